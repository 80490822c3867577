"""In-memory implementations of the repository and dispatcher protocols.

Each mutating method completes without awaiting in the middle, so under
asyncio it is as atomic as the conditional UPDATEs of the SQL repositories.
"""

from __future__ import annotations

import itertools
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any

from notifyhub.application.dtos.relay import DispatchOutcome, RelayRequest
from notifyhub.application.dtos.sharing import (
    InviteCodeCreate,
    InviteCodeResult,
    PermissionGrantResult,
)
from notifyhub.application.dtos.system_token import (
    QuotaResetCandidate,
    SystemTokenCreate,
    SystemTokenRecord,
    SystemTokenResult,
)
from notifyhub.application.dtos.token_request import TokenRequestResult
from notifyhub.application.dtos.user import Principal, UserResult
from notifyhub.domain.enums import PermissionLevel, TokenRequestStatus
from notifyhub.domain.value_objects import ResourceRef
from notifyhub.shared.utils.datetime import is_past, utc_now

_ids = itertools.count(1)


def next_id(prefix: str) -> str:
    return f"{prefix}{next(_ids):08d}"


def principal(user: UserResult) -> Principal:
    return Principal.from_user(user)


class InMemoryUserRepository:
    def __init__(self) -> None:
        self.users: dict[str, UserResult] = {}

    def add(self, username: str, is_operator: bool = False, is_active: bool = True) -> UserResult:
        user = UserResult(
            id=next_id("user"),
            username=username,
            email=f"{username}@example.com",
            is_active=is_active,
            is_operator=is_operator,
        )
        self.users[user.id] = user
        return user

    async def get_by_id(self, user_id: str) -> UserResult | None:
        return self.users.get(user_id)

    async def find_by_identifier(self, identifier: str) -> UserResult | None:
        for user in self.users.values():
            if user.username == identifier or user.email.lower() == identifier.lower():
                return user
        return None


class InMemoryResourceRepository:
    def __init__(self) -> None:
        self.owners: dict[ResourceRef, str] = {}

    async def get_owner_id(self, resource: ResourceRef) -> str | None:
        return self.owners.get(resource)

    async def exists(self, resource: ResourceRef) -> bool:
        return resource in self.owners


class InMemoryPermissionGrantRepository:
    def __init__(self) -> None:
        self.grants: dict[tuple[ResourceRef, str], PermissionGrantResult] = {}

    async def get_level(self, resource: ResourceRef, grantee_id: str) -> PermissionLevel | None:
        grant = self.grants.get((resource, grantee_id))
        return grant.level if grant else None

    async def upsert_max(
        self,
        resource: ResourceRef,
        grantee_id: str,
        level: PermissionLevel,
        granted_by_id: str | None,
        invite_code_id: str | None = None,
    ) -> PermissionGrantResult:
        key = (resource, grantee_id)
        existing = self.grants.get(key)
        if existing is None:
            grant = PermissionGrantResult(
                id=next_id("grant"),
                resource=resource,
                grantee_id=grantee_id,
                level=level,
                granted_by_id=granted_by_id,
                invite_code_id=invite_code_id,
                created_at=utc_now(),
            )
        else:
            grant = replace(
                existing,
                level=max(existing.level, level),
                granted_by_id=granted_by_id,
                invite_code_id=invite_code_id,
                updated_at=utc_now(),
            )
        self.grants[key] = grant
        return grant

    async def delete_grant(self, resource: ResourceRef, grantee_id: str) -> bool:
        return self.grants.pop((resource, grantee_id), None) is not None

    async def list_for_resource(self, resource: ResourceRef) -> list[PermissionGrantResult]:
        return [g for (r, _), g in self.grants.items() if r == resource]


class InMemoryInviteCodeRepository:
    def __init__(self) -> None:
        self.invites: dict[str, InviteCodeResult] = {}

    async def create_invite(self, data: InviteCodeCreate) -> InviteCodeResult | None:
        if any(i.code == data.code for i in self.invites.values()):
            return None
        invite = InviteCodeResult(
            id=next_id("invite"),
            code=data.code,
            resource=data.resource,
            permissions=list(data.permissions),
            max_uses=data.max_uses,
            usage_count=0,
            expires_at=data.expires_at,
            created_by_id=data.created_by_id,
            created_at=utc_now(),
        )
        self.invites[invite.id] = invite
        return invite

    async def get_invite(self, invite_id: str) -> InviteCodeResult | None:
        return self.invites.get(invite_id)

    async def get_by_code(self, code: str) -> InviteCodeResult | None:
        for invite in self.invites.values():
            if invite.code == code:
                return invite
        return None

    async def list_for_resource(self, resource: ResourceRef) -> list[InviteCodeResult]:
        return [i for i in self.invites.values() if i.resource == resource]

    async def update_invite(self, invite_id: str, changes: dict[str, Any]) -> InviteCodeResult | None:
        invite = self.invites.get(invite_id)
        if invite is None:
            return None
        updated = replace(invite, **changes)
        self.invites[invite_id] = updated
        return updated

    async def delete_invite(self, invite_id: str) -> bool:
        return self.invites.pop(invite_id, None) is not None

    async def try_consume(self, invite_id: str, now: datetime) -> bool:
        invite = self.invites.get(invite_id)
        if invite is None or invite.is_exhausted or is_past(invite.expires_at, now):
            return False
        self.invites[invite_id] = replace(invite, usage_count=invite.usage_count + 1)
        return True


class InMemorySystemTokenRepository:
    def __init__(self) -> None:
        self.rows: dict[str, SystemTokenRecord] = {}
        self.fail_reset_for: set[str] = set()

    async def create_token(self, data: SystemTokenCreate) -> SystemTokenResult:
        token = SystemTokenResult(
            id=data.token_id,
            max_calls=data.max_calls,
            calls=0,
            total_calls=0,
            failed_calls=0,
            total_failed_calls=0,
            scopes=list(data.scopes),
            expires_at=data.expires_at,
            last_reset_at=None,
            requester_id=data.requester_id,
            requester_identifier=data.requester_identifier,
            description=data.description,
            created_at=utc_now(),
            plain_text_echo=data.plain_text_echo,
        )
        self.rows[token.id] = SystemTokenRecord(token=token, token_hash=data.token_hash)
        return token

    def put(self, token: SystemTokenResult, token_hash: str = "") -> None:
        self.rows[token.id] = SystemTokenRecord(token=token, token_hash=token_hash)

    def _set(self, token_id: str, **changes: Any) -> SystemTokenResult:
        record = self.rows[token_id]
        token = replace(record.token, **changes)
        self.rows[token_id] = replace(record, token=token)
        return token

    async def get_record(self, token_id: str) -> SystemTokenRecord | None:
        return self.rows.get(token_id)

    async def get_token(self, token_id: str) -> SystemTokenResult | None:
        record = self.rows.get(token_id)
        return record.token if record else None

    async def list_tokens(
        self, requester_id: str | None = None, skip: int = 0, limit: int = 100
    ) -> list[SystemTokenResult]:
        tokens = [
            r.token
            for r in self.rows.values()
            if requester_id is None or r.token.requester_id == requester_id
        ]
        return tokens[skip : skip + limit]

    async def update_token(self, token_id: str, changes: dict[str, Any]) -> SystemTokenResult | None:
        if token_id not in self.rows:
            return None
        return self._set(token_id, **changes)

    async def delete_token(self, token_id: str) -> bool:
        return self.rows.pop(token_id, None) is not None

    async def increment_calls(self, token_id: str) -> bool:
        record = self.rows.get(token_id)
        if record is None:
            return False
        t = record.token
        saturated = t.max_calls > 0 and t.calls >= t.max_calls
        self._set(
            token_id,
            calls=t.calls if saturated else t.calls + 1,
            total_calls=t.total_calls + 1,
        )
        return True

    async def increment_failed_calls(self, token_id: str) -> bool:
        record = self.rows.get(token_id)
        if record is None:
            return False
        t = record.token
        self._set(
            token_id,
            failed_calls=t.failed_calls + 1,
            total_failed_calls=t.total_failed_calls + 1,
        )
        return True

    async def list_reset_candidates(self, offset: int, limit: int) -> list[QuotaResetCandidate]:
        ordered = sorted(self.rows.values(), key=lambda r: (r.token.created_at, r.token.id))
        return [
            QuotaResetCandidate(
                id=r.token.id,
                created_at=r.token.created_at,
                last_reset_at=r.token.last_reset_at,
            )
            for r in ordered[offset : offset + limit]
        ]

    async def reset_period(self, token_id: str, period_start: datetime) -> bool:
        if token_id in self.fail_reset_for:
            raise RuntimeError(f"reset failed for {token_id}")
        record = self.rows.get(token_id)
        if record is None:
            return False
        t = record.token
        if (t.last_reset_at or t.created_at) >= period_start:
            return False
        self._set(token_id, calls=0, last_reset_at=period_start)
        return True


class InMemoryTokenRequestRepository:
    def __init__(self) -> None:
        self.rows: dict[str, TokenRequestResult] = {}
        self.plain_text: dict[str, str] = {}

    async def create_request(
        self, user_id: str, max_requests: int, description: str | None
    ) -> TokenRequestResult:
        request = TokenRequestResult(
            id=next_id("req"),
            user_id=user_id,
            max_requests=max_requests,
            description=description,
            status=TokenRequestStatus.PENDING,
            system_access_token_id=None,
            has_plain_text_token=False,
            created_at=utc_now(),
        )
        self.rows[request.id] = request
        return request

    async def get_request(self, request_id: str) -> TokenRequestResult | None:
        request = self.rows.get(request_id)
        if request is None:
            return None
        return replace(request, has_plain_text_token=request_id in self.plain_text)

    async def list_requests(
        self, user_id: str | None = None, skip: int = 0, limit: int = 100
    ) -> list[TokenRequestResult]:
        rows = [r for r in self.rows.values() if user_id is None or r.user_id == user_id]
        return rows[skip : skip + limit]

    async def transition_from_pending(
        self,
        request_id: str,
        status: TokenRequestStatus,
        changes: dict[str, Any] | None = None,
    ) -> bool:
        request = self.rows.get(request_id)
        if request is None or request.status is not TokenRequestStatus.PENDING:
            return False
        self.rows[request_id] = replace(request, status=status, **(changes or {}))
        return True

    async def set_issued_token(
        self, request_id: str, token_id: str, plain_text_token: str | None
    ) -> None:
        self.rows[request_id] = replace(self.rows[request_id], system_access_token_id=token_id)
        if plain_text_token is not None:
            self.plain_text[request_id] = plain_text_token

    async def take_plain_text_token(self, request_id: str) -> str | None:
        return self.plain_text.pop(request_id, None)


class RecordingDispatcher:
    """Push dispatcher returning a preset outcome and recording requests."""

    def __init__(self, outcome: DispatchOutcome | None = None, error: Exception | None = None) -> None:
        self.outcome = outcome or DispatchOutcome(attempted=True, success=True)
        self.error = error
        self.requests: list[RelayRequest] = []

    async def dispatch(self, request: RelayRequest) -> DispatchOutcome:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.outcome


def days_ago(days: int) -> datetime:
    return utc_now() - timedelta(days=days)
