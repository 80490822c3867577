"""Invite codes: creation, redemption with usage caps, and management.

Redemption checks run in a fixed order (invalid code, expired, exhausted,
already satisfied). The usage cap is enforced by a conditional UPDATE, so
under any concurrency at most max_uses redemptions succeed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from notifyhub.application.dtos.sharing import (
    InviteCodeCreate,
    InviteCodeResult,
    InviteRedemptionResult,
)
from notifyhub.application.dtos.user import Principal
from notifyhub.application.interfaces.repositories import IInviteCodeRepository
from notifyhub.application.interfaces.services import ISecretCodec
from notifyhub.application.services.permission_grant_service import (
    PermissionGrantService,
)
from notifyhub.domain.enums import PermissionLevel, RedemptionFailure
from notifyhub.domain.exceptions import (
    ResourceNotFoundException,
    ValidationException,
)
from notifyhub.domain.value_objects import ResourceRef
from notifyhub.shared.utils.datetime import is_past, utc_now

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"permissions", "max_uses", "expires_at"})


def _normalize_permissions(permissions: Iterable[PermissionLevel | str]) -> list[PermissionLevel]:
    levels: list[PermissionLevel] = []
    for p in permissions:
        try:
            level = PermissionLevel(p)
        except ValueError as e:
            raise ValidationException(
                f"Unknown permission {p!r}; expected one of {PermissionLevel.values()}",
                field="permissions",
            ) from e
        if level not in levels:
            levels.append(level)
    if not levels:
        raise ValidationException("permissions must not be empty", field="permissions")
    return sorted(levels)


class InviteCodeService:
    """Create, redeem and manage invite codes for shareable resources."""

    def __init__(
        self,
        invite_repo: IInviteCodeRepository,
        grant_service: PermissionGrantService,
        codec: ISecretCodec,
        *,
        code_length: int = 12,
        max_attempts: int = 10,
    ) -> None:
        self._invites = invite_repo
        self._grants = grant_service
        self._codec = codec
        self._code_length = code_length
        self._max_attempts = max_attempts

    @staticmethod
    def _validate_limits(
        max_uses: int | None, expires_at: datetime | None, now: datetime
    ) -> None:
        if max_uses is not None and max_uses < 1:
            raise ValidationException("max_uses must be at least 1", field="max_uses")
        if expires_at is not None and is_past(expires_at, now):
            raise ValidationException("expires_at must be in the future", field="expires_at")

    async def create(
        self,
        resource: ResourceRef,
        creator: Principal,
        permissions: Iterable[PermissionLevel | str],
        max_uses: int | None = None,
        expires_at: datetime | None = None,
        now: datetime | None = None,
    ) -> InviteCodeResult:
        """Create an invite. Creator needs admin on the resource.

        Raises:
            ResourceNotFoundException: resource does not exist.
            AuthorizationException: creator lacks admin.
            ValidationException: empty permissions, bad limits, or no unique code found.
        """
        await self._grants.require(resource, creator, PermissionLevel.ADMIN)
        levels = _normalize_permissions(permissions)
        self._validate_limits(max_uses, expires_at, now or utc_now())

        for attempt in range(1, self._max_attempts + 1):
            code = self._codec.generate_code(self._code_length)
            invite = await self._invites.create_invite(
                InviteCodeCreate(
                    code=code,
                    resource=resource,
                    permissions=levels,
                    max_uses=max_uses,
                    expires_at=expires_at,
                    created_by_id=creator.id,
                )
            )
            if invite is not None:
                logger.info(
                    "Invite %s created for %s by %s (permissions=%s, max_uses=%s)",
                    invite.id,
                    resource,
                    creator.id,
                    [p.value for p in levels],
                    max_uses,
                )
                return invite
            logger.warning("Invite code collision (attempt %d/%d)", attempt, self._max_attempts)
        raise ValidationException(
            "Could not generate a unique invite code; try again", field="code"
        )

    async def redeem(
        self, code: str, redeemer: Principal, now: datetime | None = None
    ) -> InviteRedemptionResult:
        """Redeem code for redeemer, merging the invite's highest level into their grant."""
        current = now or utc_now()
        invite = await self._invites.get_by_code(code.strip().upper())
        if invite is None:
            return InviteRedemptionResult.failed(RedemptionFailure.INVALID_CODE)
        if is_past(invite.expires_at, current):
            return InviteRedemptionResult.failed(RedemptionFailure.EXPIRED)
        if invite.is_exhausted:
            return InviteRedemptionResult.failed(RedemptionFailure.EXHAUSTED)

        try:
            level = await self._grants.effective_level(invite.resource, redeemer)
        except ResourceNotFoundException:
            logger.warning("Invite %s points at missing resource %s", invite.id, invite.resource)
            return InviteRedemptionResult.failed(RedemptionFailure.INVALID_CODE)
        if level is not None and all(level >= p for p in invite.permissions):
            return InviteRedemptionResult.failed(RedemptionFailure.ALREADY_SATISFIED)

        if not await self._invites.try_consume(invite.id, current):
            return InviteRedemptionResult.failed(RedemptionFailure.EXHAUSTED)
        grant = await self._grants.merge_grant(
            invite.resource,
            redeemer.id,
            invite.granted_level,
            granted_by_id=invite.created_by_id,
            invite_code_id=invite.id,
        )
        logger.info(
            "Invite %s redeemed by %s: %s on %s", invite.id, redeemer.id, grant.level.value, invite.resource
        )
        return InviteRedemptionResult(
            success=True,
            resource=invite.resource,
            permissions=list(invite.permissions),
            level=grant.level,
        )

    async def _get_authorized(self, invite_id: str, requester: Principal) -> InviteCodeResult:
        invite = await self._invites.get_invite(invite_id)
        if invite is None:
            raise ResourceNotFoundException("invite_code", invite_id)
        await self._grants.require(invite.resource, requester, PermissionLevel.ADMIN)
        return invite

    async def get(self, invite_id: str, requester: Principal) -> InviteCodeResult:
        return await self._get_authorized(invite_id, requester)

    async def list_for_resource(
        self, resource: ResourceRef, requester: Principal
    ) -> list[InviteCodeResult]:
        await self._grants.require(resource, requester, PermissionLevel.ADMIN)
        return await self._invites.list_for_resource(resource)

    async def update(
        self,
        invite_id: str,
        requester: Principal,
        changes: dict[str, Any],
        now: datetime | None = None,
    ) -> InviteCodeResult:
        """Change permissions, max_uses or expires_at. max_uses cannot drop below usage."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(
                f"Cannot update fields: {', '.join(sorted(unknown))}"
            )
        invite = await self._get_authorized(invite_id, requester)
        values = dict(changes)
        if "permissions" in values:
            values["permissions"] = _normalize_permissions(values["permissions"] or [])
        self._validate_limits(values.get("max_uses"), values.get("expires_at"), now or utc_now())
        max_uses = values.get("max_uses")
        if max_uses is not None and max_uses < invite.usage_count:
            raise ValidationException(
                f"max_uses cannot be lower than current usage ({invite.usage_count})",
                field="max_uses",
            )
        updated = await self._invites.update_invite(invite_id, values)
        if updated is None:
            raise ResourceNotFoundException("invite_code", invite_id)
        return updated

    async def delete(self, invite_id: str, requester: Principal) -> None:
        await self._get_authorized(invite_id, requester)
        if not await self._invites.delete_invite(invite_id):
            raise ResourceNotFoundException("invite_code", invite_id)
        logger.info("Invite %s deleted by %s", invite_id, requester.id)
