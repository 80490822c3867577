"""System access token authority: issuance, validation, scopes, usage and lifecycle.

Bearer strings look like ``sat_<token_id>.<secret>``. The id gives an O(1)
lookup; only a bcrypt hash of the secret is stored. Validation never
mutates state; callers record usage after the guarded work succeeds.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from notifyhub.application.dtos.system_token import (
    IssuedSystemToken,
    SystemTokenCreate,
    SystemTokenResult,
)
from notifyhub.application.dtos.user import Principal
from notifyhub.application.interfaces.repositories import (
    ISystemTokenRepository,
    IUserRepository,
)
from notifyhub.application.interfaces.services import ISecretCodec
from notifyhub.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    MissingScopeException,
    ResourceNotFoundException,
    ValidationException,
)
from notifyhub.domain.value_objects import (
    SystemTokenCredential,
    first_missing_scope,
    normalize_scopes,
)
from notifyhub.shared.utils.datetime import is_past
from notifyhub.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {
        "max_calls",
        "expires_at",
        "requester_id",
        "requester_identifier",
        "description",
        "scopes",
    }
)
# Fields the token's requester may change on their own token.
REQUESTER_UPDATABLE_FIELDS = frozenset({"description"})


class SystemTokenService:
    """Issue, validate and manage system access tokens."""

    def __init__(
        self,
        token_repo: ISystemTokenRepository,
        user_repo: IUserRepository,
        codec: ISecretCodec,
        *,
        prefix: str = "sat_",
        store_plaintext: bool = False,
    ) -> None:
        self._tokens = token_repo
        self._users = user_repo
        self._codec = codec
        self._prefix = prefix
        self._store_plaintext = store_plaintext

    async def _require_requester(self, requester_id: str | None) -> None:
        if requester_id is None:
            return
        if await self._users.get_by_id(requester_id) is None:
            raise ValidationException(
                f"Requester user does not exist: {requester_id}", field="requester_id"
            )

    @staticmethod
    def _validate_max_calls(max_calls: int) -> None:
        if max_calls < 0:
            raise ValidationException("max_calls must be >= 0", field="max_calls")

    @staticmethod
    def _scopes(scopes: Iterable[str] | None) -> list[str]:
        try:
            return normalize_scopes(scopes)
        except ValueError as e:
            raise ValidationException(str(e), field="scopes") from e

    async def issue(
        self,
        max_calls: int,
        expires_at: datetime | None = None,
        requester_id: str | None = None,
        description: str | None = None,
        scopes: Iterable[str] | None = None,
        requester_identifier: str | None = None,
    ) -> IssuedSystemToken:
        """Create a token and return it with the plaintext bearer (shown exactly once).

        Raises:
            ValidationException: negative max_calls, bad scope, or unknown requester.
        """
        self._validate_max_calls(max_calls)
        normalized = self._scopes(scopes)
        await self._require_requester(requester_id)

        credential = SystemTokenCredential(
            token_id=generate_cuid(), secret=self._codec.generate_secret()
        )
        raw_token = credential.render(self._prefix)
        token_hash = await asyncio.to_thread(self._codec.hash_secret, credential.secret)
        token = await self._tokens.create_token(
            SystemTokenCreate(
                token_id=credential.token_id,
                token_hash=token_hash,
                max_calls=max_calls,
                scopes=normalized,
                expires_at=expires_at,
                requester_id=requester_id,
                requester_identifier=requester_identifier,
                description=description,
                plain_text_echo=raw_token if self._store_plaintext else None,
            )
        )
        logger.info(
            "Issued system token %s (max_calls=%d, scopes=%s, requester=%s)",
            token.id,
            max_calls,
            normalized or "*",
            requester_id,
        )
        return IssuedSystemToken(token=token, raw_token=raw_token)

    async def validate(
        self, bearer: str | None, now: datetime | None = None
    ) -> SystemTokenResult | None:
        """Return the token if bearer is valid, unexpired and under quota; else None."""
        credential = SystemTokenCredential.parse(bearer, self._prefix)
        if credential is None:
            return None
        record = await self._tokens.get_record(credential.token_id)
        if record is None:
            await asyncio.to_thread(self._codec.dummy_verify, credential.secret)
            return None
        matches = await asyncio.to_thread(
            self._codec.verify_secret, credential.secret, record.token_hash
        )
        if not matches:
            logger.debug("System token %s: secret mismatch", credential.token_id)
            return None
        token = record.token
        if is_past(token.expires_at, now):
            logger.debug("System token %s: expired", token.id)
            return None
        if token.max_calls > 0 and token.calls >= token.max_calls:
            logger.debug("System token %s: quota exhausted", token.id)
            return None
        return token

    def check_scopes(self, token: SystemTokenResult, required: Iterable[str]) -> None:
        """Raise MissingScopeException naming the first required scope the token lacks."""
        missing = first_missing_scope(token.scopes, required)
        if missing is not None:
            raise MissingScopeException(missing)

    async def authenticate(
        self, bearer: str | None, required_scopes: Iterable[str] = ()
    ) -> SystemTokenResult:
        """validate + check_scopes. Unauthorized is generic regardless of cause."""
        token = await self.validate(bearer)
        if token is None:
            raise AuthenticationException("Invalid or expired system access token")
        self.check_scopes(token, required_scopes)
        return token

    async def increment_usage(self, token_id: str) -> None:
        if not await self._tokens.increment_calls(token_id):
            logger.warning("Usage increment skipped: system token %s no longer exists", token_id)

    async def record_failure(self, token_id: str) -> None:
        if not await self._tokens.increment_failed_calls(token_id):
            logger.warning("Failure record skipped: system token %s no longer exists", token_id)

    async def update(
        self, token_id: str, actor: Principal, changes: dict[str, Any]
    ) -> SystemTokenResult:
        """Apply changes. Operators may change every field; the requester only description.

        Raises:
            ResourceNotFoundException: unknown token.
            AuthorizationException: actor may not make these changes (state unchanged).
            ValidationException: bad field names or values.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(
                f"Cannot update fields: {', '.join(sorted(unknown))}"
            )
        token = await self._tokens.get_token(token_id)
        if token is None:
            raise ResourceNotFoundException("system_token", token_id)
        if not actor.is_operator:
            if token.requester_id != actor.id:
                raise AuthorizationException(resource="system_token", action="update")
            forbidden = set(changes) - REQUESTER_UPDATABLE_FIELDS
            if forbidden:
                raise AuthorizationException(
                    message=f"Only operators may change: {', '.join(sorted(forbidden))}"
                )

        values = dict(changes)
        if "max_calls" in values:
            if values["max_calls"] is None:
                raise ValidationException("max_calls cannot be null", field="max_calls")
            self._validate_max_calls(values["max_calls"])
        if "scopes" in values:
            values["scopes"] = self._scopes(values["scopes"])
        if "requester_id" in values:
            await self._require_requester(values["requester_id"])

        updated = await self._tokens.update_token(token_id, values)
        if updated is None:
            raise ResourceNotFoundException("system_token", token_id)
        logger.info(
            "System token %s updated by %s (%s)", token_id, actor.id, ", ".join(sorted(values))
        )
        return updated

    async def revoke(self, token_id: str) -> None:
        """Hard delete; later validations fail exactly like an unknown token."""
        if not await self._tokens.delete_token(token_id):
            raise ResourceNotFoundException("system_token", token_id)
        logger.info("Revoked system token %s", token_id)

    async def list_tokens(
        self, actor: Principal, skip: int = 0, limit: int = 100
    ) -> list[SystemTokenResult]:
        """Operators see every token; others see tokens they requested."""
        requester_id = None if actor.is_operator else actor.id
        return await self._tokens.list_tokens(requester_id=requester_id, skip=skip, limit=limit)

    async def get_token(
        self, token_id: str, actor: Principal | None = None
    ) -> SystemTokenResult:
        """Return a token visible to actor (all when actor is None or an operator)."""
        token = await self._tokens.get_token(token_id)
        if token is None:
            raise ResourceNotFoundException("system_token", token_id)
        if actor is not None and not actor.is_operator and token.requester_id != actor.id:
            raise ResourceNotFoundException("system_token", token_id)
        return token
