"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs or domain types only; no infrastructure imports.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
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
    from notifyhub.application.dtos.user import UserResult
    from notifyhub.domain.enums import PermissionLevel, TokenRequestStatus
    from notifyhub.domain.value_objects import ResourceRef


class ISystemTokenRepository(Protocol):
    """Protocol for system access token storage (DIP)."""

    async def create_token(self, data: SystemTokenCreate) -> SystemTokenResult:
        """Persist a new token row."""

    async def get_record(self, token_id: str) -> SystemTokenRecord | None:
        """Return token plus stored hash (for validation), or None."""

    async def get_token(self, token_id: str) -> SystemTokenResult | None:
        """Return token read-model, or None."""

    async def list_tokens(
        self, requester_id: str | None = None, skip: int = 0, limit: int = 100
    ) -> list[SystemTokenResult]:
        """Return tokens (all, or those requested by requester_id), newest first."""

    async def update_token(
        self, token_id: str, changes: dict[str, Any]
    ) -> SystemTokenResult | None:
        """Apply column changes; None when the token does not exist."""

    async def delete_token(self, token_id: str) -> bool:
        """Hard delete; False when the token did not exist."""

    async def increment_calls(self, token_id: str) -> bool:
        """Atomically bump calls (saturating at max_calls) and total_calls."""

    async def increment_failed_calls(self, token_id: str) -> bool:
        """Atomically bump failed_calls and total_failed_calls."""

    async def list_reset_candidates(
        self, offset: int, limit: int
    ) -> list[QuotaResetCandidate]:
        """Page through all tokens ordered by (created_at, id)."""

    async def reset_period(self, token_id: str, period_start: datetime) -> bool:
        """Set calls=0, last_reset_at=period_start unless already reset for this period."""


class IUserRepository(Protocol):
    """Protocol for user lookup (users are owned by the registration service)."""

    async def get_by_id(self, user_id: str) -> UserResult | None:
        """Return user by id."""

    async def find_by_identifier(self, identifier: str) -> UserResult | None:
        """Return user whose username or email equals identifier."""


class IResourceRepository(Protocol):
    """Protocol for resource ownership lookup across all resource kinds."""

    async def get_owner_id(self, resource: ResourceRef) -> str | None:
        """Return the owner's user id, or None when the resource does not exist."""

    async def exists(self, resource: ResourceRef) -> bool:
        """Return True when the referenced resource exists."""


class IPermissionGrantRepository(Protocol):
    """Protocol for direct permission grants (DIP)."""

    async def get_level(
        self, resource: ResourceRef, grantee_id: str
    ) -> PermissionLevel | None:
        """Return the stored level for grantee on resource, or None."""

    async def upsert_max(
        self,
        resource: ResourceRef,
        grantee_id: str,
        level: PermissionLevel,
        granted_by_id: str | None,
        invite_code_id: str | None = None,
    ) -> PermissionGrantResult:
        """Insert or raise the grant to max(existing, level) in one statement."""

    async def delete_grant(self, resource: ResourceRef, grantee_id: str) -> bool:
        """Delete the grant; False when none existed."""

    async def list_for_resource(self, resource: ResourceRef) -> list[PermissionGrantResult]:
        """Return all grants on the resource."""


class IInviteCodeRepository(Protocol):
    """Protocol for invite code storage (DIP)."""

    async def create_invite(self, data: InviteCodeCreate) -> InviteCodeResult | None:
        """Persist a new invite; None when the code collides with an existing one."""

    async def get_invite(self, invite_id: str) -> InviteCodeResult | None:
        """Return invite by id."""

    async def get_by_code(self, code: str) -> InviteCodeResult | None:
        """Return invite by code."""

    async def list_for_resource(self, resource: ResourceRef) -> list[InviteCodeResult]:
        """Return invites for the resource, newest first."""

    async def update_invite(
        self, invite_id: str, changes: dict[str, Any]
    ) -> InviteCodeResult | None:
        """Apply column changes; None when the invite does not exist."""

    async def delete_invite(self, invite_id: str) -> bool:
        """Delete the invite; False when it did not exist."""

    async def try_consume(self, invite_id: str, now: datetime) -> bool:
        """Atomically increment usage_count if under max_uses and not expired."""


class ITokenRequestRepository(Protocol):
    """Protocol for self-service token requests (DIP)."""

    async def create_request(
        self, user_id: str, max_requests: int, description: str | None
    ) -> TokenRequestResult:
        """Persist a new pending request."""

    async def get_request(self, request_id: str) -> TokenRequestResult | None:
        """Return request by id."""

    async def list_requests(
        self, user_id: str | None = None, skip: int = 0, limit: int = 100
    ) -> list[TokenRequestResult]:
        """Return requests (all, or those of user_id), newest first."""

    async def transition_from_pending(
        self,
        request_id: str,
        status: TokenRequestStatus,
        changes: dict[str, Any] | None = None,
    ) -> bool:
        """Move a pending request to status; False when it was not pending."""

    async def set_issued_token(
        self, request_id: str, token_id: str, plain_text_token: str | None
    ) -> None:
        """Attach the issued token to an approved request."""

    async def take_plain_text_token(self, request_id: str) -> str | None:
        """Return and clear the one-time plaintext token; None when already taken."""
