"""DTOs for permission grants and invite codes."""

from dataclasses import dataclass
from datetime import datetime

from notifyhub.domain.enums import PermissionLevel, RedemptionFailure
from notifyhub.domain.value_objects import ResourceRef


@dataclass(frozen=True)
class PermissionGrantResult:
    """A grantee's permission level on one resource."""

    id: str
    resource: ResourceRef
    grantee_id: str
    level: PermissionLevel
    granted_by_id: str | None
    invite_code_id: str | None
    created_at: datetime
    updated_at: datetime | None = None


@dataclass(frozen=True)
class InviteCodeResult:
    """Invite code read-model."""

    id: str
    code: str
    resource: ResourceRef
    permissions: list[PermissionLevel]
    max_uses: int | None
    usage_count: int
    expires_at: datetime | None
    created_by_id: str | None
    created_at: datetime
    updated_at: datetime | None = None

    @property
    def granted_level(self) -> PermissionLevel:
        """Highest level in the invite's permission set (what a redeemer receives)."""
        return PermissionLevel.highest(self.permissions)

    @property
    def is_exhausted(self) -> bool:
        return self.max_uses is not None and self.usage_count >= self.max_uses


@dataclass(frozen=True)
class InviteCodeCreate:
    """Fields for a new invite code row."""

    code: str
    resource: ResourceRef
    permissions: list[PermissionLevel]
    max_uses: int | None
    expires_at: datetime | None
    created_by_id: str | None


@dataclass(frozen=True)
class InviteRedemptionResult:
    """Outcome of redeem(): success with the granted set, or the failure reason."""

    success: bool
    failure: RedemptionFailure | None = None
    resource: ResourceRef | None = None
    permissions: list[PermissionLevel] | None = None
    level: PermissionLevel | None = None

    @classmethod
    def failed(cls, reason: RedemptionFailure) -> "InviteRedemptionResult":
        return cls(success=False, failure=reason)
