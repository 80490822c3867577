"""Resource sharing and invite code API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from notifyhub.application.dtos.sharing import (
    InviteCodeResult,
    InviteRedemptionResult,
    PermissionGrantResult,
)
from notifyhub.domain.enums import PermissionLevel, ResourceType


class ShareCreateRequest(BaseModel):
    """Request body for sharing a resource with a user (by username or email)."""

    identifier: str = Field(..., min_length=1, max_length=254)
    level: PermissionLevel = PermissionLevel.READ


class PermissionGrantResponse(BaseModel):
    """A grantee's stored permission level on a resource."""

    id: str
    resource_type: ResourceType
    resource_id: str
    grantee_id: str
    level: PermissionLevel
    granted_by_id: str | None
    invite_code_id: str | None
    created_at: datetime
    updated_at: datetime | None

    @classmethod
    def from_result(cls, grant: PermissionGrantResult) -> "PermissionGrantResponse":
        return cls(
            id=grant.id,
            resource_type=grant.resource.resource_type,
            resource_id=grant.resource.resource_id,
            grantee_id=grant.grantee_id,
            level=grant.level,
            granted_by_id=grant.granted_by_id,
            invite_code_id=grant.invite_code_id,
            created_at=grant.created_at,
            updated_at=grant.updated_at,
        )


class InviteCodeCreateRequest(BaseModel):
    """Request body for creating an invite code on a resource."""

    permissions: list[PermissionLevel] = Field(
        default_factory=lambda: [PermissionLevel.READ], min_length=1, max_length=3
    )
    max_uses: int | None = Field(default=None, ge=1)
    expires_at: datetime | None = None


class InviteCodeUpdateRequest(BaseModel):
    """Request body for updating an invite (partial)."""

    permissions: list[PermissionLevel] | None = Field(default=None, min_length=1, max_length=3)
    max_uses: int | None = Field(default=None, ge=1)
    expires_at: datetime | None = None


class InviteCodeResponse(BaseModel):
    """Invite code detail/list response."""

    id: str
    code: str
    resource_type: ResourceType
    resource_id: str
    permissions: list[PermissionLevel]
    max_uses: int | None
    usage_count: int
    expires_at: datetime | None
    created_by_id: str | None
    created_at: datetime
    updated_at: datetime | None

    @classmethod
    def from_result(cls, invite: InviteCodeResult) -> "InviteCodeResponse":
        return cls(
            id=invite.id,
            code=invite.code,
            resource_type=invite.resource.resource_type,
            resource_id=invite.resource.resource_id,
            permissions=invite.permissions,
            max_uses=invite.max_uses,
            usage_count=invite.usage_count,
            expires_at=invite.expires_at,
            created_by_id=invite.created_by_id,
            created_at=invite.created_at,
            updated_at=invite.updated_at,
        )


class InviteRedeemRequest(BaseModel):
    """Request body for POST /invite-codes/redeem."""

    code: str = Field(..., min_length=1, max_length=64)


class InviteRedeemResponse(BaseModel):
    """Successful redemption: the resource and the level now held."""

    success: bool
    resource_type: ResourceType
    resource_id: str
    permissions: list[PermissionLevel]
    level: PermissionLevel

    @classmethod
    def from_result(cls, result: InviteRedemptionResult) -> "InviteRedeemResponse":
        resource = result.resource
        return cls(
            success=result.success,
            resource_type=resource.resource_type,  # type: ignore[union-attr]
            resource_id=resource.resource_id,  # type: ignore[union-attr]
            permissions=result.permissions or [],
            level=result.level,  # type: ignore[arg-type]
        )


class EffectivePermissionResponse(BaseModel):
    """The caller's effective level on a resource (null when none)."""

    resource_type: ResourceType
    resource_id: str
    level: PermissionLevel | None
