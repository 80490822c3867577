"""Self-service token request API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from notifyhub.domain.enums import TokenRequestStatus


class TokenRequestCreate(BaseModel):
    """Request body for asking for a system token."""

    max_requests: int = Field(..., ge=0, description="Requested calls per period; 0 = unlimited")
    description: str | None = Field(default=None, max_length=500)


class TokenRequestApprove(BaseModel):
    """Optional issuance parameters when approving a request."""

    expires_at: datetime | None = None
    scopes: list[str] = Field(default_factory=list, max_length=50)


class TokenRequestDecline(BaseModel):
    """Optional reason appended to the request description."""

    reason: str | None = Field(default=None, max_length=500)


class TokenRequestResponse(BaseModel):
    """Token request detail/list response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    max_requests: int
    description: str | None
    status: TokenRequestStatus
    system_access_token_id: str | None
    has_plain_text_token: bool
    created_at: datetime
    updated_at: datetime | None


class TokenRevealResponse(BaseModel):
    """The approved bearer. Returned once; later reveals get 404."""

    request_id: str
    token: str
