"""System access token API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from notifyhub.application.dtos.system_token import (
    QuotaResetRunResult,
    SystemTokenResult,
)


class SystemTokenCreateRequest(BaseModel):
    """Request body for issuing a system access token (operators only)."""

    max_calls: int = Field(default=0, ge=0, description="Calls per period; 0 = unlimited")
    expires_at: datetime | None = None
    requester_id: str | None = Field(default=None, max_length=64)
    requester_identifier: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, max_length=500)
    scopes: list[str] = Field(default_factory=list, max_length=50)


class SystemTokenUpdateRequest(BaseModel):
    """Request body for updating a token (partial). Unset fields are left unchanged."""

    max_calls: int | None = Field(default=None, ge=0)
    expires_at: datetime | None = None
    requester_id: str | None = Field(default=None, max_length=64)
    requester_identifier: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, max_length=500)
    scopes: list[str] | None = Field(default=None, max_length=50)


class SystemTokenResponse(BaseModel):
    """Token detail/list response. Never includes the secret or its hash."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    max_calls: int
    calls: int
    total_calls: int
    failed_calls: int
    total_failed_calls: int
    remaining: int | None
    scopes: list[str]
    expires_at: datetime | None
    last_reset_at: datetime | None
    requester_id: str | None
    requester_identifier: str | None
    description: str | None
    created_at: datetime
    updated_at: datetime | None
    plain_text_echo: str | None = None

    @classmethod
    def from_result(
        cls, token: SystemTokenResult, include_echo: bool = False
    ) -> "SystemTokenResponse":
        response = cls.model_validate(token)
        if not include_echo:
            response.plain_text_echo = None
        return response


class IssuedSystemTokenResponse(SystemTokenResponse):
    """Response for POST /system-tokens: token is the bearer, shown exactly once."""

    token: str


class QuotaResetResponse(BaseModel):
    """Response for POST /system-tokens/quota-reset."""

    model_config = ConfigDict(from_attributes=True)

    tokens_scanned: int
    tokens_reset: int
    error_count: int
    failed_batches: int

    @classmethod
    def from_result(cls, result: QuotaResetRunResult) -> "QuotaResetResponse":
        return cls.model_validate(result)
