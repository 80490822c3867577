"""Pydantic request/response schemas for the API."""

from notifyhub.schemas.health import HealthResponse
from notifyhub.schemas.relay import RelayNotifyRequest, RelayNotifyResponse
from notifyhub.schemas.sharing import (
    InviteCodeCreateRequest,
    InviteCodeResponse,
    InviteRedeemRequest,
    InviteRedeemResponse,
    PermissionGrantResponse,
    ShareCreateRequest,
)
from notifyhub.schemas.system_token import (
    IssuedSystemTokenResponse,
    SystemTokenCreateRequest,
    SystemTokenResponse,
)
from notifyhub.schemas.token_request import TokenRequestCreate, TokenRequestResponse

__all__ = [
    "HealthResponse",
    "InviteCodeCreateRequest",
    "InviteCodeResponse",
    "InviteRedeemRequest",
    "InviteRedeemResponse",
    "IssuedSystemTokenResponse",
    "PermissionGrantResponse",
    "RelayNotifyRequest",
    "RelayNotifyResponse",
    "ShareCreateRequest",
    "SystemTokenCreateRequest",
    "SystemTokenResponse",
    "TokenRequestCreate",
    "TokenRequestResponse",
]
