"""Application DTOs (no ORM dependency)."""

from notifyhub.application.dtos.relay import (
    DispatchOutcome,
    RelayOutcome,
    RelayRequest,
    RelayResult,
    RelayTokenUsage,
)
from notifyhub.application.dtos.sharing import (
    InviteCodeCreate,
    InviteCodeResult,
    InviteRedemptionResult,
    PermissionGrantResult,
)
from notifyhub.application.dtos.system_token import (
    IssuedSystemToken,
    QuotaResetCandidate,
    QuotaResetRunResult,
    SystemTokenCreate,
    SystemTokenRecord,
    SystemTokenResult,
)
from notifyhub.application.dtos.token_request import TokenRequestResult
from notifyhub.application.dtos.user import Principal, UserResult

__all__ = [
    "DispatchOutcome",
    "InviteCodeCreate",
    "InviteCodeResult",
    "InviteRedemptionResult",
    "IssuedSystemToken",
    "PermissionGrantResult",
    "Principal",
    "QuotaResetCandidate",
    "QuotaResetRunResult",
    "RelayOutcome",
    "RelayRequest",
    "RelayResult",
    "RelayTokenUsage",
    "SystemTokenCreate",
    "SystemTokenRecord",
    "SystemTokenResult",
    "TokenRequestResult",
    "UserResult",
]
