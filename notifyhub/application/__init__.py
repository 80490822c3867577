"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories, codec, dispatchers).
"""

from notifyhub.application.interfaces import (
    IInviteCodeRepository,
    IPermissionGrantRepository,
    IPushDispatcher,
    IResourceRepository,
    ISecretCodec,
    ISystemTokenRepository,
    ITokenRequestRepository,
    IUserRepository,
)
from notifyhub.application.services import (
    InviteCodeService,
    PermissionGrantService,
    SystemTokenService,
    TokenRequestService,
)
from notifyhub.application.use_cases import (
    RelayNotificationUseCase,
    RunQuotaResetUseCase,
)

__all__ = [
    "IInviteCodeRepository",
    "IPermissionGrantRepository",
    "IPushDispatcher",
    "IResourceRepository",
    "ISecretCodec",
    "ISystemTokenRepository",
    "ITokenRequestRepository",
    "IUserRepository",
    "InviteCodeService",
    "PermissionGrantService",
    "RelayNotificationUseCase",
    "RunQuotaResetUseCase",
    "SystemTokenService",
    "TokenRequestService",
]
