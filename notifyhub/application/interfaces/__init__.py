"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from notifyhub.infrastructure or notifyhub.api.
"""

from notifyhub.application.interfaces.repositories import (
    IInviteCodeRepository,
    IPermissionGrantRepository,
    IResourceRepository,
    ISystemTokenRepository,
    ITokenRequestRepository,
    IUserRepository,
)
from notifyhub.application.interfaces.services import IPushDispatcher, ISecretCodec

__all__ = [
    "IInviteCodeRepository",
    "IPermissionGrantRepository",
    "IPushDispatcher",
    "IResourceRepository",
    "ISecretCodec",
    "ISystemTokenRepository",
    "ITokenRequestRepository",
    "IUserRepository",
]
