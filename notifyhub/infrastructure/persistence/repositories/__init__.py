"""Persistence repositories. Re-exports for dependency injection."""

from notifyhub.infrastructure.persistence.repositories.base import BaseRepository
from notifyhub.infrastructure.persistence.repositories.invite_code_repo import (
    InviteCodeRepository,
)
from notifyhub.infrastructure.persistence.repositories.permission_grant_repo import (
    PermissionGrantRepository,
)
from notifyhub.infrastructure.persistence.repositories.resource_repo import (
    ResourceRepository,
)
from notifyhub.infrastructure.persistence.repositories.system_token_repo import (
    SystemTokenRepository,
)
from notifyhub.infrastructure.persistence.repositories.token_request_repo import (
    TokenRequestRepository,
)
from notifyhub.infrastructure.persistence.repositories.user_repo import UserRepository

__all__ = [
    "BaseRepository",
    "InviteCodeRepository",
    "PermissionGrantRepository",
    "ResourceRepository",
    "SystemTokenRepository",
    "TokenRequestRepository",
    "UserRepository",
]
