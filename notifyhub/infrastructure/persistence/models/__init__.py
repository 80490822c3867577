"""Persistence models: ORM entities and mixins."""

from notifyhub.infrastructure.persistence.models.mixins import (
    CuidMixin,
    IdentifiedModel,
    TimestampMixin,
)
from notifyhub.infrastructure.persistence.models.resource import RelayTarget, Topic
from notifyhub.infrastructure.persistence.models.sharing import InviteCode, PermissionGrant
from notifyhub.infrastructure.persistence.models.system_access_token import (
    SystemAccessToken,
    SystemAccessTokenRequest,
)
from notifyhub.infrastructure.persistence.models.user import User

__all__ = [
    "User",
    "Topic",
    "RelayTarget",
    "SystemAccessToken",
    "SystemAccessTokenRequest",
    "PermissionGrant",
    "InviteCode",
    "CuidMixin",
    "TimestampMixin",
    "IdentifiedModel",
]
