"""Domain layer: value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from notifyhub.domain.enums import (
    PermissionLevel,
    PushPlatform,
    RedemptionFailure,
    ResourceType,
    TokenRequestStatus,
)
from notifyhub.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    InvalidStateTransitionException,
    InviteRedemptionException,
    MissingScopeException,
    NotifyHubException,
    QuotaResetInProgressException,
    ResourceNotFoundException,
    ValidationException,
)
from notifyhub.domain.value_objects import (
    ResourceRef,
    SystemTokenCredential,
    first_missing_scope,
    normalize_scopes,
)

__all__ = [
    # Enums
    "PermissionLevel",
    "PushPlatform",
    "RedemptionFailure",
    "ResourceType",
    "TokenRequestStatus",
    # Exceptions
    "AuthenticationException",
    "AuthorizationException",
    "InvalidStateTransitionException",
    "InviteRedemptionException",
    "MissingScopeException",
    "NotifyHubException",
    "QuotaResetInProgressException",
    "ResourceNotFoundException",
    "ValidationException",
    # Value objects
    "ResourceRef",
    "SystemTokenCredential",
    "first_missing_scope",
    "normalize_scopes",
]
