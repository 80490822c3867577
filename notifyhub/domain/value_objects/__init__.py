"""Domain value objects and shared value types."""

from notifyhub.domain.value_objects.core import (
    ResourceRef,
    SystemTokenCredential,
    first_missing_scope,
    normalize_scopes,
)

__all__ = [
    "ResourceRef",
    "SystemTokenCredential",
    "first_missing_scope",
    "normalize_scopes",
]
