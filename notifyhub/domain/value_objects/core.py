"""Domain value objects for notifyhub.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import ClassVar

from notifyhub.domain.enums import ResourceType

# Token ids are CUID2 (lowercase alphanumeric); secrets are hex.
_TOKEN_ID_RE = re.compile(r"^[a-z0-9]{8,64}$")
_TOKEN_SECRET_RE = re.compile(r"^[0-9a-f]{32,128}$")
_SCOPE_RE = re.compile(r"^[a-z0-9_-]+(:[a-z0-9_*-]+)*$")
_RESOURCE_ID_MAX_LENGTH = 64


@dataclass(frozen=True)
class ResourceRef:
    """Tagged reference to a shareable resource (kind + id).

    Grants and invites carry one of these instead of a free-form
    (type, id) string pair, so every resource kind must be handled
    explicitly by ownership lookups.
    """

    resource_type: ResourceType
    resource_id: str

    def __post_init__(self) -> None:
        if not isinstance(self.resource_type, ResourceType):
            raise ValueError(f"Unknown resource type: {self.resource_type!r}")
        if not self.resource_id or len(self.resource_id) > _RESOURCE_ID_MAX_LENGTH:
            raise ValueError(
                f"Resource id must be 1-{_RESOURCE_ID_MAX_LENGTH} characters"
            )

    @classmethod
    def of(cls, resource_type: str | ResourceType, resource_id: str) -> "ResourceRef":
        """Build from wire values; raises ValueError for unknown kinds."""
        try:
            kind = ResourceType(resource_type)
        except ValueError as e:
            raise ValueError(
                f"Unknown resource type {resource_type!r}; expected one of {ResourceType.values()}"
            ) from e
        return cls(kind, resource_id)

    def __str__(self) -> str:
        return f"{self.resource_type.value}:{self.resource_id}"


@dataclass(frozen=True)
class SystemTokenCredential:
    """Parsed system access token bearer: <prefix><token_id>.<secret>.

    The token id is public and used for O(1) lookup; only the secret is
    hashed at rest.
    """

    SEPARATOR: ClassVar[str] = "."

    token_id: str
    secret: str

    def __post_init__(self) -> None:
        if not _TOKEN_ID_RE.match(self.token_id):
            raise ValueError("Malformed system token id")
        if not _TOKEN_SECRET_RE.match(self.secret):
            raise ValueError("Malformed system token secret")

    @classmethod
    def parse(cls, bearer: str | None, prefix: str) -> "SystemTokenCredential | None":
        """Return the credential, or None if bearer does not follow the prefix convention."""
        if not bearer or not bearer.startswith(prefix):
            return None
        body = bearer[len(prefix):]
        token_id, sep, secret = body.partition(cls.SEPARATOR)
        if not sep:
            return None
        try:
            return cls(token_id=token_id, secret=secret)
        except ValueError:
            return None

    def render(self, prefix: str) -> str:
        """Return the bearer string handed to the caller once at issuance."""
        return f"{prefix}{self.token_id}{self.SEPARATOR}{self.secret}"


def normalize_scopes(scopes: Iterable[str] | None) -> list[str]:
    """Validate and de-duplicate scope names, preserving first-seen order.

    Scopes look like 'relay:notify' or 'system-tokens:read'. An empty
    result means the token is unrestricted.
    """
    if not scopes:
        return []
    seen: dict[str, None] = {}
    for raw in scopes:
        scope = raw.strip()
        if not _SCOPE_RE.match(scope):
            raise ValueError(f"Invalid scope: {raw!r}")
        seen.setdefault(scope, None)
    return list(seen)


def first_missing_scope(granted: Iterable[str], required: Iterable[str]) -> str | None:
    """Return the first required scope not granted; None when allowed.

    An empty granted set means unrestricted.
    """
    granted_set = set(granted)
    if not granted_set:
        return None
    for scope in required:
        if scope not in granted_set:
            return scope
    return None
