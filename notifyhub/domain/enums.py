"""Domain enumerations for notifyhub.

Enums represent fixed sets of domain values (permission levels, resource
kinds, request status, redemption outcomes).
"""

from collections.abc import Iterable
from enum import Enum


class PermissionLevel(str, Enum):
    """Capability a principal holds on a resource. Totally ordered: read < write < admin.

    Comparison operators follow the lattice order, so upgrade-only merges are
    a single max() call.
    """

    READ = "read"
    WRITE = "write"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return _LEVEL_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, PermissionLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, PermissionLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, PermissionLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, PermissionLevel):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def highest(cls, levels: Iterable["PermissionLevel"]) -> "PermissionLevel":
        """Return the highest level of a non-empty collection."""
        return max(levels)

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid level values, lowest first."""
        return [level.value for level in cls]


_LEVEL_RANK: dict[PermissionLevel, int] = {
    PermissionLevel.READ: 1,
    PermissionLevel.WRITE: 2,
    PermissionLevel.ADMIN: 3,
}


class ResourceType(str, Enum):
    """Kinds of shareable resources. Grants and invites reference one of these."""

    TOPIC = "topic"
    RELAY_TARGET = "relay_target"

    @classmethod
    def values(cls) -> list[str]:
        return [rt.value for rt in cls]


class TokenRequestStatus(str, Enum):
    """Self-service token request lifecycle. APPROVED and DECLINED are final."""

    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"


class RedemptionFailure(str, Enum):
    """Why an invite code redemption was refused (checked in this order)."""

    INVALID_CODE = "invalid_code"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"
    ALREADY_SATISFIED = "already_satisfied"


class PushPlatform(str, Enum):
    """Target device platform for relayed notifications."""

    IOS = "IOS"
    ANDROID = "ANDROID"
    WEB = "WEB"
