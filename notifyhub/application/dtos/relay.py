"""DTOs for the passthrough relay protocol."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from notifyhub.domain.enums import PushPlatform


@dataclass(frozen=True)
class RelayRequest:
    """Notification to hand to a push dispatcher."""

    platform: PushPlatform
    notification: dict[str, Any]
    device: dict[str, Any]


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of one dispatch.

    attempted is False when delivery never reached a provider (transport
    failure); error is internal detail and never leaves the process.
    """

    attempted: bool
    success: bool
    error: str | None = None


@dataclass(frozen=True)
class RelayResult:
    """Receiving-side result returned to the calling deployment."""

    success: bool
    platform: PushPlatform
    sent_at: datetime
    error: str | None = None


@dataclass(frozen=True)
class RelayTokenUsage:
    """Usage counters reported by the receiving deployment's X-Token-* headers."""

    token_id: str | None = None
    max_calls: int | None = None
    calls: int | None = None
    total_calls: int | None = None
    failed_calls: int | None = None
    total_failed_calls: int | None = None
    remaining: int | None = None
    last_reset: str | None = None


@dataclass(frozen=True)
class RelayOutcome:
    """Sending-side result of a passthrough relay call."""

    success: bool
    error: str | None = None
    usage: RelayTokenUsage = field(default_factory=RelayTokenUsage)
