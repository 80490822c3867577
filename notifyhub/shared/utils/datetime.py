"""Timezone handling.

Everything inside the service is an aware UTC datetime. SQLite returns naive
values, so repositories pass what they read through ensure_utc.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Attach UTC to a naive value, convert an aware one; None passes through."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def is_past(dt: datetime | None, now: datetime | None = None) -> bool:
    """True when dt is set and not after now. A missing deadline never passes."""
    if dt is None:
        return False
    return ensure_utc(dt) <= ensure_utc(now or utc_now())  # type: ignore[operator]


def to_header_value(dt: datetime) -> str:
    """ISO-8601 UTC rendering used in response headers."""
    return ensure_utc(dt).isoformat()  # type: ignore[union-attr]
