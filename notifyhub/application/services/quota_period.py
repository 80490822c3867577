"""Monthly quota periods anchored to a token's creation time.

Periods are computed from the anchor each time (never by stepping from
the previous period), so a token created on the 31st resets on the last
day of shorter months and returns to the 31st afterwards.
"""

import calendar
from datetime import datetime

from notifyhub.shared.utils.datetime import ensure_utc


def add_months(anchor: datetime, months: int) -> datetime:
    """Return anchor shifted by months, clamping the day to the target month's end."""
    total = anchor.month - 1 + months
    year = anchor.year + total // 12
    month = total % 12 + 1
    day = min(anchor.day, calendar.monthrange(year, month)[1])
    return anchor.replace(year=year, month=month, day=day)


def current_period_start(created_at: datetime, now: datetime) -> datetime:
    """Return the latest created_at + k months (k >= 0) that is not after now.

    When now precedes created_at (clock skew), the period starts at created_at.
    """
    created: datetime = ensure_utc(created_at)  # type: ignore[assignment]
    current: datetime = ensure_utc(now)  # type: ignore[assignment]
    if current < created:
        return created
    months = (current.year - created.year) * 12 + (current.month - created.month)
    candidate = add_months(created, months)
    if candidate > current:
        candidate = add_months(created, months - 1)
    return candidate


def needs_reset(
    created_at: datetime, last_reset_at: datetime | None, now: datetime
) -> tuple[bool, datetime]:
    """Return (due, period_start): due when the last reset predates the current period."""
    period_start = current_period_start(created_at, now)
    anchor = ensure_utc(last_reset_at or created_at)
    return anchor < period_start, period_start  # type: ignore[operator]
