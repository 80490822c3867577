"""Shared utilities: datetime, generators."""

from notifyhub.shared.utils.datetime import ensure_utc, is_past, utc_now
from notifyhub.shared.utils.generators import generate_cuid

__all__ = [
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "is_past",
]
