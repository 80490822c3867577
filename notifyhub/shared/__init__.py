"""Shared utilities: request context, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from notifyhub.shared.context import (
    RequestIdLogFilter,
    get_request_id,
    reset_request_id,
    set_request_id,
)
from notifyhub.shared.utils import ensure_utc, generate_cuid, is_past, utc_now

__all__ = [
    "RequestIdLogFilter",
    "get_request_id",
    "reset_request_id",
    "set_request_id",
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "is_past",
]
