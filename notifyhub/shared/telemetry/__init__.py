"""Shared telemetry: logging setup."""

from notifyhub.shared.telemetry.logging import setup_logging

__all__ = [
    "setup_logging",
]
