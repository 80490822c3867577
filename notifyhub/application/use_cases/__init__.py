"""Application use cases: one entry point per workflow."""

from notifyhub.application.use_cases.quota_reset import RunQuotaResetUseCase
from notifyhub.application.use_cases.relay import RelayNotificationUseCase

__all__ = [
    "RelayNotificationUseCase",
    "RunQuotaResetUseCase",
]
