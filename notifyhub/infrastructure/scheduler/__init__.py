"""Background jobs owned by the application lifespan."""

from notifyhub.infrastructure.scheduler.quota_reset_scheduler import (
    QuotaResetScheduler,
    build_quota_reset_scheduler,
    token_repository_scope,
)

__all__ = [
    "QuotaResetScheduler",
    "build_quota_reset_scheduler",
    "token_repository_scope",
]
