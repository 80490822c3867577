"""Background scheduler for the quota reset job.

Owned by the application lifespan: started on boot, cancelled on shutdown.
A single asyncio.Lock guarantees that runs never overlap; a tick or manual
trigger arriving mid-run is skipped.
"""

import asyncio
import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from typing import AsyncIterator

from notifyhub.application.dtos.system_token import QuotaResetRunResult
from notifyhub.application.use_cases.quota_reset import RunQuotaResetUseCase
from notifyhub.domain.exceptions import QuotaResetInProgressException
from notifyhub.infrastructure.persistence.database import session_scope
from notifyhub.infrastructure.persistence.repositories.system_token_repo import (
    SystemTokenRepository,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def token_repository_scope() -> AsyncIterator[SystemTokenRepository]:
    """One transaction per batch: commits on clean exit, rolls back on error."""
    async with session_scope() as session:
        yield SystemTokenRepository(session)


class QuotaResetScheduler:
    """Runs RunQuotaResetUseCase once on start, then every interval_seconds."""

    def __init__(
        self,
        use_case_factory: Callable[[], RunQuotaResetUseCase],
        interval_seconds: float = 3600,
    ) -> None:
        self._use_case_factory = use_case_factory
        self._interval = interval_seconds
        self._lock = asyncio.Lock()
        self._task: asyncio.Task[None] | None = None
        self.last_result: QuotaResetRunResult | None = None

    @property
    def is_running(self) -> bool:
        """True while a reset run is in progress."""
        return self._lock.locked()

    @property
    def is_started(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> QuotaResetRunResult | None:
        """Run one pass unless one is already in progress (then return None)."""
        if self._lock.locked():
            logger.info("Quota reset already in progress; skipping this run")
            return None
        async with self._lock:
            result = await self._use_case_factory().run()
            self.last_result = result
            return result

    async def trigger(self) -> QuotaResetRunResult:
        """Manual run for operators; raises QuotaResetInProgressException when busy."""
        result = await self.run_once()
        if result is None:
            raise QuotaResetInProgressException()
        return result

    async def _loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception:
                logger.exception("Quota reset run failed")
            await asyncio.sleep(self._interval)

    def start(self) -> None:
        if self.is_started:
            return
        self._task = asyncio.create_task(self._loop(), name="quota-reset-scheduler")
        logger.info("Quota reset scheduler started (interval=%ss)", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Quota reset scheduler stopped")


def build_quota_reset_scheduler(
    interval_seconds: float, batch_size: int
) -> QuotaResetScheduler:
    """Scheduler wired to the SQL store (one session per batch)."""
    return QuotaResetScheduler(
        lambda: RunQuotaResetUseCase(token_repository_scope, batch_size=batch_size),
        interval_seconds=interval_seconds,
    )
