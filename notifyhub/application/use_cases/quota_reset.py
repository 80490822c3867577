"""Run the monthly quota reset over every system access token.

Tokens are paged in (created_at, id) order, one transaction per batch. A
token is reset only when its last reset predates its current period, and
the store applies the reset conditionally, so back-to-back runs change
each token at most once per period.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING

from notifyhub.application.dtos.system_token import (
    QuotaResetCandidate,
    QuotaResetRunResult,
)
from notifyhub.application.services.quota_period import needs_reset
from notifyhub.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from datetime import datetime

    from notifyhub.application.interfaces.repositories import ISystemTokenRepository

logger = logging.getLogger(__name__)

QUOTA_RESET_DEFAULT_BATCH_SIZE = 500

# Opens a transaction and yields a repository bound to it; commits on clean exit.
TokenRepositoryScope = Callable[
    [], AbstractAsyncContextManager["ISystemTokenRepository"]
]


class RunQuotaResetUseCase:
    """Resets current-period call counters for tokens whose period has rolled over.

    Failures on one token are logged and counted without stopping the batch;
    a batch whose transaction fails is logged and counted without stopping
    the run. Only a failure to read a batch ends the run early.
    """

    def __init__(
        self,
        repository_scope: TokenRepositoryScope,
        batch_size: int = QUOTA_RESET_DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._repository_scope = repository_scope
        self._batch_size = batch_size

    async def run(self, now: datetime | None = None) -> QuotaResetRunResult:
        """Run one full pass over all tokens.

        Args:
            now: Reference time (defaults to the current UTC time).

        Returns:
            QuotaResetRunResult with scanned, reset and error counts.
        """
        current = now or utc_now()
        tokens_scanned = 0
        tokens_reset = 0
        error_count = 0
        failed_batches = 0
        offset = 0

        while True:
            batch: list[QuotaResetCandidate] | None = None
            batch_reset = 0
            batch_errors = 0
            try:
                async with self._repository_scope() as repo:
                    batch = await repo.list_reset_candidates(offset, self._batch_size)
                    for candidate in batch:
                        due, period_start = needs_reset(
                            candidate.created_at, candidate.last_reset_at, current
                        )
                        if not due:
                            continue
                        try:
                            if await repo.reset_period(candidate.id, period_start):
                                batch_reset += 1
                        except Exception:
                            batch_errors += 1
                            logger.exception(
                                "Quota reset failed for system token %s", candidate.id
                            )
            except Exception:
                failed_batches += 1
                logger.exception("Quota reset batch at offset %d failed", offset)
                if batch is None:
                    break
            else:
                tokens_reset += batch_reset
            error_count += batch_errors

            tokens_scanned += len(batch)
            if len(batch) < self._batch_size:
                break
            offset += len(batch)

        result = QuotaResetRunResult(
            tokens_scanned=tokens_scanned,
            tokens_reset=tokens_reset,
            error_count=error_count,
            failed_batches=failed_batches,
        )
        logger.info(
            "Quota reset run: scanned=%d reset=%d errors=%d failed_batches=%d",
            result.tokens_scanned,
            result.tokens_reset,
            result.error_count,
            result.failed_batches,
        )
        return result
