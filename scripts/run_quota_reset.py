"""Run one quota reset pass outside the API process (cron, maintenance).

Usage:
    python -m scripts.run_quota_reset [batch_size]
Safe to run alongside the in-process scheduler: each reset is conditional,
so a token reset twice in the same period is only counted once.
"""

import asyncio
import sys

from notifyhub.application.use_cases import RunQuotaResetUseCase
from notifyhub.core.config import get_settings
from notifyhub.infrastructure.persistence.database import dispose_engine
from notifyhub.infrastructure.scheduler import token_repository_scope


async def main() -> None:
    batch_size = int(sys.argv[1]) if len(sys.argv) > 1 else get_settings().quota_reset_batch_size
    try:
        result = await RunQuotaResetUseCase(
            token_repository_scope, batch_size=batch_size
        ).run()
    finally:
        await dispose_engine()
    print(
        f"Done. Scanned {result.tokens_scanned}, reset {result.tokens_reset}, "
        f"errors {result.error_count}, failed batches {result.failed_batches}"
    )
    if result.error_count or result.failed_batches:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
