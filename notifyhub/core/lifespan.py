"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring of infrastructure (shared HTTP client, push
dispatcher, quota reset scheduler, DB engine dispose).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from notifyhub.api.v1.dependencies.db import get_secret_codec
from notifyhub.core.config import get_settings
from notifyhub.infrastructure.external.relay import build_push_dispatcher
from notifyhub.infrastructure.persistence.database import dispose_engine
from notifyhub.infrastructure.scheduler import build_quota_reset_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: shared HTTP client, push dispatcher, quota reset
    scheduler (started only when QUOTA_RESET_ENABLED). Shutdown order:
    scheduler stop, HTTP client close, SQL engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    # Shared HTTP client for push gateway and relay calls (connection reuse).
    app.state.http_client = httpx.AsyncClient(timeout=settings.relay_timeout_seconds)
    app.state.push_dispatcher = build_push_dispatcher(
        settings, app.state.http_client, codec=get_secret_codec()
    )

    scheduler = build_quota_reset_scheduler(
        settings.quota_reset_interval_seconds, settings.quota_reset_batch_size
    )
    app.state.quota_reset_scheduler = scheduler
    if settings.quota_reset_enabled:
        scheduler.start()
    else:
        logger.info("Quota reset scheduler disabled (QUOTA_RESET_ENABLED=false)")

    yield

    # ---- Shutdown ----
    await scheduler.stop()

    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("HTTP client closed")

    await dispose_engine()
    logger.info("Database engine disposed")
