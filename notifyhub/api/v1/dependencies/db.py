"""Repository and service dependencies (composition root).

Every request-scoped service shares the transactional session, so the
guard, the endpoint and the counter updates commit or roll back together.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from notifyhub.application.interfaces.services import IPushDispatcher
from notifyhub.application.services import (
    InviteCodeService,
    PermissionGrantService,
    SystemTokenService,
    TokenRequestService,
)
from notifyhub.application.use_cases import RelayNotificationUseCase
from notifyhub.core.config import get_settings
from notifyhub.infrastructure.persistence.database import get_db_transactional
from notifyhub.infrastructure.persistence.repositories import (
    InviteCodeRepository,
    PermissionGrantRepository,
    ResourceRepository,
    SystemTokenRepository,
    TokenRequestRepository,
    UserRepository,
)
from notifyhub.infrastructure.scheduler import QuotaResetScheduler
from notifyhub.infrastructure.security import SecretCodec


@lru_cache
def get_secret_codec() -> SecretCodec:
    """Process-wide codec (bcrypt cost from settings)."""
    return SecretCodec(rounds=get_settings().secret_hash_rounds)


async def get_user_repo(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> UserRepository:
    return UserRepository(db)


async def get_system_token_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    codec: Annotated[SecretCodec, Depends(get_secret_codec)],
) -> SystemTokenService:
    """System token authority bound to the request session."""
    settings = get_settings()
    return SystemTokenService(
        SystemTokenRepository(db),
        UserRepository(db),
        codec,
        prefix=settings.system_token_prefix,
        store_plaintext=settings.system_token_store_plaintext,
    )


async def get_permission_grant_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> PermissionGrantService:
    return PermissionGrantService(
        ResourceRepository(db), PermissionGrantRepository(db), UserRepository(db)
    )


async def get_invite_code_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    grant_service: Annotated[PermissionGrantService, Depends(get_permission_grant_service)],
    codec: Annotated[SecretCodec, Depends(get_secret_codec)],
) -> InviteCodeService:
    settings = get_settings()
    return InviteCodeService(
        InviteCodeRepository(db),
        grant_service,
        codec,
        code_length=settings.invite_code_length,
        max_attempts=settings.invite_code_max_attempts,
    )


async def get_token_request_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    token_service: Annotated[SystemTokenService, Depends(get_system_token_service)],
) -> TokenRequestService:
    return TokenRequestService(TokenRequestRepository(db), token_service)


def get_push_dispatcher(request: Request) -> IPushDispatcher:
    """Dispatcher built once in lifespan (shared HTTP client)."""
    return request.app.state.push_dispatcher


async def get_relay_use_case(
    dispatcher: Annotated[IPushDispatcher, Depends(get_push_dispatcher)],
    token_service: Annotated[SystemTokenService, Depends(get_system_token_service)],
) -> RelayNotificationUseCase:
    return RelayNotificationUseCase(dispatcher, token_service)


def get_quota_reset_scheduler(request: Request) -> QuotaResetScheduler:
    return request.app.state.quota_reset_scheduler
