"""System access token request repository. Transitions are conditional on status."""

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from notifyhub.application.dtos.token_request import TokenRequestResult
from notifyhub.domain.enums import TokenRequestStatus
from notifyhub.infrastructure.persistence.models.system_access_token import (
    SystemAccessTokenRequest,
)
from notifyhub.infrastructure.persistence.repositories.base import BaseRepository
from notifyhub.shared.utils.datetime import ensure_utc


def _request_to_result(r: SystemAccessTokenRequest) -> TokenRequestResult:
    return TokenRequestResult(
        id=r.id,
        user_id=r.user_id,
        max_requests=r.max_requests,
        description=r.description,
        status=TokenRequestStatus(r.status),
        system_access_token_id=r.system_access_token_id,
        has_plain_text_token=r.plain_text_token is not None,
        created_at=ensure_utc(r.created_at),  # type: ignore[arg-type]
        updated_at=ensure_utc(r.updated_at),
    )


class TokenRequestRepository(BaseRepository[SystemAccessTokenRequest]):
    """Implements ITokenRequestRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, SystemAccessTokenRequest)

    async def create_request(
        self, user_id: str, max_requests: int, description: str | None
    ) -> TokenRequestResult:
        row = SystemAccessTokenRequest(
            user_id=user_id,
            max_requests=max_requests,
            description=description,
            status=TokenRequestStatus.PENDING.value,
        )
        created = await self.create(row)
        return _request_to_result(created)

    async def get_request(self, request_id: str) -> TokenRequestResult | None:
        row = await self.get_by_id(request_id)
        return _request_to_result(row) if row else None

    async def list_requests(
        self, user_id: str | None = None, skip: int = 0, limit: int = 100
    ) -> list[TokenRequestResult]:
        r = SystemAccessTokenRequest
        stmt = select(r)
        if user_id is not None:
            stmt = stmt.where(r.user_id == user_id)
        stmt = stmt.order_by(r.created_at.desc(), r.id).offset(skip).limit(limit)
        result = await self.db.execute(stmt)
        return [_request_to_result(row) for row in result.scalars().all()]

    async def transition_from_pending(
        self,
        request_id: str,
        status: TokenRequestStatus,
        changes: dict[str, Any] | None = None,
    ) -> bool:
        r = SystemAccessTokenRequest
        result = await self.db.execute(
            update(r)
            .where(r.id == request_id, r.status == TokenRequestStatus.PENDING.value)
            .values(status=status.value, **(changes or {}))
            .execution_options(synchronize_session=False)
        )
        return (result.rowcount or 0) > 0

    async def set_issued_token(
        self, request_id: str, token_id: str, plain_text_token: str | None
    ) -> None:
        r = SystemAccessTokenRequest
        await self.db.execute(
            update(r)
            .where(r.id == request_id)
            .values(system_access_token_id=token_id, plain_text_token=plain_text_token)
            .execution_options(synchronize_session=False)
        )

    async def take_plain_text_token(self, request_id: str) -> str | None:
        """Read then clear with a compare-and-set so only one caller receives it."""
        r = SystemAccessTokenRequest
        result = await self.db.execute(
            select(r.plain_text_token).where(r.id == request_id)
        )
        value = result.scalar_one_or_none()
        if value is None:
            return None
        cleared = await self.db.execute(
            update(r)
            .where(r.id == request_id, r.plain_text_token == value)
            .values(plain_text_token=None)
            .execution_options(synchronize_session=False)
        )
        return value if (cleared.rowcount or 0) > 0 else None
