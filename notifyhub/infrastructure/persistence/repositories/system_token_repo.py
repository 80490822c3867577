"""System access token repository. Interface methods return application DTOs.

Counter mutations are single UPDATE statements so concurrent requests and
the quota reset job never lose or double-apply a change.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import and_, case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from notifyhub.application.dtos.system_token import (
    QuotaResetCandidate,
    SystemTokenCreate,
    SystemTokenRecord,
    SystemTokenResult,
)
from notifyhub.infrastructure.persistence.models.system_access_token import (
    SystemAccessToken,
)
from notifyhub.infrastructure.persistence.repositories.base import BaseRepository
from notifyhub.shared.utils.datetime import ensure_utc


def _token_to_result(t: SystemAccessToken) -> SystemTokenResult:
    """Map ORM SystemAccessToken to SystemTokenResult (no hash)."""
    return SystemTokenResult(
        id=t.id,
        max_calls=t.max_calls,
        calls=t.calls,
        total_calls=t.total_calls,
        failed_calls=t.failed_calls,
        total_failed_calls=t.total_failed_calls,
        scopes=list(t.scopes or []),
        expires_at=ensure_utc(t.expires_at),
        last_reset_at=ensure_utc(t.last_reset_at),
        requester_id=t.requester_id,
        requester_identifier=t.requester_identifier,
        description=t.description,
        created_at=ensure_utc(t.created_at),  # type: ignore[arg-type]
        updated_at=ensure_utc(t.updated_at),
        plain_text_echo=t.plain_text_echo,
    )


class SystemTokenRepository(BaseRepository[SystemAccessToken]):
    """Implements ISystemTokenRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, SystemAccessToken)

    async def create_token(self, data: SystemTokenCreate) -> SystemTokenResult:
        row = SystemAccessToken(
            id=data.token_id,
            token_hash=data.token_hash,
            max_calls=data.max_calls,
            calls=0,
            total_calls=0,
            failed_calls=0,
            total_failed_calls=0,
            scopes=list(data.scopes),
            expires_at=data.expires_at,
            requester_id=data.requester_id,
            requester_identifier=data.requester_identifier,
            description=data.description,
            plain_text_echo=data.plain_text_echo,
        )
        created = await self.create(row)
        return _token_to_result(created)

    async def get_record(self, token_id: str) -> SystemTokenRecord | None:
        row = await self.get_by_id(token_id)
        if row is None:
            return None
        return SystemTokenRecord(token=_token_to_result(row), token_hash=row.token_hash)

    async def get_token(self, token_id: str) -> SystemTokenResult | None:
        row = await self.get_by_id(token_id)
        return _token_to_result(row) if row else None

    async def list_tokens(
        self, requester_id: str | None = None, skip: int = 0, limit: int = 100
    ) -> list[SystemTokenResult]:
        stmt = select(SystemAccessToken)
        if requester_id is not None:
            stmt = stmt.where(SystemAccessToken.requester_id == requester_id)
        stmt = (
            stmt.order_by(SystemAccessToken.created_at.desc(), SystemAccessToken.id)
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [_token_to_result(t) for t in result.scalars().all()]

    async def update_token(
        self, token_id: str, changes: dict[str, Any]
    ) -> SystemTokenResult | None:
        row = await self.update_fields(token_id, changes)
        return _token_to_result(row) if row else None

    async def delete_token(self, token_id: str) -> bool:
        return await self.delete_by_id(token_id)

    async def increment_calls(self, token_id: str) -> bool:
        """calls saturates at max_calls (when limited); total_calls always grows."""
        t = SystemAccessToken
        saturated = and_(t.max_calls > 0, t.calls >= t.max_calls)
        result = await self.db.execute(
            update(t)
            .where(t.id == token_id)
            .values(
                calls=case((saturated, t.calls), else_=t.calls + 1),
                total_calls=t.total_calls + 1,
            )
            .execution_options(synchronize_session=False)
        )
        return (result.rowcount or 0) > 0

    async def increment_failed_calls(self, token_id: str) -> bool:
        t = SystemAccessToken
        result = await self.db.execute(
            update(t)
            .where(t.id == token_id)
            .values(
                failed_calls=t.failed_calls + 1,
                total_failed_calls=t.total_failed_calls + 1,
            )
            .execution_options(synchronize_session=False)
        )
        return (result.rowcount or 0) > 0

    async def list_reset_candidates(
        self, offset: int, limit: int
    ) -> list[QuotaResetCandidate]:
        t = SystemAccessToken
        result = await self.db.execute(
            select(t.id, t.created_at, t.last_reset_at)
            .order_by(t.created_at, t.id)
            .offset(offset)
            .limit(limit)
        )
        return [
            QuotaResetCandidate(
                id=row.id,
                created_at=ensure_utc(row.created_at),  # type: ignore[arg-type]
                last_reset_at=ensure_utc(row.last_reset_at),
            )
            for row in result.all()
        ]

    async def reset_period(self, token_id: str, period_start: datetime) -> bool:
        """Conditional reset: a second run for the same period matches no row.

        Runs in a SAVEPOINT. A failed reset rolls back only itself and the
        surrounding batch transaction stays usable.
        """
        async with self.db.begin_nested():
            return await self._reset_counters(token_id, period_start)

    async def _reset_counters(self, token_id: str, period_start: datetime) -> bool:
        t = SystemAccessToken
        result = await self.db.execute(
            update(t)
            .where(
                t.id == token_id,
                or_(t.last_reset_at.is_(None), t.last_reset_at < period_start),
                func.coalesce(t.last_reset_at, t.created_at) < period_start,
            )
            .values(calls=0, last_reset_at=period_start)
            .execution_options(synchronize_session=False)
        )
        return (result.rowcount or 0) > 0
