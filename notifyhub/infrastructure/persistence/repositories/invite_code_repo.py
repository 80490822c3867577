"""Invite code repository. Usage is consumed with one conditional UPDATE."""

from datetime import datetime
from typing import Any

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from notifyhub.application.dtos.sharing import InviteCodeCreate, InviteCodeResult
from notifyhub.domain.enums import PermissionLevel
from notifyhub.domain.value_objects import ResourceRef
from notifyhub.infrastructure.persistence.models.sharing import InviteCode
from notifyhub.infrastructure.persistence.repositories.base import BaseRepository
from notifyhub.shared.utils.datetime import ensure_utc


def _invite_to_result(i: InviteCode) -> InviteCodeResult:
    return InviteCodeResult(
        id=i.id,
        code=i.code,
        resource=ResourceRef.of(i.resource_type, i.resource_id),
        permissions=[PermissionLevel(p) for p in i.permissions],
        max_uses=i.max_uses,
        usage_count=i.usage_count,
        expires_at=ensure_utc(i.expires_at),
        created_by_id=i.created_by_id,
        created_at=ensure_utc(i.created_at),  # type: ignore[arg-type]
        updated_at=ensure_utc(i.updated_at),
    )


class InviteCodeRepository(BaseRepository[InviteCode]):
    """Implements IInviteCodeRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, InviteCode)

    async def create_invite(self, data: InviteCodeCreate) -> InviteCodeResult | None:
        existing = await self.db.execute(
            select(InviteCode.id).where(InviteCode.code == data.code)
        )
        if existing.scalar_one_or_none() is not None:
            return None
        row = InviteCode(
            code=data.code,
            resource_type=data.resource.resource_type.value,
            resource_id=data.resource.resource_id,
            permissions=[p.value for p in data.permissions],
            max_uses=data.max_uses,
            usage_count=0,
            expires_at=data.expires_at,
            created_by_id=data.created_by_id,
        )
        created = await self.create(row)
        return _invite_to_result(created)

    async def get_invite(self, invite_id: str) -> InviteCodeResult | None:
        row = await super().get_by_id(invite_id)
        return _invite_to_result(row) if row else None

    async def get_by_code(self, code: str) -> InviteCodeResult | None:
        result = await self.db.execute(
            select(InviteCode)
            .where(InviteCode.code == code)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _invite_to_result(row) if row else None

    async def list_for_resource(self, resource: ResourceRef) -> list[InviteCodeResult]:
        result = await self.db.execute(
            select(InviteCode)
            .where(
                InviteCode.resource_type == resource.resource_type.value,
                InviteCode.resource_id == resource.resource_id,
            )
            .order_by(InviteCode.created_at.desc(), InviteCode.id)
        )
        return [_invite_to_result(i) for i in result.scalars().all()]

    async def update_invite(
        self, invite_id: str, changes: dict[str, Any]
    ) -> InviteCodeResult | None:
        if "permissions" in changes:
            changes = {
                **changes,
                "permissions": [PermissionLevel(p).value for p in changes["permissions"]],
            }
        row = await self.update_fields(invite_id, changes)
        return _invite_to_result(row) if row else None

    async def delete_invite(self, invite_id: str) -> bool:
        return await self.delete_by_id(invite_id)

    async def try_consume(self, invite_id: str, now: datetime) -> bool:
        """Increment usage_count only while under the cap and unexpired; rowcount decides."""
        i = InviteCode
        result = await self.db.execute(
            update(i)
            .where(
                i.id == invite_id,
                or_(i.max_uses.is_(None), i.usage_count < i.max_uses),
                or_(i.expires_at.is_(None), i.expires_at > now),
            )
            .values(usage_count=i.usage_count + 1)
            .execution_options(synchronize_session=False)
        )
        return (result.rowcount or 0) > 0
