"""Permission grant repository. Upgrades are a single INSERT ... ON CONFLICT DO UPDATE."""

from typing import Any

from sqlalchemy import case, delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from notifyhub.application.dtos.sharing import PermissionGrantResult
from notifyhub.domain.enums import PermissionLevel
from notifyhub.domain.value_objects import ResourceRef
from notifyhub.infrastructure.persistence.models.sharing import PermissionGrant
from notifyhub.infrastructure.persistence.repositories.base import BaseRepository
from notifyhub.shared.utils.datetime import ensure_utc
from notifyhub.shared.utils.generators import generate_cuid

_INSERTS: dict[str, Any] = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _rank(column: Any) -> Any:
    """SQL expression mapping a stored level to its lattice rank."""
    return case({level.value: level.rank for level in PermissionLevel}, value=column, else_=0)


def _grant_to_result(g: PermissionGrant) -> PermissionGrantResult:
    return PermissionGrantResult(
        id=g.id,
        resource=ResourceRef.of(g.resource_type, g.resource_id),
        grantee_id=g.grantee_id,
        level=PermissionLevel(g.level),
        granted_by_id=g.granted_by_id,
        invite_code_id=g.invite_code_id,
        created_at=ensure_utc(g.created_at),  # type: ignore[arg-type]
        updated_at=ensure_utc(g.updated_at),
    )


class PermissionGrantRepository(BaseRepository[PermissionGrant]):
    """Implements IPermissionGrantRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, PermissionGrant)

    def _match(self, resource: ResourceRef, grantee_id: str) -> tuple[Any, ...]:
        return (
            PermissionGrant.resource_type == resource.resource_type.value,
            PermissionGrant.resource_id == resource.resource_id,
            PermissionGrant.grantee_id == grantee_id,
        )

    async def _get_row(self, resource: ResourceRef, grantee_id: str) -> PermissionGrant | None:
        result = await self.db.execute(
            select(PermissionGrant)
            .where(*self._match(resource, grantee_id))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_level(
        self, resource: ResourceRef, grantee_id: str
    ) -> PermissionLevel | None:
        result = await self.db.execute(
            select(PermissionGrant.level).where(*self._match(resource, grantee_id))
        )
        level = result.scalar_one_or_none()
        return PermissionLevel(level) if level else None

    async def upsert_max(
        self,
        resource: ResourceRef,
        grantee_id: str,
        level: PermissionLevel,
        granted_by_id: str | None,
        invite_code_id: str | None = None,
    ) -> PermissionGrantResult:
        """Store max(existing, level); concurrent upserts converge on the highest level."""
        dialect = self.db.get_bind().dialect.name
        insert_fn = _INSERTS.get(dialect)
        if insert_fn is None:
            raise NotImplementedError(f"Grant upsert not supported on dialect {dialect!r}")
        stmt = insert_fn(PermissionGrant).values(
            id=generate_cuid(),
            resource_type=resource.resource_type.value,
            resource_id=resource.resource_id,
            grantee_id=grantee_id,
            level=level.value,
            granted_by_id=granted_by_id,
            invite_code_id=invite_code_id,
        )
        upgrades = _rank(stmt.excluded.level) > _rank(PermissionGrant.level)
        stmt = stmt.on_conflict_do_update(
            index_elements=["resource_type", "resource_id", "grantee_id"],
            set_={
                "level": case((upgrades, stmt.excluded.level), else_=PermissionGrant.level),
                "granted_by_id": case(
                    (upgrades, stmt.excluded.granted_by_id),
                    else_=PermissionGrant.granted_by_id,
                ),
                "invite_code_id": case(
                    (upgrades, stmt.excluded.invite_code_id),
                    else_=PermissionGrant.invite_code_id,
                ),
                "updated_at": func.now(),
            },
        )
        await self.db.execute(stmt)
        row = await self._get_row(resource, grantee_id)
        if row is None:
            raise RuntimeError(f"Grant for {grantee_id} on {resource} vanished after upsert")
        return _grant_to_result(row)

    async def delete_grant(self, resource: ResourceRef, grantee_id: str) -> bool:
        result = await self.db.execute(
            delete(PermissionGrant).where(*self._match(resource, grantee_id))
        )
        return (result.rowcount or 0) > 0

    async def list_for_resource(self, resource: ResourceRef) -> list[PermissionGrantResult]:
        result = await self.db.execute(
            select(PermissionGrant)
            .where(
                PermissionGrant.resource_type == resource.resource_type.value,
                PermissionGrant.resource_id == resource.resource_id,
            )
            .order_by(PermissionGrant.created_at, PermissionGrant.id)
        )
        return [_grant_to_result(g) for g in result.scalars().all()]
