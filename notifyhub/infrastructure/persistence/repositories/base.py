"""Base repository: generic get/create/update/delete for ORM models."""

from typing import Any, Generic, TypeVar

from sqlalchemy import delete as sa_delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from notifyhub.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with get_by_id, create, update_fields and delete_by_id.

    Subclasses map rows to application DTOs at their public methods.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_by_id(self, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None.

        Always reloads from the database: counter columns are changed by
        bulk UPDATE statements that bypass the identity map.
        """
        model: Any = self.model
        result = await self.db.execute(
            select(self.model)
            .where(model.id == entity_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new record and reload server defaults."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def update_fields(
        self, entity_id: str, changes: dict[str, Any]
    ) -> ModelType | None:
        """Set the given attributes on the record; None when it does not exist.

        Unknown attribute names raise ValueError so typos never pass silently.
        """
        obj = await self.get_by_id(entity_id)
        if obj is None:
            return None
        for key, value in changes.items():
            if not hasattr(self.model, key):
                raise ValueError(f"{self.model.__name__} has no attribute {key!r}")
            setattr(obj, key, value)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def delete_by_id(self, entity_id: str) -> bool:
        """Delete by primary key; False when no row matched."""
        model: Any = self.model
        result = await self.db.execute(sa_delete(self.model).where(model.id == entity_id))
        return (result.rowcount or 0) > 0
