"""Resource ownership lookup across every shareable resource kind."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from notifyhub.domain.enums import ResourceType
from notifyhub.domain.value_objects import ResourceRef
from notifyhub.infrastructure.persistence.models.resource import RelayTarget, Topic

# Every ResourceType must map to a model with owner_id.
RESOURCE_MODELS: dict[ResourceType, Any] = {
    ResourceType.TOPIC: Topic,
    ResourceType.RELAY_TARGET: RelayTarget,
}


class ResourceRepository:
    """Implements IResourceRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_owner_id(self, resource: ResourceRef) -> str | None:
        model = RESOURCE_MODELS[resource.resource_type]
        result = await self.db.execute(
            select(model.owner_id).where(model.id == resource.resource_id)
        )
        return result.scalar_one_or_none()

    async def exists(self, resource: ResourceRef) -> bool:
        return await self.get_owner_id(resource) is not None
