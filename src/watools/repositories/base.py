"""Base repository over the sync coordinator."""

from typing import Any, Generic, TypeVar, cast

from pydantic import BaseModel

from watools.errors import NotFound
from watools.models import Collection, Entity, validate_input
from watools.sync.coordinator import SyncCoordinator

EntityType = TypeVar("EntityType", bound=Entity)
SchemaType = TypeVar("SchemaType", bound=BaseModel)


class EntityRepository(Generic[EntityType]):
    """
    Typed facade over one collection of the sync coordinator.

    Args:
        coordinator: The sync coordinator shared by all repositories.
        collection: The collection this repository reads and writes.
    """

    def __init__(self, coordinator: SyncCoordinator, collection: Collection) -> None:
        """Initialize repository with coordinator and collection."""
        self.coordinator = coordinator
        self.collection = collection

    @staticmethod
    def validate(schema: type[SchemaType], data: SchemaType | dict[str, Any]) -> SchemaType:
        """Validate caller data before any store is touched."""
        return validate_input(schema, data)

    async def _all(self) -> list[EntityType]:
        outcome = await self.coordinator.get_all(self.collection)
        return cast(list[EntityType], outcome.value)

    async def _get(self, entity_id: str) -> EntityType:
        outcome = await self.coordinator.get(self.collection, entity_id)
        if outcome.value is None:
            raise NotFound(self.collection.entity_name, entity_id)
        return cast(EntityType, outcome.value)

    async def _create(self, data: BaseModel) -> EntityType:
        outcome = await self.coordinator.create(self.collection, data)
        return cast(EntityType, outcome.value)

    async def _update(self, entity_id: str, patch: BaseModel) -> EntityType:
        outcome = await self.coordinator.update(self.collection, entity_id, patch)
        if outcome.value is not None:
            return cast(EntityType, outcome.value)
        # Remote accepted the patch but the entity was not cached yet
        return await self._get(entity_id)

    async def _delete(self, entity_id: str) -> None:
        await self.coordinator.delete(self.collection, entity_id)
