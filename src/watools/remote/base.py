"""Base class for remote store adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from watools.models import Collection


class RemoteStore(ABC):
    """CRUD contract of the authoritative store.

    Implementations raise ``RemoteUnavailable`` for any transport or service
    failure and never retry; ``NotFound`` and ``ValidationError`` are reserved
    for answers about the data itself. The store stamps ``created_at`` and
    ``updated_at`` on successful writes.
    """

    @abstractmethod
    async def get_all(self, collection: Collection) -> list[dict[str, Any]]:
        """Return every entity of a collection in the store's order."""

    @abstractmethod
    async def create(self, collection: Collection, data: dict[str, Any]) -> str:
        """Create an entity and return its assigned ID."""

    @abstractmethod
    async def update(self, collection: Collection, entity_id: str, patch: dict[str, Any]) -> None:
        """Apply a partial update to an entity."""

    @abstractmethod
    async def delete(self, collection: Collection, entity_id: str) -> None:
        """Delete an entity."""

    @abstractmethod
    async def query(
        self, collection: Collection, filters: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        """Return entities whose fields equal the given values."""

    async def aclose(self) -> None:  # noqa: B027
        """Release transport resources."""
