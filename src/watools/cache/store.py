"""Local cache access for entity collections.

The cache is pure storage: it mirrors whatever the sync coordinator hands
it and never talks to the remote store.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import ColumnElement, delete, func, select, update
from sqlalchemy.orm import Session, sessionmaker

from watools.cache.models import CACHE_MODELS, CachedJob, CachedTool, CachedUsage
from watools.models import (
    Collection,
    Entity,
    Job,
    JobToolUsage,
    Tool,
    collection_of,
)

CachedRow = CachedJob | CachedTool | CachedUsage

# Columns that hold a reference to another collection
_REFERENCE_COLUMNS = {
    Collection.JOBS: "job_id",
    Collection.TOOLS: "tool_id",
}


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on the way back
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _to_entity(row: CachedRow) -> Entity:
    if isinstance(row, CachedJob):
        return Job(
            id=row.id,
            title=row.title,
            serial_number=row.serial_number,
            description=row.description,
            created_at=_as_utc(row.created_at),
            updated_at=_as_utc(row.updated_at),
        )
    if isinstance(row, CachedTool):
        return Tool(
            id=row.id,
            name=row.name,
            is_robust=row.is_robust,
            complex_description=row.complex_description,
            variations=row.get_variations_list(),
            notes=row.notes,
            created_at=_as_utc(row.created_at),
            updated_at=_as_utc(row.updated_at),
        )
    return JobToolUsage(
        id=row.id,
        job_id=row.job_id,
        tool_id=row.tool_id,
        variation=row.variation,
        quantity=row.quantity,
        notes=row.notes,
        created_at=_as_utc(row.created_at),
    )


def _apply_values(row: CachedRow, values: Mapping[str, Any]) -> None:
    for key, value in values.items():
        if key == "id":
            continue
        if isinstance(row, CachedTool) and key == "variations":
            row.set_variations_list(value)
        elif hasattr(row, key):
            setattr(row, key, value)


def _to_row(entity: Entity) -> CachedRow:
    model = CACHE_MODELS[collection_of(entity)]
    row = model(id=entity.id)
    _apply_values(row, entity.model_dump())
    return row


class LocalCache:
    """Persistent mirror of the jobs, tools and usages collections."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        """Initialize the cache.

        Args:
            session_factory: Factory for sessions on an initialized cache database
        """
        self._session_factory = session_factory

    def _where(self, collection: Collection, filters: Mapping[str, Any]) -> list[ColumnElement[bool]]:
        model = CACHE_MODELS[collection]
        clauses = []
        for field, value in filters.items():
            column = getattr(model, field, None)
            if column is None:
                raise ValueError(f"Unknown field for {collection.value}: {field}")
            clauses.append(column == value)
        return clauses

    def get(self, collection: Collection, entity_id: str) -> Entity | None:
        """Get a cached entity by ID.

        Args:
            collection: The collection to read
            entity_id: The entity ID to look up

        Returns:
            The cached entity or None if not found
        """
        with self._session_factory() as session:
            row = session.get(CACHE_MODELS[collection], entity_id)
            return _to_entity(row) if row is not None else None

    def get_all(self, collection: Collection) -> list[Entity]:
        """Get every cached entity of a collection."""
        with self._session_factory() as session:
            rows = session.execute(select(CACHE_MODELS[collection])).scalars().all()
            return [_to_entity(row) for row in rows]

    def find(self, collection: Collection, filters: Mapping[str, Any]) -> list[Entity]:
        """Get cached entities whose fields equal the given values.

        Args:
            collection: The collection to read
            filters: Field name to required value

        Returns:
            List of matching entities
        """
        stmt = select(CACHE_MODELS[collection]).where(*self._where(collection, filters))
        with self._session_factory() as session:
            return [_to_entity(row) for row in session.execute(stmt).scalars().all()]

    def count(self, collection: Collection) -> int:
        """Count cached entities of a collection."""
        model = CACHE_MODELS[collection]
        with self._session_factory() as session:
            return int(session.execute(select(func.count()).select_from(model)).scalar_one())

    def put(self, entity: Entity) -> None:
        """Insert or replace a single entity."""
        with self._session_factory.begin() as session:
            session.merge(_to_row(entity))

    def patch(
        self, collection: Collection, entity_id: str, values: Mapping[str, Any]
    ) -> Entity | None:
        """Apply a partial update to a cached entity.

        Returns:
            The patched entity, or None if it is not cached
        """
        with self._session_factory.begin() as session:
            row = session.get(CACHE_MODELS[collection], entity_id)
            if row is None:
                return None
            _apply_values(row, values)
            session.flush()
            return _to_entity(row)

    def bulk_replace(self, collection: Collection, entities: list[Entity]) -> None:
        """Replace a whole collection in one transaction."""
        model = CACHE_MODELS[collection]
        with self._session_factory.begin() as session:
            session.execute(delete(model))
            for entity in entities:
                session.merge(_to_row(entity))

    def delete_where(self, collection: Collection, filters: Mapping[str, Any]) -> int:
        """Delete cached entities whose fields equal the given values.

        Returns:
            Number of deleted entities
        """
        model = CACHE_MODELS[collection]
        with self._session_factory.begin() as session:
            result = session.execute(delete(model).where(*self._where(collection, filters)))
            return int(result.rowcount or 0)

    def rekey(self, collection: Collection, old_id: str, new_id: str) -> None:
        """Move a cached entity to a new ID and re-point usages that reference it."""
        model = CACHE_MODELS[collection]
        with self._session_factory.begin() as session:
            session.execute(update(model).where(model.id == old_id).values(id=new_id))
            column = _REFERENCE_COLUMNS.get(collection)
            if column is not None:
                session.execute(
                    update(CachedUsage)
                    .where(getattr(CachedUsage, column) == old_id)
                    .values({column: new_id})
                )
