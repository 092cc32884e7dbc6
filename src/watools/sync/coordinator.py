"""Sync coordinator between the remote store and the local cache.

Every operation tries the remote store first and mirrors a successful
result into the local cache. When the remote store is unavailable the
operation is served from, or committed to, the local cache and writes are
queued in the pending action log for a later replay. Callers never see the
infrastructure failure; the returned ``SyncOutcome`` records which path ran.

Concurrent edits from other clients are not merged: a full read simply
replaces the cached collection (last write wins).
"""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from watools.cache.pending import PendingActionLog
from watools.cache.store import LocalCache
from watools.errors import NotFound, RemoteUnavailable
from watools.models import (
    ENTITY_TYPES,
    ActionKind,
    Collection,
    Entity,
    PendingAction,
)
from watools.remote.base import RemoteStore
from watools.sync.replay import Replayer, ReplayResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Usage payload key that points at an entity of each referenced collection
_USAGE_REFERENCE_KEYS = {Collection.JOBS: "job_id", Collection.TOOLS: "tool_id"}


class Source(str, Enum):
    """Which path produced an operation's result."""

    REMOTE = "remote"
    LOCAL_FALLBACK = "local_fallback"


@dataclass
class SyncOutcome(Generic[T]):
    """Result of a coordinator operation tagged with its source."""

    value: T
    source: Source

    @property
    def from_remote(self) -> bool:
        """Check if the remote-first path succeeded."""
        return self.source is Source.REMOTE


def generate_local_id(prefix: str) -> str:
    """Generate a time-plus-random ID for entities created offline."""
    return f"{prefix}_{int(time.time() * 1000)}_{secrets.token_hex(5)[:9]}"


class SyncCoordinator:
    """Orchestrates reads and writes across the remote store and local cache."""

    def __init__(self, remote: RemoteStore, cache: LocalCache, log: PendingActionLog) -> None:
        """Initialize the coordinator.

        Args:
            remote: Adapter for the authoritative store
            cache: Local mirror of the entity collections
            log: Queue of writes awaiting replay
        """
        self.remote = remote
        self.cache = cache
        self.log = log
        self._replayer = Replayer(remote, cache, log)

    def _parse(self, collection: Collection, items: list[dict[str, Any]]) -> list[Entity]:
        entity_type = ENTITY_TYPES[collection]
        try:
            return [entity_type.model_validate(item) for item in items]
        except PydanticValidationError as exc:
            raise RemoteUnavailable(f"Unreadable {collection.value} from remote store: {exc}") from exc

    def _queued_behind(self, collection: Collection, values: Mapping[str, Any]) -> bool:
        """Check if a write must wait for queued writes it depends on."""
        entity_id = values.get("id")
        if entity_id is not None and self.log.has_pending(collection, str(entity_id)):
            return True
        if collection is Collection.JOB_TOOL_USAGES:
            return self.log.has_pending(
                Collection.JOBS, str(values.get("job_id"))
            ) or self.log.has_pending(Collection.TOOLS, str(values.get("tool_id")))
        return False

    def _referenced_by_queued(self, collection: Collection, entity_id: str) -> bool:
        """Check if queued usage entries still point at a job or tool."""
        key = _USAGE_REFERENCE_KEYS.get(collection)
        if key is None:
            return False
        return bool(self.log.find(Collection.JOB_TOOL_USAGES, **{key: entity_id}))

    def queued_state(self, collection: Collection, entity_id: str) -> Entity | None:
        """Rebuild an entity from its queued create and the updates after it.

        Returns None when no queued create exists or a queued delete follows it.
        """
        state: dict[str, Any] | None = None
        for action in self.log.find(collection, id=entity_id):
            if action.kind is ActionKind.CREATE:
                state = dict(action.payload)
            elif action.kind is ActionKind.DELETE:
                state = None
            elif state is not None:
                state.update(action.payload)
        if state is None:
            return None
        return ENTITY_TYPES[collection].model_validate(state)

    def queued_creates(self, collection: Collection, **fields: Any) -> list[Entity]:
        """Entities created while offline that the remote store has not seen yet."""
        entities = []
        for action in self.log.find(collection, **fields):
            if action.kind is not ActionKind.CREATE or action.target_id is None:
                continue
            entity = self.queued_state(collection, action.target_id)
            if entity is not None:
                entities.append(entity)
        return entities

    # Reads

    async def get_all(self, collection: Collection) -> SyncOutcome[list[Entity]]:
        """Read a whole collection.

        A successful remote read replaces the cached collection.
        """
        try:
            entities = self._parse(collection, await self.remote.get_all(collection))
        except RemoteUnavailable as exc:
            logger.warning("Reading %s from local cache: %s", collection.value, exc)
            return SyncOutcome(self.cache.get_all(collection), Source.LOCAL_FALLBACK)

        self.cache.bulk_replace(collection, entities)
        return SyncOutcome(entities, Source.REMOTE)

    async def get(self, collection: Collection, entity_id: str) -> SyncOutcome[Entity | None]:
        """Read one entity through a full collection read.

        An entity still waiting in the log as a create is rebuilt from it.
        """
        outcome = await self.get_all(collection)
        found = next((entity for entity in outcome.value if entity.id == entity_id), None)
        if found is None:
            found = self.queued_state(collection, entity_id)
        return SyncOutcome(found, outcome.source)

    async def query(
        self, collection: Collection, filters: Mapping[str, Any]
    ) -> SyncOutcome[list[Entity]]:
        """Read the entities whose fields equal the given values.

        A successful remote query replaces the matching cached subset.
        """
        try:
            entities = self._parse(collection, await self.remote.query(collection, filters))
        except RemoteUnavailable as exc:
            logger.warning("Querying %s from local cache: %s", collection.value, exc)
            return SyncOutcome(self.cache.find(collection, filters), Source.LOCAL_FALLBACK)

        self.cache.delete_where(collection, filters)
        for entity in entities:
            self.cache.put(entity)
        return SyncOutcome(entities, Source.REMOTE)

    # Writes

    async def create(self, collection: Collection, data: BaseModel) -> SyncOutcome[Entity]:
        """Create an entity from validated input data."""
        entity_type = ENTITY_TYPES[collection]
        values = data.model_dump()

        if not self._queued_behind(collection, values):
            try:
                remote_id = await self.remote.create(collection, data.model_dump(mode="json"))
            except RemoteUnavailable as exc:
                logger.warning("Creating %s locally: %s", collection.entity_name, exc)
            else:
                # Provisional timestamp until the next full read brings the store's own
                entity = entity_type(id=remote_id, created_at=datetime.now(UTC), **values)
                self.cache.put(entity)
                return SyncOutcome(entity, Source.REMOTE)

        entity = entity_type(
            id=generate_local_id(collection.entity_name),
            created_at=datetime.now(UTC),
            **values,
        )
        self.cache.put(entity)
        self.log.enqueue(ActionKind.CREATE, collection, entity.model_dump(mode="json"))
        return SyncOutcome(entity, Source.LOCAL_FALLBACK)

    async def update(
        self, collection: Collection, entity_id: str, patch: BaseModel
    ) -> SyncOutcome[Entity | None]:
        """Apply a validated patch; only fields set on the patch are sent."""
        values = patch.model_dump(exclude_unset=True)
        wire = patch.model_dump(mode="json", exclude_unset=True)

        if not self._queued_behind(collection, {"id": entity_id}):
            try:
                await self.remote.update(collection, entity_id, wire)
            except RemoteUnavailable as exc:
                logger.warning("Updating %s %s locally: %s", collection.entity_name, entity_id, exc)
            else:
                entity = self.cache.patch(
                    collection, entity_id, {**values, "updated_at": datetime.now(UTC)}
                )
                return SyncOutcome(entity, Source.REMOTE)

        now = datetime.now(UTC)
        entity = self.cache.patch(collection, entity_id, {**values, "updated_at": now})
        if entity is None:
            # Row dropped by a full resync while its create is still queued
            queued = self.queued_state(collection, entity_id)
            if queued is None:
                raise NotFound(collection.entity_name, entity_id)
            entity = ENTITY_TYPES[collection].model_validate(
                {**queued.model_dump(), **values, "updated_at": now}
            )
            self.cache.put(entity)
        self.log.enqueue(ActionKind.UPDATE, collection, {"id": entity_id, **wire})
        return SyncOutcome(entity, Source.LOCAL_FALLBACK)

    async def delete(self, collection: Collection, entity_id: str) -> SyncOutcome[None]:
        """Delete an entity.

        A job or tool that queued usages still reference is deleted after them.
        """
        queued = self._queued_behind(
            collection, {"id": entity_id}
        ) or self._referenced_by_queued(collection, entity_id)
        if not queued:
            try:
                await self.remote.delete(collection, entity_id)
            except RemoteUnavailable as exc:
                logger.warning("Deleting %s %s locally: %s", collection.entity_name, entity_id, exc)
            except NotFound:
                self.cache.delete_where(collection, {"id": entity_id})
                raise
            else:
                self.cache.delete_where(collection, {"id": entity_id})
                return SyncOutcome(None, Source.REMOTE)

        self.cache.delete_where(collection, {"id": entity_id})
        self.log.enqueue(ActionKind.DELETE, collection, {"id": entity_id})
        return SyncOutcome(None, Source.LOCAL_FALLBACK)

    # Reconciliation

    async def replay(self) -> ReplayResult:
        """Replay queued writes; callers decide when connectivity is back."""
        return await self._replayer.replay()

    def pending_actions(self) -> list[PendingAction]:
        """Queued writes in replay order."""
        return self.log.drain()
