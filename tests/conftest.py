"""Shared fixtures: an in-memory cache database and a scriptable remote store."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from datetime import UTC, datetime
from typing import Any

import pytest
from sqlalchemy import Engine

from watools.cache.database import get_cache_engine, get_session_factory, init_cache_db
from watools.cache.pending import PendingActionLog
from watools.cache.store import LocalCache
from watools.errors import NotFound, RemoteUnavailable
from watools.models import Collection
from watools.remote.base import RemoteStore
from watools.remote.client import clear_online_cache
from watools.workspace import Workspace, build_workspace


class FakeRemoteStore(RemoteStore):
    """In-memory remote store that can be switched offline."""

    def __init__(self) -> None:
        self.online = True
        self.data: dict[Collection, dict[str, dict[str, Any]]] = {c: {} for c in Collection}
        self.calls: list[tuple[str, Collection]] = []
        self.down: set[Collection] = set()
        self.fail_ids: set[str] = set()
        self._next_id = 0

    def _check(self, op: str, collection: Collection, entity_id: str | None = None) -> None:
        self.calls.append((op, collection))
        if not self.online or collection in self.down or entity_id in self.fail_ids:
            raise RemoteUnavailable(f"{op} {collection.value}: connection refused")

    def _now(self) -> str:
        return datetime.now(UTC).isoformat()

    def seed(self, collection: Collection, **fields: Any) -> str:
        """Insert a row directly, bypassing call tracking."""
        self._next_id += 1
        entity_id = fields.pop("id", f"srv-{self._next_id}")
        self.data[collection][entity_id] = {"id": entity_id, "created_at": self._now(), **fields}
        return entity_id

    async def get_all(self, collection: Collection) -> list[dict[str, Any]]:
        self._check("get_all", collection)
        return [dict(item) for item in self.data[collection].values()]

    async def create(self, collection: Collection, data: dict[str, Any]) -> str:
        self._check("create", collection)
        self._next_id += 1
        entity_id = f"srv-{self._next_id}"
        self.data[collection][entity_id] = {**data, "id": entity_id, "created_at": self._now()}
        return entity_id

    async def update(self, collection: Collection, entity_id: str, patch: dict[str, Any]) -> None:
        self._check("update", collection, entity_id)
        if entity_id not in self.data[collection]:
            raise NotFound(collection.entity_name, entity_id)
        self.data[collection][entity_id].update(patch, updated_at=self._now())

    async def delete(self, collection: Collection, entity_id: str) -> None:
        self._check("delete", collection, entity_id)
        if self.data[collection].pop(entity_id, None) is None:
            raise NotFound(collection.entity_name, entity_id)

    async def query(
        self, collection: Collection, filters: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        self._check("query", collection)
        return [
            dict(item)
            for item in self.data[collection].values()
            if all(item.get(key) == value for key, value in filters.items())
        ]


@pytest.fixture
def remote() -> FakeRemoteStore:
    """A reachable fake remote store."""
    return FakeRemoteStore()


@pytest.fixture
def engine() -> Iterator[Engine]:
    """Create an in-memory SQLite cache database for testing."""
    cache_engine = get_cache_engine(":memory:")
    init_cache_db(cache_engine)
    yield cache_engine
    cache_engine.dispose()


@pytest.fixture
def cache(engine: Engine) -> LocalCache:
    """Local cache on the in-memory database."""
    return LocalCache(get_session_factory(engine))


@pytest.fixture
def pending_log(engine: Engine) -> PendingActionLog:
    """Pending action log on the in-memory database."""
    return PendingActionLog(get_session_factory(engine))


@pytest.fixture
def workspace(remote: FakeRemoteStore, engine: Engine) -> Workspace:
    """Fully wired workspace over the fake remote and in-memory cache."""
    return build_workspace(remote, engine)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep configuration and online status out of the user's home."""
    monkeypatch.setenv("WATOOLS_CONFIG_DIR", str(tmp_path / "config"))
    clear_online_cache()
    yield
    clear_online_cache()
