"""Application wiring: builds the sync engine and owns its lifecycle."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import Engine

from watools.cache.database import get_cache_engine, get_session_factory, init_cache_db
from watools.cache.pending import PendingActionLog
from watools.cache.store import LocalCache
from watools.remote.base import RemoteStore
from watools.remote.http import HttpRemoteStore
from watools.repositories.jobs import JobRepository
from watools.repositories.tools import ToolRepository
from watools.repositories.usages import UsageRepository
from watools.sync.coordinator import SyncCoordinator


@dataclass
class Workspace:
    """Everything a client session needs, constructed once and passed down."""

    coordinator: SyncCoordinator
    jobs: JobRepository
    tools: ToolRepository
    usages: UsageRepository


def build_workspace(remote: RemoteStore, engine: Engine) -> Workspace:
    """Wire cache, log, coordinator and repositories around a remote store.

    Args:
        remote: Adapter for the authoritative store
        engine: Engine of the cache database; tables are created if missing

    Returns:
        The assembled workspace
    """
    init_cache_db(engine)
    session_factory = get_session_factory(engine)
    coordinator = SyncCoordinator(
        remote=remote,
        cache=LocalCache(session_factory),
        log=PendingActionLog(session_factory),
    )
    usages = UsageRepository(coordinator)
    return Workspace(
        coordinator=coordinator,
        jobs=JobRepository(coordinator, usages),
        tools=ToolRepository(coordinator, usages),
        usages=usages,
    )


@asynccontextmanager
async def open_workspace(
    db_path: Path | str | None = None,
    remote: RemoteStore | None = None,
) -> AsyncIterator[Workspace]:
    """Open a workspace and release its resources afterwards.

    Args:
        db_path: Cache database file. If None, uses the configured location.
        remote: Remote store adapter. If None, uses the configured HTTP store.
    """
    engine = get_cache_engine(db_path)
    store = remote or HttpRemoteStore()
    try:
        yield build_workspace(store, engine)
    finally:
        await store.aclose()
        engine.dispose()
