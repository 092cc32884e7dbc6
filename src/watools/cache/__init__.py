"""Local cache and pending action log for offline operation."""

from watools.cache.database import get_cache_engine, get_session_factory, init_cache_db
from watools.cache.models import (
    CacheBase,
    CachedJob,
    CachedPendingAction,
    CachedTool,
    CachedUsage,
)
from watools.cache.pending import PendingActionLog
from watools.cache.store import LocalCache

__all__ = [
    "CacheBase",
    "CachedJob",
    "CachedPendingAction",
    "CachedTool",
    "CachedUsage",
    "LocalCache",
    "PendingActionLog",
    "get_cache_engine",
    "get_session_factory",
    "init_cache_db",
]
