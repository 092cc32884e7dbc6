"""Replay of deferred writes against the remote store.

Entries are replayed in enqueue order. A failed entry stays queued and only
holds back later entries for the same entity (and usages that reference
it); everything else keeps going. Replay is not transactional: whatever is
left in the log is picked up by the next explicit replay.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from watools.cache.pending import PendingActionLog
from watools.cache.store import LocalCache
from watools.errors import NotFound, RemoteUnavailable, ValidationError
from watools.models import ActionKind, Collection, PendingAction
from watools.remote.base import RemoteStore

logger = logging.getLogger(__name__)

# Fields the remote store stamps itself
_SERVER_FIELDS = ("id", "created_at", "updated_at")

_REFERENCES = (("job_id", Collection.JOBS), ("tool_id", Collection.TOOLS))


@dataclass
class ReplayResult:
    """Result of a replay pass."""

    replayed: int = 0
    failed: int = 0
    skipped: int = 0
    discarded: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if the log was fully drained."""
        return self.failed == 0 and self.skipped == 0

    @property
    def attempted(self) -> int:
        """Number of entries that were looked at."""
        return self.replayed + self.failed + self.skipped + self.discarded


class Replayer:
    """Drains the pending action log against the remote store."""

    def __init__(self, remote: RemoteStore, cache: LocalCache, log: PendingActionLog) -> None:
        self._remote = remote
        self._cache = cache
        self._log = log

    async def replay(self) -> ReplayResult:
        """Replay every queued entry once.

        Returns:
            ReplayResult with per-outcome counts
        """
        result = ReplayResult()
        id_map: dict[str, str] = {}
        blocked: set[tuple[Collection, str]] = set()

        for action in self._log.drain():
            payload = self._resolve(action.payload, id_map)
            target = str(payload.get("id", ""))

            if self._is_blocked(action.collection, payload, blocked):
                logger.debug("Holding back %s %s/%s", action.kind.value, action.collection.value, target)
                result.skipped += 1
                blocked.add((action.collection, target))
                continue

            try:
                await self._apply(action, payload, id_map)
            except RemoteUnavailable as exc:
                logger.warning(
                    "Replay of %s %s/%s failed: %s",
                    action.kind.value,
                    action.collection.value,
                    target,
                    exc,
                )
                result.failed += 1
                result.errors.append(str(exc))
                blocked.add((action.collection, target))
                continue
            except NotFound as exc:
                if action.kind is not ActionKind.DELETE:
                    self._discard(action, exc, result)
                    continue
                # Already gone remotely
            except ValidationError as exc:
                self._discard(action, exc, result)
                continue

            self._log.remove(action.id)
            result.replayed += 1

        if result.attempted:
            logger.info(
                "Replay finished: %d replayed, %d failed, %d held back, %d discarded",
                result.replayed,
                result.failed,
                result.skipped,
                result.discarded,
            )
        return result

    def _resolve(self, payload: dict[str, Any], id_map: dict[str, str]) -> dict[str, Any]:
        resolved = dict(payload)
        for key in ("id", "job_id", "tool_id"):
            value = resolved.get(key)
            if isinstance(value, str) and value in id_map:
                resolved[key] = id_map[value]
        return resolved

    def _is_blocked(
        self,
        collection: Collection,
        payload: dict[str, Any],
        blocked: set[tuple[Collection, str]],
    ) -> bool:
        if (collection, str(payload.get("id", ""))) in blocked:
            return True
        if collection is Collection.JOB_TOOL_USAGES:
            return any(
                (referenced, str(payload.get(key, ""))) in blocked
                for key, referenced in _REFERENCES
            )
        return False

    async def _apply(
        self, action: PendingAction, payload: dict[str, Any], id_map: dict[str, str]
    ) -> None:
        entity_id = str(payload["id"])
        if action.kind is ActionKind.CREATE:
            data = {k: v for k, v in payload.items() if k not in _SERVER_FIELDS}
            remote_id = await self._remote.create(action.collection, data)
            if remote_id != entity_id:
                self._cache.rekey(action.collection, entity_id, remote_id)
                self._log.remap_ids(entity_id, remote_id)
                id_map[entity_id] = remote_id
        elif action.kind is ActionKind.UPDATE:
            patch = {k: v for k, v in payload.items() if k not in _SERVER_FIELDS}
            await self._remote.update(action.collection, entity_id, patch)
        else:
            await self._remote.delete(action.collection, entity_id)

    def _discard(self, action: PendingAction, exc: Exception, result: ReplayResult) -> None:
        logger.error(
            "Discarding %s %s/%s rejected by remote store: %s",
            action.kind.value,
            action.collection.value,
            action.target_id,
            exc,
        )
        self._log.remove(action.id)
        result.discarded += 1
        result.errors.append(str(exc))
