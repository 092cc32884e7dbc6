"""Pending action log for writes that could not reach the remote store."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from watools.cache.models import CachedPendingAction
from watools.models import ActionKind, Collection, PendingAction

# Payload keys that may hold an entity ID
_ID_KEYS = ("id", "job_id", "tool_id")


def _to_action(row: CachedPendingAction) -> PendingAction:
    enqueued_at = row.enqueued_at
    if enqueued_at.tzinfo is None:
        enqueued_at = enqueued_at.replace(tzinfo=UTC)
    return PendingAction(
        id=row.id,
        kind=row.kind,
        collection=row.collection,
        payload=row.get_payload_dict(),
        enqueued_at=enqueued_at,
    )


class PendingActionLog:
    """Ordered, append-only queue of deferred mutations.

    Entries leave the log only through ``remove`` once replayed.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        """Initialize the log.

        Args:
            session_factory: Factory for sessions on an initialized cache database
        """
        self._session_factory = session_factory

    def enqueue(
        self, kind: ActionKind, collection: Collection, payload: dict[str, Any]
    ) -> PendingAction:
        """Append a mutation to the log.

        Args:
            kind: Create, update or delete
            collection: Target collection
            payload: JSON-serializable entity or patch including its ``id``

        Returns:
            The stored entry
        """
        row = CachedPendingAction(
            kind=kind,
            collection=collection,
            enqueued_at=datetime.now(UTC),
        )
        row.set_payload_dict(payload)
        with self._session_factory.begin() as session:
            session.add(row)
            session.flush()
            return _to_action(row)

    def drain(self) -> list[PendingAction]:
        """Return every entry in enqueue order without removing any.

        Order follows the autoincrement ID; ``enqueued_at`` is informational
        and may tie or run backwards when the clock is adjusted.
        """
        stmt = select(CachedPendingAction).order_by(CachedPendingAction.id)
        with self._session_factory() as session:
            return [_to_action(row) for row in session.execute(stmt).scalars().all()]

    def remove(self, action_id: int) -> bool:
        """Remove a replayed entry.

        Returns:
            True if removed, False if not found
        """
        with self._session_factory.begin() as session:
            row = session.get(CachedPendingAction, action_id)
            if row is None:
                return False
            session.delete(row)
            return True

    def count(self) -> int:
        """Number of queued entries."""
        with self._session_factory() as session:
            stmt = select(func.count()).select_from(CachedPendingAction)
            return int(session.execute(stmt).scalar_one())

    def find(self, collection: Collection, **fields: Any) -> list[PendingAction]:
        """Queued entries of a collection whose payload carries the given values.

        Example: ``log.find(Collection.JOB_TOOL_USAGES, job_id=job.id)``
        """
        stmt = (
            select(CachedPendingAction)
            .where(CachedPendingAction.collection == collection)
            .order_by(CachedPendingAction.id)
        )
        with self._session_factory() as session:
            actions = [_to_action(row) for row in session.execute(stmt).scalars().all()]
        return [
            action
            for action in actions
            if all(action.payload.get(key) == value for key, value in fields.items())
        ]

    def has_pending(self, collection: Collection, entity_id: str) -> bool:
        """Check if any queued entry targets the given entity."""
        return bool(self.find(collection, id=entity_id))

    def remap_ids(self, old_id: str, new_id: str) -> int:
        """Point queued payloads at a remote-assigned ID.

        Returns:
            Number of rewritten entries
        """
        rewritten = 0
        with self._session_factory.begin() as session:
            rows = session.execute(select(CachedPendingAction)).scalars().all()
            for row in rows:
                payload = row.get_payload_dict()
                changed = False
                for key in _ID_KEYS:
                    if payload.get(key) == old_id:
                        payload[key] = new_id
                        changed = True
                if changed:
                    row.set_payload_dict(payload)
                    rewritten += 1
        return rewritten
