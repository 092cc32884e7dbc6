"""Tests for the pending action log."""

from __future__ import annotations

from datetime import timedelta

from sqlalchemy import update

from watools.cache.database import get_session_factory
from watools.cache.models import CachedPendingAction
from watools.cache.pending import PendingActionLog
from watools.models import ActionKind, Collection


def test_enqueue_returns_stored_entry(pending_log: PendingActionLog) -> None:
    """enqueue hands back the entry with its ID and timestamp."""
    action = pending_log.enqueue(
        ActionKind.CREATE, Collection.JOBS, {"id": "job_1", "title": "Cambio"}
    )

    assert action.id is not None
    assert action.kind is ActionKind.CREATE
    assert action.collection is Collection.JOBS
    assert action.payload == {"id": "job_1", "title": "Cambio"}
    assert action.target_id == "job_1"
    assert action.enqueued_at.tzinfo is not None


def test_drain_preserves_enqueue_order(pending_log: PendingActionLog) -> None:
    """Entries come back in the order they were queued."""
    pending_log.enqueue(ActionKind.CREATE, Collection.JOBS, {"id": "a"})
    pending_log.enqueue(ActionKind.UPDATE, Collection.JOBS, {"id": "a", "title": "x"})
    pending_log.enqueue(ActionKind.DELETE, Collection.TOOLS, {"id": "b"})

    actions = pending_log.drain()

    assert [action.kind for action in actions] == [
        ActionKind.CREATE,
        ActionKind.UPDATE,
        ActionKind.DELETE,
    ]
    assert [action.id for action in actions] == sorted(action.id for action in actions)


def test_drain_ignores_clock_jumps(pending_log: PendingActionLog, engine) -> None:
    """Order follows the log ID even when a later entry has an earlier timestamp."""
    create = pending_log.enqueue(ActionKind.CREATE, Collection.JOBS, {"id": "a"})
    patch = pending_log.enqueue(ActionKind.UPDATE, Collection.JOBS, {"id": "a", "title": "x"})
    with get_session_factory(engine).begin() as session:
        session.execute(
            update(CachedPendingAction)
            .where(CachedPendingAction.id == patch.id)
            .values(enqueued_at=create.enqueued_at - timedelta(hours=1))
        )

    actions = pending_log.drain()

    assert [action.id for action in actions] == [create.id, patch.id]
    assert actions[1].enqueued_at < actions[0].enqueued_at


def test_drain_does_not_remove(pending_log: PendingActionLog) -> None:
    """Draining is a read; entries stay until removed."""
    pending_log.enqueue(ActionKind.DELETE, Collection.JOBS, {"id": "a"})

    pending_log.drain()

    assert pending_log.count() == 1


def test_remove(pending_log: PendingActionLog) -> None:
    """remove reports whether the entry existed."""
    action = pending_log.enqueue(ActionKind.DELETE, Collection.JOBS, {"id": "a"})

    assert pending_log.remove(action.id) is True
    assert pending_log.remove(action.id) is False
    assert pending_log.count() == 0


def test_has_pending_matches_collection_and_id(pending_log: PendingActionLog) -> None:
    """has_pending only matches entries that target the entity itself."""
    pending_log.enqueue(
        ActionKind.CREATE,
        Collection.JOB_TOOL_USAGES,
        {"id": "u1", "job_id": "job_1", "tool_id": "tool_1"},
    )

    assert pending_log.has_pending(Collection.JOB_TOOL_USAGES, "u1")
    assert not pending_log.has_pending(Collection.JOBS, "job_1")
    assert not pending_log.has_pending(Collection.TOOLS, "u1")


def test_remap_ids_rewrites_all_references(pending_log: PendingActionLog) -> None:
    """remap_ids rewrites the entity ID and foreign keys in queued payloads."""
    pending_log.enqueue(ActionKind.CREATE, Collection.JOBS, {"id": "job_1"})
    pending_log.enqueue(
        ActionKind.CREATE,
        Collection.JOB_TOOL_USAGES,
        {"id": "u1", "job_id": "job_1", "tool_id": "tool_1"},
    )
    pending_log.enqueue(ActionKind.DELETE, Collection.TOOLS, {"id": "tool_1"})

    assert pending_log.remap_ids("job_1", "srv-1") == 2

    payloads = [action.payload for action in pending_log.drain()]
    assert payloads[0] == {"id": "srv-1"}
    assert payloads[1]["job_id"] == "srv-1"
    assert payloads[2] == {"id": "tool_1"}


def test_find_matches_payload_fields(pending_log: PendingActionLog) -> None:
    """find looks up queued entries by any payload value, in log order."""
    first = pending_log.enqueue(
        ActionKind.CREATE,
        Collection.JOB_TOOL_USAGES,
        {"id": "u1", "job_id": "job_1", "tool_id": "tool_1"},
    )
    pending_log.enqueue(
        ActionKind.CREATE,
        Collection.JOB_TOOL_USAGES,
        {"id": "u2", "job_id": "job_2", "tool_id": "tool_1"},
    )

    assert [a.id for a in pending_log.find(Collection.JOB_TOOL_USAGES, job_id="job_1")] == [
        first.id
    ]
    assert len(pending_log.find(Collection.JOB_TOOL_USAGES, tool_id="tool_1")) == 2
    assert pending_log.find(Collection.JOBS, id="job_1") == []
