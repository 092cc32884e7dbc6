"""Synchronization between the remote store and the local cache."""

from watools.sync.coordinator import (
    Source,
    SyncCoordinator,
    SyncOutcome,
    generate_local_id,
)
from watools.sync.replay import Replayer, ReplayResult
from watools.sync.saga import Saga, SagaResult, SagaStep

__all__ = [
    "ReplayResult",
    "Replayer",
    "Saga",
    "SagaResult",
    "SagaStep",
    "Source",
    "SyncCoordinator",
    "SyncOutcome",
    "generate_local_id",
]
