"""Integration DTOs. Progress events and the terminal sync result."""

from cardsync.application.dtos.integration.sync_progress import (
    BatchCompletedEvent,
    BatchStartedEvent,
    ChunkCompletedEvent,
    ChunkStartedEvent,
    CountMismatchEvent,
    ProgressCallback,
    ProgressEmitter,
    SyncProgressEvent,
    SyncStep,
)
from cardsync.application.dtos.integration.sync_result import SyncRunResult

__all__ = [
    "BatchCompletedEvent",
    "BatchStartedEvent",
    "ChunkCompletedEvent",
    "ChunkStartedEvent",
    "CountMismatchEvent",
    "ProgressCallback",
    "ProgressEmitter",
    "SyncProgressEvent",
    "SyncRunResult",
    "SyncStep",
]
