"""Sync progress events for the line-oriented progress channel.

Every event serializes to one flat JSON object ``{step, message, ...}``;
the trigger process renders them live, one per line.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional


class SyncStep:
    """Stable step identifiers of the progress contract."""

    SYNC_START = "sync_start"
    BROWSER_LAUNCH = "browser_launch"
    PAGE_LOAD = "page_load"
    FILL_FORM = "fill_form"
    SUBMIT_FORM = "submit_form"
    SECOND_FACTOR_WAIT = "2fa_wait"
    SECOND_FACTOR_VERIFIED = "2fa_verified"
    DETERMINE_ACCOUNT = "determine_account"
    ACCOUNT_SELECTED = "account_selected"
    ACCOUNT_AUTO_DETECTED = "account_auto_detected"
    FETCH_ACCOUNT_DETAILS = "fetch_account_details"
    ACCOUNT_AMBIGUOUS = "account_ambiguous"
    FETCH_TRANSACTIONS = "fetch_transactions"
    FETCH_CHUNK = "fetch_chunk"
    CHUNK_COMPLETE = "chunk_complete"
    TAG_CREATE = "tag_create"
    SYNC_LUNCHMONEY = "sync_lunchmoney"
    SYNC_BATCH_START = "sync_batch_start"
    SYNC_BATCH_COMPLETE = "sync_batch_complete"
    SYNC_COUNT_MISMATCH = "sync_count_mismatch"
    SYNC_LUNCHMONEY_COMPLETE = "sync_lunchmoney_complete"
    SYNC_COMPLETE = "sync_complete"
    SYNC_ERROR = "sync_error"

    # Pseudo steps reported in failure results only
    VALIDATION = "validation"
    UNHANDLED_ERROR = "unhandled_error"


@dataclass
class SyncProgressEvent:
    """Base class for sync progress events."""

    step: str
    message: str
    fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        d = {"step": self.step, "message": self.message}
        d.update(self.fields)
        return d


@dataclass
class ChunkStartedEvent(SyncProgressEvent):
    """Emitted before a date range is requested from the portal."""

    def __init__(
        self,
        chunk_index: int,
        total_chunks: int,
        from_date: str,
        until_date: str,
        message: Optional[str] = None,
    ):
        super().__init__(
            step=SyncStep.FETCH_CHUNK,
            message=message
            or (
                f"Fetching {from_date} to {until_date} "
                f"({chunk_index}/{total_chunks})"
            ),
            fields={
                "chunk": chunk_index,
                "totalChunks": total_chunks,
                "fromDate": from_date,
                "untilDate": until_date,
            },
        )


@dataclass
class ChunkCompletedEvent(SyncProgressEvent):
    """Emitted after a date range was fetched."""

    def __init__(
        self,
        chunk_index: int,
        total_chunks: int,
        chunk_count: int,
        cumulative_count: int,
        message: Optional[str] = None,
    ):
        super().__init__(
            step=SyncStep.CHUNK_COMPLETE,
            message=message
            or (
                f"Chunk {chunk_index}/{total_chunks}: {chunk_count} transactions "
                f"({cumulative_count} total)"
            ),
            fields={
                "chunk": chunk_index,
                "totalChunks": total_chunks,
                "count": chunk_count,
                "totalCount": cumulative_count,
            },
        )


@dataclass
class BatchStartedEvent(SyncProgressEvent):
    """Emitted before a batch is sent to the ledger."""

    def __init__(
        self,
        batch_index: int,
        total_batches: int,
        size: int,
        message: Optional[str] = None,
    ):
        super().__init__(
            step=SyncStep.SYNC_BATCH_START,
            message=message
            or f"Uploading batch {batch_index}/{total_batches} ({size} transactions)",
            fields={
                "batch": batch_index,
                "totalBatches": total_batches,
                "size": size,
            },
        )


@dataclass
class BatchCompletedEvent(SyncProgressEvent):
    """Emitted after the ledger answered a batch."""

    def __init__(
        self,
        batch_index: int,
        total_batches: int,
        inserted: int,
        skipped: int,
        message: Optional[str] = None,
    ):
        super().__init__(
            step=SyncStep.SYNC_BATCH_COMPLETE,
            message=message
            or (
                f"Batch {batch_index}/{total_batches}: "
                f"{inserted} inserted, {skipped} skipped"
            ),
            fields={
                "batch": batch_index,
                "totalBatches": total_batches,
                "inserted": inserted,
                "skipped": skipped,
            },
        )


@dataclass
class CountMismatchEvent(SyncProgressEvent):
    """Emitted when inserted + skipped does not add up to what was sent."""

    def __init__(
        self,
        submitted: int,
        inserted: int,
        skipped: int,
        message: Optional[str] = None,
    ):
        super().__init__(
            step=SyncStep.SYNC_COUNT_MISMATCH,
            message=message
            or (
                f"Count mismatch: sent {submitted}, got {inserted} inserted "
                f"+ {skipped} skipped = {inserted + skipped}"
            ),
            fields={
                "submitted": submitted,
                "inserted": inserted,
                "skipped": skipped,
            },
        )


ProgressCallback = Callable[[SyncProgressEvent], Optional[Awaitable[None]]]


class ProgressEmitter:
    """Deliver events to an optional, sync or async, callback.

    Also remembers the step of the last event, which is what a failed run
    reports as its failing step.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self._callback = callback
        self.last_step: Optional[str] = None

    async def emit(self, event: SyncProgressEvent) -> None:
        self.last_step = event.step
        if self._callback is None:
            return
        result = self._callback(event)
        if inspect.isawaitable(result):
            await result

    async def step(self, step: str, message: str, **fields: Any) -> None:
        await self.emit(SyncProgressEvent(step=step, message=message, fields=fields))
