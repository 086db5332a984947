"""Upload ledger transactions in bounded batches."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from cardsync.application.dtos.integration import (
    BatchCompletedEvent,
    BatchStartedEvent,
    CountMismatchEvent,
    ProgressEmitter,
    SyncStep,
)
from cardsync.domain.ledger.exceptions import LedgerWriteError
from cardsync.domain.ledger.ports import LedgerPort
from cardsync.domain.ledger.value_objects import LedgerTransaction

logger = logging.getLogger(__name__)

LEDGER_MAX_BATCH_SIZE = 500


@dataclass(frozen=True)
class BatchOutcome:
    """What happened to one uploaded batch."""

    index: int
    submitted: int
    inserted: int
    skipped: int
    status_code: int


@dataclass
class UploadSummary:
    """Aggregated outcome of all batches of a run."""

    submitted: int = 0
    inserted: int = 0
    skipped: int = 0
    batches: list[BatchOutcome] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def reconciled(self) -> bool:
        return self.inserted + self.skipped == self.submitted

    def add(self, outcome: BatchOutcome) -> None:
        self.batches.append(outcome)
        self.submitted += outcome.submitted
        self.inserted += outcome.inserted
        self.skipped += outcome.skipped


def split_batches(
    transactions: Sequence[LedgerTransaction],
    size: int,
) -> list[Sequence[LedgerTransaction]]:
    return [transactions[i : i + size] for i in range(0, len(transactions), size)]


class BatchUploader:
    """
    Send transactions to the ledger, at most ``batch_size`` per request.

    Batches go out strictly one after another. The first failing batch
    aborts the upload; earlier batches stay inserted and the error reports
    how many.
    """

    def __init__(
        self,
        ledger: LedgerPort,
        batch_size: int = LEDGER_MAX_BATCH_SIZE,
        skip_duplicates: bool = True,
        apply_rules: bool = True,
    ):
        if not 1 <= batch_size <= LEDGER_MAX_BATCH_SIZE:
            msg = f"batch_size must be between 1 and {LEDGER_MAX_BATCH_SIZE}"
            raise ValueError(msg)
        self._ledger = ledger
        self._batch_size = batch_size
        self._skip_duplicates = skip_duplicates
        self._apply_rules = apply_rules

    async def upload(
        self,
        transactions: Sequence[LedgerTransaction],
        progress: Optional[ProgressEmitter] = None,
    ) -> UploadSummary:
        """
        Upload all transactions and reconcile the counts.

        Raises
        ------
        LedgerWriteError
            If a batch is rejected; ``inserted_before_failure`` tells how
            many transactions earlier batches inserted
        """
        progress = progress or ProgressEmitter()
        summary = UploadSummary()
        batches = split_batches(transactions, self._batch_size)

        await progress.step(
            SyncStep.SYNC_LUNCHMONEY,
            f"Uploading {len(transactions)} transactions to Lunch Money...",
            count=len(transactions),
            batches=len(batches),
        )

        for index, batch in enumerate(batches, 1):
            await progress.emit(
                BatchStartedEvent(
                    batch_index=index,
                    total_batches=len(batches),
                    size=len(batch),
                ),
            )
            try:
                result = await self._ledger.insert_transactions(
                    batch,
                    apply_rules=self._apply_rules,
                    skip_duplicates=self._skip_duplicates,
                )
            except LedgerWriteError as e:
                logger.error(
                    "Batch %d/%d rejected after %d inserted: %s",
                    index,
                    len(batches),
                    summary.inserted,
                    e.message,
                )
                raise e.with_inserted_before_failure(summary.inserted) from e

            outcome = BatchOutcome(
                index=index,
                submitted=len(batch),
                inserted=result.inserted,
                skipped=result.skipped,
                status_code=result.status_code,
            )
            summary.add(outcome)

            if outcome.inserted == 0:
                logger.warning(
                    "Batch %d/%d inserted no transactions (%d skipped)",
                    index,
                    len(batches),
                    outcome.skipped,
                )
            await progress.emit(
                BatchCompletedEvent(
                    batch_index=index,
                    total_batches=len(batches),
                    inserted=outcome.inserted,
                    skipped=outcome.skipped,
                ),
            )

        if not summary.reconciled:
            event = CountMismatchEvent(
                submitted=summary.submitted,
                inserted=summary.inserted,
                skipped=summary.skipped,
            )
            logger.warning(event.message)
            summary.warnings.append(event.message)
            await progress.emit(event)

        await progress.step(
            SyncStep.SYNC_LUNCHMONEY_COMPLETE,
            f"Lunch Money: {summary.inserted} inserted, {summary.skipped} skipped",
            inserted=summary.inserted,
            skipped=summary.skipped,
        )
        return summary
