"""Fetch card transactions range by range."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from cardsync.application.dtos.integration import (
    ChunkCompletedEvent,
    ChunkStartedEvent,
    ProgressEmitter,
)
from cardsync.domain.banking.exceptions import (
    BankRequestError,
    BankTransactionFetchError,
)
from cardsync.domain.banking.ports import CardPortalPort
from cardsync.domain.banking.value_objects import CardTransaction, DateRange

logger = logging.getLogger(__name__)


class TransactionFetcher:
    """
    Collect all transactions of an account over a sequence of date ranges.

    A gap is worse than a failure here: if any range cannot be read, the
    whole fetch aborts and nothing is returned.
    """

    def __init__(self, portal: CardPortalPort):
        self._portal = portal

    async def fetch(
        self,
        account_number: str,
        ranges: Sequence[DateRange],
        progress: Optional[ProgressEmitter] = None,
    ) -> list[CardTransaction]:
        """
        Fetch the ranges in the given order and concatenate the results.

        Raises
        ------
        BankTransactionFetchError
            If a request fails or a range returns anything but a list
        """
        progress = progress or ProgressEmitter()
        transactions: list[CardTransaction] = []
        total = len(ranges)

        for index, date_range in enumerate(ranges, 1):
            await progress.emit(
                ChunkStartedEvent(
                    chunk_index=index,
                    total_chunks=total,
                    from_date=date_range.from_date.isoformat(),
                    until_date=date_range.until_date.isoformat(),
                ),
            )
            chunk = await self._fetch_range(account_number, date_range)
            transactions.extend(chunk)
            logger.info(
                "Fetched %d transactions for %s (%d total)",
                len(chunk),
                date_range,
                len(transactions),
            )
            await progress.emit(
                ChunkCompletedEvent(
                    chunk_index=index,
                    total_chunks=total,
                    chunk_count=len(chunk),
                    cumulative_count=len(transactions),
                ),
            )

        return transactions

    async def _fetch_range(
        self,
        account_number: str,
        date_range: DateRange,
    ) -> list[CardTransaction]:
        try:
            payload = await self._portal.search_transactions(account_number, date_range)
        except BankRequestError as e:
            msg = f"Failed to fetch transactions for {date_range}: {e.message}"
            raise BankTransactionFetchError(
                message=msg,
                account_number=account_number,
                date_range=str(date_range),
                reason=e.message,
            ) from e

        if not isinstance(payload, list):
            msg = (
                f"Unexpected response for {date_range}: expected a list, "
                f"got {type(payload).__name__}"
            )
            raise BankTransactionFetchError(
                message=msg,
                account_number=account_number,
                date_range=str(date_range),
                reason="malformed_response",
            )

        try:
            return [CardTransaction.model_validate(item) for item in payload]
        except PydanticValidationError as e:
            msg = f"Malformed transaction in {date_range}: {e.error_count()} error(s)"
            raise BankTransactionFetchError(
                message=msg,
                account_number=account_number,
                date_range=str(date_range),
                reason="malformed_transaction",
            ) from e
