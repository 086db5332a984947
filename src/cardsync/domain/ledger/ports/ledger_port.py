"""Ledger port interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from cardsync.domain.ledger.value_objects.batch_insert_result import (
        BatchInsertResult,
    )
    from cardsync.domain.ledger.value_objects.ledger_transaction import (
        LedgerTransaction,
    )


class LedgerPort(ABC):
    """
    Interface for the personal-finance ledger.

    Only the two writes a sync needs: get-or-create a tag and insert a
    batch of transactions with server-side deduplication.
    """

    @abstractmethod
    async def ensure_tag(self, name: str) -> int:
        """
        Create a tag, or look up the existing tag with the same name.

        Returns
        -------
        The ledger's tag id

        Raises
        ------
        LedgerTagError
            If the tag can neither be created nor found
        """

    @abstractmethod
    async def insert_transactions(
        self,
        transactions: Sequence[LedgerTransaction],
        apply_rules: bool = True,
        skip_duplicates: bool = True,
    ) -> BatchInsertResult:
        """
        Insert one batch of transactions.

        Raises
        ------
        LedgerWriteError
            If the ledger rejects the batch or answers with an error body
        """

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying HTTP client."""
