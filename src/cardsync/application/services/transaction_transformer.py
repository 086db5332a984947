"""Turn raw card transactions into ledger transactions."""

from __future__ import annotations

from typing import Literal, Optional, Sequence

from cardsync.domain.banking.value_objects import CardTransaction
from cardsync.domain.ledger.value_objects import ImportMarker, LedgerTransaction

ExpenseSign = Literal["negative", "positive"]


def build_external_id(raw: CardTransaction, suffix: Optional[str] = None) -> str:
    """Deduplication key of a card transaction, optionally suffixed.

    Changing the suffix makes every key new, which forces a re-import of
    transactions the ledger already knows.
    """
    key = raw.identity_key()
    return f"{key}-{suffix}" if suffix else key


def build_notes(raw: CardTransaction) -> str:
    if not raw.is_foreign_currency:
        return ""
    source_amount = ""
    if raw.source_amount is not None:
        source_amount = format(raw.source_amount, "f")
    return f"Original: {source_amount} {raw.source_currency}"


def transform_transaction(
    raw: CardTransaction,
    marker: ImportMarker,
    ledger_account_id: int,
    expense_sign: ExpenseSign = "negative",
    external_id_suffix: Optional[str] = None,
) -> LedgerTransaction:
    """
    Map one raw card transaction to a ledger transaction.

    Parameters
    ----------
    raw
        Transaction as delivered by the portal
    marker
        Import tag of the current run
    ledger_account_id
        Manual account in the ledger that mirrors the card
    expense_sign
        Sign the ledger expects for money leaving the card
    external_id_suffix
        Optional suffix appended to the deduplication key
    """
    magnitude = abs(raw.billing_amount)
    expense_is_negative = expense_sign == "negative"
    negative = raw.is_debit == expense_is_negative
    return LedgerTransaction(
        date=raw.transaction_date,
        payee=raw.description,
        amount=-magnitude if negative else magnitude,
        manual_account_id=ledger_account_id,
        external_id=build_external_id(raw, external_id_suffix),
        notes=build_notes(raw),
        tag_ids=(marker.tag_id,),
    )


class TransactionTransformer:
    """Bind the per-run settings of :func:`transform_transaction`."""

    def __init__(
        self,
        ledger_account_id: int,
        expense_sign: ExpenseSign = "negative",
        external_id_suffix: Optional[str] = None,
    ):
        self._ledger_account_id = ledger_account_id
        self._expense_sign = expense_sign
        self._external_id_suffix = external_id_suffix

    def transform(
        self,
        raw: CardTransaction,
        marker: ImportMarker,
    ) -> LedgerTransaction:
        return transform_transaction(
            raw,
            marker,
            ledger_account_id=self._ledger_account_id,
            expense_sign=self._expense_sign,
            external_id_suffix=self._external_id_suffix,
        )

    def transform_all(
        self,
        raws: Sequence[CardTransaction],
        marker: ImportMarker,
    ) -> list[LedgerTransaction]:
        return [self.transform(raw, marker) for raw in raws]
