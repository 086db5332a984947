"""
Test data factories for portal payloads and ledger objects.

Usage:
    from tests.shared.fixtures.factories import PortalPayloadFactory

    def test_something():
        raw = PortalPayloadFactory.transaction(billing_amount="12.50")
"""

from dataclasses import dataclass
from datetime import date
from typing import Any

from cardsync.domain.banking.value_objects import CardTransaction
from cardsync.domain.ledger.value_objects import ImportMarker


@dataclass(frozen=True)
class PortalPayloadFactory:
    """Build JSON shaped like the card portal's frontend API."""

    ACCOUNT_NUMBER = "12345678901"
    SECOND_ACCOUNT_NUMBER = "98765432109"

    @classmethod
    def account(
        cls,
        account_number: str = ACCOUNT_NUMBER,
        name: str | None = "Creditcard",
        balance: Any = "-123.45",
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"accountNumber": account_number, "balance": balance}
        if name is not None:
            payload["productName"] = name
        return payload

    @classmethod
    def transaction(  # noqa: PLR0913
        cls,
        transaction_date: str = "2026-01-15",
        description: str | None = "ALBERT HEIJN 1234",
        billing_amount: Any = "12.50",
        billing_currency: str = "EUR",
        debit_credit: str = "DEBIT",
        processing_time: str | None = "101500",
        batch_nr: Any = 42,
        batch_sequence_nr: Any = 7,
        source_amount: Any = None,
        source_currency: str | None = None,
    ) -> dict[str, Any]:
        return {
            "transactionDate": transaction_date,
            "description": description,
            "billingAmount": billing_amount,
            "billingCurrency": billing_currency,
            "sourceAmount": source_amount,
            "sourceCurrency": source_currency,
            "processingTime": processing_time,
            "batchNr": batch_nr,
            "batchSequenceNr": batch_sequence_nr,
            "debitCredit": debit_credit,
            "typeOfTransaction": "P",
        }

    @classmethod
    def card_transaction(cls, **overrides: Any) -> CardTransaction:
        return CardTransaction.model_validate(cls.transaction(**overrides))


@dataclass(frozen=True)
class LedgerFactory:
    """Ledger-side test objects."""

    ASSET_ID = 4242
    TAG_ID = 777

    @classmethod
    def marker(cls, tag_id: int = TAG_ID) -> ImportMarker:
        return ImportMarker(
            tag_name="importedAt:2026-02-01T08:00:00.000Z",
            tag_id=tag_id,
        )


TODAY = date(2026, 2, 1)
