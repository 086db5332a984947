"""Ledger transaction value object."""

import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

UNREVIEWED_STATUS = "unreviewed"


class LedgerTransaction(BaseModel):
    """
    A normalized transaction ready to be inserted into the ledger.

    ``external_id`` is the deduplication key: the ledger skips an insert
    when a transaction with the same external id already exists on the
    same manual account.
    """

    date: datetime.date
    payee: str = ""
    amount: Decimal = Field(..., description="Signed amount in billing currency")
    manual_account_id: int
    external_id: str = Field(..., min_length=1)
    notes: str = ""
    tag_ids: tuple[int, ...] = ()
    status: str = UNREVIEWED_STATUS

    model_config = ConfigDict(frozen=True)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the ledger's insert-transaction object."""
        return {
            "date": self.date.isoformat(),
            "payee": self.payee,
            "amount": float(self.amount),
            "manual_account_id": self.manual_account_id,
            "tag_ids": list(self.tag_ids),
            "notes": self.notes,
            "external_id": self.external_id,
            "status": self.status,
        }

    def __str__(self) -> str:
        return f"{self.date}: {self.amount} - {self.payee[:50]} [{self.external_id}]"
