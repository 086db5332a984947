"""Card transaction value object (raw record as delivered by the portal)."""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_PROCESSING_TIME = "000000"


class DebitCredit(str, Enum):
    """Direction indicator of a card transaction."""

    DEBIT = "DEBIT"  # money leaving the card account
    CREDIT = "CREDIT"  # refunds, repayments


class CardTransaction(BaseModel):
    """
    Transaction record from the card portal's search endpoint.

    No single field identifies a record: batch number + sequence number
    recur across days, so identity needs the tuple (transaction date,
    processing time, batch number, batch sequence number, billed amount).
    The portal always reports a positive magnitude; the direction lives
    in ``debit_credit``.
    """

    transaction_date: date
    description: str = ""
    billing_amount: Decimal
    billing_currency: str | None = None
    source_amount: Decimal | None = None
    source_currency: str | None = None
    processing_time: str | None = None
    batch_nr: str | None = None
    batch_sequence_nr: str | None = None
    debit_credit: DebitCredit = Field(..., description="DEBIT or CREDIT")

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("description", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator(
        "processing_time",
        "batch_nr",
        "batch_sequence_nr",
        mode="before",
    )
    @classmethod
    def _stringify_identifier(cls, v: Any) -> Any:
        # The portal sends these as numbers or strings depending on the field
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("debit_credit", mode="before")
    @classmethod
    def _normalize_direction(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v

    @property
    def is_debit(self) -> bool:
        return self.debit_credit == DebitCredit.DEBIT

    @property
    def is_foreign_currency(self) -> bool:
        return bool(self.source_currency) and (
            self.source_currency != self.billing_currency
        )

    @property
    def billing_amount_text(self) -> str:
        """Billed amount exactly as the portal formatted it (no exponent)."""
        return format(self.billing_amount, "f")

    def identity_key(self) -> str:
        """Stable key distinguishing this record from every other one."""
        return (
            f"{self.transaction_date.isoformat()}-"
            f"{self.processing_time or DEFAULT_PROCESSING_TIME}-"
            f"{self.batch_nr}-"
            f"{self.batch_sequence_nr}-"
            f"{self.billing_amount_text}"
        )

    def __str__(self) -> str:
        sign = "-" if self.is_debit else "+"
        return (
            f"{self.transaction_date}: {sign}{self.billing_amount_text} "
            f"{self.billing_currency or ''} - {self.description[:50]}"
        )
