"""Card account descriptor value objects."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cardsync.domain.banking.value_objects.card_transaction import CardTransaction


class AccountDescriptor(BaseModel):
    """
    Value object representing a card account as listed by the portal.

    The portal's accounts endpoint returns the product name when the
    holder never set a custom account name.
    """

    account_number: str = Field(..., min_length=1, description="Portal account id")
    account_name: str | None = Field(default=None, description="Display name")
    balance: str | None = Field(
        default=None,
        description="Balance exactly as reported (display only)",
    )

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_portal(cls, payload: dict[str, Any]) -> AccountDescriptor:
        """Build a descriptor from one entry of the accounts endpoint."""
        balance = payload.get("balance")
        return cls(
            account_number=str(payload.get("accountNumber") or ""),
            account_name=payload.get("accountName") or payload.get("productName"),
            balance=None if balance is None else str(balance),
        )

    @property
    def display_name(self) -> str:
        return self.account_name or "N/A"

    def __str__(self) -> str:
        return f"{self.account_number} ({self.display_name})"


class AccountCandidate(BaseModel):
    """An account offered to the operator when none was configured."""

    descriptor: AccountDescriptor
    latest_transaction: CardTransaction | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def account_number(self) -> str:
        return self.descriptor.account_number

    def latest_transaction_summary(self) -> str:
        if self.latest_transaction is None:
            return "No recent transactions"
        tx = self.latest_transaction
        return (
            f"{tx.transaction_date.isoformat()} - {tx.description} "
            f"({tx.billing_amount_text})"
        )

    def to_dict(self) -> dict[str, Any]:
        latest = None
        if self.latest_transaction is not None:
            latest = {
                "date": self.latest_transaction.transaction_date.isoformat(),
                "description": self.latest_transaction.description,
                "amount": self.latest_transaction.billing_amount_text,
            }
        return {
            "accountNumber": self.descriptor.account_number,
            "accountName": self.descriptor.display_name,
            "balance": self.descriptor.balance,
            "latestTransaction": latest,
        }
