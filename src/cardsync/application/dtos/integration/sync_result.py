"""DTO for the terminal result of a sync run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from cardsync.domain.shared.exceptions import ErrorKind


@dataclass(frozen=True)
class SyncRunResult:
    """Result of one sync run.

    Exactly one is produced per invocation. Serializes to the camelCase
    contract the trigger process reads from stdout.
    """

    success: bool
    message: str
    transactions_count: int = 0
    synced_count: int = 0
    inserted_count: int = 0
    skipped_count: int = 0
    from_date: Optional[date] = None
    until_date: Optional[date] = None
    account_id: Optional[str] = None
    asset_id: Optional[int] = None
    warning: Optional[str] = None
    error: Optional[str] = None
    step: Optional[str] = None
    kind: Optional[ErrorKind] = None
    retryable: bool = False
    inserted_before_failure: Optional[int] = None
    accounts: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def failure(  # noqa: PLR0913
        cls,
        error: str,
        step: str,
        kind: ErrorKind,
        retryable: bool = False,
        accounts: Optional[list[dict[str, Any]]] = None,
        inserted_before_failure: Optional[int] = None,
    ) -> SyncRunResult:
        return cls(
            success=False,
            message=error,
            error=error,
            step=step,
            kind=kind,
            retryable=retryable,
            accounts=accounts or [],
            inserted_before_failure=inserted_before_failure,
        )

    @property
    def is_ambiguous_account(self) -> bool:
        return self.kind == ErrorKind.ACCOUNT_AMBIGUOUS

    def to_dict(self) -> dict:
        if not self.success:
            d: dict[str, Any] = {
                "success": False,
                "error": self.error,
                "step": self.step,
                "kind": self.kind.value if self.kind else None,
                "retryable": self.retryable,
            }
            if self.inserted_before_failure is not None:
                d["insertedBeforeFailure"] = self.inserted_before_failure
            if self.accounts:
                d["accounts"] = self.accounts
            return d

        d = {
            "success": True,
            "message": self.message,
            "transactionsCount": self.transactions_count,
            "syncedCount": self.synced_count,
            "insertedCount": self.inserted_count,
            "skippedCount": self.skipped_count,
            "fromDate": self.from_date.isoformat() if self.from_date else None,
            "untilDate": self.until_date.isoformat() if self.until_date else None,
            "accountId": self.account_id,
            "accountNumber": self.account_id,
            "assetId": self.asset_id,
        }
        if self.warning:
            d["warning"] = self.warning
        return d
