"""Decide which card account a sync run targets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Optional, Union

from cardsync.application.dtos.integration import ProgressEmitter, SyncStep
from cardsync.domain.banking.exceptions import (
    BankAccountNotFoundError,
    NoAccountsFoundError,
)
from cardsync.domain.banking.ports import CardPortalPort
from cardsync.domain.banking.value_objects import (
    AccountCandidate,
    AccountDescriptor,
    CardTransaction,
    DateRange,
)
from cardsync.domain.shared.time import today_local

logger = logging.getLogger(__name__)

PREVIEW_DAYS = 30


@dataclass(frozen=True)
class ResolvedAccount:
    """The run has a single target account."""

    account_number: str
    auto_detected: bool
    descriptor: Optional[AccountDescriptor] = None


@dataclass(frozen=True)
class AmbiguousAccounts:
    """Several accounts exist and none was configured.

    Not an error in itself: the operator has to pick one and set
    ``ICS_ACCOUNT_NUMBER``. The report lists what they can choose from.
    """

    candidates: list[AccountCandidate] = field(default_factory=list)

    @property
    def account_numbers(self) -> list[str]:
        return [c.account_number for c in self.candidates]

    def render_report(self) -> str:
        lines = [
            f"Multiple accounts found ({len(self.candidates)}). "
            "Please set ICS_ACCOUNT_NUMBER in .env:",
            "",
        ]
        for index, candidate in enumerate(self.candidates, 1):
            descriptor = candidate.descriptor
            lines.append(f"Account {index}:")
            lines.append(f"  Account Number: {descriptor.account_number}")
            lines.append(f"  Name: {descriptor.display_name}")
            if descriptor.balance is not None:
                lines.append(f"  Balance: {descriptor.balance}")
            lines.append(
                f"  Latest Transaction: {candidate.latest_transaction_summary()}",
            )
            lines.append("")
        lines.append("Add one of these account numbers to your .env file:")
        lines.append("ICS_ACCOUNT_NUMBER=<account_number>")
        return "\n".join(lines)

    def to_list(self) -> list[dict[str, Any]]:
        return [c.to_dict() for c in self.candidates]


AccountResolution = Union[ResolvedAccount, AmbiguousAccounts]


def parse_account_descriptors(payload: Any) -> list[AccountDescriptor]:
    """Normalize the accounts payload; a lone object counts as one account."""
    if payload is None:
        return []
    entries = payload if isinstance(payload, list) else [payload]
    return [
        AccountDescriptor.from_portal(entry)
        for entry in entries
        if isinstance(entry, dict) and entry.get("accountNumber")
    ]


class AccountResolver:
    """Pick the target account: configured, auto-detected or ambiguous."""

    def __init__(self, portal: CardPortalPort):
        self._portal = portal

    async def resolve(
        self,
        configured_account: Optional[str] = None,
        progress: Optional[ProgressEmitter] = None,
        today: Optional[date] = None,
    ) -> AccountResolution:
        """
        Resolve the account a sync run should target.

        Raises
        ------
        NoAccountsFoundError
            If the portal lists no accounts
        BankAccountNotFoundError
            If the configured account is not among the listed ones
        """
        progress = progress or ProgressEmitter()
        await progress.step(SyncStep.DETERMINE_ACCOUNT, "Determining account...")

        descriptors = parse_account_descriptors(await self._portal.fetch_accounts())
        if not descriptors:
            raise NoAccountsFoundError

        if configured_account:
            for descriptor in descriptors:
                if descriptor.account_number == configured_account:
                    await progress.step(
                        SyncStep.ACCOUNT_SELECTED,
                        f"Using configured account {configured_account}",
                        accountId=configured_account,
                    )
                    return ResolvedAccount(
                        account_number=configured_account,
                        auto_detected=False,
                        descriptor=descriptor,
                    )
            raise BankAccountNotFoundError(
                configured_account,
                available=[d.account_number for d in descriptors],
            )

        if len(descriptors) == 1:
            descriptor = descriptors[0]
            await progress.step(
                SyncStep.ACCOUNT_AUTO_DETECTED,
                f"Auto-detected account {descriptor.account_number}",
                accountId=descriptor.account_number,
            )
            return ResolvedAccount(
                account_number=descriptor.account_number,
                auto_detected=True,
                descriptor=descriptor,
            )

        await progress.step(
            SyncStep.FETCH_ACCOUNT_DETAILS,
            f"Found {len(descriptors)} accounts, fetching details...",
            accountCount=len(descriptors),
        )
        today = today or today_local()
        preview = DateRange(
            from_date=today - timedelta(days=PREVIEW_DAYS),
            until_date=today,
        )
        candidates = [
            AccountCandidate(
                descriptor=descriptor,
                latest_transaction=await self._latest_transaction(
                    descriptor.account_number,
                    preview,
                ),
            )
            for descriptor in descriptors
        ]
        ambiguous = AmbiguousAccounts(candidates=candidates)
        await progress.step(
            SyncStep.ACCOUNT_AMBIGUOUS,
            ambiguous.render_report(),
            accounts=ambiguous.to_list(),
        )
        return ambiguous

    async def _latest_transaction(
        self,
        account_number: str,
        preview: DateRange,
    ) -> Optional[CardTransaction]:
        # Best effort: the preview only decorates the report
        try:
            payload = await self._portal.search_transactions(account_number, preview)
            if isinstance(payload, list) and payload:
                return CardTransaction.model_validate(payload[0])
        except Exception as e:  # noqa: BLE001
            logger.warning(
                "Could not load preview for account %s: %s",
                account_number,
                e,
            )
        return None
