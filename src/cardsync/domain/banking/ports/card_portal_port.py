"""Card portal API port interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cardsync.domain.banking.value_objects.date_range import DateRange


class CardPortalPort(ABC):
    """
    Interface for the card portal's internal JSON API.

    Calls are authenticated with the Session Credential obtained by the
    browser login. The port returns the decoded JSON payload untouched so
    the application layer can decide what counts as malformed.
    """

    @abstractmethod
    async def fetch_accounts(self) -> Any:
        """
        Fetch the accounts payload.

        Returns
        -------
        Decoded JSON: normally a list of account objects, sometimes a
        single object when the holder has one card

        Raises
        ------
        BankRequestError
            If the request fails or the response is not JSON
        """

    @abstractmethod
    async def search_transactions(
        self,
        account_number: str,
        date_range: DateRange,
    ) -> Any:
        """
        Search debit and credit transactions of an account.

        Parameters
        ----------
        account_number
            Portal account id
        date_range
            Inclusive window (at most 30 days wide)

        Returns
        -------
        Decoded JSON payload, expected to be a list of transactions

        Raises
        ------
        BankRequestError
            If the request fails or the response is not JSON
        """

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying HTTP client."""
