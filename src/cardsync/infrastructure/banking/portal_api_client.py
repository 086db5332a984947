"""HTTP client for the card portal's internal frontend API."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from cardsync.domain.banking.exceptions import BankRequestError
from cardsync.domain.banking.ports import CardPortalPort
from cardsync.domain.banking.value_objects import DateRange, SessionCredential

logger = logging.getLogger(__name__)

ACCOUNTS_PATH = "/api/nl/sec/frontendservices/allaccountsv2"
SEARCH_PATH = "/api/nl/sec/frontendservices/transactionsv3/search"
XSRF_HEADER = "X-XSRF-TOKEN"


class PortalApiClient(CardPortalPort):
    """
    Call the portal API with the cookies of the logged-in browser session.

    The portal accepts these requests from any client as long as the
    session cookies and the matching anti-forgery header are sent.
    """

    def __init__(
        self,
        base_url: str,
        credential: SessionCredential,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._credential = credential
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self._credential.xsrf_token is not None:
                headers[XSRF_HEADER] = self._credential.xsrf_token.get_value()
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers=headers,
                cookies=self._credential.cookie_values(),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_accounts(self) -> Any:
        return await self._get_json(ACCOUNTS_PATH)

    async def search_transactions(
        self,
        account_number: str,
        date_range: DateRange,
    ) -> Any:
        return await self._get_json(
            SEARCH_PATH,
            params={
                "accountNumber": account_number,
                "debitCredit": "DEBIT_AND_CREDIT",
                "fromDate": date_range.from_date.isoformat(),
                "untilDate": date_range.until_date.isoformat(),
            },
        )

    async def _get_json(
        self,
        path: str,
        params: Optional[dict[str, str]] = None,
    ) -> Any:
        client = await self._get_client()
        try:
            response = await client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Portal returned %d for %s: %s",
                e.response.status_code,
                path,
                e.response.text[:200] if e.response.text else "no body",
            )
            raise BankRequestError(path, status=e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.warning("Portal request %s failed: %s", path, e)
            raise BankRequestError(path, reason=str(e) or type(e).__name__) from e

        try:
            return response.json()
        except ValueError as e:
            raise BankRequestError(path, reason="response is not JSON") from e
