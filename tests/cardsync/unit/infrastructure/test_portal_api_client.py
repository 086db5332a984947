"""Unit tests for PortalApiClient using httpx.MockTransport."""

from datetime import date

import httpx
import pytest

from cardsync.domain.banking.exceptions import BankRequestError
from cardsync.domain.banking.value_objects import DateRange, SessionCredential
from cardsync.infrastructure.banking import PortalApiClient
from cardsync.infrastructure.banking.portal_api_client import (
    ACCOUNTS_PATH,
    SEARCH_PATH,
)
from tests.shared.fixtures import PORTAL_BASE_URL, PortalPayloadFactory

CREDENTIAL = SessionCredential.from_cookie_jar(
    {"XSRF-TOKEN": "abc%3D%3D", "SESSION": "s3cr3t"},
)


def _client(handler) -> PortalApiClient:
    return PortalApiClient(
        base_url=PORTAL_BASE_URL,
        credential=CREDENTIAL,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_requests_carry_session_cookies_and_xsrf_header():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=[PortalPayloadFactory.account()])

    client = _client(handler)
    accounts = await client.fetch_accounts()
    await client.close()

    assert accounts[0]["accountNumber"] == PortalPayloadFactory.ACCOUNT_NUMBER
    request = requests[0]
    assert request.url.path == ACCOUNTS_PATH
    assert request.headers["x-xsrf-token"] == "abc=="
    assert "SESSION=s3cr3t" in request.headers["cookie"]


@pytest.mark.asyncio
async def test_search_sends_range_parameters():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=[])

    date_range = DateRange(from_date=date(2026, 1, 2), until_date=date(2026, 2, 1))
    result = await _client(handler).search_transactions("123", date_range)

    assert result == []
    assert requests[0].url.path == SEARCH_PATH
    assert dict(requests[0].url.params) == {
        "accountNumber": "123",
        "debitCredit": "DEBIT_AND_CREDIT",
        "fromDate": "2026-01-02",
        "untilDate": "2026-02-01",
    }


@pytest.mark.asyncio
async def test_http_error_becomes_bank_request_error():
    client = _client(lambda request: httpx.Response(403, text="forbidden"))

    with pytest.raises(BankRequestError) as exc_info:
        await client.fetch_accounts()

    assert exc_info.value.status == 403
    assert exc_info.value.retryable is True


@pytest.mark.asyncio
async def test_non_json_body_is_rejected():
    client = _client(lambda request: httpx.Response(200, text="<html>login</html>"))

    with pytest.raises(BankRequestError, match="not JSON"):
        await client.fetch_accounts()


@pytest.mark.asyncio
async def test_transport_error_is_wrapped():
    def handler(request):
        msg = "timed out"
        raise httpx.ReadTimeout(msg, request=request)

    with pytest.raises(BankRequestError, match="timed out"):
        await _client(handler).fetch_accounts()
