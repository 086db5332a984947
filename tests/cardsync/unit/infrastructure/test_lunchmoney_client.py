"""Unit tests for LunchMoneyClient using httpx.MockTransport."""

import json

import httpx
import pytest

from cardsync.application.services import TransactionTransformer
from cardsync.domain.ledger.exceptions import (
    LedgerFailureKind,
    LedgerTagError,
    LedgerWriteError,
)
from cardsync.domain.shared.value_objects import SecureString
from cardsync.infrastructure.ledger import LunchMoneyClient
from cardsync.infrastructure.ledger.lunchmoney_client import parse_insert_response
from tests.shared.fixtures import LedgerFactory, PortalPayloadFactory

API_URL = "https://api.lunchmoney.dev/v2"


def _client(handler) -> LunchMoneyClient:
    return LunchMoneyClient(
        base_url=API_URL,
        token=SecureString("lm-token"),
        transport=httpx.MockTransport(handler),
    )


def _transactions(count: int = 2):
    transformer = TransactionTransformer(LedgerFactory.ASSET_ID)
    raws = [
        PortalPayloadFactory.card_transaction(batch_sequence_nr=n)
        for n in range(count)
    ]
    return transformer.transform_all(raws, LedgerFactory.marker())


class TestEnsureTag:
    @pytest.mark.asyncio
    async def test_creates_tag(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(201, json={"id": 55, "name": "importedAt:x"})

        client = _client(handler)
        tag_id = await client.ensure_tag("importedAt:x")
        await client.close()

        assert tag_id == 55
        assert requests[0].url.path == "/v2/tags"
        assert requests[0].headers["authorization"] == "Bearer lm-token"
        assert json.loads(requests[0].content) == {"name": "importedAt:x"}

    @pytest.mark.asyncio
    async def test_existing_tag_is_looked_up(self):
        def handler(request):
            if request.method == "POST":
                return httpx.Response(409, json={"error": "exists"})
            return httpx.Response(
                200,
                json={"tags": [{"id": 1, "name": "other"}, {"id": 9, "name": "t"}]},
            )

        assert await _client(handler).ensure_tag("t") == 9

    @pytest.mark.asyncio
    async def test_unauthorized_tag_creation_fails(self):
        client = _client(lambda request: httpx.Response(401, text="nope"))

        with pytest.raises(LedgerTagError) as exc_info:
            await client.ensure_tag("t")

        assert exc_info.value.failure == LedgerFailureKind.INVALID_CREDENTIAL
        assert exc_info.value.message.startswith("Failed to create tag 't'")

    @pytest.mark.asyncio
    async def test_unreadable_tag_response_is_a_tag_error(self):
        client = _client(lambda request: httpx.Response(201, text="<html>"))

        with pytest.raises(LedgerTagError) as exc_info:
            await client.ensure_tag("t")

        assert exc_info.value.failure == LedgerFailureKind.MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_listed_tag_without_id_is_a_tag_error(self):
        def handler(request):
            if request.method == "POST":
                return httpx.Response(409, json={"error": "exists"})
            return httpx.Response(200, json={"tags": [{"name": "t"}]})

        with pytest.raises(LedgerTagError) as exc_info:
            await _client(handler).ensure_tag("t")

        assert exc_info.value.failure == LedgerFailureKind.MALFORMED_RESPONSE
        assert exc_info.value.tag_name == "t"


class TestInsertTransactions:
    @pytest.mark.asyncio
    async def test_posts_batch_and_counts_v2_response(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                201,
                json={"transactions": [{"id": 1}], "skipped_duplicates": [{"id": 2}]},
            )

        result = await _client(handler).insert_transactions(
            _transactions(2),
            apply_rules=True,
            skip_duplicates=True,
        )

        assert (result.inserted, result.skipped) == (1, 1)
        assert seen["body"]["apply_rules"] is True
        assert seen["body"]["skip_duplicates"] is True
        first = seen["body"]["transactions"][0]
        assert first["manual_account_id"] == LedgerFactory.ASSET_ID
        assert first["amount"] == -12.5
        assert first["tag_ids"] == [LedgerFactory.TAG_ID]

    @pytest.mark.parametrize(
        ("status", "failure", "retryable"),
        [
            (401, LedgerFailureKind.INVALID_CREDENTIAL, False),
            (429, LedgerFailureKind.RATE_LIMITED, True),
            (503, LedgerFailureKind.SERVICE_UNAVAILABLE, True),
            (404, LedgerFailureKind.NOT_FOUND, False),
        ],
    )
    @pytest.mark.asyncio
    async def test_http_errors_are_classified(self, status, failure, retryable):
        client = _client(lambda request: httpx.Response(status, text="error"))

        with pytest.raises(LedgerWriteError) as exc_info:
            await client.insert_transactions(_transactions(1))

        assert exc_info.value.failure == failure
        assert exc_info.value.retryable is retryable
        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    async def test_bad_request_keeps_detail(self):
        client = _client(
            lambda request: httpx.Response(400, text='{"error":"invalid date"}'),
        )

        with pytest.raises(LedgerWriteError, match="invalid date"):
            await client.insert_transactions(_transactions(1))

    @pytest.mark.asyncio
    async def test_error_body_on_success_status(self):
        client = _client(
            lambda request: httpx.Response(200, json={"error": "bad asset"}),
        )

        with pytest.raises(LedgerWriteError) as exc_info:
            await client.insert_transactions(_transactions(1))

        assert exc_info.value.failure == LedgerFailureKind.BAD_REQUEST

    @pytest.mark.asyncio
    async def test_connection_error_is_retryable(self):
        def handler(request):
            msg = "connection refused"
            raise httpx.ConnectError(msg, request=request)

        with pytest.raises(LedgerWriteError) as exc_info:
            await _client(handler).insert_transactions(_transactions(1))

        assert exc_info.value.retryable is True


class TestParseInsertResponse:
    def test_legacy_ids_shape(self):
        result = parse_insert_response({"ids": [1, 2, 3]})

        assert (result.inserted, result.skipped) == (3, 0)
        assert result.recognized

    def test_unknown_shape(self):
        result = parse_insert_response({"something": "else"})

        assert (result.inserted, result.skipped) == (0, 0)
        assert not result.recognized
