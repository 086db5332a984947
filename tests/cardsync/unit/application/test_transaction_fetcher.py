"""Unit tests for TransactionFetcher."""

from datetime import date

import pytest

from cardsync.application.dtos.integration import ProgressEmitter
from cardsync.application.services import TransactionFetcher
from cardsync.domain.banking.exceptions import BankTransactionFetchError
from cardsync.domain.banking.services import DateChunker
from cardsync.domain.shared.exceptions import ErrorKind
from tests.shared.fixtures import TODAY, FakePortal, PortalPayloadFactory

ACCOUNT = PortalPayloadFactory.ACCOUNT_NUMBER


def _one_transaction_per_range(date_range):
    return [
        PortalPayloadFactory.transaction(
            transaction_date=date_range.until_date.isoformat(),
        ),
    ]


@pytest.mark.asyncio
async def test_fetches_all_ranges_in_order():
    ranges = DateChunker.chunk(50, TODAY)
    portal = FakePortal(transactions={ACCOUNT: _one_transaction_per_range})
    events = []

    transactions = await TransactionFetcher(portal).fetch(
        ACCOUNT,
        ranges,
        ProgressEmitter(events.append),
    )

    assert [r for _, r in portal.searches] == ranges
    assert [t.transaction_date for t in transactions] == [
        date(2026, 2, 1),
        date(2026, 1, 1),
    ]
    assert [e.step for e in events] == [
        "fetch_chunk",
        "chunk_complete",
        "fetch_chunk",
        "chunk_complete",
    ]
    assert events[0].fields == {
        "chunk": 1,
        "totalChunks": 2,
        "fromDate": "2026-01-02",
        "untilDate": "2026-02-01",
    }
    assert events[-1].fields["totalCount"] == 2


@pytest.mark.asyncio
async def test_empty_ranges_yield_no_transactions():
    portal = FakePortal()

    transactions = await TransactionFetcher(portal).fetch(
        ACCOUNT,
        DateChunker.chunk(10, TODAY),
    )

    assert transactions == []


@pytest.mark.asyncio
async def test_non_list_payload_aborts_the_fetch():
    ranges = DateChunker.chunk(50, TODAY)

    def second_range_breaks(date_range):
        if date_range == ranges[1]:
            return {"error": "maintenance"}
        return [PortalPayloadFactory.transaction()]

    portal = FakePortal(transactions={ACCOUNT: second_range_breaks})

    with pytest.raises(BankTransactionFetchError) as exc_info:
        await TransactionFetcher(portal).fetch(ACCOUNT, ranges)

    assert "expected a list" in exc_info.value.message
    assert exc_info.value.date_range == str(ranges[1])
    assert exc_info.value.kind == ErrorKind.UPSTREAM_FETCH


@pytest.mark.asyncio
async def test_request_failure_is_wrapped():
    portal = FakePortal(failing_accounts=[ACCOUNT])

    with pytest.raises(BankTransactionFetchError, match="HTTP 500"):
        await TransactionFetcher(portal).fetch(ACCOUNT, DateChunker.chunk(5, TODAY))


@pytest.mark.asyncio
async def test_malformed_transaction_is_rejected():
    portal = FakePortal(transactions={ACCOUNT: [{"description": "no amount"}]})

    with pytest.raises(BankTransactionFetchError, match="Malformed transaction"):
        await TransactionFetcher(portal).fetch(ACCOUNT, DateChunker.chunk(5, TODAY))
