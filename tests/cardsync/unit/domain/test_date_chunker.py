"""Unit tests for the DateChunker domain service."""

from datetime import date, timedelta

import pytest

from cardsync.domain.banking.services import MAX_CHUNK_DAYS, DateChunker
from cardsync.domain.banking.value_objects import DateRange
from cardsync.domain.shared.exceptions import ValidationError

TODAY = date(2026, 2, 1)


class TestChunkCoverage:
    """The ranges cover [cutoff, today] exactly once."""

    def test_fifty_days_gives_two_newest_first_ranges(self):
        ranges = DateChunker.chunk(50, TODAY)

        assert ranges == [
            DateRange(from_date=date(2026, 1, 2), until_date=date(2026, 2, 1)),
            DateRange(from_date=date(2025, 12, 13), until_date=date(2026, 1, 1)),
        ]

    @pytest.mark.parametrize("lookback", [1, 7, 29, 30])
    def test_short_lookback_is_a_single_range(self, lookback):
        ranges = DateChunker.chunk(lookback, TODAY)

        assert ranges == [
            DateRange(
                from_date=TODAY - timedelta(days=lookback),
                until_date=TODAY,
            ),
        ]

    @pytest.mark.parametrize("lookback", [31, 61, 90, 365, 400])
    def test_ranges_are_contiguous_and_bounded(self, lookback):
        ranges = DateChunker.chunk(lookback, TODAY)

        assert ranges[0].until_date == TODAY
        assert ranges[-1].from_date == TODAY - timedelta(days=lookback)
        for newer, older in zip(ranges, ranges[1:]):
            assert older.until_date == newer.from_date - timedelta(days=1)
        for r in ranges:
            assert r.span_days <= MAX_CHUNK_DAYS

    def test_every_day_covered_once(self):
        lookback = 95
        ranges = DateChunker.chunk(lookback, TODAY)

        covered = []
        for r in ranges:
            day = r.from_date
            while day <= r.until_date:
                covered.append(day)
                day += timedelta(days=1)

        expected = {TODAY - timedelta(days=n) for n in range(lookback + 1)}
        assert len(covered) == len(set(covered))
        assert set(covered) == expected

    def test_restartable(self):
        assert DateChunker.chunk(120, TODAY) == DateChunker.chunk(120, TODAY)


class TestChunkValidation:
    @pytest.mark.parametrize("lookback", [0, -1, -30])
    def test_non_positive_lookback_rejected(self, lookback):
        with pytest.raises(ValidationError):
            DateChunker.chunk(lookback, TODAY)

    def test_custom_width(self):
        ranges = DateChunker.chunk(10, TODAY, max_days=4)

        assert [r.span_days for r in ranges] == [4, 4, 0]
        assert ranges[-1].from_date == TODAY - timedelta(days=10)


def test_lookback_window_spans_whole_period():
    window = DateChunker.lookback_window(50, TODAY)

    assert window.from_date == date(2025, 12, 13)
    assert window.until_date == TODAY
    assert str(window) == "2025-12-13 to 2026-02-01"


def test_date_range_rejects_inverted_bounds():
    with pytest.raises(ValueError):
        DateRange(from_date=date(2026, 2, 2), until_date=date(2026, 2, 1))
