"""Date chunker domain service.

The card portal's search endpoint rejects windows wider than about a
month, so a lookback window is split into contiguous ranges of at most
``MAX_CHUNK_DAYS`` days.
"""

from datetime import date, timedelta

from cardsync.domain.banking.value_objects.date_range import DateRange
from cardsync.domain.shared.exceptions import ValidationError

MAX_CHUNK_DAYS = 30


class DateChunker:
    """Split a lookback window into newest-first date ranges."""

    @staticmethod
    def lookback_window(lookback_days: int, today: date) -> DateRange:
        """Return the full window ``[today - lookback_days, today]``."""
        DateChunker._check_lookback(lookback_days)
        return DateRange(
            from_date=today - timedelta(days=lookback_days),
            until_date=today,
        )

    @staticmethod
    def chunk(
        lookback_days: int,
        today: date,
        max_days: int = MAX_CHUNK_DAYS,
    ) -> list[DateRange]:
        """
        Produce the ranges covering ``[today - lookback_days, today]``.

        Parameters
        ----------
        lookback_days
            Number of days to look back, must be positive
        today
            Anchor date; the first range ends on it
        max_days
            Maximum ``(until - from).days`` of a single range

        Returns
        -------
        Ranges ordered newest first. They are contiguous, do not overlap
        and the last one starts exactly at the cutoff.
        """
        DateChunker._check_lookback(lookback_days)
        if max_days < 1:
            msg = f"max_days must be positive, got {max_days}"
            raise ValidationError(msg)

        cutoff = today - timedelta(days=lookback_days)
        ranges: list[DateRange] = []
        until = today
        while until >= cutoff:
            start = max(until - timedelta(days=max_days), cutoff)
            ranges.append(DateRange(from_date=start, until_date=until))
            until = start - timedelta(days=1)
        return ranges

    @staticmethod
    def _check_lookback(lookback_days: int) -> None:
        if lookback_days <= 0:
            msg = f"Lookback must be a positive number of days, got {lookback_days}"
            raise ValidationError(msg, details={"lookback_days": lookback_days})
