"""Time utilities for the domain layer."""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def today_local() -> date:
    """Return the current calendar date in the host's local timezone.

    The card portal reports transaction dates in its own (local) calendar,
    so lookback windows are anchored on the local date rather than UTC.
    """
    return date.today()


def format_iso_timestamp(dt: datetime) -> str:
    """Format a datetime like JavaScript's toISOString (milliseconds, 'Z')."""
    dt = ensure_tz_aware(dt).astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def ensure_tz_aware(dt: datetime) -> datetime:
    """Ensure datetime is timezone-aware (UTC if naive)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt
