"""
posbot Formatters

Date and time helpers for notification text.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from .constants import EVE_TIME_FORMAT


def get_utc_now() -> datetime:
    """
    Get current UTC datetime.

    Returns:
        Current datetime with UTC timezone
    """
    return datetime.now(timezone.utc)


def format_datetime(dt: datetime) -> str:
    """
    Format datetime as an ISO timestamp like "2026-01-15T12:30:00Z".
    """
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")


def get_utc_timestamp() -> str:
    """Get current UTC timestamp string."""
    return format_datetime(get_utc_now())


def format_eve_time(dt: datetime) -> str:
    """
    Format a datetime in EVE time for display.

    Naive datetimes are assumed to already be UTC.

    Examples:
        >>> format_eve_time(datetime(2026, 1, 15, 12, 30, tzinfo=timezone.utc))
        'Thursday, 2026-01-15 12:30:00 EVE time'
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime(EVE_TIME_FORMAT)


def offline_time(days_remaining: float, now: Optional[datetime] = None) -> datetime:
    """
    Calculate when a starbase runs out of fuel.

    Args:
        days_remaining: Fuel left in (fractional) days
        now: Reference time (default: current UTC time)

    Returns:
        Datetime at which the fuel bay will be empty
    """
    if now is None:
        now = get_utc_now()
    return now + timedelta(days=days_remaining)


def format_days(days: float) -> str:
    """Format a day count to one decimal place, e.g. "1.3 days"."""
    return f"{days:.1f} days"
