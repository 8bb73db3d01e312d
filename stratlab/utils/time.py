"""
Calendar utilities for backtest windows.

A backtest window ends at an as-of date and starts a number of calendar
years earlier. Indicator strategies additionally look a number of days
further back so their indicators are warm at the window start.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union


def today_utc() -> date:
    """Current UTC calendar day."""
    return datetime.now(timezone.utc).date()


def resolve_as_of(as_of: Optional[date] = None) -> date:
    """
    Get the backtest anchor date, preferring an explicit as-of date.

    Args:
        as_of: Optional explicit anchor

    Returns:
        The anchor, falling back to today's UTC date if unavailable
    """
    if as_of is not None:
        return as_of

    return today_utc()


def years_before(as_of: date, years: int) -> date:
    """
    Subtract calendar years from a date.

    February 29 rolls forward to March 1 when the target year is not a
    leap year.

    Args:
        as_of: Anchor date
        years: Number of calendar years

    Returns:
        The shifted date
    """
    target_year = as_of.year - years
    try:
        return as_of.replace(year=target_year)
    except ValueError:
        return date(target_year, 3, 1)


def days_before(day: date, days: int) -> date:
    """Subtract a number of calendar days."""
    return day - timedelta(days=days)


def to_utc_date(value: Union[date, datetime, str, int, float]) -> date:
    """
    Normalize a timestamp-like value to a UTC calendar day.

    Args:
        value: date, datetime (naive values are taken as UTC), ISO string
            ("YYYY-MM-DD" or full ISO timestamp) or epoch seconds

    Returns:
        UTC calendar day

    Raises:
        ValueError: If the value cannot be interpreted
        TypeError: If the value type is unsupported
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(timezone.utc).date()

    if isinstance(value, date):
        return value

    if isinstance(value, bool):
        raise TypeError("Boolean is not a timestamp")

    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc).date()

    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return to_utc_date(datetime.fromisoformat(text))

    raise TypeError(f"Unsupported timestamp type: {type(value).__name__}")
