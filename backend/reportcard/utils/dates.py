"""Date parsing helpers used by services that accept ISO date strings."""

from datetime import date, datetime, timezone
from typing import Union

DateInput = Union[str, date, datetime, None]


def safe_parse_datetime(value: DateInput) -> datetime:
    """Return `value` as a datetime, defaulting to "now" (UTC) when empty.

    Strings are parsed as ISO 8601 (a trailing ``Z`` is accepted). Raises
    ValueError for strings that are not valid dates.
    """
    if value is None or value == "":
        return datetime.now(timezone.utc)
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f"Invalid date: {value}") from None


def safe_parse_date(value: DateInput) -> date:
    """Like `safe_parse_datetime` but returns the calendar date (today when empty)."""
    if value is None or value == "":
        return date.today()
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return safe_parse_datetime(value).date()
