"""ISO date parsing and whole-day arithmetic."""

from datetime import date, datetime


def parse_datetime(value) -> datetime | None:
    """Parse an ISO date or date-time string. Returns None for empty/invalid input."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def day_delta(value, now: datetime) -> int | None:
    """Calendar days from now's date to value's date (negative = in the past)."""
    target = parse_datetime(value)
    if target is None:
        return None
    if target.tzinfo is not None and now.tzinfo is not None:
        target = target.astimezone(now.tzinfo)
    return (target.date() - now.date()).days


def within_trailing_days(value, now: datetime, days: int) -> bool:
    """True if value falls in the last `days` calendar days counting today, future excluded.

    For days=7 that is today and the six days before it.
    """
    delta = day_delta(value, now)
    return delta is not None and -(days - 1) <= delta <= 0
