"""Date helpers for comparing value dates that may or may not carry a time."""

from datetime import date, datetime, timezone


def to_datetime(value: date) -> datetime:
    """
    Promote a date to a naive UTC datetime.

    Plain dates become midnight; aware datetimes are converted to UTC first
    so that naive and aware values can be compared.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    return datetime(value.year, value.month, value.day)


def hours_between(first: date, second: date) -> float:
    """Absolute distance between two value dates in hours."""
    return abs((to_datetime(first) - to_datetime(second)).total_seconds()) / 3600
