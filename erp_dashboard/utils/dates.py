"""
Date helpers shared by the calculators.
Accept ``date`` or ``datetime`` and never read the system clock.
"""

from datetime import date, datetime, timezone


def to_datetime(value: date | datetime, tzinfo=None) -> datetime:
    """Promote a ``date`` to midnight; attach ``tzinfo`` to naive values."""
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if tzinfo is not None and value.tzinfo is None:
        value = value.replace(tzinfo=tzinfo)
    return value


def to_utc(value: date | datetime) -> datetime:
    """Comparable form of any due/end date: naive values are taken as UTC."""
    return to_datetime(value, timezone.utc)


def whole_days_between(start: date | datetime, end: date | datetime) -> int:
    """
    Whole days from ``start`` to ``end``, floored.

    5 hours later → 0, 5 hours earlier → -1.
    """
    # timedelta.days is already floored for negative spans
    return (to_utc(end) - to_utc(start)).days
