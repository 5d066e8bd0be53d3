"""
Request parameter helpers.

Numeric query parameters are clamped here, before the calculators run.
The calculators trust their structured input and never re-validate.
"""

from datetime import date

from erp_dashboard.config import LIMIT_BOUNDS, MONTHS_BOUNDS, DAYS_BOUNDS


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _to_int(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def clamp_limit(value, default: int = 5) -> int:
    """``limit`` query parameter, clamped to [1, 20]."""
    return clamp(_to_int(value, default), *LIMIT_BOUNDS)


def clamp_months(value, default: int = 6) -> int:
    """``months`` query parameter, clamped to [1, 24]."""
    return clamp(_to_int(value, default), *MONTHS_BOUNDS)


def clamp_days(value, default: int = 7) -> int:
    """``days`` query parameter, clamped to [1, 30]."""
    return clamp(_to_int(value, default), *DAYS_BOUNDS)


def parse_month(value: str | date | None, today: date) -> date:
    """
    Parse a ``YYYY-MM`` month into the first day of that month.

    ``None`` or an unparseable string falls back to the month of ``today``.
    """
    if isinstance(value, date):
        return value.replace(day=1)
    if value:
        try:
            year, month = str(value)[:7].split("-")
            return date(int(year), int(month), 1)
        except (ValueError, TypeError):
            pass
    return today.replace(day=1)


def previous_month(month: date) -> date:
    """First day of the month before ``month``."""
    if month.month == 1:
        return date(month.year - 1, 12, 1)
    return date(month.year, month.month - 1, 1)


def month_key(month: date) -> str:
    return month.strftime("%Y-%m")
