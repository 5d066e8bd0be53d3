"""
Formatting helpers for Hungarian financial values.
"""


def format_huf(value: float) -> str:
    """Format a number as Hungarian forint (1 234 567 Ft)."""
    digits = f"{abs(value):,.0f}".replace(",", " ")
    if value < 0 and digits != "0":
        return f"-{digits} Ft"
    return f"{digits} Ft"


def format_percent(value: float, decimals: int = 1) -> str:
    """Format a number as a percentage (e.g. 23.5%)."""
    return f"{value:.{decimals}f}%"


def format_days(days: int) -> str:
    """Readable expiry distance for the rentals table."""
    if days == 0:
        return "ma"
    if days < 0:
        return f"{abs(days)} napja lejárt"
    return f"{days} nap múlva"
