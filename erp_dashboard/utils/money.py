"""
Monetary rounding helpers.

The ERP rounds with ``Math.round(x * 100) / 100`` on doubles (half-up,
toward +inf on ties). Python's ``round()`` rounds half to even, so the
calculators go through these helpers instead.
"""

import math


def round_money(value: float, places: int = 2) -> float:
    """Half-up rounding to ``places`` decimals."""
    factor = 10 ** places
    # math.floor returns an int, so a tiny negative residue comes back as 0.0
    return math.floor(value * factor + 0.5) / factor


def round_percent(value: float) -> int:
    """Half-up rounding to a whole percentage point."""
    return math.floor(value + 0.5)
