"""
Rounding helpers.

Respondent counts and averages shown to users round half up (2.5 -> 3),
not half to even as the built-in round() does.
"""

from decimal import Decimal, ROUND_HALF_UP


def round_half_up(x: float, places: int = 0) -> float:
    """Round to a fixed number of decimal places, halves away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(x)).quantize(quantum, ROUND_HALF_UP))


def round_count(x: float) -> int:
    """Round to the nearest whole respondent, halves up."""
    return int(round_half_up(x, 0))
