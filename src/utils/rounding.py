"""
Rounding utility.

Scores and averages round halves away from zero (6.5 -> 7), not to even.
"""

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round a number to ndigits decimals, halves rounding up.

    Args:
        value: Number to round
        ndigits: Decimal places to keep

    Returns:
        Rounded value as float
    """
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
