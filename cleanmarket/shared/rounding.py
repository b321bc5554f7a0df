"""Rounding helpers for ratings and percentages shown to users"""

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, places: int = 0):
    """
    Round with ties going up (4.25 -> 4.3, 12.5 -> 13).

    Returns an int when places is 0, otherwise a float.
    """
    exponent = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)
