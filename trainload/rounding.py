"""Rounding helpers shared by the zone, load and planning modules."""

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round half away from zero for positive values (137.5 -> 138).

    Python's built-in round() uses banker's rounding (137.5 -> 138 but
    262.5 -> 262), which would move zone boundaries depending on parity.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    """Round half up to the nearest integer."""
    return int(math.floor(value + 0.5))
