"""
vetscreen/numeric.py
=====================
Shared numeric helpers for the scorers.

Scores are rounded half-up (0.5 -> 1), not with Python's banker's rounding,
so that ``round_half_up(60.5) == 61``.
"""

import math


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp ``value`` into ``[low, high]``."""
    return min(max(value, low), high)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return int(math.floor(value + 0.5))
