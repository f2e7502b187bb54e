"""Numeric helpers shared by the modeling engines."""

import math
from typing import Any, Optional


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round with halves going up (62.5 -> 63), unlike Python's banker's rounding.

    Scores are displayed next to values produced by the dashboard, which
    rounds this way, so the engine must agree with it.

    Args:
        value: Number to round
        digits: Decimal places to keep

    Returns:
        Rounded value (float; use int() for whole-number scores)
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value to [lower, upper]."""
    return max(lower, min(upper, value))


def finite_or_none(value: Any) -> Optional[float]:
    """Return value as float if it is a finite number, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def positive_or_none(value: Any) -> Optional[float]:
    """Return value as float if it is finite and > 0, else None."""
    number = finite_or_none(value)
    if number is None or number <= 0:
        return None
    return number


def non_negative_or_zero(value: Any) -> float:
    """Return value as float if it is finite and >= 0, else 0.0."""
    number = finite_or_none(value)
    if number is None or number < 0:
        return 0.0
    return number
