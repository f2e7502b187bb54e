"""Utility helpers."""

from .numbers import (
    clamp,
    finite_or_none,
    non_negative_or_zero,
    positive_or_none,
    round_half_up,
)

__all__ = [
    "clamp",
    "finite_or_none",
    "non_negative_or_zero",
    "positive_or_none",
    "round_half_up",
]
