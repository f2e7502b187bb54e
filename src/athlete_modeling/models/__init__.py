"""Input records for the modeling engines."""

from .biometrics import BiometricsSnapshot, Feeling
from .metabolic import (
    CANONICAL_DURATIONS,
    BodyComposition,
    ManualOverride,
    PowerDurationPoint,
    default_power_points,
    format_duration_label,
    parse_power_points,
)
from .training import StrainSession, TimeInZones, TrainingSession

__all__ = [
    "BiometricsSnapshot",
    "Feeling",
    "CANONICAL_DURATIONS",
    "BodyComposition",
    "ManualOverride",
    "PowerDurationPoint",
    "default_power_points",
    "format_duration_label",
    "parse_power_points",
    "StrainSession",
    "TimeInZones",
    "TrainingSession",
]
