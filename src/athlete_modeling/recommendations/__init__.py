"""Readiness, strain, recovery and stress scoring."""

from .readiness import (
    FatigueStatus,
    HrvStatus,
    ReadinessResult,
    RecommendedIntensity,
    SleepStatus,
    analyze_readiness,
    calculate_daily_strain,
    calculate_readiness,
    calculate_recovery,
    calculate_strain,
    calculate_stress,
    combine_strains,
    readiness_adjustments,
)

__all__ = [
    "FatigueStatus",
    "HrvStatus",
    "ReadinessResult",
    "RecommendedIntensity",
    "SleepStatus",
    "analyze_readiness",
    "calculate_daily_strain",
    "calculate_readiness",
    "calculate_recovery",
    "calculate_strain",
    "calculate_stress",
    "combine_strains",
    "readiness_adjustments",
]
