"""Metabolic profiler and training-load calculations."""

from .fitness import (
    DailyLoadPoint,
    LoadSummary,
    TrainingLoadResult,
    aggregate_daily_sessions,
    calculate_acwr,
    calculate_ewma,
    calculate_training_load,
    determine_risk_zone,
    get_training_recommendation,
)
from .load import calculate_hrss, estimate_tss
from .metabolic import (
    EnergySystemSplit,
    MetabolicModel,
    calculate_lt1_fraction,
    classify_vlamax,
    estimate_critical_power,
    fit_metabolic_model,
)
from .power import (
    calculate_intensity_factor,
    calculate_power_to_weight,
    calculate_tss,
)
from .zones import (
    SubstrateRatios,
    Zone,
    ZoneConsumption,
    build_zone_table,
    calculate_consumption,
    calculate_marker_zones,
    calculate_zones,
    get_zone_for_power,
)

__all__ = [
    # Fitness-Fatigue model
    "DailyLoadPoint",
    "LoadSummary",
    "TrainingLoadResult",
    "aggregate_daily_sessions",
    "calculate_acwr",
    "calculate_ewma",
    "calculate_training_load",
    "determine_risk_zone",
    "get_training_recommendation",
    # Session load
    "calculate_hrss",
    "estimate_tss",
    # Metabolic profile
    "EnergySystemSplit",
    "MetabolicModel",
    "calculate_lt1_fraction",
    "classify_vlamax",
    "estimate_critical_power",
    "fit_metabolic_model",
    # Power
    "calculate_intensity_factor",
    "calculate_power_to_weight",
    "calculate_tss",
    # Zones
    "SubstrateRatios",
    "Zone",
    "ZoneConsumption",
    "build_zone_table",
    "calculate_consumption",
    "calculate_marker_zones",
    "calculate_zones",
    "get_zone_for_power",
]
