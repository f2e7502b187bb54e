"""
Athlete modeling engine.

- Metabolic profiler: CP, W' components, VLaMax, LT1/LT2 and fueling zones
- Training-load engine: CTL / ATL / TSB (Performance Management Chart)
- Readiness engine: readiness, strain, recovery and stress scores
"""

from .exceptions import (
    AthleteModelingError,
    ErrorCode,
    InsufficientDataError,
    ValidationError,
)
from .metrics import (
    build_zone_table,
    calculate_training_load,
    calculate_zones,
    estimate_tss,
    fit_metabolic_model,
)
from .recommendations import (
    analyze_readiness,
    calculate_daily_strain,
    calculate_readiness,
    calculate_recovery,
    calculate_strain,
    calculate_stress,
)
from .snapshots import MetabolicSnapshot, current_snapshot, promote_snapshot

__version__ = "0.1.0"

__all__ = [
    "AthleteModelingError",
    "ErrorCode",
    "InsufficientDataError",
    "ValidationError",
    "build_zone_table",
    "calculate_training_load",
    "calculate_zones",
    "estimate_tss",
    "fit_metabolic_model",
    "analyze_readiness",
    "calculate_daily_strain",
    "calculate_readiness",
    "calculate_recovery",
    "calculate_strain",
    "calculate_stress",
    "MetabolicSnapshot",
    "current_snapshot",
    "promote_snapshot",
]
