"""Metabolic profile modeling (CP, W' components, VLaMax, LT1/LT2, FatMax)."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..config import get_settings
from ..exceptions import InsufficientDataError
from ..models.metabolic import (
    BodyComposition,
    ManualOverride,
    PowerDurationPoint,
    parse_power_points,
)
from ..utils.numbers import clamp, round_half_up
from .power import calculate_power_to_weight

logger = logging.getLogger(__name__)


MIN_FIT_POINTS = 5

# Fitted-mode floors
MIN_CP_WATTS = 100.0
MIN_W_ALACTIC_JOULES = 1000.0
MIN_W_LACTIC_JOULES = 5000.0

VLAMAX_RANGE = (0.2, 1.5)
DEFAULT_MANUAL_VLAMAX = 0.5

# Capacity multipliers used when a duration band has too few points
ALACTIC_CP_MULTIPLIER = 25.0
LACTIC_CP_MULTIPLIER = 180.0
LACTIC_CAPACITY_FACTOR = 180.0

FAT_MAX_FRACTION = 0.70
LT2_FRACTION = 1.0

# LT1 as a fraction of CP falls as glycolytic rate rises
LT1_FRACTION_LOW_VLAMAX = 0.82
LT1_FRACTION_HIGH_VLAMAX = 0.72
LT1_VLAMAX_LOW = 0.4
LT1_VLAMAX_HIGH = 0.6

# (upper bound exclusive, label)
VLAMAX_CLASSIFICATION = [
    (0.40, "pure endurance"),
    (0.60, "strong endurance"),
    (0.80, "all-round"),
    (1.00, "anaerobic"),
    (float("inf"), "sprint/lactic"),
]


@dataclass(frozen=True)
class EnergySystemSplit:
    """Share of total work capacity per energy system, in whole percent."""

    aerobic_pct: int
    alactic_pct: int
    lactic_pct: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "aerobic_pct": self.aerobic_pct,
            "alactic_pct": self.alactic_pct,
            "lactic_pct": self.lactic_pct,
        }


@dataclass(frozen=True)
class MetabolicModel:
    """
    Athlete metabolic model derived from a power-duration test.

    Values are kept at full precision; to_dict() rounds them for display.
    """

    critical_power_watts: float
    w_alactic_joules: float
    tau_alactic_seconds: float
    w_lactic_joules: float
    tau_lactic_seconds: float
    peak_glycolytic_power_watts: float
    vlamax: float  # mmol/L/s equivalent
    fat_max_watts: float
    lt1_watts: float
    lt2_watts: float
    energy_system_split: EnergySystemSplit
    lean_body_mass_kg: float
    mode: str  # 'fitted' or 'manual'
    points_used: int = 0
    cp_w_per_kg: Optional[float] = field(default=None)

    @property
    def vlamax_class(self) -> str:
        return classify_vlamax(self.vlamax)

    @property
    def lt1_fraction(self) -> float:
        return self.lt1_watts / self.critical_power_watts

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "mode": self.mode,
            "points_used": self.points_used,
            "critical_power_watts": int(round_half_up(self.critical_power_watts)),
            "w_alactic_joules": int(round_half_up(self.w_alactic_joules)),
            "tau_alactic_seconds": round_half_up(self.tau_alactic_seconds, 1),
            "w_lactic_joules": int(round_half_up(self.w_lactic_joules)),
            "tau_lactic_seconds": int(round_half_up(self.tau_lactic_seconds)),
            "peak_glycolytic_power_watts": int(round_half_up(self.peak_glycolytic_power_watts)),
            "vlamax": round_half_up(self.vlamax, 2),
            "vlamax_class": self.vlamax_class,
            "fat_max_watts": int(round_half_up(self.fat_max_watts)),
            "lt1_watts": int(round_half_up(self.lt1_watts)),
            "lt2_watts": int(round_half_up(self.lt2_watts)),
            "energy_system_split": self.energy_system_split.to_dict(),
            "lean_body_mass_kg": round_half_up(self.lean_body_mass_kg, 1),
            "cp_w_per_kg": self.cp_w_per_kg,
        }


def classify_vlamax(vlamax: float) -> str:
    """
    Label an athlete's glycolytic profile from VLaMax.

    Display only; no model math depends on it.
    """
    for upper, label in VLAMAX_CLASSIFICATION:
        if vlamax < upper:
            return label
    return VLAMAX_CLASSIFICATION[-1][1]


def calculate_lt1_fraction(vlamax: float) -> float:
    """
    LT1 as a fraction of CP, from 0.82 (VLaMax <= 0.4) down to 0.72 (>= 0.6).

    Linear in between: a higher glycolytic rate moves the first lactate
    turnpoint to a lower share of CP.
    """
    if vlamax >= LT1_VLAMAX_HIGH:
        return LT1_FRACTION_HIGH_VLAMAX
    if vlamax <= LT1_VLAMAX_LOW:
        return LT1_FRACTION_LOW_VLAMAX
    position = (vlamax - LT1_VLAMAX_LOW) / (LT1_VLAMAX_HIGH - LT1_VLAMAX_LOW)
    return LT1_FRACTION_LOW_VLAMAX - position * (LT1_FRACTION_LOW_VLAMAX - LT1_FRACTION_HIGH_VLAMAX)


def calculate_energy_split(cp: float, w_alactic: float, w_lactic: float) -> EnergySystemSplit:
    """Split one hour of CP work plus both anaerobic capacities by system."""
    aerobic_work = cp * 3600
    total_capacity = w_alactic + w_lactic + aerobic_work
    if total_capacity <= 0:
        return EnergySystemSplit(0, 0, 0)
    return EnergySystemSplit(
        aerobic_pct=int(round_half_up(aerobic_work / total_capacity * 100)),
        alactic_pct=int(round_half_up(w_alactic / total_capacity * 100)),
        lactic_pct=int(round_half_up(w_lactic / total_capacity * 100)),
    )


def estimate_critical_power(points: Sequence[PowerDurationPoint]) -> float:
    """
    Estimate CP from populated test points (before the 100 W floor).

    - Two or more efforts >= 12 min: their mean power.
    - Otherwise 95% of the 20-min power if tested, else 90% of the weakest
      effort >= 6 min.
    - A tested 20-min effort always caps CP at 95% of its power.

    Args:
        points: Populated power-duration points

    Returns:
        CP estimate in watts (0.0 when no effort >= 6 min exists)
    """
    best_20min = next(
        (p.power_watts for p in points if p.duration_seconds == 1200), None
    )

    long_efforts = [p.power_watts for p in points if p.duration_seconds >= 720]
    if len(long_efforts) >= 2:
        cp = sum(long_efforts) / len(long_efforts)
    elif best_20min is not None:
        cp = best_20min * 0.95
    else:
        sustained = [p.power_watts for p in points if p.duration_seconds >= 360]
        cp = min(sustained) * 0.9 if sustained else 0.0

    if best_20min is not None and cp > best_20min * 0.95:
        logger.info(f"Limiting CP {cp:.0f}W to 95% of 20-min power ({best_20min * 0.95:.0f}W)")
        cp = best_20min * 0.95

    return cp


def _populated(points: Sequence[Any]) -> List[PowerDurationPoint]:
    """Tested points; dict rows are parsed and unreadable ones skipped."""
    return [p for p in parse_power_points(points) if p.is_populated]


def fit_metabolic_model(
    points: Sequence[Any],
    body: BodyComposition,
    manual: Optional[ManualOverride] = None,
    *,
    tau_lactic: Optional[float] = None,
    alactic_capacity_factor: Optional[float] = None,
) -> MetabolicModel:
    """
    Fit the metabolic model from a power-duration test.

    With at least five tested durations the model is fitted from the curve.
    With fewer, a manual CP (and optional VLaMax) is expanded with fixed
    capacity multipliers instead.

    Args:
        points: PowerDurationPoint instances or dicts (untested ones are
            ignored)
        body: Weight and body fat, used for lean body mass
        manual: Optional coach override for CP / VLaMax
        tau_lactic: Glycolytic time constant in seconds (default from settings)
        alactic_capacity_factor: Multiplier for short-burst work above CP
            (default from settings)

    Returns:
        A new MetabolicModel

    Raises:
        InsufficientDataError: fewer than five tested points and no manual CP
    """
    settings = get_settings()
    if tau_lactic is None:
        tau_lactic = settings.tau_lactic_seconds
    if alactic_capacity_factor is None:
        alactic_capacity_factor = settings.alactic_capacity_factor
    tau_alactic = settings.tau_alactic_seconds

    populated = _populated(points)
    lbm = body.lean_body_mass_kg
    manual_cp = manual.critical_power_watts if manual else None

    if len(populated) < MIN_FIT_POINTS and manual_cp is None:
        raise InsufficientDataError(populated_points=len(populated), required_points=MIN_FIT_POINTS)

    if len(populated) < MIN_FIT_POINTS:
        logger.debug(f"Manual mode with CP={manual_cp}W ({len(populated)} tested points)")
        mode = "manual"
        cp = manual_cp
        w_alactic = cp * ALACTIC_CP_MULTIPLIER
        w_lactic = cp * LACTIC_CP_MULTIPLIER
        manual_vlamax = manual.vlamax if manual else None
        vlamax = clamp(manual_vlamax or DEFAULT_MANUAL_VLAMAX, *VLAMAX_RANGE)
    else:
        logger.debug(f"Fitting power-duration curve from {len(populated)} points")
        mode = "fitted"
        cp = estimate_critical_power(populated)

        short_efforts = [p.power_watts for p in populated if 5 <= p.duration_seconds <= 30]
        if len(short_efforts) >= 2:
            w_alactic = (max(short_efforts) - cp) * alactic_capacity_factor
        else:
            w_alactic = cp * ALACTIC_CP_MULTIPLIER

        mid_efforts = [p.power_watts for p in populated if 60 <= p.duration_seconds <= 360]
        if len(mid_efforts) >= 2:
            w_lactic = (sum(mid_efforts) / len(mid_efforts) - cp) * LACTIC_CAPACITY_FACTOR
        else:
            w_lactic = cp * LACTIC_CP_MULTIPLIER

        cp = max(cp, MIN_CP_WATTS)
        w_alactic = max(w_alactic, MIN_W_ALACTIC_JOULES)
        w_lactic = max(w_lactic, MIN_W_LACTIC_JOULES)

        peak = w_lactic / tau_lactic
        if lbm > 0:
            vlamax = clamp(peak / (lbm * settings.vlamax_k), *VLAMAX_RANGE)
        else:
            vlamax = VLAMAX_RANGE[1]

    peak_glycolytic_power = w_lactic / tau_lactic
    lt1 = cp * calculate_lt1_fraction(vlamax)

    model = MetabolicModel(
        critical_power_watts=cp,
        w_alactic_joules=w_alactic,
        tau_alactic_seconds=tau_alactic,
        w_lactic_joules=w_lactic,
        tau_lactic_seconds=tau_lactic,
        peak_glycolytic_power_watts=peak_glycolytic_power,
        vlamax=vlamax,
        fat_max_watts=cp * FAT_MAX_FRACTION,
        lt1_watts=lt1,
        lt2_watts=cp * LT2_FRACTION,
        energy_system_split=calculate_energy_split(cp, w_alactic, w_lactic),
        lean_body_mass_kg=lbm,
        mode=mode,
        points_used=len(populated),
        cp_w_per_kg=calculate_power_to_weight(cp, body.weight_kg),
    )
    logger.debug(f"Metabolic model: CP={cp:.0f}W VLaMax={vlamax:.2f} ({model.vlamax_class})")
    return model
