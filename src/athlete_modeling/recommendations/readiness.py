"""
Readiness, Strain, Recovery and Stress scores.

Combines a day's biometrics into four scores:
- Readiness (0-100): how ready the athlete is to train today
- Strain (0-21): cardiovascular load of a session, Whoop-style
- Recovery (0-100): how well the athlete recovered since the last session
- Stress (0-100): physiological plus psychological stress

Every input is optional. Absent inputs are skipped rather than treated as
zero; the threshold ladders themselves live in `rules`.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from ..config import get_settings
from ..models.biometrics import BiometricsSnapshot
from ..models.training import StrainSession, TimeInZones
from ..utils.numbers import clamp, round_half_up
from . import rules

logger = logging.getLogger(__name__)


READINESS_BASE = 70
RECOVERY_BASE = 60
STRESS_BASE = 30

# With fewer input groups than this the readiness score is pulled halfway
# back toward READINESS_BASE
MIN_CONFIDENT_FACTORS = 3

MAX_STRAIN = 21.0

# Strain points per minute in each HR zone
ZONE_STRAIN_WEIGHTS = {"z1": 0.02, "z2": 0.05, "z3": 0.12, "z4": 0.25, "z5": 0.5}

LOAD_ADJUSTMENT_RANGE = (-50, 15)
HIGH_STRESS_THRESHOLD = 70
LOW_RECOVERY_THRESHOLD = 50


class HrvStatus(str, Enum):
    OPTIMAL = "optimal"
    ELEVATED = "elevated"
    SUPPRESSED = "suppressed"
    UNKNOWN = "unknown"


class SleepStatus(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    UNKNOWN = "unknown"


class FatigueStatus(str, Enum):
    FRESH = "fresh"
    NORMAL = "normal"
    FATIGUED = "fatigued"
    OVERREACHING = "overreaching"


class RecommendedIntensity(str, Enum):
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"
    REST = "rest"


# (minimum readiness, intensity, load adjustment %, message)
INTENSITY_LADDER = (
    (80, RecommendedIntensity.HIGH, 10, "Great form! You can take on hard sessions."),
    (60, RecommendedIntensity.MODERATE, 0, "Good readiness. Proceed with the planned session."),
    (40, RecommendedIntensity.LOW, -20, "Reduced readiness. Consider a lighter session."),
    (0, RecommendedIntensity.REST, -50, "Low readiness. Rest or active recovery recommended."),
)

HIGH_STRESS_ADJUSTMENT = -15
HIGH_STRESS_WARNING = "Elevated stress level."
LOW_RECOVERY_ADJUSTMENT = -10
LOW_RECOVERY_WARNING = "Incomplete recovery."


@dataclass(frozen=True)
class ReadinessResult:
    """Complete readiness assessment for one day."""

    readiness_score: int                     # 0-100
    strain_score: float                      # 0-21
    recovery_score: int                      # 0-100
    stress_score: int                        # 0-100
    hrv_status: HrvStatus
    sleep_status: SleepStatus
    fatigue_status: FatigueStatus
    recommended_intensity: RecommendedIntensity
    load_adjustment_pct: int                 # -50 to +15
    message: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "readiness_score": self.readiness_score,
            "strain_score": self.strain_score,
            "recovery_score": self.recovery_score,
            "stress_score": self.stress_score,
            "hrv_status": self.hrv_status.value,
            "sleep_status": self.sleep_status.value,
            "fatigue_status": self.fatigue_status.value,
            "recommended_intensity": self.recommended_intensity.value,
            "load_adjustment_pct": self.load_adjustment_pct,
            "message": self.message,
        }


def _as_biometrics(biometrics: Any) -> BiometricsSnapshot:
    if isinstance(biometrics, BiometricsSnapshot):
        return biometrics
    return BiometricsSnapshot.model_validate(biometrics or {})


def _as_strain_session(session: Any) -> StrainSession:
    if isinstance(session, StrainSession):
        return session
    return StrainSession.model_validate(session)


def _sleep_target(biometrics: BiometricsSnapshot) -> float:
    return biometrics.sleep_target_min or get_settings().default_sleep_target_min


def readiness_adjustments(biometrics: BiometricsSnapshot) -> Dict[str, float]:
    """
    Per-factor readiness adjustments for the input groups that are present.

    Keys are only included when their inputs exist, so the length of the
    result is the number of factors the score was built from.

    Returns:
        Ordered {factor: delta} for hrv, resting_hr, sleep_duration,
        sleep_score, training_balance, feeling and stress
    """
    b = _as_biometrics(biometrics)
    adjustments: Dict[str, float] = {}

    if b.hrv_ratio is not None:
        adjustments["hrv"] = rules.apply_rules(rules.READINESS_HRV_RATIO, b.hrv_ratio)
    elif b.hrv_rmssd is not None:
        adjustments["hrv"] = rules.apply_rules(rules.READINESS_HRV_ABSOLUTE, b.hrv_rmssd)

    if b.resting_hr_delta is not None:
        adjustments["resting_hr"] = rules.apply_rules(rules.READINESS_RESTING_HR, b.resting_hr_delta)

    if b.sleep_duration_min is not None:
        ratio = b.sleep_duration_min / _sleep_target(b)
        adjustments["sleep_duration"] = rules.apply_rules(rules.READINESS_SLEEP_DURATION, ratio)

    if b.sleep_score is not None:
        adjustments["sleep_score"] = rules.apply_rules(rules.READINESS_SLEEP_SCORE, b.sleep_score)

    if b.training_balance is not None:
        adjustments["training_balance"] = rules.apply_rules(
            rules.READINESS_TRAINING_BALANCE, b.training_balance
        )

    if b.feeling_yesterday is not None:
        adjustments["feeling"] = rules.READINESS_FEELING[b.feeling_yesterday]

    if b.stress_level is not None:
        adjustments["stress"] = rules.apply_rules(rules.READINESS_STRESS_LEVEL, b.stress_level)

    return adjustments


def calculate_readiness(biometrics: BiometricsSnapshot) -> int:
    """
    Calculate the readiness score (0-100).

    Starts at 70 and adds each present factor's adjustment. With fewer than
    three factors the result is regressed halfway toward 70 to reflect the
    lower confidence.

    Args:
        biometrics: Day's biometrics (model or dict)

    Returns:
        Readiness score, rounded half-up
    """
    adjustments = readiness_adjustments(biometrics)
    score = READINESS_BASE + sum(adjustments.values())

    if len(adjustments) < MIN_CONFIDENT_FACTORS:
        logger.debug(f"Only {len(adjustments)} readiness factors, regressing toward base")
        score = READINESS_BASE + (score - READINESS_BASE) * 0.5

    return int(round_half_up(clamp(score, 0, 100)))


def calculate_zone_strain(time_in_zones: TimeInZones) -> float:
    """Strain from minutes spent in each HR zone."""
    return sum(
        getattr(time_in_zones, zone) * weight
        for zone, weight in ZONE_STRAIN_WEIGHTS.items()
    )


def calculate_strain(session: StrainSession) -> float:
    """
    Calculate strain (0-21) for one session.

    TSS 100 ~ strain 14, TSS 150 ~ 18, TSS 200+ ~ 21. Time in zones, when
    known, is blended in at 30% (or used alone without TSS). Long easy
    sessions get a duration bonus; IF above 0.9 scales the result up.

    Args:
        session: StrainSession (or dict)

    Returns:
        Strain rounded to one decimal
    """
    s = _as_strain_session(session)
    strain = 0.0

    if s.tss is not None:
        strain = min(MAX_STRAIN, s.tss / 100 * 14)

    if s.time_in_zones is not None:
        zone_strain = calculate_zone_strain(s.time_in_zones)
        if s.tss is not None:
            strain = strain * 0.7 + zone_strain * 0.3
        else:
            strain = zone_strain

    # Long, easy sessions
    if s.duration_min > 120 and strain < 10:
        strain = min(strain + (s.duration_min - 120) * 0.03, 15)

    if s.intensity_factor is not None and s.intensity_factor > 0.9:
        strain *= 1 + (s.intensity_factor - 0.9) * 2

    return clamp(round_half_up(strain, 1), 0.0, MAX_STRAIN)


def calculate_recovery(biometrics: BiometricsSnapshot) -> int:
    """
    Calculate the recovery score (0-100) from a base of 60.

    Uses HRV vs baseline, sleep score, deep-sleep share, SpO2 and
    yesterday's training stress.
    """
    b = _as_biometrics(biometrics)
    recovery = float(RECOVERY_BASE)

    if b.hrv_ratio is not None:
        recovery += rules.apply_rules(rules.RECOVERY_HRV_RATIO, b.hrv_ratio)

    if b.sleep_score is not None:
        recovery += (b.sleep_score - 70) * 0.3

    if b.sleep_deep_min is not None and b.sleep_duration_min:
        deep_fraction = b.sleep_deep_min / b.sleep_duration_min
        recovery += rules.apply_rules(rules.RECOVERY_DEEP_SLEEP, deep_fraction)

    if b.spo2 is not None:
        recovery += rules.apply_rules(rules.RECOVERY_SPO2, b.spo2)

    if b.yesterday_training_stress is not None:
        recovery += rules.apply_rules(rules.RECOVERY_YESTERDAY_TSS, b.yesterday_training_stress)

    return int(round_half_up(clamp(recovery, 0, 100)))


def calculate_stress(biometrics: BiometricsSnapshot) -> int:
    """Calculate the stress score (0-100) from a base of 30."""
    b = _as_biometrics(biometrics)
    stress = float(STRESS_BASE)

    if b.hrv_ratio is not None:
        stress += rules.apply_rules(rules.STRESS_HRV_RATIO, b.hrv_ratio)

    if b.resting_hr_delta is not None:
        stress += rules.apply_rules(rules.STRESS_RESTING_HR, b.resting_hr_delta)

    if b.respiratory_rate is not None:
        stress += rules.apply_rules(rules.STRESS_RESPIRATORY_RATE, b.respiratory_rate)

    if b.stress_level is not None:
        stress += (b.stress_level - 5) * 5

    if (
        b.sleep_duration_min is not None
        and b.sleep_duration_min < _sleep_target(b) * rules.STRESS_SHORT_SLEEP_FRACTION
    ):
        stress += rules.STRESS_SHORT_SLEEP_DELTA

    return int(round_half_up(clamp(stress, 0, 100)))


def classify_hrv(biometrics: BiometricsSnapshot) -> HrvStatus:
    b = _as_biometrics(biometrics)
    if b.hrv_ratio is None:
        return HrvStatus.UNKNOWN
    return HrvStatus(rules.classify(rules.HRV_STATUS, b.hrv_ratio, HrvStatus.UNKNOWN.value))


def classify_sleep(biometrics: BiometricsSnapshot) -> SleepStatus:
    """Sleep status from the device score, else from duration vs target."""
    b = _as_biometrics(biometrics)
    if b.sleep_score is not None:
        status = rules.classify(rules.SLEEP_SCORE_STATUS, b.sleep_score, SleepStatus.UNKNOWN.value)
    elif b.sleep_duration_min is not None:
        ratio = b.sleep_duration_min / _sleep_target(b)
        status = rules.classify(rules.SLEEP_DURATION_STATUS, ratio, SleepStatus.UNKNOWN.value)
    else:
        status = SleepStatus.UNKNOWN.value
    return SleepStatus(status)


def classify_fatigue(biometrics: BiometricsSnapshot) -> FatigueStatus:
    b = _as_biometrics(biometrics)
    if b.training_balance is None:
        return FatigueStatus.NORMAL
    return FatigueStatus(
        rules.classify(rules.FATIGUE_STATUS, b.training_balance, FatigueStatus.NORMAL.value)
    )


def recommend_intensity(
    readiness: int,
    stress: int,
    recovery: int,
) -> Tuple[RecommendedIntensity, int, str]:
    """
    Map scores to an intensity, a load adjustment and a message.

    Returns:
        (RecommendedIntensity, load_adjustment_pct, message)
    """
    intensity, adjustment, message = RecommendedIntensity.REST, -50, ""
    for minimum, level, level_adjustment, level_message in INTENSITY_LADDER:
        if readiness >= minimum:
            intensity, adjustment, message = level, level_adjustment, level_message
            break

    warnings: List[str] = []
    if stress > HIGH_STRESS_THRESHOLD:
        adjustment += HIGH_STRESS_ADJUSTMENT
        warnings.append(HIGH_STRESS_WARNING)
    if recovery < LOW_RECOVERY_THRESHOLD:
        adjustment += LOW_RECOVERY_ADJUSTMENT
        warnings.append(LOW_RECOVERY_WARNING)

    if warnings:
        message = " ".join([message, *warnings])

    return intensity, int(clamp(adjustment, *LOAD_ADJUSTMENT_RANGE)), message


def analyze_readiness(biometrics: BiometricsSnapshot) -> ReadinessResult:
    """
    Get the full readiness analysis with a training recommendation.

    Args:
        biometrics: Day's biometrics (model or dict)

    Returns:
        ReadinessResult with the four scores, statuses and recommendation
    """
    b = _as_biometrics(biometrics)

    readiness = calculate_readiness(b)
    recovery = calculate_recovery(b)
    stress = calculate_stress(b)
    strain = calculate_strain(StrainSession(duration_min=0, tss=b.yesterday_training_stress))

    intensity, adjustment, message = recommend_intensity(readiness, stress, recovery)
    logger.debug(
        f"Readiness {readiness}, recovery {recovery}, stress {stress} -> "
        f"{intensity.value} ({adjustment:+d}%)"
    )

    return ReadinessResult(
        readiness_score=readiness,
        strain_score=strain,
        recovery_score=recovery,
        stress_score=stress,
        hrv_status=classify_hrv(b),
        sleep_status=classify_sleep(b),
        fatigue_status=classify_fatigue(b),
        recommended_intensity=intensity,
        load_adjustment_pct=adjustment,
        message=message,
    )


def combine_strains(strains: Sequence[float]) -> float:
    """
    Combine per-session strains with diminishing returns.

    The largest counts in full; the i-th following one (i >= 1, descending
    order) adds strain * 0.5 / i.
    """
    ordered = sorted((max(0.0, s) for s in strains), reverse=True)
    if not ordered:
        return 0.0

    total = ordered[0]
    for index, strain in enumerate(ordered[1:], start=1):
        total += strain * (0.5 / index)

    return clamp(round_half_up(total, 1), 0.0, MAX_STRAIN)


def calculate_daily_strain(sessions: Iterable[StrainSession]) -> float:
    """Day strain from all sessions completed that day."""
    return combine_strains([calculate_strain(s) for s in sessions])