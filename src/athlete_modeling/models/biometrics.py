"""Daily biometrics snapshot consumed by the readiness engine."""

import logging
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from ..utils.numbers import finite_or_none
from .common import INPUT_MODEL_CONFIG, aliases

logger = logging.getLogger(__name__)


class Feeling(str, Enum):
    """Subjective feeling reported for the previous day."""
    GREAT = "great"
    GOOD = "good"
    OK = "ok"
    TIRED = "tired"
    BAD = "bad"


# Fields that must be non-negative physiological measurements
_MEASUREMENT_FIELDS = (
    "hrv_rmssd",
    "hrv_baseline",
    "resting_hr",
    "resting_hr_baseline",
    "sleep_duration_min",
    "sleep_target_min",
    "sleep_score",
    "sleep_deep_min",
    "respiratory_rate",
    "spo2",
    "chronic_load",
    "acute_load",
    "yesterday_training_stress",
)

# Ordinal scales: field -> (min, max)
_ORDINAL_RANGES = {
    "soreness_level": (1, 5),
    "stress_level": (1, 10),
    "motivation_level": (1, 10),
}


class BiometricsSnapshot(BaseModel):
    """
    One day of biometrics from a wearable sync or manual entry.

    Every field is optional; partial data is the norm. Malformed values
    (negative, non-finite, outside their ordinal scale) are dropped to None
    so they are skipped by the scoring rules rather than biasing them.
    """

    model_config = INPUT_MODEL_CONFIG

    # HRV & heart
    hrv_rmssd: Optional[float] = Field(None, description="Overnight RMSSD in ms")
    hrv_baseline: Optional[float] = Field(None, description="Personal RMSSD baseline in ms")
    resting_hr: Optional[float] = Field(None, validation_alias=aliases("resting_hr", "hr_resting"))
    resting_hr_baseline: Optional[float] = Field(
        None, validation_alias=aliases("resting_hr_baseline", "hr_resting_baseline")
    )

    # Sleep
    sleep_duration_min: Optional[float] = None
    sleep_target_min: Optional[float] = None
    sleep_score: Optional[float] = Field(None, description="Device sleep score 0-100")
    sleep_deep_min: Optional[float] = None

    # Respiratory
    respiratory_rate: Optional[float] = Field(None, description="Breaths per minute")
    spo2: Optional[float] = Field(None, validation_alias=aliases("spo2", "spo2_avg"))

    # External load
    chronic_load: Optional[float] = Field(None, validation_alias=aliases("chronic_load", "ctl"))
    acute_load: Optional[float] = Field(None, validation_alias=aliases("acute_load", "atl"))
    yesterday_training_stress: Optional[float] = Field(
        None, validation_alias=aliases("yesterday_training_stress", "tss_yesterday")
    )

    # Subjective
    feeling_yesterday: Optional[Feeling] = None
    soreness_level: Optional[int] = None
    stress_level: Optional[int] = None
    motivation_level: Optional[int] = None

    @field_validator(*_MEASUREMENT_FIELDS, mode="before")
    @classmethod
    def normalize_measurement(cls, v: Any) -> Optional[float]:
        value = finite_or_none(v)
        if value is None or value < 0:
            if v is not None:
                logger.debug(f"Dropping invalid biometric value {v!r}")
            return None
        return value

    @field_validator(*_ORDINAL_RANGES, mode="before")
    @classmethod
    def normalize_ordinal(cls, v: Any, info: ValidationInfo) -> Optional[int]:
        value = finite_or_none(v)
        if value is None:
            return None
        low, high = _ORDINAL_RANGES[info.field_name]
        if not low <= value <= high:
            logger.debug(f"Dropping {info.field_name}={v!r} outside {low}-{high}")
            return None
        return int(round(value))

    @field_validator("feeling_yesterday", mode="before")
    @classmethod
    def normalize_feeling(cls, v: Any) -> Optional[Feeling]:
        if v is None or isinstance(v, Feeling):
            return v
        try:
            return Feeling(str(v).strip().lower())
        except ValueError:
            logger.debug(f"Unknown feeling {v!r}")
            return None

    @property
    def training_balance(self) -> Optional[float]:
        """TSB (chronic - acute load) when both loads are known."""
        if self.chronic_load is None or self.acute_load is None:
            return None
        return self.chronic_load - self.acute_load

    @property
    def hrv_ratio(self) -> Optional[float]:
        """Overnight HRV relative to the personal baseline."""
        if self.hrv_rmssd is None or not self.hrv_baseline:
            return None
        return self.hrv_rmssd / self.hrv_baseline

    @property
    def resting_hr_delta(self) -> Optional[float]:
        """Resting HR minus its baseline (positive = elevated)."""
        if self.resting_hr is None or self.resting_hr_baseline is None:
            return None
        return self.resting_hr - self.resting_hr_baseline
