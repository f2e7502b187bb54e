"""Input records for the metabolic profiler."""

import logging
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..utils.numbers import clamp, finite_or_none, positive_or_none
from .common import INPUT_MODEL_CONFIG, aliases

logger = logging.getLogger(__name__)


# Durations (seconds) of the standard power-duration test protocol
CANONICAL_DURATIONS: Tuple[int, ...] = (5, 10, 20, 30, 60, 120, 180, 360, 480, 720, 1200)


def format_duration_label(duration_seconds: int) -> str:
    """Format a test duration the way coaches write it (5", 1', 20')."""
    if duration_seconds < 60:
        return f'{duration_seconds}"'
    minutes, seconds = divmod(duration_seconds, 60)
    if seconds:
        return f"{minutes}'{seconds:02d}\""
    return f"{minutes}'"


class PowerDurationPoint(BaseModel):
    """Best average power an athlete held for a given duration."""

    model_config = INPUT_MODEL_CONFIG

    duration_seconds: int = Field(
        ..., gt=0,
        validation_alias=aliases("duration_seconds", "duration"),
        description="Effort duration in seconds",
    )
    power_watts: Optional[float] = Field(
        None,
        validation_alias=aliases("power_watts", "power", "watts"),
        description="Best average power in watts; None means not tested",
    )

    @field_validator("power_watts", mode="before")
    @classmethod
    def normalize_power(cls, v: Any) -> Optional[float]:
        """Treat non-positive or non-finite power as 'not tested'."""
        power = positive_or_none(v)
        if v is not None and power is None:
            logger.debug(f"Ignoring invalid power value {v!r}")
        return power

    @property
    def is_populated(self) -> bool:
        """Whether this duration was actually tested."""
        return self.power_watts is not None

    @property
    def label(self) -> str:
        return format_duration_label(self.duration_seconds)


def default_power_points() -> List[PowerDurationPoint]:
    """Return the empty canonical test protocol, one point per duration."""
    return [PowerDurationPoint(duration_seconds=d) for d in CANONICAL_DURATIONS]


def parse_power_points(raw_points: List[Any]) -> List[PowerDurationPoint]:
    """
    Build power-duration points from user-entered records.

    Entries that cannot be turned into a point (missing or non-positive
    duration, wrong type) are skipped instead of failing the whole test.

    Args:
        raw_points: PowerDurationPoint instances or dicts

    Returns:
        Valid points, in input order
    """
    points: List[PowerDurationPoint] = []
    for raw in raw_points:
        if isinstance(raw, PowerDurationPoint):
            points.append(raw)
            continue
        try:
            points.append(PowerDurationPoint.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Skipping invalid power-duration point {raw!r}: {e.error_count()} error(s)")
    return points


class BodyComposition(BaseModel):
    """Athlete body composition used to scale glycolytic capacity."""

    model_config = INPUT_MODEL_CONFIG

    weight_kg: float = Field(..., gt=0, validation_alias=aliases("weight_kg", "weight"))
    body_fat_pct: float = Field(
        0.0,
        validation_alias=aliases("body_fat_pct", "body_fat_percent", "bodyFat"),
        description="Body fat percentage (0-100)",
    )

    @field_validator("body_fat_pct", mode="before")
    @classmethod
    def normalize_body_fat(cls, v: Any) -> float:
        """Keep body fat inside a physiologically possible range."""
        pct = finite_or_none(v)
        if pct is None:
            if v is not None:
                logger.warning(f"Invalid body fat {v!r}, assuming 0%")
            return 0.0
        return clamp(pct, 0.0, 99.0)

    @property
    def lean_body_mass_kg(self) -> float:
        """Lean body mass: weight * (1 - body_fat_pct / 100)."""
        return self.weight_kg * (1 - self.body_fat_pct / 100)


class ManualOverride(BaseModel):
    """Coach-entered values used when the test curve is too sparse to fit."""

    model_config = INPUT_MODEL_CONFIG

    critical_power_watts: Optional[float] = Field(
        None, validation_alias=aliases("critical_power_watts", "manual_cp", "cp")
    )
    vlamax: Optional[float] = Field(
        None, validation_alias=aliases("vlamax", "manual_vlamax")
    )

    @field_validator("critical_power_watts", "vlamax", mode="before")
    @classmethod
    def normalize_positive(cls, v: Any) -> Optional[float]:
        """Non-positive values mean the override was not given."""
        return positive_or_none(v)
