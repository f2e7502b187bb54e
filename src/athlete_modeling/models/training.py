"""Input records for the training-load and strain calculations."""

import logging
from datetime import date as date_type
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from ..utils.numbers import non_negative_or_zero, positive_or_none
from .common import INPUT_MODEL_CONFIG, aliases

logger = logging.getLogger(__name__)


class TrainingSession(BaseModel):
    """A completed session from the activity store."""

    model_config = INPUT_MODEL_CONFIG

    date: date_type = Field(
        ..., validation_alias=aliases("date", "activity_date"),
        description="Calendar date the session was performed",
    )
    training_stress: float = Field(
        0.0, validation_alias=aliases("training_stress", "tss"),
        description="Training stress score; never negative",
    )
    duration_minutes: float = Field(
        0.0, validation_alias=aliases("duration_minutes", "duration"),
        description="Session duration in minutes",
    )

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, v: Any) -> Any:
        """Reduce activity-store timestamps to their calendar date."""
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and len(v) > 10:
            try:
                return datetime.fromisoformat(v.replace("Z", "+00:00")).date()
            except ValueError:
                return v
        return v

    @field_validator("training_stress", "duration_minutes", mode="before")
    @classmethod
    def normalize_non_negative(cls, v: Any) -> float:
        """Missing, negative or non-finite values contribute nothing."""
        value = non_negative_or_zero(v)
        if v is not None and value == 0.0 and v != 0:
            logger.debug(f"Normalized invalid session value {v!r} to 0")
        return value


class TimeInZones(BaseModel):
    """Minutes spent in each of the five heart-rate zones."""

    model_config = INPUT_MODEL_CONFIG

    z1: float = 0.0
    z2: float = 0.0
    z3: float = 0.0
    z4: float = 0.0
    z5: float = 0.0

    @field_validator("z1", "z2", "z3", "z4", "z5", mode="before")
    @classmethod
    def normalize_minutes(cls, v: Any) -> float:
        return non_negative_or_zero(v)


class StrainSession(BaseModel):
    """Load description of one session, used for strain scoring."""

    model_config = INPUT_MODEL_CONFIG

    duration_min: float = Field(0.0, validation_alias=aliases("duration_min", "duration_minutes"))
    tss: Optional[float] = Field(None, validation_alias=aliases("tss", "training_stress"))
    intensity_factor: Optional[float] = None
    time_in_zones: Optional[TimeInZones] = None

    @field_validator("duration_min", mode="before")
    @classmethod
    def normalize_duration(cls, v: Any) -> float:
        return non_negative_or_zero(v)

    @field_validator("tss", "intensity_factor", mode="before")
    @classmethod
    def normalize_optional(cls, v: Any) -> Optional[float]:
        """Zero, negative or non-finite values count as not provided."""
        return positive_or_none(v)
