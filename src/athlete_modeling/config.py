"""Configuration settings for the athlete modeling engine."""

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings


# __file__ = src/athlete_modeling/config.py
PACKAGE_ROOT = Path(__file__).parent
PROJECT_ROOT = PACKAGE_ROOT.parent.parent


class Settings(BaseSettings):
    """Model constants loaded from environment variables.

    Every value can be overridden with an ``ATHLETE_MODELING_`` prefixed
    environment variable, e.g. ``ATHLETE_MODELING_GROSS_EFFICIENCY=0.21``.
    """

    # Metabolic profiler
    gross_efficiency: float = 0.23
    tau_alactic_seconds: float = 10.0
    tau_lactic_seconds: float = 180.0
    alactic_capacity_factor: float = 15.0
    vlamax_k: float = 0.5  # W per kg LBM per mmol/L/s

    # Training-load engine
    ctl_time_constant: int = 42
    atl_time_constant: int = 7

    # Readiness engine
    default_sleep_target_min: int = 480

    # Logging (CLI only)
    log_level: str = "INFO"

    class Config:
        env_prefix = "ATHLETE_MODELING_"
        env_file = str(PROJECT_ROOT / ".env")
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
