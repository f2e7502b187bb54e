"""Pytest configuration and fixtures."""

from datetime import date, timedelta

import pytest

from athlete_modeling.config import get_settings
from athlete_modeling.models import BodyComposition, PowerDurationPoint


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached; drop the cache so env overrides never leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def power_curve():
    """Five-point test: 5", 1', 3', 8' and 20' best efforts."""
    return [
        PowerDurationPoint(duration_seconds=5, power_watts=910),
        PowerDurationPoint(duration_seconds=60, power_watts=520),
        PowerDurationPoint(duration_seconds=180, power_watts=380),
        PowerDurationPoint(duration_seconds=480, power_watts=310),
        PowerDurationPoint(duration_seconds=1200, power_watts=280),
    ]


@pytest.fixture
def full_power_curve():
    """A complete 11-duration protocol for a well-trained rider."""
    powers = {
        5: 1050, 10: 980, 20: 820, 30: 700, 60: 520, 120: 420,
        180: 390, 360: 340, 480: 325, 720: 305, 1200: 290,
    }
    return [PowerDurationPoint(duration_seconds=d, power_watts=p) for d, p in powers.items()]


@pytest.fixture
def body():
    """74 kg at 18% body fat (lean mass 60.68 kg)."""
    return BodyComposition(weight_kg=74, body_fat_pct=18)


@pytest.fixture
def today():
    return date(2025, 3, 1)


@pytest.fixture
def steady_block(today):
    """42 consecutive days of 80 TSS ending today."""
    return [
        {"date": today - timedelta(days=offset), "training_stress": 80, "duration_minutes": 75}
        for offset in range(42)
    ]
