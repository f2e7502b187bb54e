"""Tests for session training-stress estimation."""

import pytest

from athlete_modeling.metrics.load import calculate_hrss, estimate_tss
from athlete_modeling.metrics.power import (
    calculate_intensity_factor,
    calculate_power_to_weight,
    calculate_tss,
)


class TestHRSSCalculation:
    """Tests for Heart Rate Stress Score calculation."""

    def test_hrss_at_threshold_for_one_hour(self):
        """One hour at threshold should give approximately 100 HRSS."""
        hrss = calculate_hrss(
            duration_min=60,
            avg_hr=165,
            threshold_hr=165,
            max_hr=185,
            rest_hr=50,
        )
        assert hrss == pytest.approx(100, abs=1)

    def test_hrss_easy_run(self):
        """Easy effort should give less than an hour at threshold."""
        hrss = calculate_hrss(duration_min=60, avg_hr=130, threshold_hr=165, max_hr=185, rest_hr=50)
        assert hrss < 60

    def test_hrss_invalid_reserve(self):
        """Max HR not above resting HR should return 0."""
        assert calculate_hrss(60, 150, 165, 50, 50) == 0.0


class TestPowerStress:
    """Tests for power-based TSS helpers."""

    def test_one_hour_at_ftp_is_100(self):
        assert calculate_tss(3600, 250, 250, 1.0) == pytest.approx(100.0)
        assert calculate_tss(3600, 250, 250) == pytest.approx(100.0)

    def test_no_threshold(self):
        assert calculate_tss(3600, 250, 0) == 0.0

    def test_intensity_factor(self):
        assert calculate_intensity_factor(200, 250) == 0.8
        assert calculate_intensity_factor(200, 0) == 0.0

    def test_power_to_weight(self):
        assert calculate_power_to_weight(266, 74) == pytest.approx(3.59)
        assert calculate_power_to_weight(266, 0) is None


class TestEstimateTss:
    """Tests for the TSS estimation priority ladder."""

    def test_power_and_ftp(self):
        assert estimate_tss(60, normalized_power=250, ftp=250) == pytest.approx(100.0)

    def test_intensity_factor_and_ftp(self):
        # NP = 0.8 * 250 = 200 W for one hour
        assert estimate_tss(60, intensity_factor=0.8, ftp=250) == pytest.approx(64.0)

    def test_power_preferred_over_hr(self):
        tss = estimate_tss(60, normalized_power=250, ftp=250, avg_hr=120, threshold_hr=165)
        assert tss == pytest.approx(100.0)

    def test_hr_without_reserve(self):
        assert estimate_tss(60, avg_hr=150, threshold_hr=150) == pytest.approx(100.0)
        assert estimate_tss(30, avg_hr=135, threshold_hr=150) == pytest.approx(40.5)

    def test_hr_with_reserve_uses_hrss(self):
        expected = calculate_hrss(60, 165, 165, 185, 50)
        assert estimate_tss(60, avg_hr=165, threshold_hr=165, max_hr=185, rest_hr=50) == expected

    def test_duration_fallback(self):
        assert estimate_tss(60) == pytest.approx(49.0)
        assert estimate_tss(120) == pytest.approx(98.0)

    def test_ftp_without_power_falls_through(self):
        assert estimate_tss(60, ftp=250) == pytest.approx(49.0)

    @pytest.mark.parametrize("duration", [0, -30, None])
    def test_no_duration(self, duration):
        assert estimate_tss(duration, normalized_power=250, ftp=250) == 0.0
