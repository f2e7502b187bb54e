"""Tests for readiness, strain, recovery and stress scoring."""

import pytest

from athlete_modeling.models import BiometricsSnapshot, StrainSession, TimeInZones
from athlete_modeling.recommendations.readiness import (
    FatigueStatus,
    HrvStatus,
    RecommendedIntensity,
    SleepStatus,
    analyze_readiness,
    calculate_daily_strain,
    calculate_readiness,
    calculate_recovery,
    calculate_strain,
    calculate_stress,
    classify_fatigue,
    classify_hrv,
    classify_sleep,
    combine_strains,
    readiness_adjustments,
    recommend_intensity,
)


@pytest.fixture
def rested():
    """A well-recovered morning with complete data."""
    return BiometricsSnapshot(
        hrv_rmssd=62,
        hrv_baseline=60,
        resting_hr=48,
        resting_hr_baseline=50,
        sleep_duration_min=500,
        sleep_score=90,
        sleep_deep_min=110,
        spo2=98,
        chronic_load=60,
        acute_load=45,
        yesterday_training_stress=40,
        feeling_yesterday="great",
        stress_level=2,
    )


@pytest.fixture
def run_down():
    """Suppressed HRV, short sleep, high stress after a big day."""
    return BiometricsSnapshot(
        hrv_rmssd=40,
        hrv_baseline=60,
        resting_hr=58,
        resting_hr_baseline=50,
        sleep_duration_min=300,
        respiratory_rate=18,
        stress_level=9,
        yesterday_training_stress=160,
    )


class TestReadinessScore:
    """Tests for calculate_readiness."""

    def test_no_data_is_base(self):
        assert calculate_readiness(BiometricsSnapshot()) == 70

    def test_single_factor_regresses_toward_base(self):
        """Only 'bad' feeling: 70 - 15 = 55, regressed halfway to 62.5 -> 63."""
        assert calculate_readiness(BiometricsSnapshot(feeling_yesterday="bad")) == 63

    def test_two_factors_still_regressed(self):
        # 70 + 10 (great) + 12 (full sleep) = 92 -> 81
        biometrics = BiometricsSnapshot(feeling_yesterday="great", sleep_duration_min=480)
        assert calculate_readiness(biometrics) == 81

    def test_three_factors_not_regressed(self):
        # 70 + 10 + 12 + 5 = 97
        biometrics = BiometricsSnapshot(
            feeling_yesterday="great", sleep_duration_min=480, stress_level=2
        )
        assert calculate_readiness(biometrics) == 97

    def test_clamped_high(self, rested):
        assert calculate_readiness(rested) == 100

    def test_clamped_low(self, run_down):
        # 70 - 15 (HRV) - 10 (RHR) - 15 (sleep) - 10 (stress) = 20
        assert calculate_readiness(run_down) == 20

    def test_absolute_hrv_without_baseline(self):
        # 70 + 10, regressed -> 75
        assert calculate_readiness(BiometricsSnapshot(hrv_rmssd=65)) == 75

    def test_zero_baseline_uses_absolute_hrv(self):
        biometrics = BiometricsSnapshot(hrv_rmssd=35, hrv_baseline=0)
        assert readiness_adjustments(biometrics) == {"hrv": -10}

    def test_zero_balance_counts_as_present(self):
        adjustments = readiness_adjustments(BiometricsSnapshot(chronic_load=40, acute_load=40))
        assert adjustments == {"training_balance": 5}

    def test_custom_sleep_target(self):
        short_for_target = BiometricsSnapshot(sleep_duration_min=480, sleep_target_min=540)
        assert readiness_adjustments(short_for_target)["sleep_duration"] == 2

    def test_adjustments_in_factor_order(self, rested):
        assert list(readiness_adjustments(rested)) == [
            "hrv", "resting_hr", "sleep_duration", "sleep_score",
            "training_balance", "feeling", "stress",
        ]

    def test_accepts_dict(self):
        assert calculate_readiness({"feelingYesterday": "BAD"}) == 63

    def test_range(self, rested, run_down):
        for biometrics in (rested, run_down, BiometricsSnapshot()):
            assert 0 <= calculate_readiness(biometrics) <= 100


class TestStrainScore:
    """Tests for calculate_strain."""

    def test_tss_only(self):
        assert calculate_strain(StrainSession(tss=100)) == pytest.approx(14.0)
        assert calculate_strain(StrainSession(tss=50)) == pytest.approx(7.0)

    def test_tss_capped(self):
        assert calculate_strain(StrainSession(tss=300)) == 21.0

    def test_zones_only(self):
        session = StrainSession(duration_min=60, time_in_zones=TimeInZones(z2=60))
        assert calculate_strain(session) == pytest.approx(3.0)

    def test_blend_tss_and_zones(self):
        # 14 * 0.7 + (20 * 0.25) * 0.3 = 11.3
        session = StrainSession(tss=100, time_in_zones=TimeInZones(z4=20))
        assert calculate_strain(session) == pytest.approx(11.3)

    def test_long_easy_bonus(self):
        # 7 + (180 - 120) * 0.03 = 8.8
        assert calculate_strain(StrainSession(duration_min=180, tss=50)) == pytest.approx(8.8)

    def test_long_easy_bonus_capped(self):
        session = StrainSession(duration_min=600, tss=50)
        assert calculate_strain(session) == pytest.approx(15.0)

    def test_no_bonus_for_hard_sessions(self):
        assert calculate_strain(StrainSession(duration_min=180, tss=100)) == pytest.approx(14.0)

    def test_intensity_boost(self):
        session = StrainSession(tss=100, intensity_factor=1.0)
        assert calculate_strain(session) == pytest.approx(16.8)

    def test_intensity_below_threshold_ignored(self):
        session = StrainSession(tss=100, intensity_factor=0.85)
        assert calculate_strain(session) == pytest.approx(14.0)

    def test_clamped_after_boost(self):
        session = StrainSession(tss=200, intensity_factor=1.2)
        assert calculate_strain(session) == 21.0

    def test_empty_session(self):
        assert calculate_strain(StrainSession()) == 0.0

    def test_accepts_dict(self):
        assert calculate_strain({"duration_min": 60, "tss": 100}) == pytest.approx(14.0)


class TestRecoveryScore:
    """Tests for calculate_recovery."""

    def test_no_data_is_base(self):
        assert calculate_recovery(BiometricsSnapshot()) == 60

    def test_all_positive(self, rested):
        # 60 + 20 + 6 + 10 + 5 + 5 = 106 -> 100
        assert calculate_recovery(rested) == 100

    def test_sleep_score_linear(self):
        assert calculate_recovery(BiometricsSnapshot(sleep_score=60)) == 57

    def test_deep_sleep_fraction(self):
        low = BiometricsSnapshot(sleep_deep_min=30, sleep_duration_min=480)
        assert calculate_recovery(low) == 50

    def test_hard_yesterday(self):
        assert calculate_recovery(BiometricsSnapshot(yesterday_training_stress=160)) == 45
        assert calculate_recovery(BiometricsSnapshot(yesterday_training_stress=120)) == 52

    def test_low_spo2(self):
        assert calculate_recovery(BiometricsSnapshot(spo2=92)) == 50

    def test_run_down(self, run_down):
        # 60 - 15 (HRV) - 15 (TSS 160)
        assert calculate_recovery(run_down) == 30


class TestStressScore:
    """Tests for calculate_stress."""

    def test_no_data_is_base(self):
        assert calculate_stress(BiometricsSnapshot()) == 30

    def test_run_down_clamped(self, run_down):
        # 30 + 20 + 15 + 10 + 20 + 15 = 110 -> 100
        assert calculate_stress(run_down) == 100

    def test_low_stress(self):
        biometrics = BiometricsSnapshot(stress_level=1, respiratory_rate=11)
        assert calculate_stress(biometrics) == 5

    def test_short_sleep_boundary(self):
        # 75% of 480 is 360
        assert calculate_stress(BiometricsSnapshot(sleep_duration_min=360)) == 30
        assert calculate_stress(BiometricsSnapshot(sleep_duration_min=359)) == 45

    def test_elevated_hrv(self):
        assert calculate_stress(BiometricsSnapshot(hrv_rmssd=70, hrv_baseline=60)) == 35


class TestStatuses:
    """Tests for hrv/sleep/fatigue status classification."""

    def test_unknown_without_data(self):
        empty = BiometricsSnapshot()

        assert classify_hrv(empty) == HrvStatus.UNKNOWN
        assert classify_sleep(empty) == SleepStatus.UNKNOWN
        assert classify_fatigue(empty) == FatigueStatus.NORMAL

    def test_sleep_score_preferred_over_duration(self):
        biometrics = BiometricsSnapshot(sleep_score=55, sleep_duration_min=520)
        assert classify_sleep(biometrics) == SleepStatus.FAIR

    def test_sleep_from_duration(self):
        assert classify_sleep(BiometricsSnapshot(sleep_duration_min=440)) == SleepStatus.GOOD

    def test_fatigue_from_loads(self):
        assert classify_fatigue(BiometricsSnapshot(chronic_load=50, acute_load=80)) == FatigueStatus.OVERREACHING
        assert classify_fatigue(BiometricsSnapshot(chronic_load=60, acute_load=45)) == FatigueStatus.FRESH


class TestRecommendation:
    """Tests for the intensity recommendation ladder."""

    @pytest.mark.parametrize("readiness,intensity,adjustment", [
        (95, RecommendedIntensity.HIGH, 10),
        (80, RecommendedIntensity.HIGH, 10),
        (79, RecommendedIntensity.MODERATE, 0),
        (60, RecommendedIntensity.MODERATE, 0),
        (59, RecommendedIntensity.LOW, -20),
        (40, RecommendedIntensity.LOW, -20),
        (39, RecommendedIntensity.REST, -50),
    ])
    def test_ladder(self, readiness, intensity, adjustment):
        result = recommend_intensity(readiness, stress=30, recovery=60)
        assert result[:2] == (intensity, adjustment)

    def test_stress_warning(self):
        intensity, adjustment, message = recommend_intensity(85, stress=75, recovery=60)

        assert intensity == RecommendedIntensity.HIGH
        assert adjustment == -5
        assert message.endswith("Elevated stress level.")

    def test_recovery_warning(self):
        _, adjustment, message = recommend_intensity(65, stress=30, recovery=45)

        assert adjustment == -10
        assert "Incomplete recovery." in message

    def test_adjustment_clamped(self):
        _, adjustment, message = recommend_intensity(20, stress=90, recovery=20)

        assert adjustment == -50
        assert "Elevated stress level." in message
        assert "Incomplete recovery." in message


class TestAnalyzeReadiness:
    """Tests for the full readiness analysis."""

    def test_empty_snapshot(self):
        result = analyze_readiness(BiometricsSnapshot())

        assert result.readiness_score == 70
        assert result.recovery_score == 60
        assert result.stress_score == 30
        assert result.strain_score == 0.0
        assert result.hrv_status == HrvStatus.UNKNOWN
        assert result.sleep_status == SleepStatus.UNKNOWN
        assert result.fatigue_status == FatigueStatus.NORMAL
        assert result.recommended_intensity == RecommendedIntensity.MODERATE
        assert result.load_adjustment_pct == 0
        assert result.message == "Good readiness. Proceed with the planned session."

    def test_rested_athlete(self, rested):
        result = analyze_readiness(rested)

        assert result.readiness_score == 100
        assert result.recommended_intensity == RecommendedIntensity.HIGH
        assert result.load_adjustment_pct == 10
        assert result.hrv_status == HrvStatus.OPTIMAL
        assert result.sleep_status == SleepStatus.EXCELLENT
        assert result.fatigue_status == FatigueStatus.FRESH
        # Strain from yesterday's 40 TSS
        assert result.strain_score == pytest.approx(5.6)

    def test_run_down_athlete(self, run_down):
        result = analyze_readiness(run_down)

        assert result.readiness_score == 20
        assert result.stress_score == 100
        assert result.recovery_score == 30
        assert result.strain_score == 21.0
        assert result.recommended_intensity == RecommendedIntensity.REST
        assert result.load_adjustment_pct == -50
        assert result.hrv_status == HrvStatus.SUPPRESSED
        assert result.sleep_status == SleepStatus.POOR
        assert "Elevated stress level." in result.message
        assert "Incomplete recovery." in result.message

    def test_to_dict(self, rested):
        data = analyze_readiness(rested).to_dict()

        assert data["hrv_status"] == "optimal"
        assert data["recommended_intensity"] == "high"
        assert set(data) == {
            "readiness_score", "strain_score", "recovery_score", "stress_score",
            "hrv_status", "sleep_status", "fatigue_status",
            "recommended_intensity", "load_adjustment_pct", "message",
        }

    def test_idempotent(self, run_down):
        assert analyze_readiness(run_down) == analyze_readiness(run_down)

    def test_score_ranges(self, rested, run_down):
        for biometrics in (rested, run_down, BiometricsSnapshot()):
            result = analyze_readiness(biometrics)
            assert 0 <= result.readiness_score <= 100
            assert 0 <= result.recovery_score <= 100
            assert 0 <= result.stress_score <= 100
            assert 0 <= result.strain_score <= 21
            assert -50 <= result.load_adjustment_pct <= 15


class TestDailyStrain:
    """Tests for combining several sessions in one day."""

    def test_two_sessions(self):
        """Strains of 10 and 8 combine to 10 + 8 * 0.5 = 14."""
        assert combine_strains([10, 8]) == pytest.approx(14.0)
        assert combine_strains([8, 10]) == pytest.approx(14.0)

    def test_three_sessions(self):
        # 10 + 8 * 0.5 + 6 * 0.25
        assert combine_strains([6, 10, 8]) == pytest.approx(15.5)

    def test_capped(self):
        assert combine_strains([21, 21, 21]) == 21.0

    def test_empty(self):
        assert combine_strains([]) == 0.0
        assert calculate_daily_strain([]) == 0.0

    def test_from_sessions(self):
        sessions = [StrainSession(tss=100), {"tss": 50}]
        # 14 + 7 * 0.5
        assert calculate_daily_strain(sessions) == pytest.approx(17.5)

    def test_single_session_unchanged(self):
        session = StrainSession(tss=100, time_in_zones=TimeInZones(z4=20))
        assert calculate_daily_strain([session]) == calculate_strain(session)
