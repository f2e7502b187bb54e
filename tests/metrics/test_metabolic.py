"""Tests for the metabolic profiler."""

import pytest

from athlete_modeling.exceptions import ErrorCode, InsufficientDataError
from athlete_modeling.metrics.metabolic import (
    MetabolicModel,
    calculate_energy_split,
    calculate_lt1_fraction,
    classify_vlamax,
    estimate_critical_power,
    fit_metabolic_model,
)
from athlete_modeling.models import BodyComposition, ManualOverride, PowerDurationPoint


def _points(curve):
    return [PowerDurationPoint(duration_seconds=d, power_watts=p) for d, p in curve.items()]


class TestFittedModel:
    """Tests for fitting the model from a power-duration curve."""

    def test_reference_curve(self, power_curve, body):
        """One long effort falls back to 95% of the 20-min power."""
        model = fit_metabolic_model(power_curve, body)

        assert model.mode == "fitted"
        assert model.points_used == 5
        assert model.critical_power_watts == pytest.approx(266.0)
        assert model.lean_body_mass_kg == pytest.approx(60.68)

    def test_reference_curve_capacities(self, power_curve, body):
        model = fit_metabolic_model(power_curve, body)

        # Only the 5" effort is short: capacity from the CP multiplier
        assert model.w_alactic_joules == pytest.approx(266 * 25)
        assert model.tau_alactic_seconds == 10.0
        # 1' and 3' average 450 W
        assert model.w_lactic_joules == pytest.approx((450 - 266) * 180)
        assert model.peak_glycolytic_power_watts == pytest.approx(184.0)

    def test_reference_curve_thresholds(self, power_curve, body):
        model = fit_metabolic_model(power_curve, body)

        assert model.vlamax == 1.5
        assert model.vlamax_class == "sprint/lactic"
        assert model.fat_max_watts == pytest.approx(266 * 0.70)
        assert model.lt1_watts == pytest.approx(266 * 0.72)
        assert model.lt2_watts == pytest.approx(266.0)

    def test_energy_split_sums_to_about_100(self, power_curve, body):
        split = fit_metabolic_model(power_curve, body).energy_system_split

        assert split.aerobic_pct == 96
        assert 99 <= split.aerobic_pct + split.alactic_pct + split.lactic_pct <= 101

    def test_full_protocol(self, full_power_curve, body):
        """With 2+ efforts >= 12 min CP is their mean, capped at 95% of 20'."""
        model = fit_metabolic_model(full_power_curve, body)

        # mean(305, 290) = 297.5 exceeds 0.95 * 290 = 275.5
        assert model.critical_power_watts == pytest.approx(275.5)
        assert model.w_alactic_joules == pytest.approx((1050 - 275.5) * 15)

    def test_cp_never_exceeds_95_percent_of_20min(self, full_power_curve, body):
        model = fit_metabolic_model(full_power_curve, body)
        assert model.critical_power_watts <= 0.95 * 290 + 1e-9

    def test_floors_applied(self, body):
        """A very weak curve still yields minimum capacities."""
        points = _points({5: 120, 10: 115, 60: 110, 120: 105, 360: 95})
        model = fit_metabolic_model(points, body)

        assert model.critical_power_watts == 100.0
        assert model.w_alactic_joules == 1000.0
        assert model.w_lactic_joules == 5000.0

    def test_no_sustained_effort_uses_cp_floor(self, body):
        points = _points({5: 900, 10: 850, 20: 700, 30: 600, 60: 450})
        model = fit_metabolic_model(points, body)
        assert model.critical_power_watts == 100.0

    def test_untested_points_ignored(self, power_curve, body):
        padded = power_curve + [
            PowerDurationPoint(duration_seconds=10),
            PowerDurationPoint(duration_seconds=720, power_watts=0),
        ]
        model = fit_metabolic_model(padded, body)

        assert model.points_used == 5
        assert model.critical_power_watts == pytest.approx(266.0)

    def test_tiny_lean_mass_gives_max_vlamax(self, power_curve):
        body = BodyComposition(weight_kg=70, body_fat_pct=100)
        # Body fat is clamped to 99%, so lean mass stays positive
        assert body.lean_body_mass_kg > 0
        model = fit_metabolic_model(power_curve, body)
        assert model.vlamax == 1.5

    def test_custom_tau_lactic(self, power_curve, body):
        model = fit_metabolic_model(power_curve, body, tau_lactic=45)

        assert model.tau_lactic_seconds == 45
        assert model.peak_glycolytic_power_watts == pytest.approx((450 - 266) * 180 / 45)

    def test_custom_alactic_factor(self, full_power_curve, body):
        model = fit_metabolic_model(full_power_curve, body, alactic_capacity_factor=6)
        assert model.w_alactic_joules == pytest.approx((1050 - 275.5) * 6)

    def test_cp_w_per_kg(self, power_curve, body):
        model = fit_metabolic_model(power_curve, body)
        assert model.cp_w_per_kg == pytest.approx(266 / 74, abs=0.01)

    def test_manual_override_ignored_when_fitted(self, power_curve, body):
        manual = ManualOverride(critical_power_watts=300, vlamax=0.3)
        model = fit_metabolic_model(power_curve, body, manual)

        assert model.mode == "fitted"
        assert model.critical_power_watts == pytest.approx(266.0)

    def test_dict_points(self, power_curve, body):
        """Raw rows fit the same model as parsed points."""
        rows = [{"duration": p.duration_seconds, "power": p.power_watts} for p in power_curve]

        assert fit_metabolic_model(rows, body) == fit_metabolic_model(power_curve, body)

    def test_unreadable_rows_skipped(self, power_curve, body):
        rows = list(power_curve) + [{"duration": 0, "power": 500}, "not a point"]

        model = fit_metabolic_model(rows, body)
        assert model.points_used == 5


class TestManualModel:
    """Tests for the manual (coach-entered) mode."""

    def test_manual_cp(self, body):
        manual = ManualOverride(critical_power_watts=250)
        model = fit_metabolic_model([], body, manual)

        assert model.mode == "manual"
        assert model.critical_power_watts == 250
        assert model.w_alactic_joules == 250 * 25
        assert model.w_lactic_joules == 250 * 180
        assert model.tau_lactic_seconds == 180
        assert model.vlamax == 0.5

    def test_manual_vlamax(self, body):
        model = fit_metabolic_model([], body, ManualOverride(critical_power_watts=250, vlamax=0.35))

        assert model.vlamax == 0.35
        assert model.lt1_watts == pytest.approx(250 * 0.82)

    def test_manual_vlamax_clamped(self, body):
        high = fit_metabolic_model([], body, ManualOverride(critical_power_watts=250, vlamax=3.0))
        low = fit_metabolic_model([], body, ManualOverride(critical_power_watts=250, vlamax=0.05))

        assert high.vlamax == 1.5
        assert low.vlamax == 0.2

    def test_manual_with_sparse_points(self, body):
        points = _points({5: 900, 60: 500, 1200: 260})
        model = fit_metabolic_model(points, body, ManualOverride(critical_power_watts=240))

        assert model.mode == "manual"
        assert model.points_used == 3

    def test_non_positive_manual_cp_is_absent(self, body):
        with pytest.raises(InsufficientDataError):
            fit_metabolic_model([], body, ManualOverride(critical_power_watts=-10))


class TestInsufficientData:
    """Tests for the error raised when no model can be built."""

    def test_raises_without_points_or_manual(self, body):
        points = _points({5: 900, 60: 500, 1200: 260})
        with pytest.raises(InsufficientDataError) as exc_info:
            fit_metabolic_model(points, body)

        err = exc_info.value
        assert err.code == ErrorCode.INSUFFICIENT_DATA
        assert err.details["populated_points"] == 3
        assert "at least 5 power-duration test points" in str(err)

    def test_error_serializes(self, body):
        with pytest.raises(InsufficientDataError) as exc_info:
            fit_metabolic_model([], body)

        data = exc_info.value.to_dict()
        assert data["error"]["code"] == "INSUFFICIENT_DATA"
        assert data["error"]["details"]["required_points"] == 5


class TestVlamaxRange:
    """VLaMax stays in [0.2, 1.5] for any input."""

    @pytest.mark.parametrize("weight,fat", [(40, 5), (74, 18), (120, 35), (55, 60)])
    def test_fitted_vlamax_in_range(self, power_curve, weight, fat):
        model = fit_metabolic_model(power_curve, BodyComposition(weight_kg=weight, body_fat_pct=fat))
        assert 0.2 <= model.vlamax <= 1.5

    def test_low_glycolytic_capacity(self, body):
        """A flat curve gives the minimum lactic capacity."""
        points = _points({5: 400, 20: 390, 60: 300, 180: 290, 720: 300, 1200: 290})
        model = fit_metabolic_model(points, body)

        assert model.w_lactic_joules == 5000.0
        assert model.vlamax == pytest.approx(5000 / 180 / (60.68 * 0.5))
        assert model.vlamax_class == "anaerobic"


class TestCriticalPowerEstimate:
    """Tests for the CP estimation ladder."""

    def test_two_long_efforts_averaged(self):
        points = _points({720: 300, 900: 290})
        assert estimate_critical_power(points) == pytest.approx(295.0)

    def test_single_20min_effort(self):
        assert estimate_critical_power(_points({1200: 300})) == pytest.approx(285.0)

    def test_weakest_sustained_effort(self):
        points = _points({360: 350, 480: 330})
        assert estimate_critical_power(points) == pytest.approx(297.0)

    def test_no_sustained_effort(self):
        assert estimate_critical_power(_points({5: 900, 60: 500})) == 0.0


class TestLt1Fraction:
    """Tests for LT1 as a fraction of CP."""

    def test_endpoints(self):
        assert calculate_lt1_fraction(0.3) == 0.82
        assert calculate_lt1_fraction(0.4) == 0.82
        assert calculate_lt1_fraction(0.6) == 0.72
        assert calculate_lt1_fraction(1.2) == 0.72

    def test_interpolation(self):
        assert calculate_lt1_fraction(0.5) == pytest.approx(0.77)

    def test_monotonic(self):
        fractions = [calculate_lt1_fraction(v / 100) for v in range(20, 151, 5)]
        assert fractions == sorted(fractions, reverse=True)


class TestClassification:
    """Tests for VLaMax labels."""

    @pytest.mark.parametrize("vlamax,label", [
        (0.2, "pure endurance"),
        (0.39, "pure endurance"),
        (0.4, "strong endurance"),
        (0.6, "all-round"),
        (0.8, "anaerobic"),
        (1.0, "sprint/lactic"),
        (1.5, "sprint/lactic"),
    ])
    def test_classify_vlamax(self, vlamax, label):
        assert classify_vlamax(vlamax) == label


class TestEnergySplit:
    """Tests for the energy-system split."""

    def test_split_percentages(self):
        split = calculate_energy_split(cp=250, w_alactic=20000, w_lactic=80000)
        total = 250 * 3600 + 100000

        assert split.aerobic_pct == round(250 * 3600 / total * 100)
        assert split.lactic_pct == 8
        assert split.alactic_pct == 2

    def test_zero_capacity(self):
        split = calculate_energy_split(0, 0, 0)
        assert (split.aerobic_pct, split.alactic_pct, split.lactic_pct) == (0, 0, 0)


class TestModelSerialization:
    """Tests for MetabolicModel.to_dict and immutability."""

    def test_to_dict_rounds(self, power_curve, body):
        data = fit_metabolic_model(power_curve, body).to_dict()

        assert data["critical_power_watts"] == 266
        assert data["lt1_watts"] == 192  # 191.52
        assert data["fat_max_watts"] == 186  # 186.2
        assert data["lean_body_mass_kg"] == 60.7
        assert data["vlamax"] == 1.5
        assert data["energy_system_split"]["aerobic_pct"] == 96

    def test_model_is_frozen(self, power_curve, body):
        model = fit_metabolic_model(power_curve, body)
        with pytest.raises(AttributeError):
            model.critical_power_watts = 300

    def test_idempotent(self, power_curve, body):
        first = fit_metabolic_model(power_curve, body)
        second = fit_metabolic_model(power_curve, body)

        assert isinstance(first, MetabolicModel)
        assert first == second
