"""Fitness-Fatigue model calculations (CTL, ATL, TSB, ACWR, ramp rate)."""

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pydantic

from ..config import get_settings
from ..exceptions import ValidationError
from ..models.training import TrainingSession
from ..utils.numbers import non_negative_or_zero, round_half_up

logger = logging.getLogger(__name__)


# Below this CTL the acute:chronic ratio is meaningless
MIN_CTL_FOR_ACWR = 10.0


@dataclass(frozen=True)
class DailyLoadPoint:
    """Daily fitness metrics from the Fitness-Fatigue model."""

    date: date
    daily_training_stress: float  # summed TSS for the day
    chronic_load: float  # CTL (fitness) - 42 day EWMA
    acute_load: float  # ATL (fatigue) - 7 day EWMA
    balance: float  # TSB (form) = CTL - ATL
    acwr: float  # Acute:Chronic Workload Ratio
    risk_zone: str  # 'optimal', 'caution', 'danger', 'undertrained'

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "date": self.date.isoformat(),
            "daily_training_stress": round_half_up(self.daily_training_stress, 1),
            "ctl": round_half_up(self.chronic_load, 1),
            "atl": round_half_up(self.acute_load, 1),
            "tsb": round_half_up(self.balance, 1),
            "acwr": round_half_up(self.acwr, 2),
            "risk_zone": self.risk_zone,
        }


@dataclass(frozen=True)
class LoadSummary:
    """
    Summary of the requested analysis window.

    avg_tss is the mean over days that had training stress (rest days are
    excluded), matching how coaches read "average session load".
    """

    current_ctl: float = 0.0
    current_atl: float = 0.0
    current_tsb: float = 0.0
    ramp_rate: float = 0.0  # CTL points per week
    total_tss: float = 0.0
    avg_tss: float = 0.0
    peak_tss: float = 0.0
    total_hours: float = 0.0
    active_days: int = 0

    def to_dict(self) -> dict:
        return {
            "current_ctl": round_half_up(self.current_ctl, 1),
            "current_atl": round_half_up(self.current_atl, 1),
            "current_tsb": round_half_up(self.current_tsb, 1),
            "ramp_rate": round_half_up(self.ramp_rate, 1),
            "total_tss": round_half_up(self.total_tss, 1),
            "avg_tss": round_half_up(self.avg_tss, 1),
            "peak_tss": round_half_up(self.peak_tss, 1),
            "total_hours": round_half_up(self.total_hours, 1),
            "active_days": self.active_days,
        }


@dataclass(frozen=True)
class TrainingLoadResult:
    """Daily series for the window plus its summary."""

    window_days: int
    points: Tuple[DailyLoadPoint, ...] = field(default_factory=tuple)
    summary: LoadSummary = field(default_factory=LoadSummary)

    def to_dict(self) -> dict:
        return {
            "window_days": self.window_days,
            "daily": [p.to_dict() for p in self.points],
            "summary": self.summary.to_dict(),
        }


def calculate_ewma(
    current_value: float,
    previous_ewma: float,
    time_constant: int,
) -> float:
    """
    Advance an exponentially weighted average by one day.

    EWMA_today = EWMA_yesterday + (load_today - EWMA_yesterday) * (1 - e^(-1/tau))

    Args:
        current_value: Today's training stress
        previous_ewma: Yesterday's value of the average
        time_constant: tau in days (42 for CTL, 7 for ATL)
    """
    factor = 1 - math.exp(-1 / time_constant)
    return previous_ewma + (current_value - previous_ewma) * factor


# (inclusive upper ACWR bound, zone); Gabbett's sweet spot is 0.8-1.3
RISK_ZONES = (
    (1.3, "optimal"),
    (1.5, "caution"),
    (math.inf, "danger"),
)


def determine_risk_zone(acwr: float) -> str:
    """Injury-risk zone for an acute:chronic workload ratio."""
    if acwr < 0.8:
        return "undertrained"
    return next(zone for upper, zone in RISK_ZONES if acwr <= upper)


def calculate_acwr(ctl: float, atl: float) -> float:
    """ATL / CTL, or 1.0 (neutral) when there is too little training history."""
    if ctl > MIN_CTL_FOR_ACWR:
        return atl / ctl
    return 1.0


def _as_session(session: Any) -> TrainingSession:
    if isinstance(session, TrainingSession):
        return session
    return TrainingSession.model_validate(session)


def aggregate_daily_sessions(
    sessions: Iterable[Any],
    today: Optional[date] = None,
) -> Dict[date, Tuple[float, float]]:
    """
    Sum stress and duration per calendar day.

    Args:
        sessions: TrainingSession instances or dicts, any order; rows that
            cannot be read (e.g. missing or malformed date) are skipped
        today: Sessions after this date are ignored

    Returns:
        {date: (total_stress, total_minutes)}
    """
    daily: Dict[date, List[float]] = defaultdict(lambda: [0.0, 0.0])
    for raw in sessions:
        try:
            session = _as_session(raw)
        except pydantic.ValidationError as e:
            logger.warning(f"Skipping invalid session {raw!r}: {e.error_count()} error(s)")
            continue
        if today is not None and session.date > today:
            logger.debug(f"Ignoring session dated after {today}: {session.date}")
            continue
        daily[session.date][0] += session.training_stress
        daily[session.date][1] += session.duration_minutes
    return {day: (totals[0], totals[1]) for day, totals in daily.items()}


def calculate_training_load(
    sessions: Iterable[Any],
    window_days: int,
    today: date,
    *,
    initial_ctl: float = 0.0,
    initial_atl: float = 0.0,
    ctl_time_constant: Optional[int] = None,
    atl_time_constant: Optional[int] = None,
) -> TrainingLoadResult:
    """
    Calculate the CTL/ATL/TSB series and summary for an analysis window.

    The Fitness-Fatigue (Banister) model uses two exponential moving averages:
    - CTL (Chronic Training Load): 42-day EWMA representing "fitness"
    - ATL (Acute Training Load): 7-day EWMA representing "fatigue"
    - TSB (Training Stress Balance): CTL - ATL representing "form"

    Every calendar day from the earliest session (or the window start, if
    earlier) through `today` is walked so rest days decay both loads.

    Args:
        sessions: Session history, need not be sorted; same-day sessions
            are summed
        window_days: Days to report (e.g. 7, 30, 90, 180, 365); the series
            covers today - window_days .. today inclusive
        today: Last day of the window; passed in, never read from the clock
        initial_ctl: CTL on the day before the first walked day (negative or
            non-finite seeds start from 0)
        initial_atl: ATL on the day before the first walked day (same rule)
        ctl_time_constant: Days for CTL (default from settings, 42)
        atl_time_constant: Days for ATL (default from settings, 7)

    Returns:
        TrainingLoadResult with window_days + 1 daily points

    Raises:
        ValidationError: window_days < 1
    """
    if window_days < 1:
        raise ValidationError("Analysis window must be at least 1 day", field="window_days")

    settings = get_settings()
    ctl_tc = ctl_time_constant or settings.ctl_time_constant
    atl_tc = atl_time_constant or settings.atl_time_constant

    if isinstance(today, datetime):
        today = today.date()

    daily = aggregate_daily_sessions(sessions, today)
    window_start = today - timedelta(days=window_days)
    start = min([window_start, *daily.keys()])

    # Loads are never negative, whatever the seed
    ctl = non_negative_or_zero(initial_ctl)
    atl = non_negative_or_zero(initial_atl)
    points: List[DailyLoadPoint] = []

    day = start
    while day <= today:
        stress, _ = daily.get(day, (0.0, 0.0))
        ctl = calculate_ewma(stress, ctl, ctl_tc)
        atl = calculate_ewma(stress, atl, atl_tc)

        if day >= window_start:
            acwr = calculate_acwr(ctl, atl)
            points.append(
                DailyLoadPoint(
                    date=day,
                    daily_training_stress=stress,
                    chronic_load=ctl,
                    acute_load=atl,
                    balance=ctl - atl,
                    acwr=acwr,
                    risk_zone=determine_risk_zone(acwr),
                )
            )
        day += timedelta(days=1)

    return TrainingLoadResult(
        window_days=window_days,
        points=tuple(points),
        summary=summarize_window(points, daily, window_days),
    )


def summarize_window(
    points: List[DailyLoadPoint],
    daily: Dict[date, Tuple[float, float]],
    window_days: int,
) -> LoadSummary:
    """Build window statistics and the weekly CTL ramp rate."""
    if not points:
        return LoadSummary()

    stresses = [p.daily_training_stress for p in points]
    active = [s for s in stresses if s > 0]
    total_minutes = sum(daily.get(p.date, (0.0, 0.0))[1] for p in points)
    first, last = points[0], points[-1]

    return LoadSummary(
        current_ctl=last.chronic_load,
        current_atl=last.acute_load,
        current_tsb=last.balance,
        ramp_rate=(last.chronic_load - first.chronic_load) / (window_days / 7),
        total_tss=sum(stresses),
        avg_tss=sum(active) / len(active) if active else 0.0,
        peak_tss=max(stresses),
        total_hours=total_minutes / 60,
        active_days=len(active),
    )


RISK_GUIDANCE = {
    "danger": "High injury risk. Cut the load back hard for a few days.",
    "caution": "Elevated injury risk. Swap today for an easy session or rest.",
    "undertrained": "Training load low. There is room to add volume or intensity.",
}

# (exclusive lower TSB bound, guidance) checked top-down once ACWR is optimal
FORM_GUIDANCE = (
    (25, "Fresh and recovered. A good day for a key workout."),
    (0, "Positive form. A solid session is fine."),
    (-10, "Slightly fatigued. Keep the intensity moderate."),
    (-25, "Fatigued. Stick to easy training."),
    (-math.inf, "Very fatigued. Rest or keep it very easy."),
)


def get_training_recommendation(tsb: float, acwr: float) -> str:
    """
    One-line guidance from current form and injury risk.

    Risk outside the optimal ACWR band takes precedence over form.

    Args:
        tsb: Training Stress Balance
        acwr: Acute:Chronic Workload Ratio
    """
    zone = determine_risk_zone(acwr)
    if zone in RISK_GUIDANCE:
        return RISK_GUIDANCE[zone]
    return next(text for lower, text in FORM_GUIDANCE if tsb > lower)
