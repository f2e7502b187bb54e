"""
Threshold ladders used by the readiness, recovery and stress scores.

Each ladder is an ordered tuple of rules; the first rule whose predicate
matches the input value supplies the adjustment. Ladders with no matching
rule contribute nothing, so gaps (e.g. a resting HR 1-2 bpm above baseline)
are neutral.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from ..models.biometrics import Feeling


@dataclass(frozen=True)
class ScoreRule:
    """One rung of a scoring ladder."""

    predicate: Callable[[float], bool]
    delta: float
    description: str = ""

    def matches(self, value: float) -> bool:
        return self.predicate(value)


@dataclass(frozen=True)
class StatusRule:
    """One rung of a classification ladder."""

    predicate: Callable[[float], bool]
    status: str


def apply_rules(rules: Sequence[ScoreRule], value: float) -> float:
    """Return the delta of the first matching rule, or 0.0 when none match."""
    rule = first_match(rules, value)
    return rule.delta if rule else 0.0


def first_match(rules: Sequence[ScoreRule], value: float) -> Optional[ScoreRule]:
    for rule in rules:
        if rule.matches(value):
            return rule
    return None


def classify(rules: Sequence[StatusRule], value: float, default: str) -> str:
    """Return the status of the first matching rule, else `default`."""
    for rule in rules:
        if rule.predicate(value):
            return rule.status
    return default


# ---------------------------------------------------------------------------
# Readiness (base 70)
# ---------------------------------------------------------------------------

# hrv / baseline
READINESS_HRV_RATIO: Tuple[ScoreRule, ...] = (
    ScoreRule(lambda r: 0.9 <= r <= 1.1, 15, "HRV at baseline"),
    ScoreRule(lambda r: 0.8 <= r <= 1.2, 5, "HRV near baseline"),
    ScoreRule(lambda r: r < 0.8, -15, "HRV suppressed"),
    ScoreRule(lambda r: True, -5, "HRV elevated"),
)

# Absolute RMSSD (ms) when no baseline is known
READINESS_HRV_ABSOLUTE: Tuple[ScoreRule, ...] = (
    ScoreRule(lambda v: 50 <= v <= 80, 10, "HRV in healthy range"),
    ScoreRule(lambda v: v < 40, -10, "HRV low"),
)

# resting HR - baseline (bpm)
READINESS_RESTING_HR: Tuple[ScoreRule, ...] = (
    ScoreRule(lambda d: d <= -3, 10, "Resting HR well below baseline"),
    ScoreRule(lambda d: d <= 0, 5, "Resting HR at baseline"),
    ScoreRule(lambda d: d >= 5, -10, "Resting HR elevated"),
    ScoreRule(lambda d: d >= 3, -5, "Resting HR slightly elevated"),
)

# sleep duration / target
READINESS_SLEEP_DURATION: Tuple[ScoreRule, ...] = (
    ScoreRule(lambda r: r >= 1.0, 12, "Sleep target met"),
    ScoreRule(lambda r: r >= 0.9, 8, "Nearly full sleep"),
    ScoreRule(lambda r: r >= 0.8, 2, "Slightly short sleep"),
    ScoreRule(lambda r: r < 0.7, -15, "Severely short sleep"),
    ScoreRule(lambda r: True, -8, "Short sleep"),
)

READINESS_SLEEP_SCORE: Tuple[ScoreRule, ...] = (
    ScoreRule(lambda s: s >= 85, 5, "Excellent sleep score"),
    ScoreRule(lambda s: s >= 70, 2, "Good sleep score"),
    ScoreRule(lambda s: s < 50, -8, "Poor sleep score"),
)

# TSB = chronic - acute load
READINESS_TRAINING_BALANCE: Tuple[ScoreRule, ...] = (
    ScoreRule(lambda t: t >= 10, 10, "Fresh"),
    ScoreRule(lambda t: t >= 0, 5, "Positive form"),
    ScoreRule(lambda t: t >= -10, 0, "Productive training"),
    ScoreRule(lambda t: t >= -20, -5, "Accumulated fatigue"),
    ScoreRule(lambda t: True, -15, "Deep fatigue"),
)

READINESS_FEELING = {
    Feeling.GREAT: 10,
    Feeling.GOOD: 5,
    Feeling.OK: 0,
    Feeling.TIRED: -8,
    Feeling.BAD: -15,
}

# Subjective stress 1-10
READINESS_STRESS_LEVEL: Tuple[ScoreRule, ...] = (
    ScoreRule(lambda s: s <= 3, 5, "Low life stress"),
    ScoreRule(lambda s: s >= 7, -10, "High life stress"),
    ScoreRule(lambda s: s >= 5, -3, "Moderate life stress"),
)


# ---------------------------------------------------------------------------
# Recovery (base 60)
# ---------------------------------------------------------------------------

RECOVERY_HRV_RATIO: Tuple[ScoreRule, ...] = (
    ScoreRule(lambda r: r >= 1.0, 20),
    ScoreRule(lambda r: r >= 0.9, 10),
    ScoreRule(lambda r: r < 0.8, -15),
)

# deep sleep / total sleep
RECOVERY_DEEP_SLEEP: Tuple[ScoreRule, ...] = (
    ScoreRule(lambda f: f >= 0.2, 10),
    ScoreRule(lambda f: f < 0.1, -10),
)

RECOVERY_SPO2: Tuple[ScoreRule, ...] = (
    ScoreRule(lambda s: s >= 97, 5),
    ScoreRule(lambda s: s < 94, -10),
)

RECOVERY_YESTERDAY_TSS: Tuple[ScoreRule, ...] = (
    ScoreRule(lambda t: t > 150, -15),
    ScoreRule(lambda t: t > 100, -8),
    ScoreRule(lambda t: t < 50, 5),
)


# ---------------------------------------------------------------------------
# Stress (base 30)
# ---------------------------------------------------------------------------

STRESS_HRV_RATIO: Tuple[ScoreRule, ...] = (
    ScoreRule(lambda r: r < 0.8, 20),
    ScoreRule(lambda r: r < 0.9, 10),
    ScoreRule(lambda r: r > 1.1, 5),
)

STRESS_RESTING_HR: Tuple[ScoreRule, ...] = (
    ScoreRule(lambda d: d >= 5, 15),
    ScoreRule(lambda d: d >= 3, 8),
)

# breaths per minute
STRESS_RESPIRATORY_RATE: Tuple[ScoreRule, ...] = (
    ScoreRule(lambda r: r > 16, 10),
    ScoreRule(lambda r: r < 12, -5),
)

STRESS_SHORT_SLEEP_FRACTION = 0.75
STRESS_SHORT_SLEEP_DELTA = 15


# ---------------------------------------------------------------------------
# Status classification
# ---------------------------------------------------------------------------

HRV_STATUS: Tuple[StatusRule, ...] = (
    StatusRule(lambda r: 0.9 <= r <= 1.1, "optimal"),
    StatusRule(lambda r: r > 1.1, "elevated"),
    StatusRule(lambda r: True, "suppressed"),
)

SLEEP_SCORE_STATUS: Tuple[StatusRule, ...] = (
    StatusRule(lambda s: s >= 85, "excellent"),
    StatusRule(lambda s: s >= 70, "good"),
    StatusRule(lambda s: s >= 50, "fair"),
    StatusRule(lambda s: True, "poor"),
)

SLEEP_DURATION_STATUS: Tuple[StatusRule, ...] = (
    StatusRule(lambda r: r >= 1.0, "excellent"),
    StatusRule(lambda r: r >= 0.9, "good"),
    StatusRule(lambda r: r >= 0.75, "fair"),
    StatusRule(lambda r: True, "poor"),
)

FATIGUE_STATUS: Tuple[StatusRule, ...] = (
    StatusRule(lambda t: t >= 10, "fresh"),
    StatusRule(lambda t: t >= -10, "normal"),
    StatusRule(lambda t: t >= -25, "fatigued"),
    StatusRule(lambda t: True, "overreaching"),
)
