"""Session training-stress estimation (power TSS, HRSS, duration fallback)."""

import logging
from typing import Optional

from .power import calculate_tss

logger = logging.getLogger(__name__)


# Intensity factor assumed when nothing but duration is known (easy endurance)
DEFAULT_INTENSITY_FACTOR = 0.7


def calculate_hrss(
    duration_min: float,
    avg_hr: float,
    threshold_hr: float,
    max_hr: float,
    rest_hr: float,
) -> float:
    """
    Heart-rate stress score, on the TSS scale (1 h at threshold HR = 100).

    Average HR is placed on the heart-rate reserve, divided by where the
    threshold sits on that reserve, and squared like a power IF.

    Returns:
        HRSS to one decimal; 0.0 when max HR is not above resting HR
    """
    hr_reserve = max_hr - rest_hr
    if hr_reserve <= 0:
        return 0.0

    reserve_fraction = min(1.0, max(0.0, (avg_hr - rest_hr) / hr_reserve))
    threshold_fraction = (threshold_hr - rest_hr) / hr_reserve
    if threshold_fraction <= 0:
        # Threshold at or below rest: assume the usual 85% of reserve
        threshold_fraction = 0.85

    hr_intensity = reserve_fraction / threshold_fraction
    return round(duration_min / 60 * hr_intensity ** 2 * 100, 1)


def estimate_tss(
    duration_minutes: float,
    *,
    normalized_power: Optional[float] = None,
    ftp: Optional[float] = None,
    intensity_factor: Optional[float] = None,
    avg_hr: Optional[float] = None,
    threshold_hr: Optional[float] = None,
    max_hr: Optional[float] = None,
    rest_hr: Optional[float] = None,
) -> float:
    """
    Estimate training stress for a session from whatever data it has.

    Priority:
    1. Normalized power + FTP: power TSS
    2. Intensity factor + FTP: power TSS with NP = IF * FTP
    3. Average HR + threshold HR: HRSS with max/rest HR, otherwise
       duration * (hr/threshold)^2 * 100/60
    4. Duration only: assumes IF 0.7

    Args:
        duration_minutes: Session duration
        normalized_power: Normalized Power in watts
        ftp: Functional Threshold Power (or CP) in watts
        intensity_factor: IF reported by the device
        avg_hr: Average session heart rate
        threshold_hr: Lactate threshold heart rate
        max_hr: Maximum heart rate
        rest_hr: Resting heart rate

    Returns:
        Estimated TSS (0 for non-positive durations)
    """
    if not duration_minutes or duration_minutes <= 0:
        return 0.0

    if ftp and ftp > 0:
        if normalized_power and normalized_power > 0:
            return calculate_tss(duration_minutes * 60, normalized_power, ftp)
        if intensity_factor and intensity_factor > 0:
            return calculate_tss(duration_minutes * 60, intensity_factor * ftp, ftp, intensity_factor)

    if avg_hr and threshold_hr and avg_hr > 0 and threshold_hr > 0:
        if max_hr and rest_hr is not None and max_hr > rest_hr:
            return calculate_hrss(duration_minutes, avg_hr, threshold_hr, max_hr, rest_hr)
        hr_ratio = avg_hr / threshold_hr
        return round(duration_minutes * hr_ratio ** 2 * 100 / 60, 1)

    logger.debug(f"Estimating TSS from duration only ({duration_minutes} min)")
    return round(duration_minutes * DEFAULT_INTENSITY_FACTOR ** 2 * 100 / 60, 1)
