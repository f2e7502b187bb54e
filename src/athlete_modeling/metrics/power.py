"""Power-derived session metrics: intensity factor, TSS and W/kg."""

from typing import Optional

# Seconds in the reference hour that scores 100 TSS at threshold
REFERENCE_HOUR_SEC = 3600


def calculate_intensity_factor(normalized_power: float, ftp: float) -> float:
    """
    Intensity Factor: normalized power relative to threshold (NP / FTP).

    CP can stand in for FTP. Returns 0.0 without a usable threshold.
    """
    if ftp <= 0:
        return 0.0
    return round(normalized_power / ftp, 3)


def calculate_tss(
    duration_sec: float,
    normalized_power: float,
    ftp: float,
    intensity_factor: Optional[float] = None,
) -> float:
    """
    Training Stress Score of a ride from its normalized power.

    One hour held exactly at threshold scores 100:
        TSS = duration_sec * NP * IF / (FTP * 3600) * 100

    Args:
        duration_sec: Moving time in seconds
        normalized_power: Normalized power in watts
        ftp: Threshold power in watts
        intensity_factor: Precomputed IF; derived from NP / FTP when omitted

    Returns:
        TSS rounded to one decimal (0.0 for empty rides or no threshold)
    """
    if ftp <= 0 or duration_sec <= 0:
        return 0.0

    if intensity_factor is None:
        intensity_factor = calculate_intensity_factor(normalized_power, ftp)

    work_ratio = duration_sec * normalized_power * intensity_factor
    return round(work_ratio / (ftp * REFERENCE_HOUR_SEC) * 100, 1)


def calculate_power_to_weight(power: float, weight_kg: float) -> Optional[float]:
    """W/kg to two decimals, or None when the weight is unknown."""
    if weight_kg <= 0:
        return None
    return round(power / weight_kg, 2)
