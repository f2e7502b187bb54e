"""Metabolic training zones with per-zone substrate consumption."""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..config import get_settings
from ..utils.numbers import round_half_up
from .metabolic import MetabolicModel

logger = logging.getLogger(__name__)


# kcal of metabolic energy per watt-hour of mechanical work is 0.86 / GE
KCAL_PER_WATT_HOUR = 0.86
KCAL_PER_GRAM_CHO = 4.0
KCAL_PER_GRAM_FAT = 9.0
KCAL_PER_GRAM_PRO = 4.0


@dataclass(frozen=True)
class SubstrateRatios:
    """Fraction of energy from carbohydrate, fat and protein (sums to 1)."""

    cho: float
    fat: float
    pro: float

    def to_dict(self) -> Dict[str, float]:
        return {"cho": self.cho, "fat": self.fat, "pro": self.pro}


@dataclass(frozen=True)
class ZoneConsumption:
    """Hourly energy and substrate use at the zone's representative power."""

    kcal_per_hour: float
    cho_g_per_hour: float
    fat_g_per_hour: float
    pro_g_per_hour: float

    def to_dict(self) -> Dict[str, int]:
        return {
            "kcal_per_hour": int(round_half_up(self.kcal_per_hour)),
            "cho_g_per_hour": int(round_half_up(self.cho_g_per_hour)),
            "fat_g_per_hour": int(round_half_up(self.fat_g_per_hour)),
            "pro_g_per_hour": int(round_half_up(self.pro_g_per_hour)),
        }


@dataclass(frozen=True)
class Zone:
    """
    A power zone (or a point marker such as LT1) expressed against CP.

    power_range and consumption keep full precision; to_dict() rounds
    them to whole numbers for display.
    """

    id: str
    name: str
    power_range: Tuple[float, float]
    percent_of_cp: Tuple[float, float]
    substrate_ratios: SubstrateRatios
    consumption: ZoneConsumption

    @property
    def min_watts(self) -> float:
        return self.power_range[0]

    @property
    def max_watts(self) -> float:
        return self.power_range[1]

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "min_watts": int(round_half_up(self.min_watts)),
            "max_watts": int(round_half_up(self.max_watts)),
            "percent_of_cp": {
                "min": round_half_up(self.percent_of_cp[0], 1),
                "max": round_half_up(self.percent_of_cp[1], 1),
            },
            "substrates": self.substrate_ratios.to_dict(),
            "consumption": self.consumption.to_dict(),
        }


# (id, name, CP fraction min, CP fraction max, cho, fat, pro)
ZONE_DEFINITIONS = [
    ("Z1", "Recovery", 0.00, 0.70, 0.40, 0.60, 0.00),
    ("Z2", "Endurance", 0.70, 0.76, 0.60, 0.40, 0.00),
    ("Z3", "Tempo", 0.88, 0.92, 0.80, 0.20, 0.00),
    ("Z4", "Threshold", 0.98, 1.02, 0.90, 0.08, 0.02),
    ("Z5", "VO2max", 1.10, 1.20, 0.98, 0.00, 0.02),
    ("Z6", "Anaerobic", 1.25, 1.80, 1.00, 0.00, 0.00),
    ("Z7", "Neuromuscular", 1.80, 3.00, 1.00, 0.00, 0.00),
]

FATMAX_SUBSTRATES = SubstrateRatios(cho=0.45, fat=0.55, pro=0.0)
LT1_SUBSTRATES = SubstrateRatios(cho=0.60, fat=0.40, pro=0.0)
LT2_SUBSTRATES = SubstrateRatios(cho=0.90, fat=0.08, pro=0.02)


def resolve_gross_efficiency(gross_efficiency: Optional[float] = None) -> float:
    """
    Return a usable gross efficiency.

    None uses the configured default; values outside (0, 1] are replaced by
    the default with a warning.
    """
    default = get_settings().gross_efficiency
    if gross_efficiency is None:
        return default
    if not math.isfinite(gross_efficiency) or not 0 < gross_efficiency <= 1:
        logger.warning(f"Invalid gross efficiency {gross_efficiency!r}, using {default}")
        return default
    return gross_efficiency


def calculate_consumption(
    power_watts: float,
    substrates: SubstrateRatios,
    gross_efficiency: float,
) -> ZoneConsumption:
    """
    Energy and substrate use for one hour at a given power.

    kcal/h = W / GE * 0.86; grams/h = kcal * fraction / (4 | 9 | 4).
    """
    kcal = max(0.0, power_watts) / gross_efficiency * KCAL_PER_WATT_HOUR
    return ZoneConsumption(
        kcal_per_hour=kcal,
        cho_g_per_hour=kcal * substrates.cho / KCAL_PER_GRAM_CHO,
        fat_g_per_hour=kcal * substrates.fat / KCAL_PER_GRAM_FAT,
        pro_g_per_hour=kcal * substrates.pro / KCAL_PER_GRAM_PRO,
    )


def calculate_zones(
    model: MetabolicModel,
    gross_efficiency: Optional[float] = None,
) -> List[Zone]:
    """
    Expand a metabolic model into the seven CP-based training zones.

    Consumption is evaluated at each zone's mid power.

    Args:
        model: Fitted metabolic model
        gross_efficiency: Mechanical efficiency (default from settings)

    Returns:
        Zones Z1..Z7 in order
    """
    ge = resolve_gross_efficiency(gross_efficiency)
    cp = model.critical_power_watts

    zones = []
    for zone_id, name, cp_min, cp_max, cho, fat, pro in ZONE_DEFINITIONS:
        min_watts = cp * cp_min
        max_watts = cp * cp_max
        substrates = SubstrateRatios(cho=cho, fat=fat, pro=pro)
        zones.append(
            Zone(
                id=zone_id,
                name=name,
                power_range=(min_watts, max_watts),
                percent_of_cp=(cp_min * 100, cp_max * 100),
                substrate_ratios=substrates,
                consumption=calculate_consumption((min_watts + max_watts) / 2, substrates, ge),
            )
        )
    return zones


def calculate_marker_zones(
    model: MetabolicModel,
    gross_efficiency: Optional[float] = None,
) -> List[Zone]:
    """
    Build the FatMax, LT1 and LT2 markers shown alongside the zones.

    FatMax is a narrow band (70-72% CP, consumption at 71%); LT1 and LT2
    are single powers.
    """
    ge = resolve_gross_efficiency(gross_efficiency)
    cp = model.critical_power_watts
    lt1_pct = model.lt1_fraction * 100

    return [
        Zone(
            id="FatMax",
            name="FatMax",
            power_range=(cp * 0.70, cp * 0.72),
            percent_of_cp=(70.0, 72.0),
            substrate_ratios=FATMAX_SUBSTRATES,
            consumption=calculate_consumption(cp * 0.71, FATMAX_SUBSTRATES, ge),
        ),
        Zone(
            id="LT1",
            name="LT1",
            power_range=(model.lt1_watts, model.lt1_watts),
            percent_of_cp=(lt1_pct, lt1_pct),
            substrate_ratios=LT1_SUBSTRATES,
            consumption=calculate_consumption(model.lt1_watts, LT1_SUBSTRATES, ge),
        ),
        Zone(
            id="LT2",
            name="LT2",
            power_range=(model.lt2_watts, model.lt2_watts),
            percent_of_cp=(100.0, 100.0),
            substrate_ratios=LT2_SUBSTRATES,
            consumption=calculate_consumption(model.lt2_watts, LT2_SUBSTRATES, ge),
        ),
    ]


def build_zone_table(
    model: MetabolicModel,
    gross_efficiency: Optional[float] = None,
) -> Dict[str, Zone]:
    """
    Zones and markers keyed the way the profile store saves them.

    Returns:
        Ordered mapping z1..z7, fatmax, lt1, lt2
    """
    ge = resolve_gross_efficiency(gross_efficiency)
    table = {zone.id.lower(): zone for zone in calculate_zones(model, ge)}
    table.update({zone.id.lower(): zone for zone in calculate_marker_zones(model, ge)})
    return table


def get_zone_for_power(power: float, zones: List[Zone]) -> Optional[str]:
    """
    Return the id of the zone containing a power value.

    Zones are not contiguous (e.g. 76-88% CP is unassigned), so powers in
    a gap map to None.
    """
    if power < 0:
        return None
    for zone in zones:
        if zone.min_watts <= power <= zone.max_watts:
            return zone.id
    return None
