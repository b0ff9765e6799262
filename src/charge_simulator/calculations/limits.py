"""
Charging Current Limit Calculations
===================================

Calculates the maximum charging current the pack accepts, based on:
- Charger rating
- Pack C-rate rating
- Vehicle power cap
- Hot temperature (linear taper)
- Cold temperature (quadratic ramp with a floor)
- State of charge (exponential taper near full)
- Cell balancing penalty

Each ceiling is returned together with the factor that produced it, so the
binding constraint is read off the minimum directly.
"""

import math
from enum import Enum
from typing import List, Optional, Tuple

from ..config import (
    HOT_TEMP_THRESHOLD_C,
    HOT_TEMP_RANGE_C,
    COLD_TEMP_CUTOFF_C,
    COLD_TEMP_OFFSET_C,
    COLD_TEMP_FLOOR_FACTOR,
    SOC_TAPER_KNEE,
    SOC_TAPER_RATE,
    BALANCING_CURRENT_PENALTY,
)


UNBOUNDED = float('inf')


class LimitingFactor(Enum):
    """Constraints that can cap the charging current, in priority order."""
    CHARGER = "Charger"
    C_RATE = "C-rate"
    CAR = "Car"
    TEMPERATURE_HOT = "Temperature (hot)"
    TEMPERATURE_COLD = "Temperature (cold)"
    SOC = "SoC"
    BALANCING = "Cell balancing"

    @property
    def label(self) -> str:
        """Human-readable label."""
        return self.value


Ceiling = Tuple[float, LimitingFactor]


# Formula of each ceiling, for debug output
CEILING_FORMULAS = {
    LimitingFactor.CHARGER: "I = I_charger",
    LimitingFactor.C_RATE: "I = C_rate * C_total",
    LimitingFactor.CAR: "I = P_car * 1000 / V_pack",
    LimitingFactor.TEMPERATURE_HOT:
        f"I = I_charger * max(0, 1 - (T_max - {HOT_TEMP_THRESHOLD_C:g}) / {HOT_TEMP_RANGE_C:g})",
    LimitingFactor.TEMPERATURE_COLD:
        f"I = I_charger * max({COLD_TEMP_FLOOR_FACTOR:g}, "
        f"((max(0, T_avg) + {COLD_TEMP_OFFSET_C:g}) / {COLD_TEMP_CUTOFF_C:g})^2)",
    LimitingFactor.SOC:
        f"I = I_charger * min(1, exp(-{SOC_TAPER_RATE:g} * (SOC - {SOC_TAPER_KNEE:g})))",
    LimitingFactor.BALANCING:
        f"I = I_charger * max(0, 1 - intensity * {BALANCING_CURRENT_PENALTY:g})",
}


def calculate_c_rate_limit(max_c_rate: float, total_capacity_ah: float) -> float:
    """
    Calculate current ceiling from C-rate rating.

    I_max = C-rate × Capacity (Ah)
    """
    return max_c_rate * total_capacity_ah


def calculate_car_power_limit(
    max_car_power_kw: Optional[float],
    pack_voltage: float
) -> float:
    """
    Calculate current ceiling from the vehicle power cap.

    I_max = P_car × 1000 / V_pack

    Parameters:
    ----------
    max_car_power_kw : float | None
        Vehicle power cap (kW), None for no cap

    pack_voltage : float
        Pack voltage (V)

    Returns:
    -------
    float
        Current ceiling (A), unbounded without a cap
    """
    if max_car_power_kw is None or pack_voltage <= 0:
        return UNBOUNDED
    return max_car_power_kw * 1000.0 / pack_voltage


def calculate_hot_temperature_limit(
    charger_max_a: float,
    max_temperature_c: float
) -> float:
    """
    Calculate current ceiling for a hot pack.

    Above the threshold the ceiling falls linearly to zero:
    I_max = I_charger × max(0, 1 - (T_max - T_hot) / ΔT)

    Parameters:
    ----------
    charger_max_a : float
        Charger maximum current (A)

    max_temperature_c : float
        Hottest cell temperature (°C)

    Returns:
    -------
    float
        Current ceiling (A)
    """
    if max_temperature_c <= HOT_TEMP_THRESHOLD_C:
        return UNBOUNDED
    factor = max(0.0, 1.0 - (max_temperature_c - HOT_TEMP_THRESHOLD_C) / HOT_TEMP_RANGE_C)
    return charger_max_a * factor


def calculate_cold_temperature_limit(
    charger_max_a: float,
    average_temperature_c: float
) -> float:
    """
    Calculate current ceiling for a cold pack.

    Below the cutoff the ceiling follows a quadratic ramp with a floor,
    so charging slows down but never stops:
    I_max = I_charger × max(floor, ((max(0, T_avg) + offset) / T_cold)²)

    Parameters:
    ----------
    charger_max_a : float
        Charger maximum current (A)

    average_temperature_c : float
        Average cell temperature (°C)

    Returns:
    -------
    float
        Current ceiling (A)
    """
    if average_temperature_c >= COLD_TEMP_CUTOFF_C:
        return UNBOUNDED
    ramp = ((max(0.0, average_temperature_c) + COLD_TEMP_OFFSET_C) / COLD_TEMP_CUTOFF_C) ** 2
    return charger_max_a * max(COLD_TEMP_FLOOR_FACTOR, ramp)


def calculate_soc_limit(charger_max_a: float, average_soc_percent: float) -> float:
    """
    Calculate current ceiling from state of charge.

    Reproduces the tail-off of fast charging near full:
    I_max = I_charger × min(1, exp(-k × (SOC - SOC_knee)))

    At 80% this is ~45% of the charger current, at 90% ~20%.

    Parameters:
    ----------
    charger_max_a : float
        Charger maximum current (A)

    average_soc_percent : float
        Average SOC (0-100%)

    Returns:
    -------
    float
        Current ceiling (A)
    """
    soc = average_soc_percent / 100.0
    if soc <= SOC_TAPER_KNEE:
        return UNBOUNDED
    return charger_max_a * min(1.0, math.exp(-SOC_TAPER_RATE * (soc - SOC_TAPER_KNEE)))


def calculate_balancing_limit(charger_max_a: float, balancing_intensity: float) -> float:
    """
    Calculate current ceiling while cells are being balanced.

    I_max = I_charger × max(0, 1 - intensity × penalty)
    """
    if balancing_intensity <= 0:
        return UNBOUNDED
    return charger_max_a * max(0.0, 1.0 - balancing_intensity * BALANCING_CURRENT_PENALTY)


def calculate_current_ceilings(
    charger_max_a: float,
    max_c_rate: float,
    total_capacity_ah: float,
    max_car_power_kw: Optional[float],
    pack_voltage: float,
    max_temperature_c: float,
    average_temperature_c: float,
    average_soc_percent: float,
    balancing_intensity: float
) -> List[Ceiling]:
    """
    Evaluate all seven current ceilings.

    Returns:
    -------
    List[Tuple[float, LimitingFactor]]
        (ceiling_a, factor) in priority order
    """
    return [
        (charger_max_a, LimitingFactor.CHARGER),
        (calculate_c_rate_limit(max_c_rate, total_capacity_ah), LimitingFactor.C_RATE),
        (calculate_car_power_limit(max_car_power_kw, pack_voltage), LimitingFactor.CAR),
        (calculate_hot_temperature_limit(charger_max_a, max_temperature_c),
         LimitingFactor.TEMPERATURE_HOT),
        (calculate_cold_temperature_limit(charger_max_a, average_temperature_c),
         LimitingFactor.TEMPERATURE_COLD),
        (calculate_soc_limit(charger_max_a, average_soc_percent), LimitingFactor.SOC),
        (calculate_balancing_limit(charger_max_a, balancing_intensity),
         LimitingFactor.BALANCING),
    ]


def select_limiting_ceiling(ceilings: List[Ceiling]) -> Ceiling:
    """
    Pick the most restrictive ceiling.

    min() keeps the first of equal values, so exact ties go to the factor
    listed first in priority order.
    """
    return min(ceilings, key=lambda x: x[0])
