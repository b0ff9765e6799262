"""
Charging Simulator Calculations Module
======================================

Pure functions for pack aggregates, current limits and balancing.
"""

from .aggregates import (
    calculate_average_soc,
    calculate_pack_voltage,
    calculate_average_temperature,
    calculate_max_temperature,
)

from .limits import (
    LimitingFactor,
    calculate_c_rate_limit,
    calculate_car_power_limit,
    calculate_hot_temperature_limit,
    calculate_cold_temperature_limit,
    calculate_soc_limit,
    calculate_balancing_limit,
    calculate_current_ceilings,
    select_limiting_ceiling,
)

from .balancing import (
    BalancingResult,
    calculate_balancing_threshold,
    calculate_balancing_intensity,
    balance_cells,
)

__all__ = [
    # Aggregates
    "calculate_average_soc",
    "calculate_pack_voltage",
    "calculate_average_temperature",
    "calculate_max_temperature",
    # Limits
    "LimitingFactor",
    "calculate_c_rate_limit",
    "calculate_car_power_limit",
    "calculate_hot_temperature_limit",
    "calculate_cold_temperature_limit",
    "calculate_soc_limit",
    "calculate_balancing_limit",
    "calculate_current_ceilings",
    "select_limiting_ceiling",
    # Balancing
    "BalancingResult",
    "calculate_balancing_threshold",
    "calculate_balancing_intensity",
    "balance_cells",
]
