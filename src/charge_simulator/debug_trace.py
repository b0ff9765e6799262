"""
Debug Trace Functions
=====================

Traces the charging current limit of a pack with detailed step-by-step
output: the aggregates that feed the policy, every ceiling with its
formula and inputs, and the binding constraint.
"""

from .debugger import CalculationDebugger
from .models.pack import ChargingPack
from .calculations.limits import LimitingFactor, CEILING_FORMULAS, select_limiting_ceiling
from .calculations.balancing import calculate_balancing_threshold
from .config import (
    HOT_TEMP_THRESHOLD_C,
    COLD_TEMP_CUTOFF_C,
    SOC_TAPER_KNEE,
)


_CEILING_CONDITIONS = {
    LimitingFactor.CAR: "unbounded without a car power cap",
    LimitingFactor.TEMPERATURE_HOT: f"unbounded at or below {HOT_TEMP_THRESHOLD_C:g}C",
    LimitingFactor.TEMPERATURE_COLD: f"unbounded at or above {COLD_TEMP_CUTOFF_C:g}C",
    LimitingFactor.SOC: f"unbounded at or below {SOC_TAPER_KNEE * 100:g}% SOC",
    LimitingFactor.BALANCING: "unbounded while balancing is idle",
}


def trace_limit_calculation(
    pack: ChargingPack,
    charger_max_current_a: float
) -> CalculationDebugger:
    """
    Trace the charging current limit of a pack.

    Parameters:
    ----------
    pack : ChargingPack
        The pack to analyze (not modified)

    charger_max_current_a : float
        Charger maximum current (A)

    Returns:
    -------
    CalculationDebugger
        Debugger with all calculation steps recorded
    """
    debugger = CalculationDebugger()
    config = pack.config

    debugger.start(
        configuration=pack.configuration_string,
        system_voltage=f"{pack.system_voltage}V",
        charger=f"{charger_max_current_a:g}A",
        car_power_cap="none" if config.max_car_power_kw is None else f"{config.max_car_power_kw:g}kW",
    )

    # ==========================================================================
    # SECTION 1: PACK STATE
    # ==========================================================================
    debugger.start_section("PACK STATE")

    debugger.add_input("S", pack.cells_in_series, "cells", "Cells in series")
    debugger.add_input("P", pack.cells_in_parallel, "cells", "Cells in parallel")
    debugger.add_input("C_rate", config.max_c_rate, "C", "Maximum C-rate")

    total_capacity = pack.total_capacity_ah
    debugger.add_step(
        category="Aggregate",
        description="Total capacity",
        formula="C_total = C_cell * S * P",
        variables={
            "C_cell": pack.cell_spec.capacity_ah,
            "S": pack.cells_in_series,
            "P": pack.cells_in_parallel,
        },
        result=total_capacity,
        result_name="C_total",
        result_unit="Ah",
    )

    debugger.add_step(
        category="Aggregate",
        description="Pack voltage",
        formula="V_pack = sum_s(mean_p(V_cell))",
        variables={},
        result=pack.total_voltage,
        result_name="V_pack",
        result_unit="V",
    )

    average_soc = pack.average_state_of_charge
    debugger.add_step(
        category="Aggregate",
        description="Energy-weighted average SOC",
        formula="SOC = sum(SOC_i * C_i * V_i) / sum(C_i * V_i)",
        variables={},
        result=average_soc,
        result_name="SOC",
        result_unit="%",
    )

    debugger.add_step(
        category="Aggregate",
        description="Average cell temperature",
        formula="T_avg = mean(T_i)",
        variables={},
        result=pack.average_temperature,
        result_name="T_avg",
        result_unit="C",
    )

    debugger.add_step(
        category="Aggregate",
        description="Hottest cell temperature",
        formula="T_max = max(T_i)",
        variables={},
        result=pack.max_temperature,
        result_name="T_max",
        result_unit="C",
    )

    debugger.add_step(
        category="Balancing",
        description="SOC spread against balancing threshold",
        formula="threshold = 0.1 - SOC / 1000",
        variables={"spread": pack.soc_spread},
        result=calculate_balancing_threshold(average_soc),
        result_name="threshold",
        comment=f"Current intensity {pack.balancing_intensity:.6g}",
    )

    # ==========================================================================
    # SECTION 2: CEILINGS
    # ==========================================================================
    debugger.start_section("CURRENT CEILINGS")

    ceilings = pack.evaluate_ceilings(charger_max_current_a)
    inputs = pack.ceiling_inputs(charger_max_current_a)
    for value, factor in ceilings:
        debugger.add_step(
            category="Limit",
            description=f"{factor.label} ceiling",
            formula=CEILING_FORMULAS[factor],
            variables=inputs[factor],
            result=value,
            result_name=f"I_{factor.name.lower()}",
            result_unit="A",
            comment=_CEILING_CONDITIONS.get(factor, "") if value == float('inf') else "",
        )

    # ==========================================================================
    # SECTION 3: RESULT
    # ==========================================================================
    debugger.start_section("RESULT")

    limited, factor = select_limiting_ceiling(ceilings)
    debugger.add_step(
        category="Result",
        description="Limited charging current",
        formula="I = min(ceilings)",
        variables={},
        result=limited,
        result_name="I_limited",
        result_unit="A",
        comment=f"Limited by {factor.label}",
    )

    debugger.add_step(
        category="Result",
        description="Charging power",
        formula="P = I * V_pack / 1000",
        variables={"I": limited, "V_pack": pack.total_voltage},
        result=limited * pack.total_voltage / 1000.0,
        result_name="P",
        result_unit="kW",
    )

    debugger.finish()
    return debugger
