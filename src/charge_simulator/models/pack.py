"""
Charging Pack Model
===================

Main ChargingPack class: a series × parallel grid of cells with pack-level
aggregates, the charging current limit, passive balancing and the battery
heater. This is the primary API used by the simulation driver.
"""

import logging
import math
from typing import Optional, List, Dict, Any

import numpy as np

from .cell import Cell, CellSpec
from ..config import (
    ChargingConfig,
    CELLS_IN_SERIES,
    MIN_CELLS_IN_PARALLEL,
    MAX_CELLS_IN_PARALLEL,
    COLD_TEMP_CUTOFF_C,
)
from ..calculations.aggregates import (
    calculate_average_soc,
    calculate_pack_voltage,
    calculate_average_temperature,
    calculate_max_temperature,
    calculate_min_temperature,
    calculate_soc_range,
    calculate_voltage_range,
)
from ..calculations.balancing import BalancingResult, balance_cells
from ..calculations.limits import (
    Ceiling,
    CEILING_FORMULAS,
    LimitingFactor,
    calculate_current_ceilings,
    select_limiting_ceiling,
)
from ..debugger import debug_step, get_debugger

logger = logging.getLogger(__name__)


NOT_CHARGING = "Not charging"


def calculate_cells_in_parallel(
    battery_capacity_kwh: float,
    system_voltage: int,
    cell_energy_wh: float
) -> int:
    """
    Size the parallel count for a target pack energy.

    The count is derived for the 800V layout and made even, so a 400V pack
    (half the series count) uses exactly twice as many parallel strings and
    both architectures hold the same number of cells.

    Parameters:
    ----------
    battery_capacity_kwh : float
        Target pack energy (kWh)

    system_voltage : int
        400 or 800 (V)

    cell_energy_wh : float
        Nominal energy per cell (Wh)

    Returns:
    -------
    int
        Parallel count, clamped to [MIN_CELLS_IN_PARALLEL, MAX_CELLS_IN_PARALLEL]
    """
    total_cells_needed = battery_capacity_kwh * 1000.0 / cell_energy_wh
    parallel_800 = math.floor(total_cells_needed / CELLS_IN_SERIES[800])
    if parallel_800 % 2 != 0:
        parallel_800 += 1

    parallel = parallel_800 * 2 if system_voltage == 400 else parallel_800
    return min(MAX_CELLS_IN_PARALLEL, max(MIN_CELLS_IN_PARALLEL, parallel))


class ChargingPack:
    """
    Battery pack under charge.

    Aggregates are recomputed from the cells on every read; the only
    pack-level state is the balancing intensity, the last limiting factor
    and whether the heater is on.

    Parameters:
    ----------
    config : ChargingConfig
        Pack and charger configuration. Out-of-range user values are
        clamped, structural errors raise ValueError.

    cell_spec : CellSpec, optional
        Nominal cell, defaults to the 10Ah reference cell

    rng : numpy.random.Generator, optional
        Source of per-cell imperfections and temperature noise. Defaults to
        a generator seeded with config.seed.

    Example:
    -------
        config = ChargingConfig(system_voltage=800, battery_capacity_kwh=90, seed=1)
        pack = ChargingPack(config)

        current = pack.calculate_limited_current(625.0)
        pack.apply_charge(current, 1.0 / 3600.0)

        print(pack.average_state_of_charge, pack.limiting_factor)
    """

    def __init__(
        self,
        config: Optional[ChargingConfig] = None,
        cell_spec: Optional[CellSpec] = None,
        rng: Optional[np.random.Generator] = None
    ):
        config = (config or ChargingConfig()).clamped()
        valid, message = config.validate()
        if not valid:
            raise ValueError(f"Invalid pack configuration: {message}")

        self.config = config
        self.cell_spec = cell_spec or CellSpec()
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)

        self.cells_in_series = config.cells_in_series
        self.cells_in_parallel = calculate_cells_in_parallel(
            config.battery_capacity_kwh, config.system_voltage, self.cell_spec.energy_wh
        )

        self.cells: List[Cell] = [
            Cell(
                self.cell_spec,
                initial_soc=config.initial_soc,
                initial_temperature_c=config.initial_temperature_c,
                ambient_temperature_c=config.ambient_c,
                rng=self.rng,
            )
            for _ in range(self.cells_in_series * self.cells_in_parallel)
        ]
        if not self.cells:
            raise ValueError("Pack must contain at least one cell")

        self.balancing_intensity = 0.0
        self.last_balancing: Optional[BalancingResult] = None
        self._limiting_factor: Optional[LimitingFactor] = None
        self.heating_active = False
        if config.battery_heating_enabled:
            self.enable_heating()

        logger.debug(
            "Built %s pack: %d cells, %.1f kWh",
            self.configuration_string, self.total_cells, self.energy_capacity_kwh
        )

    # =========================================================================
    # Layout
    # =========================================================================

    @property
    def total_cells(self) -> int:
        """Total number of cells in pack."""
        return len(self.cells)

    @property
    def configuration_string(self) -> str:
        """Configuration string (e.g., '108S20P')."""
        return f"{self.cells_in_series}S{self.cells_in_parallel}P"

    @property
    def system_voltage(self) -> int:
        """Nominal architecture voltage (V)."""
        return self.config.system_voltage

    def cell_index(self, series_pos: int, parallel_pos: int) -> int:
        """Flat index of the cell at (series_pos, parallel_pos)."""
        if not 0 <= series_pos < self.cells_in_series:
            raise IndexError(f"Series position {series_pos} out of range")
        if not 0 <= parallel_pos < self.cells_in_parallel:
            raise IndexError(f"Parallel position {parallel_pos} out of range")
        return series_pos + parallel_pos * self.cells_in_series

    def cell_at(self, series_pos: int, parallel_pos: int) -> Cell:
        """Cell at the given grid position."""
        return self.cells[self.cell_index(series_pos, parallel_pos)]

    def _grid(self, values: List[float]) -> np.ndarray:
        # Flat order is series-fastest, so reshape as (P, S) then transpose
        return np.asarray(values, dtype=float).reshape(
            self.cells_in_parallel, self.cells_in_series
        ).T

    def get_soc_grid(self) -> np.ndarray:
        """Cell SOC (0-1) as a (series, parallel) array."""
        return self._grid([cell.state_of_charge for cell in self.cells])

    def get_temperature_grid(self) -> np.ndarray:
        """Cell temperature (°C) as a (series, parallel) array."""
        return self._grid([cell.temperature_c for cell in self.cells])

    def get_voltage_grid(self) -> np.ndarray:
        """Cell voltage (V) as a (series, parallel) array."""
        return self._grid([cell.voltage for cell in self.cells])

    # =========================================================================
    # Aggregates
    # =========================================================================

    @property
    def total_voltage(self) -> float:
        """Pack voltage (V): sum of parallel-averaged series group voltages."""
        return calculate_pack_voltage(self.cells, self.cells_in_series, self.cells_in_parallel)

    @property
    def total_capacity_ah(self) -> float:
        """Combined capacity of all cells (Ah)."""
        return self.cell_spec.capacity_ah * self.total_cells

    @property
    def energy_capacity_kwh(self) -> float:
        """Nominal pack energy (kWh)."""
        return self.cell_spec.energy_wh * self.total_cells / 1000.0

    @property
    def average_state_of_charge(self) -> float:
        """Energy-weighted average SOC (0-100%)."""
        return calculate_average_soc(self.cells)

    @property
    def average_temperature(self) -> float:
        """Average cell temperature (°C)."""
        return calculate_average_temperature(self.cells)

    @property
    def max_temperature(self) -> float:
        """Hottest cell temperature (°C)."""
        return calculate_max_temperature(self.cells)

    @property
    def min_temperature(self) -> float:
        """Coldest cell temperature (°C)."""
        return calculate_min_temperature(self.cells)

    @property
    def min_cell_voltage(self) -> float:
        """Lowest cell voltage (V)."""
        return calculate_voltage_range(self.cells)[0]

    @property
    def max_cell_voltage(self) -> float:
        """Highest cell voltage (V)."""
        return calculate_voltage_range(self.cells)[1]

    @property
    def voltage_difference(self) -> float:
        """Spread between highest and lowest cell voltage (V)."""
        v_min, v_max = calculate_voltage_range(self.cells)
        return v_max - v_min

    @property
    def soc_spread(self) -> float:
        """Spread between fullest and emptiest cell (fraction)."""
        soc_min, soc_max = calculate_soc_range(self.cells)
        return soc_max - soc_min

    @property
    def cells_balanced(self) -> int:
        """Cells bled during the last balancing pass."""
        return sum(1 for cell in self.cells if cell.was_balanced)

    # =========================================================================
    # Current Limit
    # =========================================================================

    def evaluate_ceilings(self, charger_max_current_a: float) -> List[Ceiling]:
        """
        Evaluate all seven current ceilings for the present pack state.

        Parameters:
        ----------
        charger_max_current_a : float
            Charger maximum current (A)

        Returns:
        -------
        List[Tuple[float, LimitingFactor]]
            (ceiling_a, factor) in priority order
        """
        return calculate_current_ceilings(
            charger_max_current_a,
            max_c_rate=self.config.max_c_rate,
            total_capacity_ah=self.total_capacity_ah,
            max_car_power_kw=self.config.max_car_power_kw,
            pack_voltage=self.total_voltage,
            max_temperature_c=self.max_temperature,
            average_temperature_c=self.average_temperature,
            average_soc_percent=self.average_state_of_charge,
            balancing_intensity=self.balancing_intensity,
        )

    def ceiling_inputs(self, charger_max_current_a: float) -> Dict[LimitingFactor, Dict[str, Any]]:
        """Variables each ceiling formula reads, keyed by factor."""
        return {
            LimitingFactor.CHARGER: {"I_charger": charger_max_current_a},
            LimitingFactor.C_RATE: {
                "C_rate": self.config.max_c_rate,
                "C_total": self.total_capacity_ah,
            },
            LimitingFactor.CAR: {
                "P_car": self.config.max_car_power_kw,
                "V_pack": self.total_voltage,
            },
            LimitingFactor.TEMPERATURE_HOT: {
                "I_charger": charger_max_current_a,
                "T_max": self.max_temperature,
            },
            LimitingFactor.TEMPERATURE_COLD: {
                "I_charger": charger_max_current_a,
                "T_avg": self.average_temperature,
            },
            LimitingFactor.SOC: {
                "I_charger": charger_max_current_a,
                "SOC": self.average_state_of_charge / 100.0,
            },
            LimitingFactor.BALANCING: {
                "I_charger": charger_max_current_a,
                "intensity": self.balancing_intensity,
            },
        }

    def calculate_limited_current(self, charger_max_current_a: float) -> float:
        """
        Get the charging current the pack accepts right now.

        The most restrictive ceiling wins and its factor is stored as the
        limiting factor. This has no effect on cell state or the heater.

        Parameters:
        ----------
        charger_max_current_a : float
            Charger maximum current (A)

        Returns:
        -------
        float
            Allowed charging current (A)
        """
        ceilings = self.evaluate_ceilings(charger_max_current_a)
        if get_debugger() is not None:
            inputs = self.ceiling_inputs(charger_max_current_a)
            for value, factor in ceilings:
                debug_step(
                    category="Limit",
                    description=f"{factor.label} ceiling",
                    formula=CEILING_FORMULAS[factor],
                    variables=inputs[factor],
                    result=value,
                    result_name=f"I_{factor.name.lower()}",
                    result_unit="A",
                )

        current, factor = select_limiting_ceiling(ceilings)
        self._limiting_factor = factor

        debug_step(
            category="Limit",
            description="Limited charging current",
            formula="I = min(ceilings)",
            variables={},
            result=current,
            result_name="I_limited",
            result_unit="A",
            comment=f"Limited by {factor.label}",
        )
        return current

    @property
    def limiting_factor(self) -> str:
        """Label of the ceiling that bound the last calculated current."""
        if self._limiting_factor is None:
            return NOT_CHARGING
        return self._limiting_factor.label

    @property
    def limiting_factor_enum(self) -> Optional[LimitingFactor]:
        """Factor that bound the last calculated current, None before the first."""
        return self._limiting_factor

    # =========================================================================
    # Charge, Balancing, Thermal
    # =========================================================================

    def apply_charge(self, current_a: float, delta_hours: float) -> BalancingResult:
        """
        Charge the pack for one time step.

        The current splits evenly across parallel strings. Cells are charged,
        balanced, then thermally updated.

        Parameters:
        ----------
        current_a : float
            Pack current (A)

        delta_hours : float
            Time step (h)

        Returns:
        -------
        BalancingResult
            Outcome of the balancing pass
        """
        current_per_string = current_a / self.cells_in_parallel

        for cell in self.cells:
            cell.update_charge(current_per_string, delta_hours)

        result = self.balance_cells()
        self.apply_thermal(current_per_string, delta_hours)
        return result

    def balance_cells(self) -> BalancingResult:
        """Run one passive balancing pass and update the intensity."""
        result = balance_cells(self.cells)
        self.balancing_intensity = result.intensity
        self.last_balancing = result

        if result.active:
            debug_step(
                category="Balancing",
                description="Balancing pass",
                formula="intensity = k × SOC_avg × spread",
                variables={"spread": result.spread, "threshold": result.threshold},
                result=result.intensity,
                result_name="intensity",
                comment=f"{result.cells_balanced} cells bled",
            )
        return result

    def apply_thermal(self, current_per_string_a: float, delta_hours: float):
        """Advance every cell temperature by one time step."""
        noise = self.rng if self.config.temperature_noise else None
        for cell in self.cells:
            cell.update_temperature(
                current_per_string_a, delta_hours, self.config.cooling_power, noise
            )

    # =========================================================================
    # Heating
    # =========================================================================

    def enable_heating(self):
        """Turn the battery heater on for every cell."""
        self.heating_active = True
        for cell in self.cells:
            cell.heating_enabled = True

    def disable_heating(self):
        """Turn the battery heater off for every cell."""
        self.heating_active = False
        for cell in self.cells:
            cell.heating_enabled = False

    def update_heating_state(self) -> bool:
        """
        Switch the heater off once the pack has warmed up.

        Called once per tick by the driver. The heater is not switched
        back on if the pack later cools.

        Returns:
        -------
        bool
            True if the heater was switched off by this call
        """
        if self.heating_active and self.average_temperature >= COLD_TEMP_CUTOFF_C:
            self.disable_heating()
            logger.info(
                "Pack reached %.1f°C, battery heating off", COLD_TEMP_CUTOFF_C
            )
            return True
        return False

    # =========================================================================
    # Reset and Export
    # =========================================================================

    def reset(self):
        """Restore every cell to its initial state and reapply heating config."""
        for cell in self.cells:
            cell.reset(self.config.initial_temperature_c)

        self._limiting_factor = None
        self.balancing_intensity = 0.0
        self.last_balancing = None

        if self.config.battery_heating_enabled:
            self.enable_heating()
        else:
            self.disable_heating()

    def summary(self) -> str:
        """Generate formatted summary string."""
        lines = [
            f"Charging Pack: {self.configuration_string} ({self.system_voltage}V class)",
            f"=" * 50,
            f"",
            f"Electrical:",
            f"  Pack Voltage: {self.total_voltage:.1f}V",
            f"  Cell Voltage: {self.min_cell_voltage:.3f}V - {self.max_cell_voltage:.3f}V "
            f"(Δ{self.voltage_difference:.3f}V)",
            f"  Energy: {self.energy_capacity_kwh:.1f}kWh",
            f"  Average SOC: {self.average_state_of_charge:.1f}%",
            f"",
            f"Thermal:",
            f"  Average Temperature: {self.average_temperature:.1f}°C",
            f"  Max Temperature: {self.max_temperature:.1f}°C",
            f"  Heating: {'on' if self.heating_active else 'off'}",
            f"",
            f"Limits:",
            f"  Limiting Factor: {self.limiting_factor}",
            f"  Balancing Intensity: {self.balancing_intensity:.5f}",
            f"  Cells Balanced: {self.cells_balanced}",
        ]
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Export pack state as dictionary."""
        return {
            "configuration": self.configuration_string,
            "system_voltage": self.system_voltage,
            "cells_in_series": self.cells_in_series,
            "cells_in_parallel": self.cells_in_parallel,
            "total_cells": self.total_cells,
            "total_voltage_v": self.total_voltage,
            "total_capacity_ah": self.total_capacity_ah,
            "energy_capacity_kwh": self.energy_capacity_kwh,
            "average_soc_percent": self.average_state_of_charge,
            "average_temperature_c": self.average_temperature,
            "max_temperature_c": self.max_temperature,
            "min_cell_voltage_v": self.min_cell_voltage,
            "max_cell_voltage_v": self.max_cell_voltage,
            "voltage_difference_v": self.voltage_difference,
            "limiting_factor": self.limiting_factor,
            "balancing_intensity": self.balancing_intensity,
            "cells_balanced": self.cells_balanced,
            "heating_active": self.heating_active,
        }
