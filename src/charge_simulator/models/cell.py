"""
Cell Model
==========

Defines the CellSpec dataclass holding nominal cell properties and the
Cell class holding the mutable per-tick state of one cell in the pack.

Every cell draws a small set of imperfections once, at construction, from
the generator handed in by the pack:
- internal resistance within ±20% of nominal
- a random factor (0-1) that spreads efficiency and self-heating
- the initial SOC within ±5% of the configured value

These make cells drift apart while charging, which balancing later corrects.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..config import (
    CELL_CAPACITY_AH,
    CELL_MIN_VOLTAGE,
    CELL_MAX_VOLTAGE,
    CELL_NOMINAL_VOLTAGE,
    CELL_INTERNAL_RESISTANCE_OHM,
    CELL_CHARGE_EFFICIENCY,
    RESISTANCE_SPREAD,
    INITIAL_SOC_SPREAD,
)
from .thermal import ThermalContributions, calculate_thermal_contributions, sample_jitter


@dataclass(frozen=True)
class CellSpec:
    """
    Nominal specification shared by every cell of a pack.

    Attributes:
    ----------
    capacity_ah : float
        Rated capacity (Ah)

    min_voltage : float
        Terminal voltage at 0% SOC (V)

    max_voltage : float
        Terminal voltage at 100% SOC (V)

    nominal_voltage : float
        Nominal voltage (V), used for energy

    internal_resistance_ohm : float
        Nominal internal resistance (Ω)

    charge_efficiency : float
        Base coulombic efficiency
    """
    capacity_ah: float = CELL_CAPACITY_AH
    min_voltage: float = CELL_MIN_VOLTAGE
    max_voltage: float = CELL_MAX_VOLTAGE
    nominal_voltage: float = CELL_NOMINAL_VOLTAGE
    internal_resistance_ohm: float = CELL_INTERNAL_RESISTANCE_OHM
    charge_efficiency: float = CELL_CHARGE_EFFICIENCY

    def __post_init__(self):
        """Validate capacity and voltage window."""
        if self.capacity_ah <= 0:
            raise ValueError(f"Cell capacity must be positive, got {self.capacity_ah} Ah")
        if self.max_voltage <= self.min_voltage:
            raise ValueError(
                f"Cell max voltage ({self.max_voltage}V) must exceed "
                f"min voltage ({self.min_voltage}V)"
            )

    @property
    def energy_wh(self) -> float:
        """Nominal energy per cell (Wh)."""
        return self.capacity_ah * self.nominal_voltage

    def voltage_at_soc(self, soc: float) -> float:
        """Terminal voltage at a given SOC fraction (V)."""
        return self.min_voltage + (self.max_voltage - self.min_voltage) * soc


class Cell:
    """
    Mutable state of a single cell.

    Charge is the stored quantity; SOC and voltage are derived from it, so
    every write goes through a clamp to [0, capacity].

    Parameters:
    ----------
    spec : CellSpec
        Nominal cell specification

    initial_soc : float
        Configured initial SOC (0-1) before per-cell perturbation

    initial_temperature_c : float
        Starting temperature (°C)

    ambient_temperature_c : float, optional
        Ambient reference (°C), defaults to the initial temperature

    rng : numpy.random.Generator, optional
        Source of the per-cell imperfections. Without one the cell is ideal.
    """

    def __init__(
        self,
        spec: CellSpec,
        initial_soc: float = 0.0,
        initial_temperature_c: float = 25.0,
        ambient_temperature_c: Optional[float] = None,
        rng: Optional[np.random.Generator] = None
    ):
        self.spec = spec

        if rng is not None:
            self.random_factor = float(rng.random())
            soc_factor = 1.0 - INITIAL_SOC_SPREAD + rng.random() * 2 * INITIAL_SOC_SPREAD
            resistance_factor = 1.0 - RESISTANCE_SPREAD + rng.random() * 2 * RESISTANCE_SPREAD
        else:
            self.random_factor = 0.5
            soc_factor = 1.0
            resistance_factor = 1.0

        self.internal_resistance_ohm = spec.internal_resistance_ohm * resistance_factor
        self.charge_efficiency = spec.charge_efficiency * (0.95 + self.random_factor * 0.10)
        self.initial_soc = min(1.0, max(0.0, initial_soc * soc_factor))

        self.ambient_temperature_c = (
            initial_temperature_c if ambient_temperature_c is None else ambient_temperature_c
        )
        self.temperature_c = initial_temperature_c
        self.charge_ah = self.initial_soc * spec.capacity_ah
        self.heating_enabled = False
        self.was_balanced = False

    # =========================================================================
    # Derived State
    # =========================================================================

    @property
    def capacity_ah(self) -> float:
        """Cell capacity (Ah)."""
        return self.spec.capacity_ah

    @property
    def state_of_charge(self) -> float:
        """State of charge (0-1)."""
        return self.charge_ah / self.spec.capacity_ah

    @state_of_charge.setter
    def state_of_charge(self, value: float):
        value = min(1.0, max(0.0, value))
        self.charge_ah = value * self.spec.capacity_ah

    @property
    def voltage(self) -> float:
        """Terminal voltage (V), linear in SOC."""
        return self.spec.voltage_at_soc(self.state_of_charge)

    @property
    def energy_wh(self) -> float:
        """Nominal energy (Wh)."""
        return self.spec.energy_wh

    # =========================================================================
    # Per-Tick Updates
    # =========================================================================

    def update_charge(self, current_a: float, delta_hours: float):
        """
        Add charge for one time step.

        ΔQ = I × η_cell × Δt, clipped to [0, capacity]. Overcharge is
        silently discarded.

        Parameters:
        ----------
        current_a : float
            Cell current (A), positive when charging

        delta_hours : float
            Time step (h)
        """
        charge_added = current_a * self.charge_efficiency * delta_hours
        new_charge = self.charge_ah + charge_added
        self.charge_ah = min(self.spec.capacity_ah, max(0.0, new_charge))

    def update_temperature(
        self,
        current_a: float,
        delta_hours: float,
        cooling_coefficient: float,
        rng: Optional[np.random.Generator] = None
    ) -> ThermalContributions:
        """
        Advance the cell temperature by one time step.

        Parameters:
        ----------
        current_a : float
            Cell current (A)

        delta_hours : float
            Time step (h)

        cooling_coefficient : float
            Passive cooling coefficient (1/h)

        rng : numpy.random.Generator, optional
            Source of the occasional jitter, no jitter when omitted

        Returns:
        -------
        ThermalContributions
            The rates and jitter that were applied
        """
        contributions = calculate_thermal_contributions(
            current_a,
            self.temperature_c,
            self.ambient_temperature_c,
            self.internal_resistance_ohm,
            self.random_factor,
            self.heating_enabled,
            cooling_coefficient,
        )
        contributions.jitter_c = sample_jitter(rng)

        self.temperature_c += contributions.total_c_per_h * delta_hours
        self.temperature_c += contributions.jitter_c
        return contributions

    def bleed(self, soc_amount: float):
        """Remove charge equal to soc_amount of capacity (balancing)."""
        self.state_of_charge = self.state_of_charge - soc_amount

    def reset(self, initial_temperature_c: float):
        """Restore the post-construction SOC and the given temperature."""
        self.charge_ah = self.initial_soc * self.spec.capacity_ah
        self.temperature_c = initial_temperature_c
        self.heating_enabled = False
        self.was_balanced = False

    def __repr__(self) -> str:
        return (
            f"Cell(soc={self.state_of_charge:.4f}, "
            f"temp={self.temperature_c:.2f}C, "
            f"v={self.voltage:.3f}V)"
        )
