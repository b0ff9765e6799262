"""
Cell Thermal Model
==================

Lumped per-cell temperature update used on every simulation tick.

The temperature derivative (°C/h) is the sum of four contributions:
- Resistive heating from I²R losses (only above a small current)
- Active battery heater (only while the heater is on)
- Passive cooling towards ambient (only while the heater is off)
- Slow equilibration towards ambient (always)
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..config import (
    HEATING_CURRENT_THRESHOLD_A,
    RESISTANCE_HEAT_MULTIPLIER,
    HEAT_TO_TEMP_FACTOR,
    HEAT_RANDOM_OFFSET,
    HEATER_POWER_C_PER_H,
    AMBIENT_EQUILIBRATION_COEFF,
    TEMPERATURE_JITTER_PROBABILITY,
    TEMPERATURE_JITTER_AMPLITUDE_C,
)


@dataclass
class ThermalContributions:
    """
    Temperature rates applied to a cell during one tick.

    Attributes:
    ----------
    resistive_c_per_h : float
        Self-heating from I²R losses (°C/h)

    heater_c_per_h : float
        Battery heater contribution (°C/h)

    cooling_c_per_h : float
        Passive cooling contribution (°C/h), zero or negative above ambient

    ambient_c_per_h : float
        Equilibration towards ambient (°C/h)

    jitter_c : float
        Random jitter added directly to the temperature (°C)
    """
    resistive_c_per_h: float = 0.0
    heater_c_per_h: float = 0.0
    cooling_c_per_h: float = 0.0
    ambient_c_per_h: float = 0.0
    jitter_c: float = 0.0

    @property
    def total_c_per_h(self) -> float:
        """Net temperature rate (°C/h), excluding jitter."""
        return (
            self.resistive_c_per_h +
            self.heater_c_per_h +
            self.cooling_c_per_h +
            self.ambient_c_per_h
        )


def calculate_resistive_heating(
    current_a: float,
    internal_resistance_ohm: float,
    random_factor: float
) -> float:
    """
    Calculate self-heating rate of a cell.

    dT/dt = I² × (R × k_R) × ((0.95 + 0.1 × rf) + offset) × k_T

    Parameters:
    ----------
    current_a : float
        Cell current (A)

    internal_resistance_ohm : float
        Cell internal resistance (Ω)

    random_factor : float
        Per-cell random factor (0-1)

    Returns:
    -------
    float
        Temperature rate (°C/h), zero at or below the current threshold
    """
    if current_a <= HEATING_CURRENT_THRESHOLD_A:
        return 0.0

    effective_resistance = internal_resistance_ohm * RESISTANCE_HEAT_MULTIPLIER
    heat_generated = current_a ** 2 * effective_resistance
    variation = (0.95 + random_factor * 0.1) + HEAT_RANDOM_OFFSET
    return heat_generated * variation * HEAT_TO_TEMP_FACTOR


def calculate_thermal_contributions(
    current_a: float,
    temperature_c: float,
    ambient_c: float,
    internal_resistance_ohm: float,
    random_factor: float,
    heating_enabled: bool,
    cooling_coefficient: float
) -> ThermalContributions:
    """
    Calculate the deterministic temperature rates of a cell.

    Parameters:
    ----------
    current_a : float
        Cell current (A)

    temperature_c : float
        Current cell temperature (°C)

    ambient_c : float
        Ambient temperature (°C)

    internal_resistance_ohm : float
        Cell internal resistance (Ω)

    random_factor : float
        Per-cell random factor (0-1)

    heating_enabled : bool
        Whether the battery heater is on

    cooling_coefficient : float
        Passive cooling coefficient (1/h)

    Returns:
    -------
    ThermalContributions
        Rates with jitter left at zero
    """
    contributions = ThermalContributions(
        resistive_c_per_h=calculate_resistive_heating(
            current_a, internal_resistance_ohm, random_factor
        ),
        ambient_c_per_h=AMBIENT_EQUILIBRATION_COEFF * (ambient_c - temperature_c),
    )

    if heating_enabled:
        contributions.heater_c_per_h = HEATER_POWER_C_PER_H
    else:
        contributions.cooling_c_per_h = -cooling_coefficient * (temperature_c - ambient_c)

    return contributions


def sample_jitter(rng: Optional[np.random.Generator]) -> float:
    """Draw the occasional temperature jitter (°C), zero without a generator."""
    if rng is None:
        return 0.0
    if rng.random() >= TEMPERATURE_JITTER_PROBABILITY:
        return 0.0
    return (rng.random() - 0.5) * TEMPERATURE_JITTER_AMPLITUDE_C
