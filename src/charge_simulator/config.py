"""
Charging Simulator Configuration
================================

Contains configuration settings, physical constants, and policy constants
for the EV charging simulation.

All internal calculations use these units:
- Voltage: V
- Current: A
- Charge: Ah
- Temperature: Celsius
- Energy: Wh (displayed as kWh)
- Power: W (displayed as kW)
- Time: hours for charge/thermal math, seconds for the virtual clock
"""

from dataclasses import dataclass, replace
from typing import Optional


# =============================================================================
# Cell Defaults
# =============================================================================

# Nominal cell capacity (Ah)
CELL_CAPACITY_AH = 10.0

# Terminal voltage range (V) - voltage is linear in SOC between these
CELL_MIN_VOLTAGE = 3.4
CELL_MAX_VOLTAGE = 4.2

# Nominal voltage used for energy figures (V)
CELL_NOMINAL_VOLTAGE = 3.7

# Base internal resistance (Ohm), perturbed ±20% per cell
CELL_INTERNAL_RESISTANCE_OHM = 0.01
RESISTANCE_SPREAD = 0.2

# Base coulombic efficiency, scaled per cell by 0.95-1.05
CELL_CHARGE_EFFICIENCY = 1.0

# Initial SOC perturbation (±5%)
INITIAL_SOC_SPREAD = 0.05


# =============================================================================
# Thermal Model Constants (per hour)
# =============================================================================

# Cells only self-heat above this current (A)
HEATING_CURRENT_THRESHOLD_A = 0.1

# Lumped-model scaling of I²R heating
RESISTANCE_HEAT_MULTIPLIER = 50.0
HEAT_TO_TEMP_FACTOR = 0.7
HEAT_RANDOM_OFFSET = 0.2

# Active battery heater contribution (°C/h)
HEATER_POWER_C_PER_H = 50.0

# Slow equilibration towards ambient (1/h)
AMBIENT_EQUILIBRATION_COEFF = 0.05

# Occasional temperature noise
TEMPERATURE_JITTER_PROBABILITY = 0.005
TEMPERATURE_JITTER_AMPLITUDE_C = 0.5  # full width, i.e. ±0.25°C


# =============================================================================
# Pack Layout
# =============================================================================

# System voltage (V) -> cells in series
CELLS_IN_SERIES = {
    400: 108,
    800: 216,
}

# Parallel count limits
MIN_CELLS_IN_PARALLEL = 1
MAX_CELLS_IN_PARALLEL = 64

# Lowest accepted C-rate once clamped
MIN_C_RATE = 0.1


# =============================================================================
# Current Limiting Policy
# =============================================================================

# Hot limit: linear taper to zero over HOT_TEMP_RANGE_C above threshold
HOT_TEMP_THRESHOLD_C = 40.0
HOT_TEMP_RANGE_C = 25.0

# Cold limit: quadratic ramp below cutoff, never below the floor factor
COLD_TEMP_CUTOFF_C = 20.0
COLD_TEMP_OFFSET_C = 5.0
COLD_TEMP_FLOOR_FACTOR = 0.02

# SOC taper: exponential above the knee (fraction)
SOC_TAPER_KNEE = 0.70
SOC_TAPER_RATE = 8.0

# Balancing
BALANCING_BASE_THRESHOLD = 0.1
BALANCING_THRESHOLD_SLOPE = 1000.0  # threshold = base - avg_soc_pct / slope
BALANCING_INTENSITY_COEFF = 0.002
BALANCING_CURRENT_PENALTY = 50.0


# =============================================================================
# Chargers
# =============================================================================

CHARGER_MAX_CURRENT_A = {
    "fast": 625.0,
    "standard": 500.0,
}


# =============================================================================
# Simulation Clock
# =============================================================================

# One tick is one simulated second
TIME_STEP_S = 1.0

# Sample history bound
MAX_DATA_POINTS = 1000

# Average SOC (%) treated as fully charged
DEFAULT_END_SOC_PERCENT = 99.9


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class ChargingConfig:
    """
    Configuration for a charging simulation.

    Attributes:
    ----------
    system_voltage : int
        Pack architecture, 400 or 800 (V)

    charger_type : str
        One of: fast, standard

    max_c_rate : float
        Maximum charging C-rate accepted by the pack

    cooling_power : float
        Passive cooling coefficient (1/h)

    battery_capacity_kwh : float
        Target pack energy (kWh), used to size the parallel count

    max_car_power_kw : float | None
        Vehicle-side charging power cap (kW), None for no cap

    initial_temperature_c : float
        Starting cell temperature (°C), also the ambient reference

    ambient_temperature_c : float | None
        Ambient temperature (°C), defaults to the initial temperature

    battery_heating_enabled : bool
        Run the battery heater until the pack is warm

    initial_soc : float
        Starting state of charge per cell (0-1), perturbed ±5% per cell

    seed : int | None
        Seed for the per-cell perturbation and noise

    temperature_noise : bool
        Enable the occasional random temperature jitter

    end_soc_percent : float
        Average SOC (%) at which the simulation stops
    """
    system_voltage: int = 400
    charger_type: str = "fast"
    max_c_rate: float = 2.0
    cooling_power: float = 1.0
    battery_capacity_kwh: float = 80.0
    max_car_power_kw: Optional[float] = None
    initial_temperature_c: float = 25.0
    ambient_temperature_c: Optional[float] = None
    battery_heating_enabled: bool = False
    initial_soc: float = 0.0
    seed: Optional[int] = None
    temperature_noise: bool = True
    end_soc_percent: float = DEFAULT_END_SOC_PERCENT

    @property
    def cells_in_series(self) -> int:
        """Series count for the configured system voltage."""
        return CELLS_IN_SERIES[self.system_voltage]

    @property
    def charger_max_current_a(self) -> float:
        """Maximum current of the configured charger (A)."""
        return CHARGER_MAX_CURRENT_A[self.charger_type]

    @property
    def ambient_c(self) -> float:
        """Effective ambient temperature (°C)."""
        if self.ambient_temperature_c is None:
            return self.initial_temperature_c
        return self.ambient_temperature_c

    def clamped(self) -> "ChargingConfig":
        """
        Return a copy with user-adjustable values pulled into range.

        Structural errors (unknown voltage or charger, non-positive
        capacity) are left for validate() to report.
        """
        car_power = self.max_car_power_kw
        if car_power is not None and car_power <= 0:
            car_power = None
        return replace(
            self,
            max_c_rate=max(MIN_C_RATE, self.max_c_rate),
            cooling_power=max(0.0, self.cooling_power),
            max_car_power_kw=car_power,
            initial_soc=min(1.0, max(0.0, self.initial_soc)),
            end_soc_percent=min(100.0, max(0.0, self.end_soc_percent)),
        )

    def validate(self) -> tuple[bool, str]:
        """Validate configuration values."""
        errors = []

        if self.system_voltage not in CELLS_IN_SERIES:
            errors.append(
                f"System voltage must be one of {sorted(CELLS_IN_SERIES)}, "
                f"got {self.system_voltage}"
            )
        if self.charger_type not in CHARGER_MAX_CURRENT_A:
            errors.append(f"Unknown charger type: {self.charger_type}")
        if self.battery_capacity_kwh <= 0:
            errors.append(
                f"Battery capacity must be positive, got {self.battery_capacity_kwh} kWh"
            )
        if self.max_c_rate <= 0:
            errors.append(f"Max C-rate must be positive, got {self.max_c_rate}")
        if self.cooling_power < 0:
            errors.append("Cooling power cannot be negative")
        if not 0.0 <= self.initial_soc <= 1.0:
            errors.append("Initial SOC should be between 0 and 1")

        if errors:
            return False, "; ".join(errors)
        return True, ""
