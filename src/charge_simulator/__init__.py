"""
EV Charging Simulator Module
============================

Simulates the charging of an electric-vehicle battery pack cell by cell,
reproducing the tapering charge curve of real fast charging.

Features:
---------
- 400V (108S) and 800V (216S) packs sized from a target kWh
- Per-cell imperfections drawn from a seeded generator
- Cell thermal model with resistive heating, cooling and battery heater
- Seven-way charging current limit with the binding constraint reported
- Passive balancing that tightens as the pack fills
- Host-driven stepping with time acceleration and a bounded history

Usage:
------
    from src.charge_simulator import ChargingConfig, ChargingSimulation

    config = ChargingConfig(system_voltage=800, charger_type="fast", seed=7)
    sim = ChargingSimulation.from_config(config, time_acceleration=60)

    sim.start()
    while sim.is_running:
        sim.advance(wall_delta_seconds=1 / 60)

    for point in sim.data_points:
        print(point.soc, point.power)
"""

from .models.cell import Cell, CellSpec
from .models.pack import ChargingPack
from .models.thermal import ThermalContributions
from .calculations.limits import LimitingFactor
from .calculations.balancing import BalancingResult
from .simulation.driver import ChargingSimulation, format_elapsed
from .simulation.history import DataPoint, SampleHistory
from .config import ChargingConfig, CHARGER_MAX_CURRENT_A, CELLS_IN_SERIES
from .debugger import CalculationDebugger, get_debugger, set_debugger, debug_step
from .debug_trace import trace_limit_calculation

__all__ = [
    # Core classes
    "Cell",
    "CellSpec",
    "ChargingPack",
    "ChargingSimulation",
    "format_elapsed",
    # Records
    "ThermalContributions",
    "BalancingResult",
    "DataPoint",
    "SampleHistory",
    # Enums
    "LimitingFactor",
    # Config
    "ChargingConfig",
    "CHARGER_MAX_CURRENT_A",
    "CELLS_IN_SERIES",
    # Debugger
    "CalculationDebugger",
    "get_debugger",
    "set_debugger",
    "debug_step",
    "trace_limit_calculation",
]
