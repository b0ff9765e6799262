"""
Charging Simulation
===================

Time-stepped driver and recorded charging curve.
"""

from .driver import ChargingSimulation, format_elapsed
from .history import DataPoint, SampleHistory

__all__ = [
    "ChargingSimulation",
    "format_elapsed",
    "DataPoint",
    "SampleHistory",
]
