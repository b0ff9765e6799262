"""
Charging Simulator Models
=========================

Stateful models of the cells and the pack under charge.
"""

from .cell import Cell, CellSpec
from .thermal import ThermalContributions
from .pack import ChargingPack, calculate_cells_in_parallel

__all__ = [
    "Cell",
    "CellSpec",
    "ThermalContributions",
    "ChargingPack",
    "calculate_cells_in_parallel",
]
