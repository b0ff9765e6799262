"""
Pack Aggregate Calculations
===========================

Pure functions computing pack-level quantities from the cell collection.
Nothing here is cached: every call reads the cells as they are now.
"""

from typing import Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from ..models.cell import Cell


def calculate_average_soc(cells: Sequence["Cell"]) -> float:
    """
    Calculate the energy-weighted average state of charge.

    SOC_avg = Σ(SOC_i × C_i × V_i) / Σ(C_i × V_i)

    Cell voltage rises with SOC, so fuller cells carry more weight than
    in a plain arithmetic mean.

    Parameters:
    ----------
    cells : Sequence[Cell]
        Cells of the pack

    Returns:
    -------
    float
        Average state of charge (0-100%)
    """
    stored = 0.0
    weight = 0.0
    for cell in cells:
        cell_weight = cell.capacity_ah * cell.voltage
        stored += cell.state_of_charge * cell_weight
        weight += cell_weight

    if weight <= 0:
        return 0.0
    return stored / weight * 100.0


def calculate_pack_voltage(
    cells: Sequence["Cell"],
    cells_in_series: int,
    cells_in_parallel: int
) -> float:
    """
    Calculate pack terminal voltage.

    V_pack = Σ_s (1/P × Σ_p V(s, p)), index(s, p) = s + p × S

    Parameters:
    ----------
    cells : Sequence[Cell]
        Cells in grid order

    cells_in_series : int
        Series count (S)

    cells_in_parallel : int
        Parallel count (P)

    Returns:
    -------
    float
        Pack voltage (V)
    """
    total = 0.0
    for s in range(cells_in_series):
        group = 0.0
        for p in range(cells_in_parallel):
            group += cells[s + p * cells_in_series].voltage
        total += group / cells_in_parallel
    return total


def calculate_average_temperature(cells: Sequence["Cell"]) -> float:
    """Arithmetic mean cell temperature (°C)."""
    return sum(cell.temperature_c for cell in cells) / len(cells)


def calculate_max_temperature(cells: Sequence["Cell"]) -> float:
    """Hottest cell temperature (°C)."""
    return max(cell.temperature_c for cell in cells)


def calculate_min_temperature(cells: Sequence["Cell"]) -> float:
    """Coldest cell temperature (°C)."""
    return min(cell.temperature_c for cell in cells)


def calculate_soc_range(cells: Sequence["Cell"]) -> tuple[float, float]:
    """(min, max) cell SOC as fractions."""
    socs = [cell.state_of_charge for cell in cells]
    return min(socs), max(socs)


def calculate_voltage_range(cells: Sequence["Cell"]) -> tuple[float, float]:
    """(min, max) cell voltage (V)."""
    voltages = [cell.voltage for cell in cells]
    return min(voltages), max(voltages)
