"""
Passive Cell Balancing
======================

Bleeds the fullest cells down when the SOC spread across the pack grows
beyond a tolerance. The tolerance tightens as the pack fills:

    threshold = 0.1 - SOC_avg(%) / 1000

While balancing is active, the bleed amount (intensity) also feeds the
balancing current ceiling.
"""

from dataclasses import dataclass
from typing import Sequence, TYPE_CHECKING

from ..config import (
    BALANCING_BASE_THRESHOLD,
    BALANCING_THRESHOLD_SLOPE,
    BALANCING_INTENSITY_COEFF,
)
from .aggregates import calculate_average_soc, calculate_soc_range

if TYPE_CHECKING:
    from ..models.cell import Cell


@dataclass
class BalancingResult:
    """
    Outcome of one balancing pass.

    Attributes:
    ----------
    active : bool
        Whether the spread exceeded the threshold

    intensity : float
        SOC fraction bled from each selected cell (0 when inactive)

    spread : float
        Max - min cell SOC before bleeding (fraction)

    threshold : float
        Spread tolerance used for this pass

    cells_balanced : int
        Number of cells bled
    """
    active: bool
    intensity: float
    spread: float
    threshold: float
    cells_balanced: int = 0


def calculate_balancing_threshold(average_soc_percent: float) -> float:
    """Spread tolerance at the given average SOC (0-100%)."""
    return BALANCING_BASE_THRESHOLD - average_soc_percent / BALANCING_THRESHOLD_SLOPE


def calculate_balancing_intensity(average_soc_percent: float, spread: float) -> float:
    """
    Bleed amount per selected cell.

    intensity = k × SOC_avg(%) × spread
    """
    return BALANCING_INTENSITY_COEFF * average_soc_percent * spread


def balance_cells(cells: Sequence["Cell"]) -> BalancingResult:
    """
    Run one balancing pass over the cells.

    Cells whose SOC (in percent) is above the average SOC plus the
    threshold are bled by the intensity and flagged; all others are
    unflagged. Within tolerance nothing is bled and every flag is cleared.

    Parameters:
    ----------
    cells : Sequence[Cell]
        Cells of the pack, mutated in place

    Returns:
    -------
    BalancingResult
        Summary of the pass
    """
    min_soc, max_soc = calculate_soc_range(cells)
    spread = max_soc - min_soc
    average_soc_percent = calculate_average_soc(cells)
    threshold = calculate_balancing_threshold(average_soc_percent)

    if spread <= threshold:
        for cell in cells:
            cell.was_balanced = False
        return BalancingResult(False, 0.0, spread, threshold)

    intensity = calculate_balancing_intensity(average_soc_percent, spread)
    cutoff_percent = average_soc_percent + threshold

    bled = 0
    for cell in cells:
        if cell.state_of_charge * 100.0 > cutoff_percent:
            cell.bleed(intensity)
            cell.was_balanced = True
            bled += 1
        else:
            cell.was_balanced = False

    return BalancingResult(True, intensity, spread, threshold, bled)
