"""
Charging History
================

Time series of charging samples, one per whole SOC percent, for charts
and reports.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any, Iterator, List, Optional

from ..config import MAX_DATA_POINTS


@dataclass(frozen=True)
class DataPoint:
    """
    One recorded sample.

    Attributes:
    ----------
    time : float
        Elapsed simulated time (s)

    soc : float
        Average state of charge (0-100%)

    power : float
        Charging power (kW)

    current : float
        Charging current (A)

    voltage : float
        Pack voltage (V)

    temperature : float
        Average cell temperature (°C)

    heating_enabled : bool
        Whether the battery heater was on
    """
    time: float
    soc: float
    power: float
    current: float
    voltage: float
    temperature: float
    heating_enabled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Export as dictionary."""
        return asdict(self)


class SampleHistory:
    """
    Ordered, bounded list of samples.

    When an append pushes the length past max_points, every other sample
    is dropped (entries at even positions are kept). Order is preserved;
    only chart resolution is lost.
    """

    def __init__(self, max_points: int = MAX_DATA_POINTS):
        if max_points < 1:
            raise ValueError(f"max_points must be at least 1, got {max_points}")
        self.max_points = max_points
        self._points: List[DataPoint] = []

    def append(self, point: DataPoint):
        """Add a sample, down-sampling if the bound is exceeded."""
        self._points.append(point)
        if len(self._points) > self.max_points:
            self._points = self._points[::2]

    def clear(self):
        """Remove all samples."""
        self._points = []

    @property
    def points(self) -> List[DataPoint]:
        """Copy of the recorded samples."""
        return list(self._points)

    @property
    def latest(self) -> Optional[DataPoint]:
        """Most recent sample, None when empty."""
        return self._points[-1] if self._points else None

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[DataPoint]:
        return iter(self._points)

    def __getitem__(self, index: int) -> DataPoint:
        return self._points[index]
