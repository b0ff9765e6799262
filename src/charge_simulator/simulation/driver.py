"""
Charging Simulation Driver
==========================

Advances a ChargingPack through virtual time in fixed one-second ticks and
records a down-sampled charging curve.

The driver owns no timer. The host calls advance() with the wall-clock time
that has passed (or poll(), which measures it), and the driver runs as many
ticks as that time covers at the current acceleration factor.
"""

import logging
import math
import time
from typing import Optional, List

from ..config import (
    ChargingConfig,
    CHARGER_MAX_CURRENT_A,
    TIME_STEP_S,
    MAX_DATA_POINTS,
)
from ..models.pack import ChargingPack, NOT_CHARGING
from .history import DataPoint, SampleHistory

logger = logging.getLogger(__name__)


class ChargingSimulation:
    """
    Stopped/Running state machine around one pack and one charger.

    Parameters:
    ----------
    pack : ChargingPack
        Pack to charge. A configuration change means a new pack and a new
        simulation, never mutation of this one.

    charger_type : str
        One of: fast, standard

    time_acceleration : int
        Simulated seconds per wall-clock second (>= 1)

    max_data_points : int
        Bound on the recorded history

    Example:
    -------
        sim = ChargingSimulation.from_config(ChargingConfig(seed=42))
        sim.start()
        while sim.is_running:
            sim.advance(wall_delta_seconds=0.016)
        print(sim.summary())
    """

    def __init__(
        self,
        pack: ChargingPack,
        charger_type: str = "fast",
        time_acceleration: int = 1,
        max_data_points: int = MAX_DATA_POINTS
    ):
        if charger_type not in CHARGER_MAX_CURRENT_A:
            raise ValueError(
                f"Charger type must be one of {sorted(CHARGER_MAX_CURRENT_A)}, "
                f"got {charger_type}"
            )

        self.pack = pack
        self.charger_type = charger_type
        self.charger_max_current_a = CHARGER_MAX_CURRENT_A[charger_type]
        self.time_step_s = TIME_STEP_S
        self.end_soc_percent = pack.config.end_soc_percent

        self._time_acceleration = _validate_acceleration(time_acceleration)
        self._is_running = False
        self._elapsed_s = 0.0
        self._last_update: Optional[float] = None
        self._last_current_a = 0.0
        self._history = SampleHistory(max_data_points)
        self._record_initial_point()

    @classmethod
    def from_config(
        cls,
        config: ChargingConfig,
        time_acceleration: int = 1
    ) -> "ChargingSimulation":
        """Build a pack from config and wrap it in a simulation."""
        pack = ChargingPack(config)
        return cls(pack, config.charger_type, time_acceleration)

    # =========================================================================
    # Public State
    # =========================================================================

    @property
    def is_running(self) -> bool:
        """Whether the simulation is advancing."""
        return self._is_running

    @property
    def elapsed_sim_seconds(self) -> float:
        """Simulated time since start or reset (s)."""
        return self._elapsed_s

    @property
    def time_acceleration(self) -> int:
        """Simulated seconds per wall-clock second."""
        return self._time_acceleration

    @property
    def data_points(self) -> List[DataPoint]:
        """Recorded samples in insertion order."""
        return self._history.points

    @property
    def history(self) -> SampleHistory:
        """The bounded sample history."""
        return self._history

    @property
    def current_a(self) -> float:
        """Charging current applied in the last tick (A)."""
        return self._last_current_a

    @property
    def is_full(self) -> bool:
        """Whether the pack has reached the end SOC."""
        return self.pack.average_state_of_charge >= self.end_soc_percent

    @property
    def limiting_factor(self) -> str:
        """Binding constraint label, 'Not charging' while stopped."""
        if not self._is_running:
            return NOT_CHARGING
        return self.pack.limiting_factor

    # =========================================================================
    # State Machine
    # =========================================================================

    def start(self, now: Optional[float] = None):
        """
        Start (or resume) charging.

        No-op while running. Captures the wall-clock reference used by
        poll(); elapsed time and history are kept.

        Parameters:
        ----------
        now : float, optional
            Wall-clock reference (s) in the clock the host passes to poll().
            When omitted, the reference is taken by the next poll(), which
            then runs a single tick.
        """
        if self._is_running:
            return
        self._is_running = True
        self._last_update = now
        logger.info(
            "Charging started at %.1f%% SOC (t=%.0fs, x%d)",
            self.pack.average_state_of_charge, self._elapsed_s, self._time_acceleration
        )

    def stop(self):
        """Stop charging. No-op while stopped."""
        if not self._is_running:
            return
        self._is_running = False
        logger.info(
            "Charging stopped at %.1f%% SOC (t=%.0fs)",
            self.pack.average_state_of_charge, self._elapsed_s
        )

    def reset(self, now: Optional[float] = None):
        """
        Restore the pack and clear elapsed time and history.

        The run state is kept; a running simulation continues from the
        restored pack with a fresh wall-clock reference.

        Parameters:
        ----------
        now : float, optional
            New wall-clock reference (s), see start()
        """
        self.pack.reset()
        self._elapsed_s = 0.0
        self._last_update = now
        self._last_current_a = 0.0
        self._history.clear()
        self._record_initial_point()
        logger.info("Simulation reset")

    def set_time_acceleration(self, factor: int, now: Optional[float] = None):
        """
        Change the acceleration factor.

        A running simulation is restarted so the wall-clock reference is
        taken afresh; otherwise the next poll would see the whole gap since
        the last one at the new factor.

        Parameters:
        ----------
        factor : int
            Simulated seconds per wall-clock second (>= 1)

        now : float, optional
            New wall-clock reference (s), see start()
        """
        self._time_acceleration = _validate_acceleration(factor)
        if self._is_running:
            self.stop()
            self.start(now)

    # =========================================================================
    # Stepping
    # =========================================================================

    def advance(self, wall_delta_seconds: float) -> int:
        """
        Run the ticks covered by a wall-clock interval.

        ticks = max(1, floor(Δt_wall × acceleration / step))

        Stops early when the pack is full. Does nothing while stopped.

        Parameters:
        ----------
        wall_delta_seconds : float
            Wall-clock time since the previous call (s)

        Returns:
        -------
        int
            Ticks executed
        """
        if not self._is_running:
            return 0

        budget_s = max(0.0, wall_delta_seconds) * self._time_acceleration
        steps = max(1, math.floor(budget_s / self.time_step_s))

        executed = 0
        for _ in range(steps):
            self.tick()
            executed += 1
            if not self._is_running:
                break
        return executed

    def poll(self, now: Optional[float] = None) -> int:
        """
        Advance by the wall-clock time since the previous poll or start.

        Parameters:
        ----------
        now : float, optional
            Current wall-clock time (s), defaults to time.monotonic()

        Returns:
        -------
        int
            Ticks executed
        """
        if not self._is_running:
            return 0
        now = time.monotonic() if now is None else now
        delta = 0.0 if self._last_update is None else now - self._last_update
        self._last_update = now
        return self.advance(delta)

    def tick(self) -> DataPoint:
        """
        Advance the simulation by one fixed step.

        Returns:
        -------
        DataPoint
            State after the tick, whether or not it was recorded
        """
        self.pack.update_heating_state()

        current = self.pack.calculate_limited_current(self.charger_max_current_a)
        self.pack.apply_charge(current, self.time_step_s / 3600.0)
        self._last_current_a = current

        point = self._make_point(current)
        if math.floor(point.soc) > self._last_recorded_percent:
            self._history.append(point)
            self._last_recorded_percent = math.floor(point.soc)

        self._elapsed_s += self.time_step_s

        if point.soc >= self.end_soc_percent:
            if self._is_running:
                logger.info("Pack full after %.0fs", self._elapsed_s)
            self._is_running = False

        return point

    def run_until_full(self, max_ticks: Optional[int] = None) -> int:
        """
        Charge headlessly until full or until max_ticks have run.

        Returns:
        -------
        int
            Ticks executed
        """
        self.start()
        executed = 0
        while self._is_running and (max_ticks is None or executed < max_ticks):
            self.tick()
            executed += 1
        return executed

    # =========================================================================
    # Samples and Reporting
    # =========================================================================

    def _make_point(self, current: float) -> DataPoint:
        voltage = self.pack.total_voltage
        return DataPoint(
            time=self._elapsed_s,
            soc=self.pack.average_state_of_charge,
            power=voltage * current / 1000.0,
            current=current,
            voltage=voltage,
            temperature=self.pack.average_temperature,
            heating_enabled=self.pack.heating_active,
        )

    def _record_initial_point(self):
        point = self._make_point(0.0)
        self._history.append(point)
        self._last_recorded_percent = math.floor(point.soc)

    def summary(self) -> str:
        """Generate formatted status string."""
        latest = self._history.latest
        power = latest.power if latest else 0.0
        current = latest.current if latest else 0.0

        lines = [
            f"Charging Simulation ({self.charger_type} charger, "
            f"{self.charger_max_current_a:.0f}A)",
            f"=" * 50,
            f"  Status: {'running' if self._is_running else 'stopped'}",
            f"  Elapsed: {format_elapsed(self._elapsed_s)}",
            f"  SOC: {self.pack.average_state_of_charge:.1f}%",
            f"  Power: {power:.1f}kW ({current:.1f}A)",
            f"  Pack Voltage: {self.pack.total_voltage:.1f}V",
            f"  Temperature: {self.pack.average_temperature:.1f}°C avg, "
            f"{self.pack.max_temperature:.1f}°C max",
            f"  Cell Voltage: {self.pack.min_cell_voltage:.2f}V - "
            f"{self.pack.max_cell_voltage:.2f}V (Δ{self.pack.voltage_difference:.2f}V)",
            f"  Limiting Factor: {self.limiting_factor}",
        ]
        return "\n".join(lines)


def format_elapsed(seconds: float) -> str:
    """Format seconds as HH:MM:SS."""
    seconds = int(seconds)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def _validate_acceleration(factor: int) -> int:
    if int(factor) != factor or factor < 1:
        raise ValueError(f"Time acceleration must be an integer >= 1, got {factor}")
    return int(factor)
