#!/usr/bin/env python3
"""
EV Charging Simulator Launcher
==============================

Runs a headless charging session and prints the charging curve.

The pack is built from the command-line configuration, charged until the
end SOC is reached (or the tick budget runs out), and one row is printed
per recorded sample, followed by a status summary.

Usage:
    python run_charging_simulator.py --voltage 800 --capacity 90 --seed 7
    python run_charging_simulator.py --temperature -5 --heating --trace

Requirements:
    - Python 3.9+
    - numpy
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent))

from src.charge_simulator import (
    ChargingConfig,
    ChargingSimulation,
    CHARGER_MAX_CURRENT_A,
    CELLS_IN_SERIES,
    trace_limit_calculation,
)
from src.charge_simulator.config import DEFAULT_END_SOC_PERCENT


def build_parser() -> argparse.ArgumentParser:
    """Command-line options mirroring ChargingConfig."""
    parser = argparse.ArgumentParser(description="Simulate charging an EV battery pack")
    parser.add_argument("--voltage", type=int, default=400, choices=sorted(CELLS_IN_SERIES),
                        help="System voltage (V)")
    parser.add_argument("--charger", default="fast", choices=sorted(CHARGER_MAX_CURRENT_A),
                        help="Charger type")
    parser.add_argument("--capacity", type=float, default=80.0,
                        help="Battery capacity (kWh)")
    parser.add_argument("--c-rate", type=float, default=2.0,
                        help="Maximum C-rate")
    parser.add_argument("--cooling", type=float, default=1.0,
                        help="Cooling power coefficient (1/h)")
    parser.add_argument("--car-power", type=float, default=None,
                        help="Vehicle charging power cap (kW)")
    parser.add_argument("--temperature", type=float, default=25.0,
                        help="Initial pack temperature (C)")
    parser.add_argument("--ambient", type=float, default=None,
                        help="Ambient temperature (C), defaults to --temperature")
    parser.add_argument("--heating", action="store_true",
                        help="Enable battery heating")
    parser.add_argument("--initial-soc", type=float, default=0.0,
                        help="Initial SOC (0-1)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed for reproducible runs")
    parser.add_argument("--end-soc", type=float, default=DEFAULT_END_SOC_PERCENT,
                        help="Average SOC (%%) at which charging stops")
    parser.add_argument("--max-ticks", type=int, default=None,
                        help="Stop after this many simulated seconds")
    parser.add_argument("--trace", action="store_true",
                        help="Print the current limit trace before charging")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log simulation events")
    return parser


def main(argv=None) -> int:
    """Run the simulation described by the command line."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    config = ChargingConfig(
        system_voltage=args.voltage,
        charger_type=args.charger,
        max_c_rate=args.c_rate,
        cooling_power=args.cooling,
        battery_capacity_kwh=args.capacity,
        max_car_power_kw=args.car_power,
        initial_temperature_c=args.temperature,
        ambient_temperature_c=args.ambient,
        battery_heating_enabled=args.heating,
        initial_soc=args.initial_soc,
        seed=args.seed,
        end_soc_percent=args.end_soc,
    )

    try:
        sim = ChargingSimulation.from_config(config)
    except ValueError as error:
        print(f"Error: {error}", file=sys.stderr)
        return 2

    print("=" * 60)
    print("EV Charging Simulator")
    print("=" * 60)
    print(sim.pack.summary())
    print()

    if args.trace:
        print(trace_limit_calculation(sim.pack, sim.charger_max_current_a).get_report())
        print()

    sim.run_until_full(max_ticks=args.max_ticks)

    print(f"{'Time (s)':>9} {'SOC (%)':>8} {'Power (kW)':>11} {'Current (A)':>12} "
          f"{'Voltage (V)':>12} {'Temp (C)':>9}")
    for point in sim.data_points:
        print(f"{point.time:9.0f} {point.soc:8.1f} {point.power:11.1f} {point.current:12.1f} "
              f"{point.voltage:12.1f} {point.temperature:9.1f}")

    print()
    print(sim.summary())
    return 0


if __name__ == "__main__":
    sys.exit(main())
