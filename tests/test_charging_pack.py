"""
Charging Pack Validation Tests
==============================

Validates the cell model, pack aggregates, the charging current limit
and passive balancing.

Test Methodology:
- Verify SOC stays within [0, 1] under any charge input
- Verify the average SOC is energy-weighted
- Verify each current ceiling against its closed form
- Verify the binding constraint is reported with the current
- Verify reset restores the exact post-construction state
"""

import math
import sys
from pathlib import Path
import unittest

import numpy as np

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.charge_simulator import (
    Cell,
    CellSpec,
    ChargingPack,
    ChargingConfig,
    LimitingFactor,
    CalculationDebugger,
    set_debugger,
    trace_limit_calculation,
)
from src.charge_simulator.calculations.aggregates import calculate_average_soc
from src.charge_simulator.calculations.limits import (
    UNBOUNDED,
    calculate_car_power_limit,
    calculate_hot_temperature_limit,
    calculate_cold_temperature_limit,
    calculate_soc_limit,
    calculate_balancing_limit,
    select_limiting_ceiling,
)
from src.charge_simulator.models.pack import calculate_cells_in_parallel


# 1 kWh is below one 800V string, so this clamps to a single 108S string
SMALL_PACK = dict(battery_capacity_kwh=1.0, temperature_noise=False, seed=11)


class TestCell(unittest.TestCase):
    """Test single-cell charge, voltage and temperature."""

    def setUp(self):
        """Ideal cell (no generator): efficiency 1.0, resistance 10 mOhm."""
        self.spec = CellSpec()
        self.cell = Cell(self.spec, initial_soc=0.0, initial_temperature_c=25.0)

    def test_voltage_linear_in_soc(self):
        """Voltage interpolates between 3.4V and 4.2V."""
        self.assertAlmostEqual(self.cell.voltage, 3.4)
        self.cell.state_of_charge = 0.5
        self.assertAlmostEqual(self.cell.voltage, 3.8)
        self.cell.state_of_charge = 1.0
        self.assertAlmostEqual(self.cell.voltage, 4.2)

    def test_update_charge_adds_ampere_hours(self):
        """10A for 0.5h into a 10Ah ideal cell gives 50% SOC."""
        self.cell.update_charge(10.0, 0.5)
        self.assertAlmostEqual(self.cell.charge_ah, 5.0)
        self.assertAlmostEqual(self.cell.state_of_charge, 0.5)

    def test_overcharge_is_clipped(self):
        """SOC never exceeds 1 even for huge charge input."""
        self.cell.update_charge(10000.0, 1.0)
        self.assertEqual(self.cell.state_of_charge, 1.0)
        self.cell.update_charge(10000.0, 1.0)
        self.assertEqual(self.cell.state_of_charge, 1.0)

    def test_negative_charge_is_clipped(self):
        """SOC never drops below 0."""
        self.cell.update_charge(-10000.0, 1.0)
        self.assertEqual(self.cell.state_of_charge, 0.0)

    def test_soc_setter_clamps(self):
        """Direct SOC writes are clamped."""
        self.cell.state_of_charge = 1.5
        self.assertEqual(self.cell.state_of_charge, 1.0)
        self.cell.state_of_charge = -0.5
        self.assertEqual(self.cell.state_of_charge, 0.0)

    def test_bleed_reduces_soc(self):
        """Balancing bleed removes SOC and clamps at zero."""
        self.cell.state_of_charge = 0.6
        self.cell.bleed(0.1)
        self.assertAlmostEqual(self.cell.state_of_charge, 0.5)
        self.cell.bleed(1.0)
        self.assertEqual(self.cell.state_of_charge, 0.0)

    def test_no_current_at_ambient_is_steady(self):
        """Without current or heater a cell at ambient stays put."""
        self.cell.update_temperature(0.0, 1.0, cooling_coefficient=1.0)
        self.assertAlmostEqual(self.cell.temperature_c, 25.0)

    def test_heater_adds_heat(self):
        """Heater adds 50°C/h at ambient."""
        self.cell.heating_enabled = True
        contributions = self.cell.update_temperature(0.0, 0.01, cooling_coefficient=1.0)
        self.assertAlmostEqual(self.cell.temperature_c, 25.5)
        self.assertEqual(contributions.cooling_c_per_h, 0.0)

    def test_resistive_heating_threshold(self):
        """Currents at or below 0.1A do not self-heat."""
        contributions = self.cell.update_temperature(0.05, 1.0, cooling_coefficient=0.0)
        self.assertEqual(contributions.resistive_c_per_h, 0.0)

        contributions = self.cell.update_temperature(10.0, 0.0, cooling_coefficient=0.0)
        self.assertGreater(contributions.resistive_c_per_h, 0.0)

    def test_resistive_heating_scales_with_current_squared(self):
        """I²R heating quadruples when current doubles."""
        low = self.cell.update_temperature(5.0, 0.0, 0.0).resistive_c_per_h
        high = self.cell.update_temperature(10.0, 0.0, 0.0).resistive_c_per_h
        self.assertAlmostEqual(high / low, 4.0)

    def test_cooling_pulls_towards_ambient(self):
        """A hot cell without heater cools down."""
        self.cell.temperature_c = 45.0
        contributions = self.cell.update_temperature(0.0, 0.01, cooling_coefficient=2.0)
        self.assertLess(contributions.cooling_c_per_h, 0.0)
        self.assertLess(contributions.ambient_c_per_h, 0.0)
        self.assertLess(self.cell.temperature_c, 45.0)

    def test_reset_restores_initial_state(self):
        """Reset restores the initial SOC and the given temperature."""
        self.cell.update_charge(5.0, 1.0)
        self.cell.temperature_c = 33.0
        self.cell.heating_enabled = True
        self.cell.reset(20.0)
        self.assertEqual(self.cell.state_of_charge, 0.0)
        self.assertEqual(self.cell.temperature_c, 20.0)
        self.assertFalse(self.cell.heating_enabled)

    def test_random_imperfections_within_bounds(self):
        """Seeded cells spread resistance ±20%, efficiency 0.95-1.05, SOC ±5%."""
        rng = np.random.default_rng(0)
        cells = [Cell(self.spec, initial_soc=0.5, rng=rng) for _ in range(200)]

        for cell in cells:
            self.assertGreaterEqual(cell.internal_resistance_ohm, 0.008 - 1e-12)
            self.assertLessEqual(cell.internal_resistance_ohm, 0.012 + 1e-12)
            self.assertGreaterEqual(cell.charge_efficiency, 0.95)
            self.assertLessEqual(cell.charge_efficiency, 1.05)
            self.assertGreaterEqual(cell.state_of_charge, 0.475 - 1e-12)
            self.assertLessEqual(cell.state_of_charge, 0.525 + 1e-12)

        efficiencies = {cell.charge_efficiency for cell in cells}
        self.assertGreater(len(efficiencies), 1)

    def test_same_seed_same_cells(self):
        """The same seed reproduces the same imperfections."""
        a = Cell(self.spec, 0.5, rng=np.random.default_rng(42))
        b = Cell(self.spec, 0.5, rng=np.random.default_rng(42))
        self.assertEqual(a.internal_resistance_ohm, b.internal_resistance_ohm)
        self.assertEqual(a.state_of_charge, b.state_of_charge)

    def test_invalid_spec_rejected(self):
        """Non-positive capacity is a configuration error."""
        with self.assertRaises(ValueError):
            CellSpec(capacity_ah=0.0)


class TestAggregates(unittest.TestCase):
    """Test pack aggregate calculations."""

    def test_average_soc_is_energy_weighted(self):
        """Two cells at 0% and 100% do not average to 50%.

        Weights are C × V: 10 × 3.4 and 10 × 4.2, so the average is
        4.2 / 7.6 = 55.26%.
        """
        spec = CellSpec()
        empty = Cell(spec, initial_soc=0.0)
        full = Cell(spec, initial_soc=1.0)

        average = calculate_average_soc([empty, full])

        self.assertAlmostEqual(average, 100.0 * 4.2 / 7.6, places=6)
        self.assertNotAlmostEqual(average, 50.0, places=1)

    def test_equal_cells_average_to_their_soc(self):
        """Identical cells average to their own SOC."""
        spec = CellSpec()
        cells = [Cell(spec, initial_soc=0.3) for _ in range(4)]
        self.assertAlmostEqual(calculate_average_soc(cells), 30.0)


class TestPackConstruction(unittest.TestCase):
    """Test pack layout and configuration handling."""

    def test_reference_400v_pack(self):
        """400V / 80kWh gives 108S20P."""
        pack = ChargingPack(ChargingConfig(system_voltage=400, battery_capacity_kwh=80.0, seed=1))
        self.assertEqual(pack.cells_in_series, 108)
        self.assertEqual(pack.cells_in_parallel, 20)
        self.assertEqual(pack.total_cells, 2160)
        self.assertEqual(pack.configuration_string, "108S20P")

    def test_reference_800v_pack(self):
        """800V / 80kWh gives 216S10P, the same cell count as 400V."""
        pack = ChargingPack(ChargingConfig(system_voltage=800, battery_capacity_kwh=80.0, seed=1))
        self.assertEqual(pack.cells_in_series, 216)
        self.assertEqual(pack.cells_in_parallel, 10)
        self.assertEqual(pack.total_cells, 2160)

    def test_energy_capacity(self):
        """2160 cells × 37Wh = 79.92kWh."""
        pack = ChargingPack(ChargingConfig(battery_capacity_kwh=80.0, seed=1))
        self.assertAlmostEqual(pack.energy_capacity_kwh, 79.92)
        self.assertAlmostEqual(pack.total_capacity_ah, 21600.0)

    def test_parallel_count_clamped(self):
        """Tiny and huge packs are clamped rather than rejected."""
        self.assertEqual(calculate_cells_in_parallel(1.0, 400, 37.0), 1)
        self.assertEqual(calculate_cells_in_parallel(1.0, 800, 37.0), 1)
        self.assertEqual(calculate_cells_in_parallel(10000.0, 400, 37.0), 64)

    def test_invalid_configuration_rejected(self):
        """Zero capacity and unknown voltages raise ValueError."""
        with self.assertRaises(ValueError):
            ChargingPack(ChargingConfig(battery_capacity_kwh=0.0))
        with self.assertRaises(ValueError):
            ChargingPack(ChargingConfig(battery_capacity_kwh=-5.0))
        with self.assertRaises(ValueError):
            ChargingPack(ChargingConfig(system_voltage=600))
        with self.assertRaises(ValueError):
            ChargingPack(ChargingConfig(charger_type="turbo"))

    def test_user_values_clamped(self):
        """Out-of-range adjustable values are clamped at construction."""
        pack = ChargingPack(ChargingConfig(
            max_c_rate=-1.0, cooling_power=-3.0, max_car_power_kw=0.0,
            initial_soc=1.7, **SMALL_PACK
        ))
        self.assertGreater(pack.config.max_c_rate, 0.0)
        self.assertEqual(pack.config.cooling_power, 0.0)
        self.assertIsNone(pack.config.max_car_power_kw)
        self.assertEqual(pack.config.initial_soc, 1.0)

    def test_grid_index_mapping(self):
        """index(s, p) = s + p × S, grids are (series, parallel)."""
        pack = ChargingPack(ChargingConfig(battery_capacity_kwh=80.0, seed=2))
        for i, cell in enumerate(pack.cells):
            cell.temperature_c = float(i)

        grid = pack.get_temperature_grid()
        self.assertEqual(grid.shape, (108, 20))
        self.assertEqual(grid[5, 3], 5 + 3 * 108)
        self.assertIs(pack.cell_at(5, 3), pack.cells[5 + 3 * 108])
        self.assertEqual(pack.get_soc_grid()[7, 2], pack.cell_at(7, 2).state_of_charge)

        with self.assertRaises(IndexError):
            pack.cell_at(108, 0)

    def test_pack_voltage_sums_series_groups(self):
        """Empty 108S pack sits at 108 × 3.4V."""
        pack = ChargingPack(ChargingConfig(**SMALL_PACK))
        self.assertAlmostEqual(pack.total_voltage, 108 * 3.4)
        self.assertAlmostEqual(pack.min_cell_voltage, 3.4)
        self.assertAlmostEqual(pack.voltage_difference, 0.0)


class TestCurrentLimits(unittest.TestCase):
    """Test the seven charging current ceilings."""

    CHARGER = 625.0

    def setUp(self):
        """Small empty pack at 25°C."""
        self.pack = ChargingPack(ChargingConfig(**SMALL_PACK))

    def set_temperature(self, temp_c):
        for cell in self.pack.cells:
            cell.temperature_c = temp_c

    def test_limiting_factor_before_first_calculation(self):
        """No limit calculated yet reads as not charging."""
        self.assertEqual(self.pack.limiting_factor, "Not charging")

    def test_charger_limited_at_room_temperature(self):
        """A cool, empty pack takes the full charger current."""
        current = self.pack.calculate_limited_current(self.CHARGER)
        self.assertEqual(current, self.CHARGER)
        self.assertEqual(self.pack.limiting_factor, "Charger")
        self.assertIs(self.pack.limiting_factor_enum, LimitingFactor.CHARGER)

    def test_car_power_cap(self):
        """50kW at 367.2V limits to ~136A and is reported as Car."""
        pack = ChargingPack(ChargingConfig(max_car_power_kw=50.0, **SMALL_PACK))
        current = pack.calculate_limited_current(self.CHARGER)
        self.assertAlmostEqual(current, 50000.0 / (108 * 3.4))
        self.assertEqual(pack.limiting_factor, "Car")

    def test_car_power_limit_function(self):
        """Car ceiling is P / V and unbounded without a cap."""
        self.assertAlmostEqual(calculate_car_power_limit(100.0, 400.0), 250.0)
        self.assertEqual(calculate_car_power_limit(None, 400.0), UNBOUNDED)
        self.assertEqual(calculate_car_power_limit(100.0, 0.0), UNBOUNDED)

    def test_never_exceeds_charger(self):
        """No pack state yields more than the charger current."""
        rng = np.random.default_rng(5)
        for _ in range(20):
            for cell in self.pack.cells:
                cell.state_of_charge = rng.random()
                cell.temperature_c = rng.uniform(-30.0, 70.0)
            current = self.pack.calculate_limited_current(self.CHARGER)
            self.assertLessEqual(current, self.CHARGER)
            self.assertGreaterEqual(current, 0.0)

    def test_hot_limit_monotonic(self):
        """Current never rises as the hottest cell heats past 40°C."""
        previous = float('inf')
        for temp in np.arange(35.0, 70.0, 0.5):
            self.set_temperature(float(temp))
            current = self.pack.calculate_limited_current(self.CHARGER)
            self.assertLessEqual(current, previous)
            previous = current

        self.assertEqual(previous, 0.0)
        self.assertEqual(self.pack.limiting_factor, "Temperature (hot)")

    def test_hot_limit_closed_form(self):
        """At 52.5°C the hot ceiling is half the charger current."""
        self.assertEqual(calculate_hot_temperature_limit(self.CHARGER, 40.0), UNBOUNDED)
        self.assertAlmostEqual(calculate_hot_temperature_limit(self.CHARGER, 52.5), 312.5)
        self.assertEqual(calculate_hot_temperature_limit(self.CHARGER, 90.0), 0.0)

    def test_cold_limit_never_zero(self):
        """Even at -40°C the cold ceiling keeps charging alive."""
        for temp in (19.0, 5.0, 0.0, -10.0, -40.0, -273.0):
            self.assertGreater(calculate_cold_temperature_limit(self.CHARGER, temp), 0.0)

        self.set_temperature(-40.0)
        current = self.pack.calculate_limited_current(self.CHARGER)
        self.assertAlmostEqual(current, self.CHARGER * (5.0 / 20.0) ** 2)
        self.assertGreater(current, 0.0)
        self.assertEqual(self.pack.limiting_factor, "Temperature (cold)")

    def test_cold_limit_unbounded_when_warm(self):
        """At or above 20°C there is no cold ceiling."""
        self.assertEqual(calculate_cold_temperature_limit(self.CHARGER, 20.0), UNBOUNDED)

    def test_soc_taper(self):
        """SOC taper starts at 70% and follows exp(-8 × (SOC - 0.7))."""
        self.assertEqual(calculate_soc_limit(self.CHARGER, 70.0), UNBOUNDED)
        self.assertAlmostEqual(
            calculate_soc_limit(self.CHARGER, 80.0), self.CHARGER * math.exp(-0.8)
        )
        self.assertLess(
            calculate_soc_limit(self.CHARGER, 95.0), calculate_soc_limit(self.CHARGER, 85.0)
        )

    def test_balancing_limit(self):
        """Balancing ceiling scales with intensity and floors at zero."""
        self.assertEqual(calculate_balancing_limit(self.CHARGER, 0.0), UNBOUNDED)
        self.assertAlmostEqual(calculate_balancing_limit(self.CHARGER, 0.01), 312.5)
        self.assertEqual(calculate_balancing_limit(self.CHARGER, 0.05), 0.0)

    def test_exact_tie_goes_to_priority_order(self):
        """Equal ceilings resolve to the first in priority order."""
        ceilings = [
            (300.0, LimitingFactor.CHARGER),
            (300.0, LimitingFactor.CAR),
            (float('inf'), LimitingFactor.SOC),
        ]
        self.assertEqual(select_limiting_ceiling(ceilings), (300.0, LimitingFactor.CHARGER))

    def test_limit_calculation_has_no_heating_side_effect(self):
        """Calculating the limit never switches the heater."""
        pack = ChargingPack(ChargingConfig(battery_heating_enabled=True, **SMALL_PACK))
        pack.calculate_limited_current(self.CHARGER)
        self.assertTrue(pack.heating_active)

        self.assertTrue(pack.update_heating_state())
        self.assertFalse(pack.heating_active)
        self.assertFalse(any(cell.heating_enabled for cell in pack.cells))

    def test_heater_stays_on_while_cold(self):
        """Below 20°C the heater keeps running."""
        pack = ChargingPack(ChargingConfig(
            battery_heating_enabled=True, initial_temperature_c=-5.0, **SMALL_PACK
        ))
        self.assertFalse(pack.update_heating_state())
        self.assertTrue(pack.heating_active)


class TestBalancing(unittest.TestCase):
    """Test passive balancing and its current penalty."""

    def setUp(self):
        """Small pack with all cells at 50%."""
        self.pack = ChargingPack(ChargingConfig(**SMALL_PACK))
        for cell in self.pack.cells:
            cell.state_of_charge = 0.5

    def test_within_tolerance_no_balancing(self):
        """Identical cells are left alone."""
        result = self.pack.balance_cells()
        self.assertFalse(result.active)
        self.assertEqual(self.pack.balancing_intensity, 0.0)
        self.assertEqual(self.pack.cells_balanced, 0)

    def test_high_cell_is_bled(self):
        """One cell 10 points above the rest is bled and flagged."""
        high = self.pack.cells[0]
        high.state_of_charge = 0.6
        average = self.pack.average_state_of_charge

        result = self.pack.balance_cells()

        self.assertTrue(result.active)
        self.assertAlmostEqual(result.spread, 0.1)
        self.assertAlmostEqual(result.intensity, 0.002 * average * 0.1)
        self.assertAlmostEqual(high.state_of_charge, 0.6 - result.intensity)
        self.assertTrue(high.was_balanced)
        self.assertEqual(self.pack.cells_balanced, 1)
        self.assertEqual(result.cells_balanced, 1)

    def test_balancing_limits_current(self):
        """Active balancing caps the current at I × (1 - 50 × intensity)."""
        self.pack.cells[0].state_of_charge = 0.6
        self.pack.balance_cells()

        current = self.pack.calculate_limited_current(625.0)

        expected = 625.0 * (1.0 - self.pack.balancing_intensity * 50.0)
        self.assertAlmostEqual(current, expected)
        self.assertEqual(self.pack.limiting_factor, "Cell balancing")

    def test_balancing_clears_when_spread_closes(self):
        """Intensity and flags reset once the spread is within tolerance."""
        self.pack.cells[0].state_of_charge = 0.6
        self.pack.balance_cells()
        self.pack.cells[0].state_of_charge = 0.5

        result = self.pack.balance_cells()

        self.assertFalse(result.active)
        self.assertEqual(self.pack.balancing_intensity, 0.0)
        self.assertFalse(self.pack.cells[0].was_balanced)


class TestPackChargeAndReset(unittest.TestCase):
    """Test charge application and reset."""

    def test_soc_bounded_under_overcharge(self):
        """Massive overcharge leaves every cell within [0, 1]."""
        pack = ChargingPack(ChargingConfig(**SMALL_PACK))
        for _ in range(5):
            pack.apply_charge(10000.0, 0.1)
            for cell in pack.cells:
                self.assertGreaterEqual(cell.state_of_charge, 0.0)
                self.assertLessEqual(cell.state_of_charge, 1.0)

    def test_reset_round_trip(self):
        """Reset reproduces the state observed right after construction."""
        pack = ChargingPack(ChargingConfig(
            initial_soc=0.2, battery_capacity_kwh=10.0, seed=3
        ))
        socs = [cell.state_of_charge for cell in pack.cells]
        temps = [cell.temperature_c for cell in pack.cells]
        average_soc = pack.average_state_of_charge

        for _ in range(10):
            current = pack.calculate_limited_current(500.0)
            pack.apply_charge(current, 10.0 / 3600.0)
        self.assertNotEqual([cell.state_of_charge for cell in pack.cells], socs)

        pack.reset()

        self.assertEqual([cell.state_of_charge for cell in pack.cells], socs)
        self.assertEqual([cell.temperature_c for cell in pack.cells], temps)
        self.assertEqual(pack.average_state_of_charge, average_soc)
        self.assertEqual(pack.limiting_factor, "Not charging")
        self.assertEqual(pack.balancing_intensity, 0.0)

    def test_reset_reapplies_heating(self):
        """Heating comes back on after reset when configured."""
        pack = ChargingPack(ChargingConfig(battery_heating_enabled=True, **SMALL_PACK))
        pack.disable_heating()
        pack.reset()
        self.assertTrue(pack.heating_active)
        self.assertTrue(all(cell.heating_enabled for cell in pack.cells))

    def test_fixed_current_taper_near_80_percent(self):
        """At a fixed 300A the SOC ceiling only bites around 80% SOC.

        400V / 80kWh pack held near ambient by strong cooling. The SOC
        ceiling for a 625A charger drops below 300A at
        70% + ln(625/300) / 8 ≈ 79.2%.
        """
        pack = ChargingPack(ChargingConfig(
            battery_capacity_kwh=80.0, cooling_power=60.0,
            temperature_noise=False, seed=4
        ))
        delta_hours = 30.0 / 3600.0
        crossing_soc = None

        for _ in range(200):
            pack.apply_charge(300.0, delta_hours)
            ceilings = {factor: value for value, factor in pack.evaluate_ceilings(625.0)}
            self.assertEqual(ceilings[LimitingFactor.TEMPERATURE_HOT], UNBOUNDED)
            if ceilings[LimitingFactor.SOC] < 300.0:
                crossing_soc = pack.average_state_of_charge
                break

        self.assertIsNotNone(crossing_soc)
        self.assertGreater(crossing_soc, 78.0)
        self.assertLess(crossing_soc, 82.0)
        self.assertLess(pack.max_temperature, 35.0)


class TestDebugTrace(unittest.TestCase):
    """Test limit tracing."""

    def tearDown(self):
        set_debugger(None)

    def test_global_debugger_records_ceilings(self):
        """Each limit calculation publishes seven ceilings and the result."""
        pack = ChargingPack(ChargingConfig(**SMALL_PACK))
        debugger = CalculationDebugger()
        set_debugger(debugger)

        current = pack.calculate_limited_current(625.0)

        self.assertEqual(len(debugger.find_steps_by_category("Limit")), 8)
        self.assertEqual(debugger.find_step_by_result("I_limited").result, current)

    def test_published_ceilings_carry_formula_and_inputs(self):
        """Per-tick ceiling steps name their formula and the values read."""
        pack = ChargingPack(ChargingConfig(max_car_power_kw=50.0, **SMALL_PACK))
        debugger = CalculationDebugger()
        set_debugger(debugger)

        pack.calculate_limited_current(625.0)

        ceiling_steps = [
            step for step in debugger.find_steps_by_category("Limit")
            if step.result_name != "I_limited"
        ]
        self.assertEqual(len(ceiling_steps), 7)
        for step in ceiling_steps:
            self.assertTrue(step.formula)
            self.assertTrue(step.variables)

        car = debugger.find_step_by_result("I_car")
        self.assertEqual(car.variables["P_car"], 50.0)
        self.assertAlmostEqual(car.variables["V_pack"], 108 * 3.4)
        self.assertIn("exp", debugger.find_step_by_result("I_soc").formula)

    def test_bounded_debugger(self):
        """max_steps keeps only the most recent steps."""
        debugger = CalculationDebugger(max_steps=5)
        for i in range(12):
            debugger.add_input(f"x{i}", i)
        self.assertEqual(debugger.get_step_count(), 5)
        self.assertEqual(debugger.steps[0].result_name, "x7")

    def test_trace_report(self):
        """Trace report names the binding constraint."""
        pack = ChargingPack(ChargingConfig(**SMALL_PACK))
        report = trace_limit_calculation(pack, 625.0).get_report()
        self.assertIn("CURRENT CEILINGS", report)
        self.assertIn("Limited by Charger", report)


def run_validation():
    """Run validation tests and print summary."""
    print("=" * 60)
    print("Charging Pack Validation")
    print("=" * 60)
    print()

    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    suite.addTests(loader.loadTestsFromTestCase(TestCell))
    suite.addTests(loader.loadTestsFromTestCase(TestAggregates))
    suite.addTests(loader.loadTestsFromTestCase(TestPackConstruction))
    suite.addTests(loader.loadTestsFromTestCase(TestCurrentLimits))
    suite.addTests(loader.loadTestsFromTestCase(TestBalancing))
    suite.addTests(loader.loadTestsFromTestCase(TestPackChargeAndReset))
    suite.addTests(loader.loadTestsFromTestCase(TestDebugTrace))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    print()
    print("=" * 60)
    if result.wasSuccessful():
        print("All validation tests PASSED")
    else:
        print(f"FAILED: {len(result.failures)} failures, {len(result.errors)} errors")
    print("=" * 60)

    return result.wasSuccessful()


if __name__ == "__main__":
    success = run_validation()
    sys.exit(0 if success else 1)
