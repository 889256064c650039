from __future__ import annotations

import math
import unittest

import numpy as np

from luvatrix_chart.axis.bounds import AxisBounds
from luvatrix_chart.errors import ChartContractError


def _is_nice(value: float) -> bool:
    magnitude = 10.0 ** math.floor(math.log10(value))
    frac = value / magnitude
    return any(math.isclose(frac, nice, rel_tol=1e-9) for nice in (1.0, 2.0, 5.0, 10.0))


class AxisBoundsTests(unittest.TestCase):
    def test_equal_min_max_yields_positive_range(self) -> None:
        bounds = AxisBounds.from_data_range(50.0, 50.0, desired_tick_count=5)
        self.assertGreater(bounds.range, 0.0)
        self.assertLess(bounds.min, 50.0)
        self.assertGreater(bounds.max, 50.0)
        self.assertEqual((bounds.min, bounds.max, bounds.interval), (40.0, 60.0, 5.0))

    def test_zero_at_zero_widens_to_unit_range(self) -> None:
        bounds = AxisBounds.from_data_range(0.0, 0.0)
        self.assertLess(bounds.min, 0.0)
        self.assertGreater(bounds.max, 0.0)

    def test_interval_is_always_one_two_or_five_times_power_of_ten(self) -> None:
        rng = np.random.default_rng(11)
        for _ in range(200):
            lo, hi = sorted(rng.uniform(-1e6, 1e6, size=2) * 10.0 ** rng.integers(-6, 3))
            ticks = int(rng.integers(2, 12))
            bounds = AxisBounds.from_data_range(float(lo), float(hi), desired_tick_count=ticks)
            self.assertTrue(_is_nice(bounds.interval), bounds.interval)
            self.assertLessEqual(bounds.min, lo)
            self.assertGreaterEqual(bounds.max, hi)

    def test_normalize_denormalize_round_trip(self) -> None:
        bounds = AxisBounds(min=-37.5, max=1234.25, interval=200.0)
        for value in np.linspace(bounds.min, bounds.max, 97):
            normalized = min(1.0, max(0.0, bounds.normalize(float(value))))
            self.assertAlmostEqual(bounds.denormalize(normalized), float(value), delta=1e-9)

    def test_normalize_zero_range_is_centered(self) -> None:
        bounds = AxisBounds(min=3.0, max=3.0, interval=1.0)
        self.assertEqual(bounds.normalize(3.0), 0.5)
        self.assertEqual(bounds.major_tick_count, 1)

    def test_major_ticks_are_index_based(self) -> None:
        bounds = AxisBounds(min=0.0, max=10.0, interval=2.0)
        self.assertEqual(list(bounds.major_ticks()), [0.0, 2.0, 4.0, 6.0, 8.0, 10.0])
        self.assertEqual(bounds.major_tick_count, 6)

        fine = AxisBounds(min=0.0, max=1.0, interval=0.1)
        ticks = list(fine.major_ticks())
        self.assertEqual(len(ticks), 11)
        self.assertAlmostEqual(ticks[3], 0.3)
        self.assertAlmostEqual(ticks[-1], 1.0)

    def test_minor_ticks_fill_between_majors(self) -> None:
        bounds = AxisBounds(min=0.0, max=10.0, interval=5.0, minor_tick_interval=1.0)
        self.assertEqual(bounds.minor_ticks_per_interval, 4)
        self.assertEqual(list(bounds.minor_ticks()), [1.0, 2.0, 3.0, 4.0, 6.0, 7.0, 8.0, 9.0])
        self.assertEqual(list(AxisBounds(min=0.0, max=1.0, interval=1.0).minor_ticks()), [])

    def test_contract_violations_raise(self) -> None:
        with self.assertRaises(ChartContractError):
            AxisBounds(min=2.0, max=1.0, interval=1.0)
        with self.assertRaises(ChartContractError):
            AxisBounds(min=0.0, max=1.0, interval=0.0)
        with self.assertRaises(ChartContractError):
            AxisBounds(min=0.0, max=1.0, interval=1.0, padding=1.5)
        with self.assertRaises(ChartContractError):
            AxisBounds(min=0.0, max=1.0, interval=1.0, decimal_places=-1)
        with self.assertRaises(ChartContractError):
            AxisBounds.from_data_range(5.0, 1.0)

    def test_with_values_copies(self) -> None:
        bounds = AxisBounds(min=0.0, max=10.0, interval=2.0)
        wider = bounds.with_values(max=20.0)
        self.assertEqual(wider.max, 20.0)
        self.assertEqual(bounds.max, 10.0)
        self.assertTrue(wider.contains(15.0))
        self.assertFalse(bounds.contains(15.0))


if __name__ == "__main__":
    unittest.main()
