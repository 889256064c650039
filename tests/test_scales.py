from __future__ import annotations

import unittest

from luvatrix_chart.errors import ChartContractError
from luvatrix_chart.scales import (
    clean_value,
    decimal_places_for_interval,
    decimals_from_step,
    format_fixed,
    format_large_number,
    format_scientific,
    nice_interval,
    nice_interval_for_range,
    nice_number,
    next_nice_number,
    round_down,
    round_up,
    snap_to_decimals,
)


class NiceNumberTests(unittest.TestCase):
    def test_ceiling_mode_picks_smallest_nice_fraction_above(self) -> None:
        self.assertEqual(nice_number(12.0, round_result=False), 20.0)
        self.assertEqual(nice_number(0.85, round_result=False), 1.0)
        self.assertEqual(nice_number(3.0, round_result=False), 5.0)
        self.assertEqual(nice_number(6.0, round_result=False), 10.0)

    def test_rounding_mode_picks_nearest_nice_fraction(self) -> None:
        self.assertEqual(nice_number(1.4, round_result=True), 1.0)
        self.assertEqual(nice_number(2.9, round_result=True), 2.0)
        self.assertEqual(nice_number(6.9, round_result=True), 5.0)
        self.assertEqual(nice_number(7.0, round_result=True), 10.0)

    def test_non_positive_value_rejected(self) -> None:
        with self.assertRaises(ChartContractError):
            nice_number(0.0, round_result=False)
        with self.assertRaises(ChartContractError):
            nice_interval(10.0, target_ticks=0)

    def test_range_helper_handles_zero_and_huge_ranges(self) -> None:
        self.assertEqual(nice_interval_for_range(0.0, 0.0), 0.2)
        self.assertAlmostEqual(nice_interval_for_range(250.0, 250.0), 10.0)
        self.assertAlmostEqual(nice_interval_for_range(0.0, 87.0), 20.0)
        # 7.2e9 / 5 normalizes to 1.44, which stays at 1.
        self.assertAlmostEqual(nice_interval_for_range(0.0, 7.2e9), 1e9)

    def test_next_nice_number(self) -> None:
        self.assertEqual(next_nice_number(0.0), 1.0)
        self.assertEqual(next_nice_number(3.0), 5.0)
        self.assertEqual(next_nice_number(120.0), 200.0)


class DecimalTests(unittest.TestCase):
    def test_decimal_places_table(self) -> None:
        self.assertEqual(decimal_places_for_interval(5.0), 0)
        self.assertEqual(decimal_places_for_interval(0.5), 1)
        self.assertEqual(decimal_places_for_interval(0.05), 2)
        self.assertEqual(decimal_places_for_interval(0.002), 3)
        self.assertEqual(decimal_places_for_interval(0.0001), 4)

    def test_decimals_from_step(self) -> None:
        self.assertEqual(decimals_from_step(0.25), 2)
        self.assertEqual(decimals_from_step(0.5), 1)
        self.assertEqual(decimals_from_step(10.0), 0)

    def test_clean_value_strips_drift(self) -> None:
        self.assertEqual(clean_value(0.1 * 3, 0.1), 0.3)
        self.assertEqual(clean_value(1e-12), 0.0)

    def test_snap_rounds_halves_away_from_zero(self) -> None:
        self.assertEqual(snap_to_decimals(2.5, 0), 3.0)
        self.assertEqual(snap_to_decimals(-2.5, 0), -3.0)
        self.assertEqual(snap_to_decimals(12.5, 0), 13.0)
        self.assertEqual(snap_to_decimals(0.125, 2), 0.13)
        self.assertEqual(clean_value(7.5, 5.0), 8.0)

    def test_rounding_to_interval(self) -> None:
        self.assertEqual(round_down(-13.0, 10.0), -20.0)
        self.assertEqual(round_up(47.0, 10.0), 50.0)


class FormattingTests(unittest.TestCase):
    def test_fixed_rounds_half_up_and_drops_negative_zero(self) -> None:
        self.assertEqual(format_fixed(2.5, 0), "3")
        self.assertEqual(format_fixed(0.30000000000000004, 1), "0.3")
        self.assertEqual(format_fixed(-0.0001, 2), "0.00")

    def test_large_number_suffixes(self) -> None:
        self.assertEqual(format_large_number(1500.0), "1.5K")
        self.assertEqual(format_large_number(2_000_000.0), "2M")
        self.assertEqual(format_large_number(-3_200_000_000.0), "-3.2B")
        self.assertEqual(format_large_number(42.0), "42")

    def test_scientific_drops_exponent_padding(self) -> None:
        self.assertEqual(format_scientific(2e6, 0), "2e+6")
        self.assertEqual(format_scientific(0.00012, 1), "1.2e-4")
        self.assertEqual(format_scientific(3.5e12, 1), "3.5e+12")


if __name__ == "__main__":
    unittest.main()
