from __future__ import annotations

import unittest

import numpy as np

from luvatrix_chart.data import DataPoint, points_from_lists
from luvatrix_chart.downsample import (
    DownsampleMethod,
    adaptive_downsample,
    downsample,
    downsample_with,
    estimate_error,
    lttb_indices,
    progressive_downsample,
)
from luvatrix_chart.errors import ChartContractError


def _series(n: int, seed: int = 5) -> list[DataPoint[object]]:
    rng = np.random.default_rng(seed)
    y = np.cumsum(rng.normal(size=n))
    return points_from_lists(np.arange(n, dtype=np.float64).tolist(), y.tolist())


class LttbTests(unittest.TestCase):
    def test_short_input_is_returned_unchanged(self) -> None:
        points = [DataPoint(0.0, 10.0), DataPoint(1.0, 20.0), DataPoint(2.0, 30.0)]
        self.assertEqual(downsample(points, 10), points)

    def test_output_length_and_endpoints(self) -> None:
        for n in (2, 3, 10, 97, 1000):
            points = _series(n)
            for target in (1, 2, 3, 7, 50, 500, 2000):
                out = downsample(points, target)
                self.assertEqual(len(out), min(target, n), (n, target))
                if target >= 2:
                    self.assertIs(out[0], points[0])
                    self.assertIs(out[-1], points[-1])

    def test_small_targets(self) -> None:
        points = _series(20)
        self.assertEqual(downsample(points, 2), [points[0], points[-1]])
        self.assertEqual(downsample(points, 1), [points[-1]])
        self.assertEqual(downsample(points, 0), [])
        self.assertEqual(downsample(points, -3), [])

    def test_output_is_an_ordered_subset(self) -> None:
        points = _series(500)
        out = downsample(points, 40)
        xs = [p.x for p in out]
        self.assertEqual(xs, sorted(xs))
        self.assertEqual(len(set(xs)), len(xs))

    def test_spike_survives(self) -> None:
        ys = [0.0] * 100
        ys[50] = 100.0
        points = points_from_lists(list(range(100)), ys)
        out = downsample(points, 10)
        self.assertIn(points[50], out)

    def test_metadata_is_carried_through(self) -> None:
        points = [DataPoint(float(i), float(i % 7), metadata={"row": i}) for i in range(100)]
        out = downsample(points, 12)
        self.assertTrue(all(p.metadata == {"row": int(p.x)} for p in out))

    def test_index_variant_validates_shapes(self) -> None:
        self.assertEqual(lttb_indices(np.arange(5.0), np.arange(5.0), 3)[0], 0)
        with self.assertRaises(ChartContractError):
            lttb_indices(np.arange(5.0), np.arange(4.0), 3)


class BucketMethodTests(unittest.TestCase):
    def setUp(self) -> None:
        self.points = points_from_lists(list(range(10)), [0, 5, 1, 6, 2, 7, 3, 8, 4, 9])

    def test_first_and_last(self) -> None:
        first = downsample_with(self.points, 5, DownsampleMethod.FIRST)
        self.assertEqual([p.x for p in first], [0.0, 2.0, 4.0, 6.0, 8.0])
        last = downsample_with(self.points, 5, DownsampleMethod.LAST)
        self.assertEqual([p.x for p in last], [1.0, 3.0, 5.0, 7.0, 9.0])

    def test_average(self) -> None:
        avg = downsample_with(self.points, 5, "average")
        self.assertEqual([p.x for p in avg], [0.5, 2.5, 4.5, 6.5, 8.5])
        self.assertEqual(avg[0].y, 2.5)

    def test_min_max_keeps_extremes_in_order(self) -> None:
        out = downsample_with(self.points, 4, DownsampleMethod.MIN_MAX)
        self.assertEqual([p.x for p in out], [0.0, 3.0, 6.0, 9.0])

    def test_unknown_method_rejected(self) -> None:
        with self.assertRaises(ValueError):
            downsample_with(self.points, 4, "median")


class AdaptiveTests(unittest.TestCase):
    def test_adaptive_target_is_clamped(self) -> None:
        points = _series(5000)
        self.assertEqual(len(adaptive_downsample(points, pixel_width=10.0)), 50)
        self.assertEqual(len(adaptive_downsample(points, pixel_width=5000.0)), 2000)
        self.assertEqual(len(adaptive_downsample(points, pixel_width=300.0)), 600)

    def test_progressive_levels(self) -> None:
        points = _series(600)
        levels = progressive_downsample(points, levels=(100, 500, 1000))
        self.assertEqual({k: len(v) for k, v in levels.items()}, {100: 100, 500: 500, 1000: 600})

    def test_error_estimate(self) -> None:
        line = points_from_lists(list(range(50)), [2.0 * i for i in range(50)])
        self.assertEqual(estimate_error(line, [line[0], line[-1]]), 0.0)
        self.assertEqual(estimate_error([], line), 0.0)

        zigzag = _series(400)
        err = estimate_error(zigzag, downsample(zigzag, 20))
        self.assertGreater(err, 0.0)
        self.assertLessEqual(err, 1.0)
        finer = estimate_error(zigzag, downsample(zigzag, 200))
        self.assertLess(finer, err)


if __name__ == "__main__":
    unittest.main()
