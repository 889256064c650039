from __future__ import annotations

import math
import unittest

import numpy as np

from luvatrix_chart.coordinates import CoordinateSystem
from luvatrix_chart.data import DataPoint
from luvatrix_chart.errors import ChartContractError
from luvatrix_chart.geometry import Rect, distance, distance_squared, distance_to_segment
from luvatrix_chart.spatial import IndexedPoint, SpatialIndex


def _coords() -> CoordinateSystem:
    return CoordinateSystem(chart_area=Rect(0.0, 0.0, 800.0, 600.0), x_min=0.0, x_max=1000.0, y_min=0.0, y_max=1000.0)


def _random_points(n: int, seed: int) -> list[DataPoint[object]]:
    rng = np.random.default_rng(seed)
    xy = rng.uniform(0.0, 1000.0, size=(n, 2))
    return [DataPoint(float(x), float(y), metadata=i) for i, (x, y) in enumerate(xy)]


def _brute_nearest(
    coords: CoordinateSystem,
    points: list[DataPoint[object]],
    position: tuple[float, float],
    max_distance: float,
) -> float | None:
    best = max_distance
    found = None
    for p in points:
        d = distance(coords.data_to_screen(p), position)
        if d < best:
            best = d
            found = d
    return found


class SpatialIndexTests(unittest.TestCase):
    def test_find_nearest_matches_brute_force(self) -> None:
        coords = _coords()
        rng = np.random.default_rng(1234)
        for seed in range(5):
            points = _random_points(int(rng.integers(1, 1001)), seed)
            index = SpatialIndex(points, coords)
            for _ in range(40):
                position = (float(rng.uniform(-20.0, 820.0)), float(rng.uniform(-20.0, 620.0)))
                for max_distance in (math.inf, 25.0, 3.0):
                    expected = _brute_nearest(coords, points, position, max_distance)
                    hit = index.find_nearest(position, max_distance=max_distance)
                    if expected is None:
                        self.assertIsNone(hit)
                    else:
                        self.assertIsNotNone(hit)
                        self.assertAlmostEqual(distance(coords.data_to_screen(hit), position), expected)

    def test_rect_radius_and_line_queries_match_brute_force(self) -> None:
        coords = _coords()
        points = _random_points(700, 42)
        index = SpatialIndex(points, coords)
        screen = {p.metadata: coords.data_to_screen(p) for p in points}

        rect = Rect(100.0, 50.0, 420.0, 333.0)
        got = {p.metadata for p in index.find_in_rect(rect)}
        self.assertEqual(got, {k for k, s in screen.items() if rect.contains_closed(s)})

        center = (400.0, 300.0)
        got = {p.metadata for p in index.find_in_radius(center, 60.0)}
        self.assertEqual(got, {k for k, s in screen.items() if distance_squared(s, center) <= 3600.0})

        start, end = (0.0, 0.0), (800.0, 600.0)
        got = {p.metadata for p in index.find_along_line(start, end, tolerance=8.0)}
        self.assertEqual(got, {k for k, s in screen.items() if distance_to_segment(s, start, end) <= 8.0})

    def test_query_order_is_deterministic(self) -> None:
        coords = _coords()
        points = _random_points(300, 9)
        first = [p.metadata for p in SpatialIndex(points, coords).find_in_rect(Rect(0.0, 0.0, 800.0, 600.0))]
        second = [p.metadata for p in SpatialIndex(points, coords).find_in_rect(Rect(0.0, 0.0, 800.0, 600.0))]
        self.assertEqual(first, second)
        self.assertEqual(sorted(first), list(range(300)))

    def test_nearest_query_touches_few_nodes(self) -> None:
        coords = _coords()
        index = SpatialIndex(_random_points(10_000, 77), coords, max_points_per_node=4, max_depth=8)
        stats = index.statistics
        self.assertEqual(stats.total_points, 10_000)
        self.assertLessEqual(stats.max_depth, 8)
        rng = np.random.default_rng(8)
        worst = 0
        for _ in range(50):
            position = (float(rng.uniform(0.0, 800.0)), float(rng.uniform(0.0, 600.0)))
            index.find_nearest(position, max_distance=10.0)
            worst = max(worst, index.last_query_visits)
        self.assertGreater(worst, 0)
        self.assertLess(worst, 200)
        self.assertLess(worst * 10, stats.node_count)

    def test_chart_edge_points_are_indexed_and_outside_points_rejected(self) -> None:
        coords = _coords()
        corner = DataPoint(1000.0, 0.0, label="bottom-right")
        outside = DataPoint(1200.0, 10.0, label="outside")
        with self.assertLogs("luvatrix_chart.spatial", level="DEBUG"):
            index = SpatialIndex([corner, outside, DataPoint(0.0, 1000.0)], coords)
        self.assertEqual(len(index), 2)
        self.assertEqual(index.rejected, 1)
        self.assertIs(index.find_nearest((800.0, 600.0), max_distance=1.0), corner)

    def test_depth_limit_force_adds(self) -> None:
        coords = _coords()
        same = [DataPoint(500.0, 500.0, metadata=i) for i in range(50)]
        index = SpatialIndex(same, coords, max_points_per_node=4, max_depth=3)
        stats = index.statistics
        self.assertEqual(stats.total_points, 50)
        self.assertEqual(stats.max_depth, 3)
        self.assertEqual(len(index.find_in_radius(coords.data_to_screen(same[0]), 0.5)), 50)

    def test_point_no_child_accepts_stays_in_parent(self) -> None:
        coords = _coords()
        index = SpatialIndex([DataPoint(100.0, 100.0), DataPoint(900.0, 900.0)], coords, max_points_per_node=1)
        root = index._nodes[0]
        self.assertIsNotNone(root.children)
        for child in root.children:
            index._nodes[child].bounds = Rect(0.0, 0.0, 0.0, 0.0)

        stray = DataPoint(500.0, 500.0, label="stray")
        self.assertTrue(index._insert(0, IndexedPoint(stray, coords.data_to_screen(stray))))
        self.assertEqual([ip.data_point for ip in root.points], [stray])
        self.assertEqual(len(index), 3)
        self.assertEqual(index.find_in_rect(Rect(390.0, 290.0, 410.0, 310.0)), [stray])

    def test_rebuild_and_clear(self) -> None:
        coords = _coords()
        index = SpatialIndex(_random_points(100, 3), coords)
        self.assertEqual(index.statistics.total_points, 100)
        index.rebuild(_random_points(10, 4))
        self.assertEqual(index.statistics.total_points, 10)
        index.rebuild([DataPoint(5.0, 5.0)], coords.with_chart_area(Rect(0.0, 0.0, 100.0, 100.0)))
        self.assertEqual(index.find_nearest((0.5, 99.5), max_distance=2.0), DataPoint(5.0, 5.0))
        index.clear()
        self.assertIsNone(index.find_nearest((0.0, 0.0)))
        self.assertEqual(index.find_in_rect(Rect(0.0, 0.0, 800.0, 600.0)), [])
        self.assertEqual(index.statistics.node_count, 0)

    def test_invalid_capacity_rejected(self) -> None:
        with self.assertRaises(ChartContractError):
            SpatialIndex([], _coords(), max_points_per_node=0)
        with self.assertRaises(ChartContractError):
            SpatialIndex([], _coords(), max_depth=-1)


if __name__ == "__main__":
    unittest.main()
