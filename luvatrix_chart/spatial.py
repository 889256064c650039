from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import Generic, Iterable, TypeVar

from luvatrix_chart.coordinates import CoordinateSystem
from luvatrix_chart.data import DataPoint
from luvatrix_chart.errors import ChartContractError
from luvatrix_chart.geometry import Point, Rect, distance, distance_squared, distance_to_segment


LOGGER = logging.getLogger(__name__)
M = TypeVar("M")


@dataclass(frozen=True)
class IndexedPoint(Generic[M]):
    data_point: DataPoint[M]
    screen_position: Point


@dataclass(frozen=True)
class QuadTreeStatistics:
    total_points: int
    node_count: int
    max_depth: int
    avg_points_per_leaf: float


@dataclass
class _Node:
    bounds: Rect
    depth: int
    closed_right: bool
    closed_bottom: bool
    points: list[IndexedPoint[object]] = field(default_factory=list)
    children: tuple[int, int, int, int] | None = None

    @property
    def is_leaf(self) -> bool:
        return self.children is None

    def accepts(self, position: Point) -> bool:
        x, y = position
        b = self.bounds
        in_x = b.left <= x < b.right or (self.closed_right and x == b.right)
        in_y = b.top <= y < b.bottom or (self.closed_bottom and y == b.bottom)
        return in_x and in_y


class SpatialIndex(Generic[M]):
    """QuadTree over screen-projected points.

    Nodes live in a flat arena and refer to their children by index. Bounds
    are half-open except along the chart area's right and bottom edges, so
    every point inside the chart area has exactly one home. There is no
    incremental removal; call ``rebuild`` after any data or viewport change.
    """

    def __init__(
        self,
        points: Iterable[DataPoint[M]],
        coord_system: CoordinateSystem,
        max_points_per_node: int = 4,
        max_depth: int = 8,
    ) -> None:
        if max_points_per_node < 1:
            raise ChartContractError("max_points_per_node must be >= 1")
        if max_depth < 0:
            raise ChartContractError("max_depth must be >= 0")
        self.coord_system = coord_system
        self.max_points_per_node = int(max_points_per_node)
        self.max_depth = int(max_depth)
        self.last_query_visits = 0
        self.rejected = 0
        self._nodes: list[_Node] = []
        self.rebuild(points)

    def rebuild(self, points: Iterable[DataPoint[M]], coord_system: CoordinateSystem | None = None) -> None:
        if coord_system is not None:
            self.coord_system = coord_system
        self._nodes = [_Node(bounds=self.coord_system.chart_area, depth=0, closed_right=True, closed_bottom=True)]
        self.rejected = 0
        inserted = 0
        for point in points:
            screen = self.coord_system.data_to_screen(point)
            if self._insert(0, IndexedPoint(point, screen)):
                inserted += 1
            else:
                self.rejected += 1
                LOGGER.debug("point (%s, %s) at %s lies outside the index bounds", point.x, point.y, screen)
        LOGGER.debug(
            "spatial index rebuilt: %d points, %d rejected, %d nodes",
            inserted,
            self.rejected,
            len(self._nodes),
        )

    def clear(self) -> None:
        self._nodes = []
        self.rejected = 0
        self.last_query_visits = 0

    def __len__(self) -> int:
        return sum(len(node.points) for node in self._nodes)

    def find_in_rect(self, rect: Rect) -> list[DataPoint[M]]:
        return [ip.data_point for ip in self._query(rect)]

    def find_nearest(self, position: Point, max_distance: float = math.inf) -> DataPoint[M] | None:
        candidates = self._query(Rect.from_center(position, max_distance * 2, max_distance * 2))
        nearest: DataPoint[M] | None = None
        best = max_distance
        for candidate in candidates:
            dist = distance(candidate.screen_position, position)
            if dist < best:
                best = dist
                nearest = candidate.data_point
        return nearest

    def find_in_radius(self, position: Point, radius: float) -> list[DataPoint[M]]:
        if radius < 0:
            raise ChartContractError("radius must be >= 0")
        radius_sq = radius * radius
        return [
            c.data_point
            for c in self._query(Rect.from_center(position, radius * 2, radius * 2))
            if distance_squared(c.screen_position, position) <= radius_sq
        ]

    def find_along_line(self, start: Point, end: Point, tolerance: float = 10.0) -> list[DataPoint[M]]:
        if tolerance < 0:
            raise ChartContractError("tolerance must be >= 0")
        box = Rect(
            left=min(start[0], end[0]) - tolerance,
            top=min(start[1], end[1]) - tolerance,
            right=max(start[0], end[0]) + tolerance,
            bottom=max(start[1], end[1]) + tolerance,
        )
        return [
            c.data_point
            for c in self._query(box)
            if distance_to_segment(c.screen_position, start, end) <= tolerance
        ]

    @property
    def statistics(self) -> QuadTreeStatistics:
        if not self._nodes:
            return QuadTreeStatistics(total_points=0, node_count=0, max_depth=0, avg_points_per_leaf=0.0)
        leaves = [node for node in self._nodes if node.is_leaf]
        in_leaves = sum(len(node.points) for node in leaves)
        return QuadTreeStatistics(
            total_points=len(self),
            node_count=len(self._nodes),
            max_depth=max(node.depth for node in self._nodes),
            avg_points_per_leaf=in_leaves / len(leaves) if leaves else 0.0,
        )

    def __repr__(self) -> str:
        stats = self.statistics
        return f"SpatialIndex(points={stats.total_points}, nodes={stats.node_count}, depth={stats.max_depth})"

    def _insert(self, index: int, point: IndexedPoint[M]) -> bool:
        node = self._nodes[index]
        if not node.accepts(point.screen_position):
            return False
        if node.is_leaf:
            if len(node.points) < self.max_points_per_node or node.depth >= self.max_depth:
                node.points.append(point)
                return True
            self._subdivide(index)
        for child in node.children or ():
            if self._insert(child, point):
                return True
        # Unreachable while the four children tile this node. Parent-held points
        # are still scanned by _collect, so an accepted point is never dropped.
        node.points.append(point)
        return True

    def _subdivide(self, index: int) -> None:
        node = self._nodes[index]
        b = node.bounds
        mid_x = (b.left + b.right) / 2.0
        mid_y = (b.top + b.bottom) / 2.0
        # TL, TR, BL, BR; also the query order.
        quads = (
            (Rect(b.left, b.top, mid_x, mid_y), False, False),
            (Rect(mid_x, b.top, b.right, mid_y), node.closed_right, False),
            (Rect(b.left, mid_y, mid_x, b.bottom), False, node.closed_bottom),
            (Rect(mid_x, mid_y, b.right, b.bottom), node.closed_right, node.closed_bottom),
        )
        first = len(self._nodes)
        for bounds, closed_right, closed_bottom in quads:
            self._nodes.append(
                _Node(bounds=bounds, depth=node.depth + 1, closed_right=closed_right, closed_bottom=closed_bottom)
            )
        node.children = (first, first + 1, first + 2, first + 3)

        pending = node.points
        node.points = []
        for point in pending:
            if not any(self._insert(child, point) for child in node.children):
                node.points.append(point)

    def _query(self, rect: Rect) -> list[IndexedPoint[M]]:
        self.last_query_visits = 0
        if not self._nodes:
            return []
        out: list[IndexedPoint[M]] = []
        self._collect(0, rect, out)
        return out

    def _collect(self, index: int, rect: Rect, out: list[IndexedPoint[M]]) -> None:
        node = self._nodes[index]
        if not node.bounds.intersects(rect):
            return
        self.last_query_visits += 1
        if node.children is not None:
            for child in node.children:
                self._collect(child, rect, out)
        for point in node.points:
            if rect.contains_closed(point.screen_position):
                out.append(point)
