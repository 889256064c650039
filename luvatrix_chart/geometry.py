from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Iterable, TypeAlias


Point: TypeAlias = tuple[float, float]


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    right: float
    bottom: float

    @classmethod
    def from_ltwh(cls, left: float, top: float, width: float, height: float) -> Rect:
        return cls(left=float(left), top=float(top), right=float(left + width), bottom=float(top + height))

    @classmethod
    def from_center(cls, center: Point, width: float, height: float) -> Rect:
        cx, cy = center
        hw = width / 2.0
        hh = height / 2.0
        return cls(left=cx - hw, top=cy - hh, right=cx + hw, bottom=cy + hh)

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> Rect:
        xs: list[float] = []
        ys: list[float] = []
        for x, y in points:
            xs.append(x)
            ys.append(y)
        if not xs:
            return cls(0.0, 0.0, 0.0, 0.0)
        return cls(left=min(xs), top=min(ys), right=max(xs), bottom=max(ys))

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center(self) -> Point:
        return ((self.left + self.right) / 2.0, (self.top + self.bottom) / 2.0)

    @property
    def is_empty(self) -> bool:
        return self.left >= self.right or self.top >= self.bottom

    def contains(self, point: Point) -> bool:
        # Half-open: the right and bottom edges belong to the neighbour.
        x, y = point
        return self.left <= x < self.right and self.top <= y < self.bottom

    def contains_closed(self, point: Point) -> bool:
        x, y = point
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    def intersects(self, other: Rect) -> bool:
        return (
            self.left <= other.right
            and other.left <= self.right
            and self.top <= other.bottom
            and other.top <= self.bottom
        )

    def expand_to_include(self, other: Rect) -> Rect:
        return Rect(
            left=min(self.left, other.left),
            top=min(self.top, other.top),
            right=max(self.right, other.right),
            bottom=max(self.bottom, other.bottom),
        )


def distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def distance_squared(a: Point, b: Point) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return dx * dx + dy * dy


def distance_to_segment(point: Point, start: Point, end: Point) -> float:
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    if dx == 0 and dy == 0:
        return distance(point, start)
    t = ((point[0] - start[0]) * dx + (point[1] - start[1]) * dy) / (dx * dx + dy * dy)
    t = min(1.0, max(0.0, t))
    return distance(point, (start[0] + t * dx, start[1] + t * dy))


def perpendicular_distance(point: Point, line_start: Point, line_end: Point) -> float:
    """Distance from ``point`` to the infinite line through the two endpoints."""
    dx = line_end[0] - line_start[0]
    dy = line_end[1] - line_start[1]
    length = math.hypot(dx, dy)
    if length == 0:
        return distance(point, line_start)
    return abs((point[0] - line_start[0]) * dy - (point[1] - line_start[1]) * dx) / length
