from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
import math
from typing import Sequence, TypeAlias

import numpy as np

from luvatrix_chart.errors import ChartContractError
from luvatrix_chart.geometry import Point, Rect


DEFAULT_FLATNESS = 0.25
MAX_CURVE_STEPS = 256


@dataclass(frozen=True)
class MoveTo:
    point: Point


@dataclass(frozen=True)
class LineTo:
    point: Point


@dataclass(frozen=True)
class CubicTo:
    control1: Point
    control2: Point
    point: Point


@dataclass(frozen=True)
class Close:
    pass


Segment: TypeAlias = MoveTo | LineTo | CubicTo | Close


@dataclass(frozen=True)
class Contour:
    """One flattened sub-path. Closed contours repeat their first vertex at the end."""

    points: tuple[Point, ...]
    closed: bool = False

    @cached_property
    def _cumulative(self) -> np.ndarray:
        if len(self.points) < 2:
            return np.zeros(len(self.points), dtype=np.float64)
        arr = np.asarray(self.points, dtype=np.float64)
        steps = np.hypot(np.diff(arr[:, 0]), np.diff(arr[:, 1]))
        return np.concatenate(([0.0], np.cumsum(steps)))

    @property
    def length(self) -> float:
        cum = self._cumulative
        return float(cum[-1]) if cum.size else 0.0

    def point_at(self, distance: float) -> Point:
        if not self.points:
            raise ChartContractError("empty contour has no points")
        cum = self._cumulative
        d = min(max(distance, 0.0), self.length)
        i = int(np.searchsorted(cum, d, side="right")) - 1
        if i >= len(self.points) - 1:
            return self.points[-1]
        seg = cum[i + 1] - cum[i]
        t = (d - cum[i]) / seg if seg > 0 else 0.0
        (x0, y0), (x1, y1) = self.points[i], self.points[i + 1]
        return (x0 + (x1 - x0) * t, y0 + (y1 - y0) * t)

    def extract(self, start: float, end: float) -> Path:
        """Sub-path between two arc-length offsets, as a polyline."""
        total = self.length
        lo = min(max(start, 0.0), total)
        hi = min(max(end, 0.0), total)
        if hi < lo or not self.points:
            return Path()
        cum = self._cumulative
        pts = [self.point_at(lo)]
        for i in range(len(self.points)):
            if lo < cum[i] < hi:
                pts.append(self.points[i])
        pts.append(self.point_at(hi))
        return line_path(pts)


@dataclass(frozen=True)
class Path:
    segments: tuple[Segment, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "segments", tuple(self.segments))

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def is_empty(self) -> bool:
        return not self.segments

    def then(self, other: Path) -> Path:
        return Path(self.segments + other.segments)

    @cached_property
    def bounds(self) -> Rect:
        """Tight bounds; cubic extrema come from the roots of the derivative."""
        xs: list[float] = []
        ys: list[float] = []
        current: Point | None = None
        for seg in self.segments:
            if isinstance(seg, (MoveTo, LineTo)):
                xs.append(seg.point[0])
                ys.append(seg.point[1])
                current = seg.point
            elif isinstance(seg, CubicTo):
                start = current if current is not None else seg.point
                for axis, out in ((0, xs), (1, ys)):
                    p0, p1, p2, p3 = start[axis], seg.control1[axis], seg.control2[axis], seg.point[axis]
                    out.append(p0)
                    out.append(p3)
                    for t in _cubic_extrema(p0, p1, p2, p3):
                        out.append(_cubic_at(p0, p1, p2, p3, t))
                current = seg.point
        if not xs:
            return Rect(0.0, 0.0, 0.0, 0.0)
        return Rect(left=min(xs), top=min(ys), right=max(xs), bottom=max(ys))

    def contours(self, flatness: float = DEFAULT_FLATNESS) -> list[Contour]:
        if not flatness > 0:
            raise ChartContractError("flatness must be > 0")
        out: list[Contour] = []
        pts: list[Point] = []
        start: Point | None = None

        def flush(closed: bool) -> None:
            if pts:
                out.append(Contour(points=tuple(pts), closed=closed))

        for seg in self.segments:
            if isinstance(seg, MoveTo):
                flush(False)
                pts = [seg.point]
                start = seg.point
            elif isinstance(seg, LineTo):
                if not pts:
                    pts = [start or (0.0, 0.0)]
                pts.append(seg.point)
            elif isinstance(seg, CubicTo):
                if not pts:
                    pts = [start or (0.0, 0.0)]
                pts.extend(_flatten_cubic(pts[-1], seg.control1, seg.control2, seg.point, flatness))
            elif isinstance(seg, Close):
                if pts:
                    if pts[-1] != pts[0]:
                        pts.append(pts[0])
                    flush(True)
                    start = pts[0]
                    pts = []
        flush(False)
        return out

    @property
    def length(self) -> float:
        return sum(c.length for c in self.contours())

    def extract(self, contour: int, start: float, end: float) -> Path:
        contours = self.contours()
        if not 0 <= contour < len(contours):
            raise ChartContractError(f"contour index out of range: {contour}")
        return contours[contour].extract(start, end)


def _cubic_at(p0: float, p1: float, p2: float, p3: float, t: float) -> float:
    mt = 1.0 - t
    return mt * mt * mt * p0 + 3 * mt * mt * t * p1 + 3 * mt * t * t * p2 + t * t * t * p3


def _cubic_extrema(p0: float, p1: float, p2: float, p3: float) -> list[float]:
    a = 3.0 * (-p0 + 3.0 * p1 - 3.0 * p2 + p3)
    b = 6.0 * (p0 - 2.0 * p1 + p2)
    c = 3.0 * (p1 - p0)
    roots: list[float] = []
    if abs(a) < 1e-12:
        if abs(b) > 1e-12:
            roots.append(-c / b)
    else:
        disc = b * b - 4.0 * a * c
        if disc >= 0:
            sq = math.sqrt(disc)
            roots.append((-b + sq) / (2.0 * a))
            roots.append((-b - sq) / (2.0 * a))
    return [t for t in roots if 0.0 < t < 1.0]


def _flatten_cubic(p0: Point, c1: Point, c2: Point, p3: Point, flatness: float) -> list[Point]:
    hull = math.dist(p0, c1) + math.dist(c1, c2) + math.dist(c2, p3)
    steps = min(MAX_CURVE_STEPS, max(1, int(math.ceil(math.sqrt(hull / flatness)))))
    t = np.linspace(0.0, 1.0, steps + 1)[1:]
    mt = 1.0 - t
    ctrl = np.asarray((p0, c1, c2, p3), dtype=np.float64)
    coeffs = np.stack((mt**3, 3 * mt * mt * t, 3 * mt * t * t, t**3), axis=1)
    pts = coeffs @ ctrl
    out = [(float(x), float(y)) for x, y in pts[:-1]]
    out.append(p3)
    return out


def line_path(points: Sequence[Point]) -> Path:
    if not points:
        return Path()
    segments: list[Segment] = [MoveTo(_pt(points[0]))]
    segments.extend(LineTo(_pt(p)) for p in points[1:])
    return Path(tuple(segments))


def smooth_path(points: Sequence[Point], smoothness: float = 0.35) -> Path:
    """Cubic Bezier through every point, control points taken from the neighbours."""
    n = len(points)
    if n <= 2:
        return line_path(points)
    segments: list[Segment] = [MoveTo(_pt(points[0]))]
    for i in range(n - 1):
        p0 = points[max(i - 1, 0)]
        p1 = points[i]
        p2 = points[i + 1]
        p3 = points[min(i + 2, n - 1)]
        cp1 = (p1[0] + (p2[0] - p0[0]) * smoothness, p1[1] + (p2[1] - p0[1]) * smoothness)
        cp2 = (p2[0] - (p3[0] - p1[0]) * smoothness, p2[1] - (p3[1] - p1[1]) * smoothness)
        segments.append(CubicTo(cp1, cp2, _pt(p2)))
    return Path(tuple(segments))


def catmull_rom_spline(
    points: Sequence[Point],
    segments_per_curve: int = 20,
    tension: float = 0.5,
) -> list[Point]:
    if segments_per_curve < 1:
        raise ChartContractError("segments_per_curve must be >= 1")
    n = len(points)
    if n < 4:
        return [_pt(p) for p in points]
    arr = np.asarray(points, dtype=np.float64)
    prev = arr[np.maximum(np.arange(n) - 1, 0)]
    nxt = arr[np.minimum(np.arange(n) + 1, n - 1)]
    tangents = tension * (nxt - prev)

    t = np.linspace(0.0, 1.0, segments_per_curve + 1)[1:]
    t2 = t * t
    t3 = t2 * t
    h00 = 2 * t3 - 3 * t2 + 1
    h10 = t3 - 2 * t2 + t
    h01 = -2 * t3 + 3 * t2
    h11 = t3 - t2

    out: list[Point] = [_pt(points[0])]
    for i in range(n - 1):
        seg = (
            h00[:, None] * arr[i]
            + h10[:, None] * tangents[i]
            + h01[:, None] * arr[i + 1]
            + h11[:, None] * tangents[i + 1]
        )
        out.extend((float(x), float(y)) for x, y in seg[:-1])
        out.append(_pt(points[i + 1]))
    return out


def catmull_rom_path(points: Sequence[Point], segments_per_curve: int = 20, tension: float = 0.5) -> Path:
    if len(points) < 4:
        return line_path(points)
    return line_path(catmull_rom_spline(points, segments_per_curve, tension))


def simplify(points: Sequence[Point], tolerance: float) -> list[Point]:
    """Douglas-Peucker; no dropped point is farther than ``tolerance`` from the result."""
    if tolerance < 0:
        raise ChartContractError("tolerance must be >= 0")
    n = len(points)
    if n <= 2:
        return [_pt(p) for p in points]
    arr = np.asarray(points, dtype=np.float64)
    keep = np.zeros(n, dtype=bool)
    keep[0] = keep[-1] = True
    stack = [(0, n - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue
        dist = _line_distances(arr[first + 1 : last], arr[first], arr[last])
        i = int(np.argmax(dist))
        if dist[i] > tolerance:
            split = first + 1 + i
            keep[split] = True
            stack.append((split, last))
            stack.append((first, split))
    return [_pt(points[i]) for i in np.flatnonzero(keep)]


def simplified_path(points: Sequence[Point], tolerance: float = 2.0) -> Path:
    return line_path(simplify(points, tolerance))


def area_path(
    points: Sequence[Point],
    baseline_y: float,
    curved: bool = False,
    smoothness: float = 0.35,
) -> Path:
    if not points:
        return Path()
    top = smooth_path(points, smoothness) if curved else line_path(points)
    return top.then(
        Path(
            (
                LineTo((float(points[-1][0]), float(baseline_y))),
                LineTo((float(points[0][0]), float(baseline_y))),
                Close(),
            )
        )
    )


def dashed_path(path: Path, dash_array: Sequence[float]) -> Path:
    """Alternating draw/gap lengths along each contour; the pattern restarts per contour."""
    pattern = [float(v) for v in dash_array]
    if not pattern or len(pattern) % 2:
        raise ChartContractError(f"dash_array must have a non-zero even length, got {len(pattern)}")
    if any(v < 0 or not math.isfinite(v) for v in pattern):
        raise ChartContractError("dash_array values must be finite and >= 0")
    if sum(pattern) <= 0:
        raise ChartContractError("dash_array must contain a positive length")

    segments: list[Segment] = []
    for contour in path.contours():
        total = contour.length
        pos = 0.0
        i = 0
        while pos < total:
            end = min(pos + pattern[i % len(pattern)], total)
            if i % 2 == 0 and end > pos:
                segments.extend(contour.extract(pos, end).segments)
            pos = end
            i += 1
    return Path(tuple(segments))


def _line_distances(pts: np.ndarray, start: np.ndarray, end: np.ndarray) -> np.ndarray:
    dx, dy = end - start
    length = math.hypot(dx, dy)
    if length == 0:
        return np.hypot(pts[:, 0] - start[0], pts[:, 1] - start[1])
    return np.abs((pts[:, 0] - start[0]) * dy - (pts[:, 1] - start[1]) * dx) / length


def _pt(p: Point) -> Point:
    return (float(p[0]), float(p[1]))
