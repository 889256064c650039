from __future__ import annotations

from enum import Enum
import logging
from typing import Sequence, TypeVar

import numpy as np

from luvatrix_chart.data import DataPoint
from luvatrix_chart.errors import ChartContractError
from luvatrix_chart.geometry import distance_to_segment


LOGGER = logging.getLogger(__name__)
M = TypeVar("M")

ADAPTIVE_MIN_POINTS = 50
ADAPTIVE_MAX_POINTS = 2000
DEFAULT_LEVELS = (100, 500, 1000, 5000)


class DownsampleMethod(str, Enum):
    LTTB = "lttb"
    FIRST = "first"
    LAST = "last"
    AVERAGE = "average"
    MIN_MAX = "min_max"


def downsample(points: Sequence[DataPoint[M]], target_points: int) -> list[DataPoint[M]]:
    """Largest-Triangle-Three-Buckets reduction to ``min(target_points, len(points))`` points.

    Input must be sorted by x. The first and last samples are always kept,
    so peaks and troughs survive while flat runs collapse.
    """
    return downsample_with(points, target_points, DownsampleMethod.LTTB)


def downsample_with(
    points: Sequence[DataPoint[M]],
    target_points: int,
    method: DownsampleMethod | str = DownsampleMethod.LTTB,
) -> list[DataPoint[M]]:
    method = DownsampleMethod(method)
    n = len(points)
    if n <= target_points:
        return list(points)
    if target_points <= 0:
        return []
    if target_points == 1:
        return [points[-1]]
    if target_points == 2:
        return [points[0], points[-1]]

    if method is DownsampleMethod.LTTB:
        x, y = _xy_arrays(points)
        return [points[i] for i in lttb_indices(x, y, target_points)]
    if method is DownsampleMethod.FIRST:
        return _bucket_first(points, target_points)
    if method is DownsampleMethod.LAST:
        return _bucket_last(points, target_points)
    if method is DownsampleMethod.AVERAGE:
        return _bucket_average(points, target_points)
    return _bucket_min_max(points, target_points)


def lttb_indices(x: np.ndarray, y: np.ndarray, target_points: int) -> list[int]:
    """Indices chosen by LTTB over sorted coordinate arrays."""
    xs = np.asarray(x, dtype=np.float64)
    ys = np.asarray(y, dtype=np.float64)
    if xs.shape != ys.shape or xs.ndim != 1:
        raise ChartContractError("x and y must be 1-D arrays of equal length")
    n = int(xs.size)
    if n <= target_points:
        return list(range(n))
    if target_points <= 0:
        return []
    if target_points == 1:
        return [n - 1]
    if target_points == 2:
        return [0, n - 1]

    buckets = target_points - 2
    interior = n - 2
    edges = [1 + (i * interior) // buckets for i in range(buckets + 1)]

    selected = [0]
    prev = 0
    for b in range(buckets):
        start, end = edges[b], edges[b + 1]
        if b + 1 < buckets:
            nxt_start, nxt_end = edges[b + 1], edges[b + 2]
            cx = float(xs[nxt_start:nxt_end].mean())
            cy = float(ys[nxt_start:nxt_end].mean())
        else:
            cx = float(xs[-1])
            cy = float(ys[-1])

        ax = xs[prev]
        ay = ys[prev]
        bx = xs[start:end]
        by = ys[start:end]
        areas = np.abs((ax - cx) * (by - ay) - (ax - bx) * (cy - ay)) * 0.5
        # argmax keeps the first index on ties.
        prev = start + int(np.argmax(areas))
        selected.append(prev)

    selected.append(n - 1)
    return selected


def adaptive_downsample(
    points: Sequence[DataPoint[M]],
    pixel_width: float,
    points_per_pixel: float = 2.0,
) -> list[DataPoint[M]]:
    target = int(round(pixel_width * points_per_pixel))
    clamped = min(ADAPTIVE_MAX_POINTS, max(ADAPTIVE_MIN_POINTS, target))
    if clamped != target:
        LOGGER.debug("adaptive target %d clamped to %d", target, clamped)
    return downsample(points, clamped)


def progressive_downsample(
    points: Sequence[DataPoint[M]],
    levels: Sequence[int] = DEFAULT_LEVELS,
) -> dict[int, list[DataPoint[M]]]:
    """One reduced copy per level of detail, keyed by target size."""
    return {int(level): downsample(points, int(level)) for level in levels}


def estimate_error(original: Sequence[DataPoint[object]], downsampled: Sequence[DataPoint[object]]) -> float:
    """Mean distance of skipped samples from the reduced polyline, over the y range, in [0, 1]."""
    if not original or not downsampled:
        return 0.0

    ox, oy = _xy_arrays(original)
    total = 0.0
    comparisons = 0
    for start, end in zip(downsampled, downsampled[1:], strict=False):
        mask = (ox >= start.x) & (ox <= end.x)
        if int(np.count_nonzero(mask)) <= 2:
            continue
        a = (start.x, start.y)
        b = (end.x, end.y)
        for px, py in zip(ox[mask], oy[mask], strict=True):
            total += distance_to_segment((float(px), float(py)), a, b)
            comparisons += 1

    if comparisons == 0:
        return 0.0
    y_range = float(oy.max() - oy.min())
    if y_range <= 0:
        return 0.0
    return float(np.clip((total / comparisons) / y_range, 0.0, 1.0))


def _xy_arrays(points: Sequence[DataPoint[object]]) -> tuple[np.ndarray, np.ndarray]:
    x = np.fromiter((p.x for p in points), dtype=np.float64, count=len(points))
    y = np.fromiter((p.y for p in points), dtype=np.float64, count=len(points))
    return x, y


def _bucket_first(points: Sequence[DataPoint[M]], target: int) -> list[DataPoint[M]]:
    n = len(points)
    return [points[(i * n) // target] for i in range(target)]


def _bucket_last(points: Sequence[DataPoint[M]], target: int) -> list[DataPoint[M]]:
    n = len(points)
    return [points[max(0, ((i + 1) * n) // target - 1)] for i in range(target)]


def _bucket_average(points: Sequence[DataPoint[M]], target: int) -> list[DataPoint[M]]:
    x, y = _xy_arrays(points)
    n = len(points)
    out: list[DataPoint[M]] = []
    for i in range(target):
        start = (i * n) // target
        end = ((i + 1) * n) // target
        if end > start:
            out.append(DataPoint(x=float(x[start:end].mean()), y=float(y[start:end].mean())))
    return out


def _bucket_min_max(points: Sequence[DataPoint[M]], target: int) -> list[DataPoint[M]]:
    # Two samples per bucket, so half as many buckets as the target.
    n = len(points)
    buckets = min(max(1, target // 2), max(1, n // 2))
    _, y = _xy_arrays(points)
    out: list[DataPoint[M]] = []
    for i in range(buckets):
        start = (i * n) // buckets
        end = ((i + 1) * n) // buckets
        if end <= start:
            continue
        lo = start + int(np.argmin(y[start:end]))
        hi = start + int(np.argmax(y[start:end]))
        for idx in sorted({lo, hi}):
            out.append(points[idx])
    return out
