from __future__ import annotations

from dataclasses import dataclass, replace
import math
from typing import Generic, Iterable, Sequence, TypeVar

from luvatrix_chart.errors import ChartDataError


M = TypeVar("M")


@dataclass(frozen=True)
class DataPoint(Generic[M]):
    """One chart sample. ``metadata`` is carried through untouched."""

    x: float
    y: float
    label: str | None = None
    metadata: M | None = None

    def with_values(
        self,
        *,
        x: float | None = None,
        y: float | None = None,
        label: str | None = None,
    ) -> DataPoint[M]:
        changes: dict[str, object] = {}
        if x is not None:
            changes["x"] = float(x)
        if y is not None:
            changes["y"] = float(y)
        if label is not None:
            changes["label"] = label
        return replace(self, **changes)

    def lerp(self, other: DataPoint[M], t: float) -> DataPoint[M]:
        return DataPoint(
            x=self.x + (other.x - self.x) * t,
            y=self.y + (other.y - self.y) * t,
            label=self.label,
            metadata=self.metadata,
        )

    def distance_to(self, other: DataPoint[object]) -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def is_within_bounds(self, min_x: float, max_x: float, min_y: float, max_y: float) -> bool:
        return min_x <= self.x <= max_x and min_y <= self.y <= max_y


def points_from_lists(
    xs: Sequence[float],
    ys: Sequence[float],
    labels: Sequence[str] | None = None,
) -> list[DataPoint[object]]:
    if len(xs) != len(ys):
        raise ChartDataError(f"x and y length mismatch: {len(xs)} != {len(ys)}")
    if labels is not None and len(labels) != len(xs):
        raise ChartDataError(f"labels length mismatch: {len(labels)} != {len(xs)}")
    out: list[DataPoint[object]] = []
    for i, (x, y) in enumerate(zip(xs, ys, strict=True)):
        label = labels[i] if labels is not None else None
        out.append(DataPoint(x=float(x), y=float(y), label=label))
    return out


def filter_by_bounds(
    points: Iterable[DataPoint[M]],
    min_x: float,
    max_x: float,
    min_y: float,
    max_y: float,
) -> list[DataPoint[M]]:
    return [p for p in points if p.is_within_bounds(min_x, max_x, min_y, max_y)]


def sort_by_x(points: Iterable[DataPoint[M]]) -> list[DataPoint[M]]:
    return sorted(points, key=lambda p: p.x)


def value_range(values: Iterable[float]) -> tuple[float, float] | None:
    lo = math.inf
    hi = -math.inf
    for v in values:
        if v < lo:
            lo = v
        if v > hi:
            hi = v
    if lo > hi:
        return None
    return (lo, hi)
