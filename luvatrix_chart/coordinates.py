from __future__ import annotations

from dataclasses import dataclass, replace
from functools import cached_property
import math
from typing import Iterable, Sequence, TypeVar

import numpy as np

from luvatrix_chart.axis.bounds import AxisBounds
from luvatrix_chart.data import DataPoint
from luvatrix_chart.errors import ChartContractError
from luvatrix_chart.geometry import Point, Rect


M = TypeVar("M")


@dataclass(frozen=True)
class CoordinateSystem:
    """Immutable data <-> screen mapping for one frame.

    Screen Y grows downward while data Y grows upward. Any layout change
    (resize, zoom, pan, new data range) builds a new instance, so the cached
    scale factors never need invalidating in place.
    """

    chart_area: Rect
    x_min: float
    x_max: float
    y_min: float
    y_max: float
    x_inversed: bool = False
    y_inversed: bool = False
    device_pixel_ratio: float = 1.0

    def __post_init__(self) -> None:
        if self.x_max < self.x_min:
            raise ChartContractError(f"x_max must be >= x_min, got {self.x_max} < {self.x_min}")
        if self.y_max < self.y_min:
            raise ChartContractError(f"y_max must be >= y_min, got {self.y_max} < {self.y_min}")
        if not self.device_pixel_ratio > 0:
            raise ChartContractError("device_pixel_ratio must be > 0")

    @classmethod
    def from_bounds(
        cls,
        chart_area: Rect,
        x_bounds: AxisBounds,
        y_bounds: AxisBounds,
        *,
        device_pixel_ratio: float = 1.0,
    ) -> CoordinateSystem:
        return cls(
            chart_area=chart_area,
            x_min=x_bounds.min,
            x_max=x_bounds.max,
            y_min=y_bounds.min,
            y_max=y_bounds.max,
            device_pixel_ratio=device_pixel_ratio,
        )

    @property
    def x_range(self) -> float:
        return self.x_max - self.x_min

    @property
    def y_range(self) -> float:
        return self.y_max - self.y_min

    @property
    def data_bounds(self) -> Rect:
        return Rect(left=self.x_min, top=self.y_min, right=self.x_max, bottom=self.y_max)

    @cached_property
    def scale_x(self) -> float:
        rng = self.x_range
        return self.chart_area.width / rng if rng != 0 else 1.0

    @cached_property
    def scale_y(self) -> float:
        rng = self.y_range
        return self.chart_area.height / rng if rng != 0 else 1.0

    def data_x_to_screen_x(self, x: float) -> float:
        if self.x_range == 0:
            return self.chart_area.left
        offset = (x - self.x_min) * self.scale_x
        if self.x_inversed:
            return self.chart_area.right - offset
        return self.chart_area.left + offset

    def data_y_to_screen_y(self, y: float) -> float:
        if self.y_range == 0:
            return self.chart_area.bottom
        offset = (y - self.y_min) * self.scale_y
        if self.y_inversed:
            return self.chart_area.top + offset
        return self.chart_area.bottom - offset

    def screen_x_to_data_x(self, sx: float) -> float:
        if self.x_range == 0:
            return self.x_min
        offset = self.chart_area.right - sx if self.x_inversed else sx - self.chart_area.left
        return self.x_min + offset / self.scale_x

    def screen_y_to_data_y(self, sy: float) -> float:
        if self.y_range == 0:
            return self.y_min
        offset = sy - self.chart_area.top if self.y_inversed else self.chart_area.bottom - sy
        return self.y_min + offset / self.scale_y

    def data_to_screen(self, point: DataPoint[object], *, snap: bool = False) -> Point:
        screen = (self.data_x_to_screen_x(point.x), self.data_y_to_screen_y(point.y))
        return self.snap_point(screen) if snap else screen

    def screen_to_data(self, screen: Point) -> DataPoint[object]:
        return DataPoint(x=self.screen_x_to_data_x(screen[0]), y=self.screen_y_to_data_y(screen[1]))

    def data_points_to_screen(self, points: Iterable[DataPoint[object]], *, snap: bool = False) -> list[Point]:
        return [self.data_to_screen(p, snap=snap) for p in points]

    def project_arrays(self, x: np.ndarray, y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        xs = np.asarray(x, dtype=np.float64)
        ys = np.asarray(y, dtype=np.float64)
        if self.x_range == 0:
            sx = np.full(xs.shape, self.chart_area.left, dtype=np.float64)
        elif self.x_inversed:
            sx = self.chart_area.right - (xs - self.x_min) * self.scale_x
        else:
            sx = self.chart_area.left + (xs - self.x_min) * self.scale_x
        if self.y_range == 0:
            sy = np.full(ys.shape, self.chart_area.bottom, dtype=np.float64)
        elif self.y_inversed:
            sy = self.chart_area.top + (ys - self.y_min) * self.scale_y
        else:
            sy = self.chart_area.bottom - (ys - self.y_min) * self.scale_y
        return sx, sy

    def snap_to_pixel(self, coordinate: float) -> float:
        dpr = self.device_pixel_ratio
        return round(coordinate * dpr) / dpr

    def snap_point(self, point: Point) -> Point:
        return (self.snap_to_pixel(point[0]), self.snap_to_pixel(point[1]))

    def snap_rect(self, rect: Rect) -> Rect:
        return Rect(
            left=self.snap_to_pixel(rect.left),
            top=self.snap_to_pixel(rect.top),
            right=self.snap_to_pixel(rect.right),
            bottom=self.snap_to_pixel(rect.bottom),
        )

    def data_width_to_screen_width(self, data_width: float) -> float:
        return data_width * self.scale_x

    def data_height_to_screen_height(self, data_height: float) -> float:
        return data_height * self.scale_y

    def screen_width_to_data_width(self, screen_width: float) -> float:
        return screen_width / self.scale_x

    def screen_height_to_data_height(self, screen_height: float) -> float:
        return screen_height / self.scale_y

    def contains_screen(self, point: Point) -> bool:
        return self.chart_area.contains(point)

    def contains_data(self, point: DataPoint[object]) -> bool:
        return point.is_within_bounds(self.x_min, self.x_max, self.y_min, self.y_max)

    def visible_points(self, points: Iterable[DataPoint[M]]) -> list[DataPoint[M]]:
        return [p for p in points if self.contains_data(p)]

    def find_nearest_point(
        self,
        screen: Point,
        points: Sequence[DataPoint[M]],
        *,
        max_distance: float = 30.0,
    ) -> DataPoint[M] | None:
        """Linear scan; ``SpatialIndex`` answers the same query in sub-linear time."""
        nearest: DataPoint[M] | None = None
        best = max_distance
        for point in points:
            sx, sy = self.data_to_screen(point)
            dist = math.hypot(sx - screen[0], sy - screen[1])
            if dist < best:
                best = dist
                nearest = point
        return nearest

    def zoom(self, *, x_min: float, x_max: float, y_min: float, y_max: float) -> CoordinateSystem:
        return replace(self, x_min=x_min, x_max=x_max, y_min=y_min, y_max=y_max)

    def pan(self, dx_pixels: float, dy_pixels: float) -> CoordinateSystem:
        """Shift the visible data window so content follows a drag of (dx, dy) pixels."""
        dx = self.screen_width_to_data_width(dx_pixels) if self.x_range != 0 else 0.0
        dy = self.screen_height_to_data_height(dy_pixels) if self.y_range != 0 else 0.0
        if self.x_inversed:
            dx = -dx
        if self.y_inversed:
            dy = -dy
        return replace(
            self,
            x_min=self.x_min - dx,
            x_max=self.x_max - dx,
            y_min=self.y_min + dy,
            y_max=self.y_max + dy,
        )

    def with_chart_area(self, chart_area: Rect) -> CoordinateSystem:
        return replace(self, chart_area=chart_area)
