from __future__ import annotations

from dataclasses import dataclass, replace
import math
from typing import Iterator

from luvatrix_chart.errors import ChartContractError
from luvatrix_chart.scales import EPSILON, decimal_places_for_interval, nice_interval


MAX_TICKS = 10_000


@dataclass(frozen=True)
class AxisBounds:
    """Nice min/max/interval for one axis.

    Tick sequences are generated on demand from ``min + interval * i`` so
    long axes never accumulate floating-point drift.
    """

    min: float
    max: float
    interval: float
    decimal_places: int = 2
    minor_tick_interval: float | None = None
    padding: float = 0.0

    def __post_init__(self) -> None:
        if not (math.isfinite(self.min) and math.isfinite(self.max)):
            raise ChartContractError("axis bounds must be finite")
        if self.min > self.max:
            raise ChartContractError(f"min must be <= max, got {self.min} > {self.max}")
        if not self.interval > 0:
            raise ChartContractError(f"interval must be > 0, got {self.interval}")
        if self.decimal_places < 0:
            raise ChartContractError("decimal_places must be >= 0")
        if not 0.0 <= self.padding <= 1.0:
            raise ChartContractError("padding must be within [0, 1]")

    @classmethod
    def from_data_range(
        cls,
        data_min: float,
        data_max: float,
        desired_tick_count: int | None = None,
        padding: float = 0.05,
        include_zero: bool = False,
    ) -> AxisBounds:
        lo = float(data_min)
        hi = float(data_max)
        if lo > hi:
            raise ChartContractError(f"data_min must be <= data_max, got {lo} > {hi}")
        if lo == hi:
            if lo == 0:
                lo, hi = -1.0, 1.0
            else:
                delta = abs(lo) * 0.1
                lo -= delta
                hi += delta

        span = hi - lo
        lo -= span * padding
        hi += span * padding

        if include_zero:
            lo = min(lo, 0.0)
            hi = max(hi, 0.0)

        interval = nice_interval(hi - lo, desired_tick_count or 5)
        return cls(
            min=math.floor(lo / interval) * interval,
            max=math.ceil(hi / interval) * interval,
            interval=interval,
            decimal_places=decimal_places_for_interval(interval),
            padding=padding,
        )

    @property
    def range(self) -> float:
        return self.max - self.min

    @property
    def major_tick_count(self) -> int:
        if self.range == 0:
            return 1
        return int(round(self.range / self.interval)) + 1

    @property
    def minor_ticks_per_interval(self) -> int:
        if self.minor_tick_interval is None or self.minor_tick_interval <= 0:
            return 0
        return int(round(self.interval / self.minor_tick_interval)) - 1

    def major_ticks(self) -> Iterator[float]:
        start = math.floor(self.min / self.interval)
        lower = self.min - EPSILON * max(1.0, abs(self.min))
        upper = self.max + EPSILON * max(1.0, abs(self.max))
        for i in range(min(self.major_tick_count + 2, MAX_TICKS)):
            value = (start + i) * self.interval
            if value > upper:
                return
            if value >= lower:
                yield value

    def minor_ticks(self) -> Iterator[float]:
        if self.minor_tick_interval is None or self.minor_tick_interval <= 0:
            return
        majors = list(self.major_ticks())
        for lo, hi in zip(majors, majors[1:]):
            j = 1
            while True:
                value = lo + self.minor_tick_interval * j
                if value >= hi - EPSILON:
                    break
                yield value
                j += 1

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def normalize(self, value: float) -> float:
        if self.range == 0:
            return 0.5
        return (value - self.min) / self.range

    def denormalize(self, normalized: float) -> float:
        return self.min + normalized * self.range

    def with_values(self, **changes: float | int | None) -> AxisBounds:
        return replace(self, **changes)


@dataclass(frozen=True)
class AxisLabel:
    value: float
    text: str
    position: float
