from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Iterable, TypeAlias

from luvatrix_chart.axis import calculator
from luvatrix_chart.axis.bounds import AxisBounds, AxisLabel
from luvatrix_chart.axis.calculator import AxisConfig, label_count, label_position
from luvatrix_chart.axis.measure import DEFAULT_FONT_FAMILY, DEFAULT_FONT_SIZE_PX, LabelSizeCache, measure_band
from luvatrix_chart.data import value_range
from luvatrix_chart.errors import ChartContractError
from luvatrix_chart.scales import EPSILON


MS_PER_SECOND = 1000.0
MS_PER_MINUTE = 60_000.0
MS_PER_HOUR = 3_600_000.0
MS_PER_DAY = 86_400_000.0
MS_PER_WEEK = 604_800_000.0
MS_PER_MONTH = 2_592_000_000.0
MS_PER_YEAR = 31_536_000_000.0

_DATETIME_LADDERS: tuple[tuple[float, float, tuple[float, ...]], ...] = (
    (MS_PER_MINUTE, MS_PER_SECOND, (1, 5, 10, 15, 30)),
    (MS_PER_HOUR, MS_PER_MINUTE, (1, 5, 10, 15, 30)),
    (MS_PER_DAY, MS_PER_HOUR, (1, 2, 3, 6, 12)),
    (MS_PER_WEEK, MS_PER_DAY, (1, 2, 3, 7)),
    (MS_PER_MONTH, MS_PER_WEEK, (1, 2, 4)),
    (MS_PER_YEAR, MS_PER_MONTH, (1, 2, 3, 6)),
)
_YEAR_LADDER = (1, 2, 5, 10)


@dataclass(frozen=True)
class NumericAxis:
    config: AxisConfig = field(default_factory=AxisConfig)


@dataclass(frozen=True)
class CategoryAxis:
    categories: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "categories", tuple(self.categories))


@dataclass(frozen=True)
class DateTimeAxis:
    min: datetime | None = None
    max: datetime | None = None
    interval: timedelta | None = None
    desired_intervals: int = 5
    date_format: str | None = None
    tz: tzinfo = timezone.utc

    def __post_init__(self) -> None:
        if self.desired_intervals <= 0:
            raise ChartContractError("desired_intervals must be > 0")
        if self.interval is not None and self.interval <= timedelta(0):
            raise ChartContractError("interval must be positive")


Axis: TypeAlias = NumericAxis | CategoryAxis | DateTimeAxis


def calculate_bounds(axis: Axis, values: Iterable[float]) -> AxisBounds:
    if isinstance(axis, NumericAxis):
        return calculator.calculate_bounds(values, axis.config)
    if isinstance(axis, CategoryAxis):
        return AxisBounds(min=-0.5, max=len(axis.categories) - 0.5, interval=1.0, decimal_places=0)
    if isinstance(axis, DateTimeAxis):
        return _datetime_bounds(axis, values)
    raise TypeError(f"unsupported axis type: {type(axis)!r}")


def generate_labels(axis: Axis, bounds: AxisBounds) -> list[AxisLabel]:
    if isinstance(axis, NumericAxis):
        return calculator.generate_labels(bounds, axis.config)
    if isinstance(axis, CategoryAxis):
        n = len(axis.categories)
        return [
            AxisLabel(value=float(i), text=text, position=i / (n - 1) if n > 1 else 0.5)
            for i, text in enumerate(axis.categories)
        ]
    if isinstance(axis, DateTimeAxis):
        return _datetime_labels(axis, bounds)
    raise TypeError(f"unsupported axis type: {type(axis)!r}")


def measure_labels(
    axis: Axis,
    labels: list[AxisLabel],
    available: tuple[float, float],
    *,
    vertical: bool = True,
    cache: LabelSizeCache | None = None,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
) -> tuple[float, float]:
    if not isinstance(axis, (NumericAxis, CategoryAxis, DateTimeAxis)):
        raise TypeError(f"unsupported axis type: {type(axis)!r}")
    return measure_band(
        [label.text for label in labels],
        available,
        vertical=vertical,
        cache=cache,
        font_family=font_family,
        font_size_px=font_size_px,
    )


def datetime_interval_ms(range_ms: float, desired_intervals: int) -> float:
    rough = range_ms / desired_intervals
    for limit, unit, steps in _DATETIME_LADDERS:
        if rough < limit:
            return _closest([s * unit for s in steps], rough)
    return _closest([s * MS_PER_YEAR for s in _YEAR_LADDER], rough)


def datetime_format_for_range(range_ms: float) -> str:
    if range_ms < MS_PER_DAY:
        return "%H:%M"
    if range_ms < MS_PER_WEEK:
        return "%b %d %H:%M"
    if range_ms < MS_PER_MONTH * 3:
        return "%b %d"
    if range_ms < MS_PER_YEAR * 2:
        return "%b %Y"
    return "%Y"


def to_epoch_ms(value: datetime) -> float:
    return value.timestamp() * 1000.0


def _closest(options: list[float], target: float) -> float:
    best = options[0]
    for option in options[1:]:
        if abs(option - target) < abs(best - target):
            best = option
    return best


def _datetime_bounds(axis: DateTimeAxis, values: Iterable[float]) -> AxisBounds:
    observed = value_range(values)
    if axis.min is not None and axis.max is not None:
        lo, hi = to_epoch_ms(axis.min), to_epoch_ms(axis.max)
    elif observed is not None:
        lo = to_epoch_ms(axis.min) if axis.min is not None else observed[0]
        hi = to_epoch_ms(axis.max) if axis.max is not None else observed[1]
    else:
        now = datetime.now(axis.tz)
        lo, hi = to_epoch_ms(now - timedelta(days=30)), to_epoch_ms(now)
    if lo > hi:
        lo, hi = hi, lo

    if axis.interval is not None:
        interval = axis.interval.total_seconds() * 1000.0
    else:
        interval = datetime_interval_ms(hi - lo, axis.desired_intervals)
    return AxisBounds(min=lo, max=hi, interval=interval, decimal_places=0)


def _datetime_labels(axis: DateTimeAxis, bounds: AxisBounds) -> list[AxisLabel]:
    fmt = axis.date_format or datetime_format_for_range(bounds.range)
    labels: list[AxisLabel] = []
    for i in range(label_count(bounds)):
        value = bounds.min + bounds.interval * i
        if value > bounds.max + EPSILON:
            break
        stamp = datetime.fromtimestamp(value / 1000.0, tz=axis.tz)
        labels.append(AxisLabel(value=value, text=stamp.strftime(fmt), position=label_position(value, bounds)))
    return labels


@dataclass
class AxisState:
    """Bounds and labels for one axis, recomputed only when inputs change."""

    axis: Axis
    _key: tuple[object, ...] | None = field(default=None, init=False, repr=False)
    _bounds: AxisBounds | None = field(default=None, init=False, repr=False)
    _labels: list[AxisLabel] | None = field(default=None, init=False, repr=False)
    recomputes: int = field(default=0, init=False)

    def resolve(self, values: Iterable[float]) -> tuple[AxisBounds, list[AxisLabel]]:
        data = tuple(values)
        key = (self.axis, data)
        if key != self._key or self._bounds is None or self._labels is None:
            self._bounds = calculate_bounds(self.axis, data)
            self._labels = generate_labels(self.axis, self._bounds)
            self._key = key
            self.recomputes += 1
        return self._bounds, list(self._labels)

    def set_axis(self, axis: Axis) -> None:
        if axis != self.axis:
            self.axis = axis
            self.invalidate()

    def invalidate(self) -> None:
        self._key = None
        self._bounds = None
        self._labels = None
