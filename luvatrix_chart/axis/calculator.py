from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import math
from typing import Callable, Iterable

from luvatrix_chart.axis.bounds import AxisBounds, AxisLabel
from luvatrix_chart.data import value_range
from luvatrix_chart.errors import ChartContractError
from luvatrix_chart.scales import (
    EPSILON,
    clean_value,
    decimal_places_for_interval,
    format_fixed,
    format_large_number,
    format_scientific,
    nice_interval,
    nice_interval_for_range,
    round_down,
    round_up,
    snap_to_decimals,
)


LOGGER = logging.getLogger(__name__)
MAX_LABELS = 1000


class RangePadding(str, Enum):
    NONE = "none"
    NORMAL = "normal"
    ROUND = "round"
    ADDITIONAL = "additional"
    AUTO = "auto"

    @property
    def fraction(self) -> float:
        if self is RangePadding.NONE:
            return 0.0
        if self is RangePadding.ADDITIONAL:
            return 0.10
        return 0.05


@dataclass(frozen=True)
class AxisConfig:
    min: float | None = None
    max: float | None = None
    interval: float | None = None
    desired_intervals: int = 5
    padding: RangePadding = RangePadding.AUTO
    include_zero: bool = False
    minor_ticks_per_interval: int = 0
    label_formatter: Callable[[float], str] | None = None
    use_abbreviation: bool = False
    use_scientific_notation: bool = False

    def __post_init__(self) -> None:
        if self.desired_intervals <= 0:
            raise ChartContractError("desired_intervals must be > 0")
        if self.interval is not None and not self.interval > 0:
            raise ChartContractError(f"interval must be > 0, got {self.interval}")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ChartContractError(f"min must be <= max, got {self.min} > {self.max}")
        if self.minor_ticks_per_interval < 0:
            raise ChartContractError("minor_ticks_per_interval must be >= 0")
        object.__setattr__(self, "padding", RangePadding(self.padding))

    @property
    def auto_range(self) -> bool:
        return self.min is None or self.max is None


def calculate_bounds(values: Iterable[float], config: AxisConfig | None = None) -> AxisBounds:
    cfg = config or AxisConfig()
    observed = value_range(values)
    if observed is None and cfg.min is None and cfg.max is None:
        return AxisBounds(min=0.0, max=10.0, interval=1.0, decimal_places=0)

    data_min, data_max = observed if observed is not None else (0.0, 10.0)
    lo = float(cfg.min) if cfg.min is not None else data_min
    hi = float(cfg.max) if cfg.max is not None else data_max
    if lo > hi:
        raise ChartContractError(f"resolved axis min {lo} exceeds max {hi}")

    if lo == hi:
        lo, hi = synthesize_range(lo)

    if cfg.include_zero:
        lo = min(lo, 0.0)
        hi = max(hi, 0.0)

    fraction = 0.0
    if cfg.auto_range:
        fraction = cfg.padding.fraction
        span = hi - lo
        lo -= span * fraction
        hi += span * fraction
        if cfg.include_zero:
            lo = min(lo, 0.0)
            hi = max(hi, 0.0)

    interval = cfg.interval if cfg.interval is not None else nice_interval(hi - lo, cfg.desired_intervals)

    if cfg.padding is RangePadding.ROUND:
        lo = round_down(lo, interval)
        hi = round_up(hi, interval)

    minor = None
    if cfg.minor_ticks_per_interval > 0:
        minor = interval / (cfg.minor_ticks_per_interval + 1)

    return AxisBounds(
        min=lo,
        max=hi,
        interval=interval,
        decimal_places=decimal_places_for_interval(interval),
        minor_tick_interval=minor,
        padding=fraction,
    )


def synthesize_range(value: float) -> tuple[float, float]:
    if value == 0:
        LOGGER.debug("zero-width range at 0, using [-1, 1]")
        return (-1.0, 1.0)
    delta = abs(value) * 0.1
    LOGGER.debug("zero-width range at %s, widening by %s", value, delta)
    return (value - delta, value + delta)


def label_count(bounds: AxisBounds) -> int:
    if bounds.range <= 0:
        return 1
    theoretical = int(round(bounds.range / bounds.interval)) + 1
    if theoretical > MAX_LABELS:
        LOGGER.warning("axis wants %d labels, capping at %d", theoretical, MAX_LABELS)
        return MAX_LABELS
    return max(1, theoretical)


def label_position(value: float, bounds: AxisBounds) -> float:
    if bounds.range <= EPSILON:
        return 0.5
    normalized = (value - bounds.min) / bounds.range
    if abs(normalized) < EPSILON:
        return 0.0
    if abs(1.0 - normalized) < EPSILON:
        return 1.0
    return min(1.0, max(0.0, normalized))


def generate_labels(bounds: AxisBounds, config: AxisConfig | None = None) -> list[AxisLabel]:
    cfg = config or AxisConfig()
    labels: list[AxisLabel] = []
    for i in range(label_count(bounds)):
        value = bounds.min + bounds.interval * i
        if value > bounds.max + EPSILON:
            break
        clean = snap_to_decimals(value, bounds.decimal_places)
        labels.append(
            AxisLabel(
                value=clean,
                text=format_label(clean, bounds.decimal_places, cfg),
                position=label_position(clean, bounds),
            )
        )
    return labels


def format_label(value: float, decimals: int, config: AxisConfig) -> str:
    if config.label_formatter is not None:
        return config.label_formatter(value)
    if config.use_abbreviation:
        return format_large_number(value, decimals=max(1, decimals))
    if config.use_scientific_notation:
        abs_v = abs(value)
        if abs_v >= 1e6 or (abs_v <= 1e-3 and value != 0):
            return format_scientific(value, decimals)
    return format_fixed(value, decimals)


def calculate_nice_bounds(
    data_min: float,
    data_max: float,
    *,
    desired_intervals: int = 5,
    padding: RangePadding = RangePadding.AUTO,
    interval: float | None = None,
) -> AxisBounds:
    """Bounds that snap outward to the interval grid, one rule per padding strategy."""
    if desired_intervals <= 0:
        raise ChartContractError("desired_intervals must be > 0")
    if data_min > data_max:
        raise ChartContractError(f"data_min must be <= data_max, got {data_min} > {data_max}")
    padding = RangePadding(padding)

    if abs(data_max - data_min) < EPSILON:
        return _zero_range_bounds(data_min)

    step = interval if interval is not None else nice_interval_for_range(data_min, data_max, desired_intervals)
    if not step > 0:
        raise ChartContractError(f"interval must be > 0, got {step}")

    if padding is RangePadding.NONE:
        lo, hi = data_min, data_max
    elif padding is RangePadding.NORMAL:
        lo, hi = round_down(data_min, step), round_up(data_max, step)
    elif padding is RangePadding.ROUND:
        lo = _round_to_nice(data_min, step, down=True)
        hi = _round_to_nice(data_max, step, down=False)
    elif padding is RangePadding.ADDITIONAL:
        lo = round_down(data_min, step) - step
        hi = round_up(data_max, step) + step
    elif data_max - data_min > 1000:
        lo = _round_to_nice(data_min, step, down=True)
        hi = _round_to_nice(data_max, step, down=False)
    elif data_min >= 0 and data_max > 0:
        lo, hi = 0.0, round_up(data_max, step)
    else:
        lo, hi = round_down(data_min, step), round_up(data_max, step)

    return AxisBounds(min=lo, max=hi, interval=step, decimal_places=decimal_places_for_interval(step))


def _zero_range_bounds(value: float) -> AxisBounds:
    if abs(value) < EPSILON:
        return AxisBounds(min=-1.0, max=1.0, interval=0.5, decimal_places=1)
    abs_v = abs(value)
    if abs_v < 1.0:
        scale = abs_v * 0.5
    elif abs_v < 100:
        scale = 10.0
    else:
        scale = float(10.0 ** math.floor(math.log10(abs_v))) * 0.5
    step = scale / 2.0
    return AxisBounds(
        min=value - scale,
        max=value + scale,
        interval=step,
        decimal_places=decimal_places_for_interval(step),
    )


def _round_to_nice(value: float, interval: float, *, down: bool) -> float:
    magnitude = float(10.0 ** math.floor(math.log10(interval)))
    normalized = value / magnitude
    frac = _nice_fraction(normalized)
    if down:
        return math.floor(normalized / frac) * frac * magnitude
    return math.ceil(normalized / frac) * frac * magnitude


def _nice_fraction(normalized: float) -> float:
    if normalized < 1.5:
        return 1.0
    if normalized < 3.0:
        return 2.0
    if normalized < 7.0:
        return 5.0
    return 10.0


def generate_label_values(vmin: float, vmax: float, interval: float) -> list[float]:
    if not interval > 0:
        raise ChartContractError(f"interval must be > 0, got {interval}")
    if vmin > vmax:
        raise ChartContractError(f"min must be <= max, got {vmin} > {vmax}")
    steps = min(int(round((vmax - vmin) / interval)) + 1, MAX_LABELS)
    values: list[float] = []
    for i in range(steps):
        value = vmin + interval * i
        if value <= vmax + EPSILON:
            values.append(clean_value(value, interval))
    if not values or abs(values[-1] - vmax) > EPSILON:
        values.append(vmax)
    return values


def generate_minor_ticks(vmin: float, vmax: float, interval: float, minor_per_interval: int) -> list[float]:
    if minor_per_interval < 0:
        raise ChartContractError("minor_per_interval must be >= 0")
    if minor_per_interval == 0:
        return []
    if not interval > 0:
        raise ChartContractError(f"interval must be > 0, got {interval}")
    slots = minor_per_interval + 1
    minor_interval = interval / slots
    limit = min(int(math.ceil((vmax - vmin) / minor_interval)), MAX_LABELS * slots)
    ticks: list[float] = []
    for j in range(1, limit + 1):
        if j % slots == 0:
            continue
        value = vmin + minor_interval * j
        if value >= vmax - EPSILON:
            break
        ticks.append(clean_value(value, minor_interval))
    return ticks


def calculate_nice_y_bounds(
    data_min: float,
    data_max: float,
    config: AxisConfig | None = None,
) -> tuple[float, float]:
    cfg = config or AxisConfig()
    if cfg.min is not None and cfg.max is not None:
        return (cfg.min, cfg.max)

    # Non-negative value axes start at zero.
    if cfg.min is not None:
        effective_min = cfg.min
    elif data_min >= 0:
        effective_min = 0.0
    else:
        effective_min = data_min
    effective_max = cfg.max if cfg.max is not None else data_max

    step = cfg.interval or nice_interval_for_range(effective_min, effective_max, cfg.desired_intervals)
    lo = cfg.min if cfg.min is not None else round_down(effective_min, step)
    hi = cfg.max if cfg.max is not None else round_up(effective_max, step)

    # Keep the tallest value off the top edge.
    if cfg.max is None and hi - data_max < step * 0.15:
        hi += step
    return (lo, hi)


def calculate_nice_x_bounds(
    data_min: float,
    data_max: float,
    config: AxisConfig | None = None,
    *,
    use_nice_bounds: bool = False,
) -> tuple[float, float]:
    cfg = config or AxisConfig()
    if cfg.min is not None and cfg.max is not None:
        return (cfg.min, cfg.max)
    lo = cfg.min if cfg.min is not None else data_min
    hi = cfg.max if cfg.max is not None else data_max
    if not use_nice_bounds:
        return (lo, hi)
    step = cfg.interval or nice_interval_for_range(lo, hi, cfg.desired_intervals)
    return (
        cfg.min if cfg.min is not None else round_down(lo, step),
        cfg.max if cfg.max is not None else round_up(hi, step),
    )


def category_x_bounds(point_count: int) -> tuple[float, float]:
    return (-0.5, point_count - 0.5)
