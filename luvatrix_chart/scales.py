from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
import math

import numpy as np

from luvatrix_chart.errors import ChartContractError


EPSILON = 1e-10


def nice_number(value: float, *, round_result: bool) -> float:
    """Pick a value of the form {1, 2, 5, 10} x 10^k close to ``value``.

    With ``round_result`` the nearest nice fraction wins, otherwise the
    smallest nice fraction that is >= the normalized value.
    """
    if not math.isfinite(value) or value <= 0:
        raise ChartContractError(f"nice number requires a positive finite value, got {value!r}")
    exp = np.floor(np.log10(value))
    magnitude = float(10.0**exp)
    frac = value / magnitude

    if round_result:
        if frac < 1.5:
            nice_frac = 1.0
        elif frac < 3.0:
            nice_frac = 2.0
        elif frac < 7.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0
    else:
        if frac <= 1.0:
            nice_frac = 1.0
        elif frac <= 2.0:
            nice_frac = 2.0
        elif frac <= 5.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0

    return float(nice_frac * magnitude)


def nice_interval(value_range: float, target_ticks: int = 5) -> float:
    if target_ticks <= 0:
        raise ChartContractError("target_ticks must be > 0")
    return nice_number(value_range / target_ticks, round_result=False)


def nice_interval_for_range(vmin: float, vmax: float, desired_intervals: int = 5) -> float:
    """Nice interval with dedicated handling for zero, tiny and huge ranges."""
    if desired_intervals <= 0:
        raise ChartContractError("desired_intervals must be > 0")
    span = abs(vmax - vmin)

    if span < EPSILON:
        if abs(vmin) < EPSILON and abs(vmax) < EPSILON:
            return 0.2
        avg = abs((vmin + vmax) / 2.0)
        return float(10.0 ** (math.floor(math.log10(avg)) - 1))

    rough = span / desired_intervals
    if span > 1e9:
        # Large ranges lean towards 5 a little longer before jumping to 10.
        magnitude = float(10.0 ** math.floor(math.log10(rough)))
        frac = rough / magnitude
        if frac < 1.5:
            return magnitude
        if frac < 3.0:
            return 2.0 * magnitude
        if frac < 7.5:
            return 5.0 * magnitude
        return 10.0 * magnitude
    return nice_number(rough, round_result=True)


def next_nice_number(value: float) -> float:
    if abs(value) < EPSILON:
        return 1.0
    magnitude = float(10.0 ** math.floor(math.log10(abs(value))))
    normalized = value / magnitude
    if normalized < 1.0:
        nice = 1.0
    elif normalized < 2.0:
        nice = 2.0
    elif normalized < 5.0:
        nice = 5.0
    else:
        nice = 10.0
    return nice * magnitude


def previous_nice_number(value: float) -> float:
    if abs(value) < EPSILON:
        return -1.0
    magnitude = float(10.0 ** math.floor(math.log10(abs(value))))
    normalized = value / magnitude
    if normalized <= 1.0:
        nice = 0.5
    elif normalized <= 2.0:
        nice = 1.0
    elif normalized <= 5.0:
        nice = 2.0
    elif normalized <= 10.0:
        nice = 5.0
    else:
        nice = 10.0
    return nice * magnitude


def decimal_places_for_interval(interval: float) -> int:
    if interval >= 1:
        return 0
    if interval >= 0.1:
        return 1
    if interval >= 0.01:
        return 2
    if interval >= 0.001:
        return 3
    return 4


def decimals_from_step(step: float, *, limit: int = 6) -> int:
    """Significant decimals of ``step`` itself (0.25 -> 2, 0.5 -> 1)."""
    if step <= 0 or not math.isfinite(step):
        return limit
    if step >= 1:
        return 0
    d = Decimal(repr(step)).normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(limit, decimals)


def snap_to_decimals(value: float, decimals: int) -> float:
    """Round to ``decimals`` places, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    if not math.isfinite(value):
        return value
    multiplier = 10.0**decimals
    return math.copysign(math.floor(abs(value) * multiplier + 0.5), value) / multiplier


def clean_value(value: float, interval: float | None = None) -> float:
    if abs(value) < EPSILON:
        return 0.0
    if interval is not None:
        return snap_to_decimals(value, decimals_from_step(interval))
    return round(value, 10)


def round_down(value: float, interval: float) -> float:
    return math.floor(value / interval) * interval


def round_up(value: float, interval: float) -> float:
    return math.ceil(value / interval) * interval


def format_fixed(value: float, decimals: int) -> str:
    if not math.isfinite(value):
        return str(value)
    quant = Decimal("1").scaleb(-decimals)
    try:
        out = format(Decimal(repr(value)).quantize(quant, rounding=ROUND_HALF_UP), "f")
    except InvalidOperation:
        out = f"{value:.{decimals}f}"
    if out.lstrip("-").strip("0.") == "":
        out = out.lstrip("-")
    return out


def format_scientific(value: float, decimals: int) -> str:
    if not math.isfinite(value):
        return str(value)
    mantissa, exponent = f"{value:.{decimals}e}".split("e")
    power = int(exponent)
    return f"{mantissa}e{'-' if power < 0 else '+'}{abs(power)}"


def format_large_number(value: float, *, decimals: int = 1, show_decimals: bool = True) -> str:
    abs_v = abs(value)
    suffix = ""
    scaled = abs_v
    if abs_v >= 1e12:
        scaled = abs_v / 1e12
        suffix = "T"
    elif abs_v >= 1e9:
        scaled = abs_v / 1e9
        suffix = "B"
    elif abs_v >= 1e6:
        scaled = abs_v / 1e6
        suffix = "M"
    elif abs_v >= 1e3:
        scaled = abs_v / 1e3
        suffix = "K"

    if show_decimals and suffix:
        out = format_fixed(scaled, decimals)
    else:
        out = format_fixed(scaled, 0)
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    sign = "-" if value < 0 and out != "0" else ""
    return f"{sign}{out}{suffix}"
