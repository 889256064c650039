from luvatrix_chart.axis.bounds import AxisBounds, AxisLabel
from luvatrix_chart.axis.calculator import (
    MAX_LABELS,
    AxisConfig,
    RangePadding,
    calculate_bounds,
    calculate_nice_bounds,
    generate_label_values,
    generate_labels,
    generate_minor_ticks,
)
from luvatrix_chart.axis.measure import LabelSizeCache, text_size
from luvatrix_chart.axis.variants import Axis, AxisState, CategoryAxis, DateTimeAxis, NumericAxis

__all__ = [
    "MAX_LABELS",
    "Axis",
    "AxisBounds",
    "AxisConfig",
    "AxisLabel",
    "AxisState",
    "CategoryAxis",
    "DateTimeAxis",
    "LabelSizeCache",
    "NumericAxis",
    "RangePadding",
    "calculate_bounds",
    "calculate_nice_bounds",
    "generate_label_values",
    "generate_labels",
    "generate_minor_ticks",
    "text_size",
]
