from luvatrix_chart.axis import (
    AxisBounds,
    AxisConfig,
    AxisLabel,
    AxisState,
    CategoryAxis,
    DateTimeAxis,
    LabelSizeCache,
    NumericAxis,
    RangePadding,
    calculate_bounds,
    generate_labels,
)
from luvatrix_chart.coordinates import CoordinateSystem
from luvatrix_chart.data import DataPoint
from luvatrix_chart.downsample import DownsampleMethod, downsample, downsample_with
from luvatrix_chart.errors import ChartContractError, ChartDataError
from luvatrix_chart.geometry import Rect
from luvatrix_chart.path import Path
from luvatrix_chart.spatial import QuadTreeStatistics, SpatialIndex

__all__ = [
    "AxisBounds",
    "AxisConfig",
    "AxisLabel",
    "AxisState",
    "CategoryAxis",
    "ChartContractError",
    "ChartDataError",
    "CoordinateSystem",
    "DataPoint",
    "DateTimeAxis",
    "DownsampleMethod",
    "LabelSizeCache",
    "NumericAxis",
    "Path",
    "QuadTreeStatistics",
    "RangePadding",
    "Rect",
    "SpatialIndex",
    "calculate_bounds",
    "downsample",
    "downsample_with",
    "generate_labels",
]
