from luvatrix_chart.adapters.normalize import points_from_xy, xy_arrays

__all__ = ["points_from_xy", "xy_arrays"]
