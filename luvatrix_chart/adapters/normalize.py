from __future__ import annotations

from typing import Any, Mapping

import numpy as np

from luvatrix_chart.data import DataPoint
from luvatrix_chart.errors import ChartDataError


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]

try:
    import torch
except Exception:  # pragma: no cover - optional dependency
    torch = None  # type: ignore[assignment]


def points_from_xy(
    y: Any = None,
    x: Any = None,
    data: Mapping[str, Any] | None = None,
    labels: Any = None,
    metadata: Any = None,
) -> list[DataPoint[object]]:
    """Build chart points from array-likes or from named columns of ``data``.

    ``y`` is required; ``x`` defaults to the sample index. ``labels`` and
    ``metadata`` are optional per-point columns and must match ``y`` in length.
    Any of the arguments may be a column name when ``data`` (a DataFrame or a
    plain mapping of columns) is given.
    """
    x_arr, y_arr = xy_arrays(y, x=x, data=data)
    n = y_arr.size
    texts = _per_point(labels, data, n, "labels")
    extras = _per_point(metadata, data, n, "metadata")

    points: list[DataPoint[object]] = []
    for i in range(n):
        points.append(
            DataPoint(
                x=float(x_arr[i]),
                y=float(y_arr[i]),
                label=None if texts is None else str(texts[i]),
                metadata=None if extras is None else extras[i],
            )
        )
    return points


def xy_arrays(y: Any = None, *, x: Any = None, data: Mapping[str, Any] | None = None) -> tuple[np.ndarray, np.ndarray]:
    """Finite float64 ``(x, y)`` arrays of equal length."""
    if y is None:
        raise ChartDataError("y input is required")
    y_arr = _float_column(_lookup(y, data), "y")
    if y_arr.size == 0:
        raise ChartDataError("empty series")

    if x is None:
        x_arr = np.arange(y_arr.size, dtype=np.float64)
    else:
        x_arr = _float_column(_lookup(x, data), "x")
        if x_arr.size != y_arr.size:
            raise ChartDataError(f"x and y length mismatch: {x_arr.size} != {y_arr.size}")

    bad = ~(np.isfinite(x_arr) & np.isfinite(y_arr))
    if np.any(bad):
        first = int(np.flatnonzero(bad)[0])
        raise ChartDataError(f"series contains non-finite values at index {first}")
    return x_arr, y_arr


def _lookup(value: Any, data: Mapping[str, Any] | None) -> Any:
    if not isinstance(value, str):
        return value
    if data is None:
        raise ChartDataError(f"column name {value!r} needs `data=`")
    try:
        return data[value]
    except KeyError:
        raise ChartDataError(f"column not found: {value}") from None


def _float_column(value: Any, name: str) -> np.ndarray:
    if torch is not None and isinstance(value, torch.Tensor):
        value = value.detach().cpu().to(torch.float64).numpy()
    elif pd is not None and isinstance(value, (pd.Series, pd.Index)):
        # Nullable dtypes hold pd.NA, which numpy cannot cast; map it to nan.
        try:
            value = value.to_numpy(dtype=np.float64, na_value=np.nan)
        except (TypeError, ValueError) as exc:
            raise ChartDataError(f"{name} must be numeric") from exc
    elif isinstance(value, (bytes, bytearray)):
        raise ChartDataError(f"unsupported {name} input type: {type(value)!r}")

    try:
        arr = np.asarray(value, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ChartDataError(f"{name} must be numeric") from exc
    if arr.ndim != 1:
        raise ChartDataError(f"{name} must be 1-D, got shape {arr.shape}")
    return arr


def _per_point(value: Any, data: Mapping[str, Any] | None, n: int, name: str) -> list[Any] | None:
    if value is None:
        return None
    column = _lookup(value, data)
    if isinstance(column, np.ndarray):
        column = column.tolist()
    try:
        items = list(column)
    except TypeError:
        raise ChartDataError(f"unsupported {name} input type: {type(column)!r}") from None
    if len(items) != n:
        raise ChartDataError(f"{name} length mismatch: {len(items)} != {n}")
    return items
