"""Discretize values into bins for a stepped color scale.

Bins are the half-open intervals ``[b[i], b[i+1])`` between ascending
boundaries; the last interval also holds ``b[-1]``. Values outside the
boundaries are clipped into the first or last bin.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def validate_bins(bins: Sequence[float]) -> np.ndarray:
    """Return *bins* as a float array, or raise ``ValueError``."""
    arr = np.asarray(list(bins), dtype=float)
    if arr.ndim != 1 or len(arr) < 2:
        raise ValueError(f"Need at least two bin boundaries, got {list(bins)}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"Bin boundaries must be finite, got {list(bins)}")
    if not np.all(np.diff(arr) > 0):
        raise ValueError(f"Bin boundaries must be strictly increasing, got {list(bins)}")
    return arr


def n_bins(bins: Sequence[float]) -> int:
    return len(validate_bins(bins)) - 1


def _is_missing(value) -> bool:
    return value is None or value is pd.NA or (isinstance(value, float) and math.isnan(value))


def bin_index(bins: Sequence[float], value: float | None) -> int | None:
    """Index ``i`` such that ``bins[i] <= value < bins[i + 1]``, clipped.

    Missing values return ``None``.
    """
    arr = validate_bins(bins)
    if _is_missing(value):
        return None
    idx = int(np.searchsorted(arr, float(value), side="right")) - 1
    return min(max(idx, 0), len(arr) - 2)


def assign_bins(bins: Sequence[float], values: pd.Series) -> pd.Series:
    """Vectorized :func:`bin_index`; returns a nullable ``Int64`` series."""
    arr = validate_bins(bins)
    numeric = pd.to_numeric(values, errors="coerce")
    raw = np.searchsorted(arr, numeric.to_numpy(dtype=float, na_value=np.nan), side="right") - 1
    clipped = np.clip(raw, 0, len(arr) - 2)
    result = pd.Series(clipped, index=values.index, dtype="Int64")
    result[numeric.isna()] = pd.NA
    return result


def count_outside(bins: Sequence[float], values: pd.Series) -> int:
    """Number of non-missing values that fall outside ``[bins[0], bins[-1]]``."""
    arr = validate_bins(bins)
    numeric = pd.to_numeric(values, errors="coerce").dropna()
    return int(((numeric < arr[0]) | (numeric > arr[-1])).sum())


def value_range(values: pd.Series) -> tuple[float, float]:
    """``(min, max)`` of the non-missing values."""
    numeric = pd.to_numeric(values, errors="coerce").dropna()
    if numeric.empty:
        raise ValueError("No numeric values to compute a range from")
    return float(numeric.min()), float(numeric.max())


def step_bins(low: float, high: float, step: float) -> list[float]:
    """Boundaries every *step* covering ``[low, high]``.

    The first boundary is the multiple of *step* at or below *low*, the last
    the multiple at or above *high*; ``step_bins(2212, 2633, 50)`` gives
    ``[2200, 2250, ..., 2650]``.
    """
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")
    if high < low:
        raise ValueError(f"high ({high}) is below low ({low})")
    start = math.floor(low / step) * step
    stop = math.ceil(high / step) * step
    if stop <= start:
        stop = start + step
    count = int(round((stop - start) / step))
    return [start + i * step for i in range(count + 1)]
