"""Validation utilities for price series and horizons."""

import numbers
from collections.abc import Iterable
from typing import Any

import numpy as np


class InvalidSeriesError(ValueError):
    """Raised when a price series cannot be scored (non-finite or not 1-D)."""

    def __init__(self, message: str, bad_index: int | None = None):
        super().__init__(message)
        self.bad_index = bad_index


def ensure_finite_series(values: Any) -> np.ndarray:
    """
    Coerce a price series to a 1-D float array and reject non-finite values.

    Args:
        values: list, tuple, numpy array or pandas Series of prices

    Returns:
        New float64 array (the caller's data is never aliased)

    Raises:
        InvalidSeriesError: if the data is not 1-D, not numeric, or holds NaN/inf
    """
    try:
        arr = np.array(values, dtype=float, copy=True)
    except (TypeError, ValueError) as e:
        raise InvalidSeriesError(f"Price series is not numeric: {e}") from e

    if arr.ndim != 1:
        raise InvalidSeriesError(f"Price series must be 1-D, got shape {arr.shape}")

    finite = np.isfinite(arr)
    if not finite.all():
        bad = int(np.flatnonzero(~finite)[0])
        raise InvalidSeriesError(
            f"Price series has non-finite value {arr[bad]!r} at index {bad}",
            bad_index=bad,
        )
    return arr


def check_horizons(horizons: Iterable[Any]) -> tuple[int, ...]:
    """
    Validate a horizon set: positive, unique integers in caller order.

    Args:
        horizons: Iterable of lookback lengths

    Returns:
        Tuple of ints, order preserved

    Raises:
        ValueError: on non-integer, non-positive or duplicate horizons
    """
    out: list[int] = []
    for h in horizons:
        if isinstance(h, bool) or not isinstance(h, numbers.Integral):
            raise ValueError(f"Invalid horizon {h!r}. Must be a positive integer")
        h = int(h)
        if h <= 0:
            raise ValueError(f"Invalid horizon {h}. Must be a positive integer")
        if h in out:
            raise ValueError(f"Duplicate horizon {h}")
        out.append(h)
    return tuple(out)


def check_fraction(name: str, value: float) -> float:
    """Validate a value in [0, 1]."""
    value = float(value)
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"Invalid {name} {value}. Must be within [0, 1]")
    return value


def check_positive(name: str, value: float) -> float:
    """Validate a strictly positive finite value."""
    value = float(value)
    if not np.isfinite(value) or value <= 0:
        raise ValueError(f"Invalid {name} {value}. Must be positive")
    return value
