"""Exponential smoothing primitives shared by every scorer."""

import numpy as np

# Denominator guard used across the engine
EPS = 1e-8


def ema(values: np.ndarray, span: float) -> np.ndarray:
    """
    Calculate Exponential Moving Average seeded with the first value.

    alpha = 2 / (span + 1). The update is written as
    prev + alpha * (x - prev) so a constant input stays exactly constant.

    Args:
        values: 1-D float array
        span: Smoothing span (>= 1)

    Returns:
        EMA array, same length as input
    """
    x = np.asarray(values, dtype=float)
    out = np.empty_like(x)
    if x.size == 0:
        return out

    alpha = 2.0 / (span + 1.0)
    prev = x[0]
    out[0] = prev
    for i in range(1, x.size):
        prev = prev + alpha * (x[i] - prev)
        out[i] = prev
    return out


def ema_abs(values: np.ndarray, span: float) -> np.ndarray:
    """EMA of the absolute values (adaptive scale estimator)."""
    return ema(np.abs(np.asarray(values, dtype=float)), span)


def ema_std(values: np.ndarray, span: float) -> np.ndarray:
    """
    Calculate EMA-based rolling standard deviation.

    sqrt(max(0, E[x^2] - E[x]^2)); the floor at zero absorbs round-off.
    Values are scaled by a power of two near max(|x|) before squaring so
    huge prices cannot overflow; the scaling is exact.

    Args:
        values: 1-D float array
        span: Smoothing span

    Returns:
        Standard deviation array, same length as input
    """
    x = np.asarray(values, dtype=float)
    peak = float(np.max(np.abs(x))) if x.size else 0.0
    scale = 2.0 ** np.floor(np.log2(peak)) if peak > 0 else 1.0
    y = x / scale
    mean = ema(y, span)
    mean_sq = ema(y * y, span)
    return np.sqrt(np.maximum(0.0, mean_sq - mean * mean)) * scale


def clip_score(values: np.ndarray | float) -> np.ndarray:
    """Clip to the [-100, 100] score range."""
    return np.clip(values, -100.0, 100.0)


def round_half_up(x: float) -> int:
    """Round .5 away from the floor (display rounding for scores)."""
    return int(np.floor(x + 0.5))
