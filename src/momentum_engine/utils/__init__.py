"""Utility modules."""

from momentum_engine.utils.indicators import calculate_adx, calculate_rsi, synthesize_ohlc
from momentum_engine.utils.provenance import build_meta, build_ml_provenance
from momentum_engine.utils.series import (
    looks_daily,
    slice_recent_years,
    standardize_closes,
    value_at,
)
from momentum_engine.utils.smoothing import EPS, ema, ema_abs, ema_std
from momentum_engine.utils.validators import (
    InvalidSeriesError,
    check_horizons,
    ensure_finite_series,
)

__all__ = [
    "calculate_adx",
    "calculate_rsi",
    "synthesize_ohlc",
    "build_meta",
    "build_ml_provenance",
    "looks_daily",
    "slice_recent_years",
    "standardize_closes",
    "value_at",
    "EPS",
    "ema",
    "ema_abs",
    "ema_std",
    "InvalidSeriesError",
    "check_horizons",
    "ensure_finite_series",
]
