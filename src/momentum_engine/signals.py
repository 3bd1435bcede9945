"""Display indicator signals and the 0-100 momentum composite score.

These are the header-panel readings: band position, a classic 14-period
RSI, the reference impulse histogram and a synthetic-OHLC ADX, each mapped
to [-100, 100] (positive = bullish) and blended with trend-dependent weights.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from momentum_engine.config import MomentumConfig
from momentum_engine.engine import IndicatorSeries, compute_momentum
from momentum_engine.utils.indicators import calculate_adx, calculate_rsi, synthesize_ohlc
from momentum_engine.utils.smoothing import round_half_up
from momentum_engine.utils.validators import ensure_finite_series

SIGNAL_EPS = 1e-6
RSI_PERIOD = 14
ADX_PERIOD = 14
# Trading days of histogram history used for the MACD scale
MACD_SCALE_WINDOW = 252
ADX_TRENDING = 25.0

TRENDING_WEIGHTS = {"macd": 0.45, "rsi": 0.25, "band": 0.20, "adx": 0.10}
RANGING_WEIGHTS = {"macd": 0.25, "rsi": 0.35, "band": 0.30, "adx": 0.10}


@dataclass(frozen=True)
class IndicatorSignals:
    """Per-bar display signals, integers in [-100, 100]."""

    band: list[int] = field(default_factory=list)
    rsi: list[int] = field(default_factory=list)
    macd: list[int] = field(default_factory=list)
    adx: list[int] = field(default_factory=list)
    composite: list[int] = field(default_factory=list)

    def latest(self) -> dict[str, int | None]:
        """Last value of each signal (None when empty)."""
        return {
            "band": self.band[-1] if self.band else None,
            "rsi": self.rsi[-1] if self.rsi else None,
            "macd": self.macd[-1] if self.macd else None,
            "adx": self.adx[-1] if self.adx else None,
            "composite": self.composite[-1] if self.composite else None,
        }


def _to_percent(values: np.ndarray) -> list[int]:
    return np.floor(values * 100.0 + 0.5).astype(int).tolist()


def indicator_signals(
    closes: Sequence[float] | np.ndarray | pd.Series,
    config: MomentumConfig | None = None,
    momentum: IndicatorSeries | None = None,
) -> IndicatorSignals:
    """
    Compute display signals for every bar.

    Args:
        closes: Close prices
        config: Engine config used for the band/impulse overlays
        momentum: Precomputed engine output for the same closes (optional)

    Returns:
        IndicatorSignals aligned to closes
    """
    close = ensure_finite_series(closes)
    n = close.size
    if n == 0:
        return IndicatorSignals()

    if momentum is None:
        momentum = compute_momentum(close, config)
    if len(momentum) == n:
        upper = momentum.band_upper
        lower = momentum.band_lower
        hist = momentum.impulse_histogram
    else:
        upper = lower = hist = np.full(n, np.nan)

    prices = pd.Series(close)
    rsi = calculate_rsi(prices, RSI_PERIOD).to_numpy()
    ohlc = synthesize_ohlc(prices)
    adx_parts = calculate_adx(ohlc["high"], ohlc["low"], ohlc["close"], ADX_PERIOD)
    adx = adx_parts["adx"].to_numpy()
    direction = adx_parts["direction"].to_numpy()

    finite_hist = hist[np.isfinite(hist)]
    window = finite_hist[-MACD_SCALE_WINDOW:]
    hist_std = float(np.std(window)) if window.size else 0.0
    hist_scale = hist_std if hist_std > SIGNAL_EPS else 1.0

    band_valid = np.isfinite(upper) & np.isfinite(lower) & (upper != lower)
    width = np.where(band_valid, np.maximum(SIGNAL_EPS, upper - lower), 1.0)
    percent_b = np.where(band_valid, np.clip((close - lower) / width, 0.0, 1.0), 0.5)
    s_band = np.clip((0.5 - percent_b) / 0.5, -1.0, 1.0)

    s_rsi = np.where(np.isfinite(rsi), np.clip((50.0 - rsi) / 20.0, -1.0, 1.0), 0.0)
    s_macd = np.where(np.isfinite(hist), np.clip((hist / hist_scale) / 2.0, -1.0, 1.0), 0.0)

    adx_valid = np.isfinite(adx)
    strength = np.where(adx_valid, np.clip((np.abs(adx) - 15.0) / 20.0, 0.0, 1.0), 0.0)
    sign = np.where(np.isfinite(direction), np.clip(direction, -1.0, 1.0), 0.0)
    s_adx = strength * sign

    trending = adx_valid & (np.abs(np.where(adx_valid, adx, 0.0)) >= ADX_TRENDING)
    composite = np.where(
        trending,
        TRENDING_WEIGHTS["band"] * s_band
        + TRENDING_WEIGHTS["rsi"] * s_rsi
        + TRENDING_WEIGHTS["macd"] * s_macd
        + TRENDING_WEIGHTS["adx"] * s_adx,
        RANGING_WEIGHTS["band"] * s_band
        + RANGING_WEIGHTS["rsi"] * s_rsi
        + RANGING_WEIGHTS["macd"] * s_macd
        + RANGING_WEIGHTS["adx"] * s_adx,
    )
    composite = np.clip(composite, -1.0, 1.0)

    return IndicatorSignals(
        band=_to_percent(s_band),
        rsi=_to_percent(s_rsi),
        macd=_to_percent(s_macd),
        adx=_to_percent(s_adx),
        composite=_to_percent(composite),
    )


def to_unit_score(score: float) -> int:
    """Map a [-100, 100] score to the 0-100 display scale."""
    return round_half_up((score + 100.0) / 2.0)


def momentum_composite_score(
    prices: Sequence[float] | np.ndarray,
    score_momentum: Sequence[float] | np.ndarray | None = None,
    config: MomentumConfig | None = None,
    momentum: IndicatorSeries | None = None,
) -> int | None:
    """
    Headline 0-100 momentum score.

    Uses the last display composite when at least two prices exist, else
    falls back to the last engine momentum score.

    Args:
        prices: Close prices
        score_momentum: Engine momentum scores for the fallback path
            (defaults to momentum.score_momentum)
        config: Engine config for the display signals
        momentum: Precomputed engine output for the same prices (optional)

    Returns:
        Integer score in [0, 100], or None without usable data
    """
    if score_momentum is None and momentum is not None:
        score_momentum = momentum.score_momentum

    if len(prices) >= 2:
        signals = indicator_signals(prices, config, momentum=momentum)
        if signals.composite:
            return to_unit_score(signals.composite[-1])

    if score_momentum is None or len(score_momentum) == 0:
        return None
    raw = float(score_momentum[-1])
    if not math.isfinite(raw):
        return None
    return to_unit_score(raw)
