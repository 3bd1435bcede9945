"""Per-horizon indicator scorers: band, oscillator and trend impulse.

Each scorer maps a close series and one horizon to a score in [-100, 100].
The band and impulse scorers also return their raw series so the reference
horizon can be exposed as chart overlays.
"""

from dataclasses import dataclass

import numpy as np

from momentum_engine.utils.smoothing import EPS, clip_score, ema, ema_std

# Outer decile of the band: extremity boost and regime classification
BAND_EDGE_LOW = 0.10
BAND_EDGE_HIGH = 0.90

# Relative weights of the impulse, acceleration and regime-distance components
IMPULSE_WEIGHT = 0.55
ACCELERATION_WEIGHT = 0.30
DISTANCE_WEIGHT = 0.15


@dataclass(frozen=True)
class BandScore:
    """Band scorer output for one horizon."""

    score: np.ndarray
    mean: np.ndarray
    std: np.ndarray

    @property
    def upper(self) -> np.ndarray:
        return self.mean + 2.0 * self.std

    @property
    def lower(self) -> np.ndarray:
        return self.mean - 2.0 * self.std


@dataclass(frozen=True)
class ImpulseScore:
    """Trend-impulse scorer output for one horizon."""

    score: np.ndarray
    line: np.ndarray
    signal: np.ndarray
    histogram: np.ndarray
    ema_fast: np.ndarray
    ema_slow: np.ndarray


@dataclass(frozen=True)
class OscillatorThresholds:
    """Overbought/oversold levels and how far a trend may push them."""

    adaptive: bool = True
    overbought: float = 70.0
    oversold: float = 30.0
    max_shift: float = 20.0
    shift_gain: float = 10.0


def percent_b(closes: np.ndarray, mean: np.ndarray, std: np.ndarray) -> np.ndarray:
    """Position between the +-2 std bands, clamped to [0, 1]."""
    lower = mean - 2.0 * std
    width = 4.0 * std
    return np.clip((closes - lower) / (width + EPS), 0.0, 1.0)


def normalized_bandwidth(mean: np.ndarray, std: np.ndarray) -> np.ndarray:
    """Band width relative to the mean level."""
    return 4.0 * std / (np.abs(mean) + EPS)


def band_score(
    closes: np.ndarray,
    horizon: int,
    squash: float = 2.0,
    extremity_gain: float = 0.6,
    volatility_damping: float = 2.0,
) -> BandScore:
    """
    Score distance from the EMA band (mean-reversion biased).

    Stretched above the mean scores negative, below scores positive. Scores
    are boosted in the outer decile of the band and damped as the band widens.

    Args:
        closes: Close prices
        horizon: EMA span for mean and std
        squash: tanh scale applied to the z-score
        extremity_gain: Extra weight at the band edges (up to 1 + gain)
        volatility_damping: Gain of the 1 / (1 + g * bandwidth) damping

    Returns:
        BandScore with the clipped score and the band mean/std
    """
    mean = ema(closes, horizon)
    std = ema_std(closes, horizon)

    z = (closes - mean) / (std + EPS)
    base = -100.0 * np.tanh(z / squash)

    b = percent_b(closes, mean, std)
    bandwidth = normalized_bandwidth(mean, std)

    boost = np.ones_like(b)
    high = b > BAND_EDGE_HIGH
    low = b < BAND_EDGE_LOW
    boost[high] = 1.0 + extremity_gain * ((b[high] - BAND_EDGE_HIGH) / BAND_EDGE_LOW)
    boost[low] = 1.0 + extremity_gain * ((BAND_EDGE_LOW - b[low]) / BAND_EDGE_LOW)

    damping = 1.0 / (1.0 + volatility_damping * bandwidth)

    return BandScore(score=clip_score(base * boost * damping), mean=mean, std=std)


def trend_strength(closes: np.ndarray, horizon: int) -> np.ndarray:
    """|slope of the EMA mean| / EMA std, zero on the first bar."""
    span = max(2, horizon)
    mean = ema(closes, span)
    std = ema_std(closes, span)
    slope = np.zeros_like(mean)
    slope[1:] = np.diff(mean)
    return np.abs(slope) / (std + EPS)


def oscillator_score(
    closes: np.ndarray,
    horizon: int,
    slope_scale: float = 4.0,
    thresholds: OscillatorThresholds | None = None,
) -> np.ndarray:
    """
    Score an RSI-style oscillator against (possibly adaptive) thresholds.

    The raw 0-100 value is mapped so that +-100 sit on the overbought and
    oversold levels. With adaptive thresholds those levels move outward in
    proportion to trend strength. A slope term rewards the direction of change.

    Args:
        closes: Close prices
        horizon: EMA span for the smoothed up/down moves
        slope_scale: tanh scale of the change in the raw oscillator
        thresholds: Overbought/oversold settings (default 70/30, adaptive)

    Returns:
        Score array in [-100, 100]
    """
    if thresholds is None:
        thresholds = OscillatorThresholds()

    delta = np.zeros_like(closes)
    delta[1:] = np.diff(closes)
    avg_up = ema(np.where(delta > 0, delta, 0.0), horizon)
    avg_down = ema(np.where(delta < 0, -delta, 0.0), horizon)

    total = avg_up + avg_down
    # No movement at all reads neutral
    raw = np.where(total > EPS, 100.0 * avg_up / (total + EPS), 50.0)

    overbought = np.full_like(raw, thresholds.overbought)
    oversold = np.full_like(raw, thresholds.oversold)
    if thresholds.adaptive:
        shift = np.minimum(
            thresholds.max_shift,
            thresholds.shift_gain * trend_strength(closes, horizon),
        )
        overbought = np.clip(thresholds.overbought + shift, 50.0, 95.0)
        oversold = np.clip(thresholds.oversold - shift, 5.0, 50.0)

    up_range = np.maximum(1.0, overbought - 50.0)
    down_range = np.maximum(1.0, 50.0 - oversold)
    base = np.where(
        raw >= 50.0,
        100.0 * (raw - 50.0) / up_range,
        -100.0 * (50.0 - raw) / down_range,
    )
    base = clip_score(base)

    prev = np.empty_like(raw)
    if raw.size:
        prev[0] = 50.0
        prev[1:] = raw[:-1]
    slope_part = 50.0 * np.tanh((raw - prev) / slope_scale)

    return clip_score(base + slope_part)


def slow_span(horizon: int, ratio: float) -> int:
    """Slow EMA span for the impulse line, at least 2."""
    return max(2, int(np.floor(horizon * ratio + 0.5)))


def impulse_score(
    closes: np.ndarray,
    horizon: int,
    span_ratio: float = 4.0,
    histogram_scale: float = 0.8,
    signal_scale: float = 0.6,
    distance_scale: float = 1.2,
    edge_decay: float = 1.2,
) -> ImpulseScore:
    """
    Score a MACD-style trend impulse, normalized by its own volatility.

    Args:
        closes: Close prices
        horizon: Fast EMA span (also the signal span)
        span_ratio: Slow span = horizon * ratio
        histogram_scale: tanh scale of histogram / V
        signal_scale: tanh scale of the signal-line change / V
        distance_scale: tanh scale of line / V
        edge_decay: Decay of the exp(-|line / V| / decay) edge penalty

    Returns:
        ImpulseScore with the clipped score and the raw line/signal/EMA series
    """
    fast = ema(closes, horizon)
    slow = ema(closes, slow_span(horizon, span_ratio))
    line = fast - slow

    signal = ema(line, horizon)
    histogram = line - signal

    # Mean absolute deviation of the line over a longer window
    deviation = np.abs(line - ema(line, horizon))
    scale = ema(deviation, max(3, int(np.floor(3 * horizon + 0.5)))) + EPS

    distance = line / scale
    signal_change = np.zeros_like(signal)
    signal_change[1:] = np.diff(signal) / scale[1:]

    impulse = np.tanh((histogram / scale) / histogram_scale)
    acceleration = np.tanh(signal_change / signal_scale)
    regime = np.tanh(distance / distance_scale)

    raw = IMPULSE_WEIGHT * impulse + ACCELERATION_WEIGHT * acceleration + DISTANCE_WEIGHT * regime
    edge = np.exp(-np.abs(distance) / edge_decay)
    score = 100.0 * np.clip(raw * edge, -1.0, 1.0)

    return ImpulseScore(
        score=score,
        line=line,
        signal=signal,
        histogram=histogram,
        ema_fast=fast,
        ema_slow=slow,
    )
