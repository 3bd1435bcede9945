"""Regime context and the rule-based reversion/trend blend."""

from dataclasses import dataclass

import numpy as np

from momentum_engine.config import MomentumConfig, RegimeBucket
from momentum_engine.scoring.scorers import (
    BAND_EDGE_HIGH,
    BAND_EDGE_LOW,
    normalized_bandwidth,
    percent_b,
)
from momentum_engine.utils.smoothing import EPS, clip_score

# Bucket classification thresholds
EXTREME_Z = 2.0
TREND_Z = 1.0
TREND_STRENGTH_MIN = 0.25

# Sub-score mixes: reversion leans on the band, trend on the impulse
PRIMARY_MIX = 0.7
OSCILLATOR_MIX = 0.3


@dataclass(frozen=True)
class RegimeContext:
    """Per-bar regime statistics from the reference horizon."""

    z: np.ndarray
    percent_b: np.ndarray
    bandwidth: np.ndarray
    mean_slope: np.ndarray
    trend_strength: np.ndarray

    def __len__(self) -> int:
        return len(self.z)


def regime_context(closes: np.ndarray, mean: np.ndarray, std: np.ndarray) -> RegimeContext:
    """
    Derive the regime context from the reference band mean/std.

    Args:
        closes: Close prices
        mean: Reference-horizon EMA mean
        std: Reference-horizon EMA std

    Returns:
        RegimeContext aligned to closes
    """
    z = (closes - mean) / (std + EPS)
    slope = np.zeros_like(mean)
    slope[1:] = np.diff(mean)
    return RegimeContext(
        z=z,
        percent_b=percent_b(closes, mean, std),
        bandwidth=normalized_bandwidth(mean, std),
        mean_slope=slope,
        trend_strength=np.abs(slope) / (std + EPS),
    )


def classify_regime(z: float, percent_b: float, trend_strength: float) -> RegimeBucket:
    """
    Classify one bar into a regime bucket.

    Extreme when hugging a band edge or |z| >= 2, trend when near the mean
    with a strong slope, range otherwise.
    """
    if percent_b <= BAND_EDGE_LOW or percent_b >= BAND_EDGE_HIGH or abs(z) >= EXTREME_Z:
        return RegimeBucket.EXTREME
    if abs(z) < TREND_Z and trend_strength > TREND_STRENGTH_MIN:
        return RegimeBucket.TREND
    return RegimeBucket.RANGE


def classify_bar(context: RegimeContext, i: int) -> RegimeBucket:
    """Classify bar i of a regime context."""
    return classify_regime(
        float(context.z[i]),
        float(context.percent_b[i]),
        float(context.trend_strength[i]),
    )


def reversion_weights(context: RegimeContext, config: MomentumConfig) -> np.ndarray:
    """
    Weight of the reversion sub-score per bar.

    Grows from 0 at |z| = 1 to 1 at |z| = 2, then is capped while the trend
    is strong or the band is wide (harder when both hold).
    """
    w_rev = np.clip(np.abs(context.z) - 1.0, 0.0, 1.0)

    strong = context.trend_strength > config.trend_strength_threshold
    wide = context.bandwidth > config.bandwidth_threshold
    cap = np.ones_like(w_rev)
    cap[strong | wide] = config.reversion_cap
    cap[strong & wide] = config.reversion_cap_strong
    return np.minimum(w_rev, cap)


def rule_blend(
    band: np.ndarray,
    oscillator: np.ndarray,
    impulse: np.ndarray,
    context: RegimeContext,
    config: MomentumConfig,
) -> np.ndarray:
    """
    Rule-based composite: regime-weighted reversion and trend sub-scores.

    Args:
        band: Aggregated band score
        oscillator: Aggregated oscillator score
        impulse: Aggregated impulse score
        context: Reference-horizon regime context
        config: Engine config (cap thresholds)

    Returns:
        Raw composite in [-100, 100]
    """
    w_rev = reversion_weights(context, config)
    reversion = clip_score(PRIMARY_MIX * band + OSCILLATOR_MIX * oscillator)
    trend = clip_score(PRIMARY_MIX * impulse + OSCILLATOR_MIX * oscillator)
    return clip_score(w_rev * reversion + (1.0 - w_rev) * trend)
