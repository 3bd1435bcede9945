"""Multi-horizon momentum engine: close series in, bounded scores out."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, fields
from typing import Any

import numpy as np
import pandas as pd

from momentum_engine.config import MomentumConfig
from momentum_engine.scoring.conditioning import agreement_damping, extrema_snap, soft_normalize
from momentum_engine.scoring.horizons import aggregate, horizon_weights
from momentum_engine.scoring.mixing import apply_ml_mixing
from momentum_engine.scoring.regime import regime_context, rule_blend
from momentum_engine.scoring.scorers import (
    OscillatorThresholds,
    band_score,
    impulse_score,
    oscillator_score,
)
from momentum_engine.utils.validators import ensure_finite_series

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndicatorSeries:
    """Overlays and scores aligned index-for-index to the input closes."""

    # Reference-horizon overlays
    band_upper: np.ndarray
    band_mid: np.ndarray
    band_lower: np.ndarray
    impulse_line: np.ndarray
    impulse_signal: np.ndarray
    impulse_histogram: np.ndarray
    ema_fast: np.ndarray
    ema_slow: np.ndarray

    # Scores in [-100, 100]
    score_band: np.ndarray
    score_oscillator: np.ndarray
    score_impulse: np.ndarray
    score_momentum: np.ndarray

    @classmethod
    def empty(cls) -> "IndicatorSeries":
        return cls(**{f.name: np.zeros(0) for f in fields(cls)})

    def __len__(self) -> int:
        return len(self.score_momentum)

    def to_dict(self) -> dict[str, list[float]]:
        """Plain lists keyed by series name (JSON friendly)."""
        return {f.name: getattr(self, f.name).tolist() for f in fields(self)}

    def to_frame(self, index: Any = None) -> pd.DataFrame:
        """One column per series; index defaults to a RangeIndex."""
        return pd.DataFrame(
            {f.name: getattr(self, f.name) for f in fields(self)},
            index=index,
        )


def compute_momentum(
    closes: Sequence[float] | np.ndarray | pd.Series,
    config: MomentumConfig | None = None,
) -> IndicatorSeries:
    """
    Compute the composite momentum signal and its components.

    Pipeline: horizon weights -> per-horizon band/oscillator/impulse scores ->
    aggregation -> regime context (reference horizon) -> rule blend ->
    optional ML mixing -> agreement damping -> soft normalization ->
    extrema snap.

    Args:
        closes: Chronologically ordered, equally spaced close prices
        config: Engine config (defaults if None)

    Returns:
        IndicatorSeries aligned to closes; empty if closes or horizons are empty

    Raises:
        InvalidSeriesError: if closes holds NaN/inf or is not 1-D
    """
    if config is None:
        config = MomentumConfig()

    close = ensure_finite_series(closes)
    n = close.size
    if n == 0 or not config.horizons:
        return IndicatorSeries.empty()

    ml = config.ml
    weights = horizon_weights(
        config.horizons,
        by_inverse_horizon=config.weight_by_inverse_horizon,
        blend_equal=config.horizon_blend_equal_fraction,
        ml=ml,
    )

    thresholds = OscillatorThresholds(
        adaptive=config.oscillator_adaptive,
        overbought=config.oscillator_overbought,
        oversold=config.oscillator_oversold,
        max_shift=config.oscillator_max_shift,
        shift_gain=config.oscillator_shift_gain,
    )

    band_scores: list[np.ndarray] = []
    oscillator_scores: list[np.ndarray] = []
    impulse_scores: list[np.ndarray] = []
    reference_band = None
    reference_impulse = None

    for horizon in config.horizons:
        band = band_score(
            close,
            horizon,
            squash=config.band_squash,
            extremity_gain=config.band_extremity_gain,
            volatility_damping=config.band_volatility_damping,
        )
        impulse = impulse_score(
            close,
            horizon,
            span_ratio=config.impulse_span_ratio,
            histogram_scale=config.impulse_histogram_scale,
            signal_scale=config.impulse_signal_scale,
            distance_scale=config.impulse_distance_scale,
            edge_decay=config.impulse_edge_decay,
        )
        band_scores.append(band.score)
        impulse_scores.append(impulse.score)
        oscillator_scores.append(
            oscillator_score(
                close,
                horizon,
                slope_scale=config.oscillator_slope_scale,
                thresholds=thresholds,
            )
        )
        if horizon == config.reference_horizon:
            reference_band = band
            reference_impulse = impulse

    score_band = aggregate(band_scores, weights)
    score_oscillator = aggregate(oscillator_scores, weights)
    score_impulse = aggregate(impulse_scores, weights)

    context = regime_context(close, reference_band.mean, reference_band.std)

    composite = rule_blend(score_band, score_oscillator, score_impulse, context, config)
    composite = apply_ml_mixing(composite, score_band, score_oscillator, score_impulse, context, ml)

    damped = agreement_damping(
        composite,
        score_band,
        score_oscillator,
        score_impulse,
        min_factor=config.agreement_min_factor,
        threshold=config.agreement_threshold,
    )
    soft = soft_normalize(damped, config.normalization_span)
    score_momentum = extrema_snap(soft, context, reference_impulse.signal)

    return IndicatorSeries(
        band_upper=reference_band.upper,
        band_mid=reference_band.mean.copy(),
        band_lower=reference_band.lower,
        impulse_line=reference_impulse.line,
        impulse_signal=reference_impulse.signal,
        impulse_histogram=reference_impulse.histogram,
        ema_fast=reference_impulse.ema_fast,
        ema_slow=reference_impulse.ema_slow,
        score_band=score_band,
        score_oscillator=score_oscillator,
        score_impulse=score_impulse,
        score_momentum=score_momentum,
    )
