"""Scoring stages of the momentum pipeline."""

from momentum_engine.scoring.conditioning import agreement_damping, extrema_snap, soft_normalize
from momentum_engine.scoring.horizons import aggregate, horizon_weights, rule_horizon_weights
from momentum_engine.scoring.mixing import apply_ml_mixing, resolve_weights
from momentum_engine.scoring.regime import (
    RegimeContext,
    classify_regime,
    regime_context,
    rule_blend,
)
from momentum_engine.scoring.scorers import (
    BandScore,
    ImpulseScore,
    OscillatorThresholds,
    band_score,
    impulse_score,
    oscillator_score,
)

__all__ = [
    # Scorers
    "BandScore",
    "ImpulseScore",
    "OscillatorThresholds",
    "band_score",
    "impulse_score",
    "oscillator_score",
    # Horizons
    "aggregate",
    "horizon_weights",
    "rule_horizon_weights",
    # Regime
    "RegimeContext",
    "classify_regime",
    "regime_context",
    "rule_blend",
    # ML
    "apply_ml_mixing",
    "resolve_weights",
    # Conditioning
    "agreement_damping",
    "extrema_snap",
    "soft_normalize",
]
