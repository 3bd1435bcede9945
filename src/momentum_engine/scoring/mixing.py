"""Optional ML regime-conditioned indicator mixing.

Resolution order for a bar's weights: its regime bucket, then the bundle's
configured fallback bucket, then the reserved default entry. If none resolve
the rule-based composite is kept for that bar (or for the whole series when
the bundle is applied once from the last bar).
"""

import logging

import numpy as np

from momentum_engine.config import IndicatorWeights, MLConfig, RegimeBucket
from momentum_engine.scoring.regime import RegimeContext, classify_bar
from momentum_engine.utils.smoothing import clip_score

logger = logging.getLogger(__name__)


def resolve_weights(ml: MLConfig, bucket: RegimeBucket) -> IndicatorWeights | None:
    """Look up the weight set for a bucket through the fallback chain."""
    weights = ml.indicator.get(bucket)
    if weights is None and ml.bucket_fallback is not None:
        weights = ml.indicator.get(ml.bucket_fallback)
    if weights is None:
        weights = ml.default_weights
    return weights


def mix(
    weights: IndicatorWeights,
    band: np.ndarray,
    oscillator: np.ndarray,
    impulse: np.ndarray,
) -> np.ndarray:
    """Weighted sum of the three aggregated scores, clipped."""
    return clip_score(weights.band * band + weights.rsi * oscillator + weights.macd * impulse)


def apply_ml_mixing(
    rule_scores: np.ndarray,
    band: np.ndarray,
    oscillator: np.ndarray,
    impulse: np.ndarray,
    context: RegimeContext,
    ml: MLConfig | None,
) -> np.ndarray:
    """
    Replace the rule-based composite with ML indicator weights where they resolve.

    Args:
        rule_scores: Rule-based raw composite
        band: Aggregated band score
        oscillator: Aggregated oscillator score
        impulse: Aggregated impulse score
        context: Reference-horizon regime context
        ml: Optional ML bundle

    Returns:
        New composite array (rule_scores is not modified)
    """
    out = rule_scores.copy()
    if ml is None:
        return out
    if not ml.is_confident:
        logger.debug(
            f"ML bundle below confidence gate ({ml.confidence} < {ml.min_confidence}), "
            "using rule-based blend"
        )
        return out
    if not ml.has_indicator_weights or out.size == 0:
        return out

    if ml.apply_per_bar:
        mixed: dict[RegimeBucket, np.ndarray] = {}
        unresolved = 0
        for i in range(out.size):
            bucket = classify_bar(context, i)
            weights = resolve_weights(ml, bucket)
            if weights is None:
                unresolved += 1
                continue
            if bucket not in mixed:
                mixed[bucket] = mix(weights, band, oscillator, impulse)
            out[i] = mixed[bucket][i]
        if unresolved:
            logger.debug(f"No ML weights resolved for {unresolved} bars, kept rule-based values")
        return out

    bucket = classify_bar(context, out.size - 1)
    weights = resolve_weights(ml, bucket)
    if weights is None:
        logger.debug(f"No ML weights for last-bar bucket {bucket.value}, using rule-based blend")
        return out
    return mix(weights, band, oscillator, impulse)
