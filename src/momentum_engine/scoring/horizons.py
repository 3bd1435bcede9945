"""Horizon weighting and per-indicator aggregation across horizons."""

import logging
from collections.abc import Sequence

import numpy as np

from momentum_engine.config import MLConfig
from momentum_engine.utils.smoothing import clip_score

logger = logging.getLogger(__name__)


def rule_horizon_weights(
    horizons: Sequence[int],
    by_inverse_horizon: bool = True,
    blend_equal: float = 0.4,
) -> np.ndarray:
    """
    Blend inverse-horizon weights with equal weights.

    Args:
        horizons: Lookback lengths
        by_inverse_horizon: Start from 1/h weights (else uniform)
        blend_equal: 0 = pure starting weights, 1 = pure equal weights

    Returns:
        Weight array summing to 1 (empty for no horizons)
    """
    k = len(horizons)
    if k == 0:
        return np.zeros(0)

    h = np.asarray(horizons, dtype=float)
    start = 1.0 / h if by_inverse_horizon else np.ones(k)
    start = start / (start.sum() or 1.0)
    equal = np.full(k, 1.0 / k)
    return (1.0 - blend_equal) * start + blend_equal * equal


def ml_horizon_weights(horizons: Sequence[int], ml: MLConfig) -> np.ndarray | None:
    """
    Weights from an ML horizon override, aligned to the configured horizons.

    Horizons missing from the override get 0.

    Returns:
        Normalized weights, or None if the override is absent or sums to <= 0
    """
    if not ml.horizon:
        return None
    raw = np.array([ml.horizon.get(h, 0.0) for h in horizons], dtype=float)
    total = raw.sum()
    if not total > 0:
        logger.debug("ML horizon override sums to zero, keeping rule-based weights")
        return None
    return raw / total


def horizon_weights(
    horizons: Sequence[int],
    by_inverse_horizon: bool = True,
    blend_equal: float = 0.4,
    ml: MLConfig | None = None,
) -> np.ndarray:
    """
    Final horizon weights: ML override when confident and valid, else rule-based.

    Args:
        horizons: Lookback lengths
        by_inverse_horizon: Rule weights start from 1/h
        blend_equal: Equal-weight blend fraction for the rule weights
        ml: Optional ML bundle (ignored under its confidence gate)

    Returns:
        Weight array summing to 1
    """
    weights = rule_horizon_weights(horizons, by_inverse_horizon, blend_equal)
    if ml is not None and ml.is_confident:
        override = ml_horizon_weights(horizons, ml)
        if override is not None:
            weights = override
    total = weights.sum()
    return weights / (total or 1.0)


def aggregate(scores_by_horizon: Sequence[np.ndarray], weights: np.ndarray) -> np.ndarray:
    """Weighted sum of per-horizon score series, clipped to [-100, 100]."""
    acc = np.zeros_like(scores_by_horizon[0]) if scores_by_horizon else np.zeros(0)
    for scores, weight in zip(scores_by_horizon, weights):
        acc = acc + weight * scores
    return clip_score(acc)
