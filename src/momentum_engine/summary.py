"""Momentum summary payload for charting and header panels."""

from collections.abc import Sequence
from time import perf_counter
from typing import Any

import numpy as np
import pandas as pd

from momentum_engine.config import IndicatorWeights, MLConfig, MomentumConfig, RegimeBucket
from momentum_engine.engine import compute_momentum
from momentum_engine.signals import momentum_composite_score, to_unit_score
from momentum_engine.utils.provenance import build_meta, build_ml_provenance
from momentum_engine.utils.smoothing import round_half_up
from momentum_engine.utils.validators import ensure_finite_series

EQUAL_WEIGHTS = IndicatorWeights(band=1 / 3, rsi=1 / 3, macd=1 / 3)


def display_weights(ml: MLConfig | None) -> IndicatorWeights:
    """Representative indicator weights: default, trend, range, extreme, else equal."""
    if ml is not None:
        if ml.default_weights is not None:
            return ml.default_weights
        for bucket in (RegimeBucket.TREND, RegimeBucket.RANGE, RegimeBucket.EXTREME):
            weights = ml.indicator.get(bucket)
            if weights is not None:
                return weights
    return EQUAL_WEIGHTS


def momentum_summary(
    closes: Sequence[float] | np.ndarray | pd.Series,
    dates: Sequence[str] | None = None,
    config: MomentumConfig | None = None,
    include_series: bool = True,
) -> dict[str, Any]:
    """
    Score a close series and package the latest readings.

    Args:
        closes: Close prices, oldest first
        dates: Optional date labels aligned to closes
        config: Engine config (defaults if None)
        include_series: Include every overlay and score series

    Returns:
        Dict with meta, latest indicator scores, overall score, ML provenance
        and (optionally) the full series

    Raises:
        InvalidSeriesError: if closes holds NaN/inf
        ValueError: if dates and closes differ in length
    """
    start_time = perf_counter()

    if config is None:
        config = MomentumConfig()
    close = ensure_finite_series(closes)
    if dates is not None:
        dates = [str(d) for d in dates]
    if dates is not None and len(dates) != close.size:
        raise ValueError(f"Got {len(dates)} dates for {close.size} closes")

    momentum = compute_momentum(close, config)

    indicators: dict[str, int | None] = {"band": None, "rsi": None, "macd": None}
    overall_score = None
    if len(momentum):
        indicators = {
            "band": round_half_up(momentum.score_band[-1]),
            # Stretched-up oscillator reads negative, like the band score
            "rsi": round_half_up(-momentum.score_oscillator[-1]),
            "macd": round_half_up(momentum.score_impulse[-1]),
        }
        overall_score = to_unit_score(momentum.score_momentum[-1])

    ml = config.ml
    applied = config.active_ml is not None
    ml_block = build_ml_provenance(ml, applied)
    ml_block["weights"] = display_weights(config.active_ml).as_dict()

    result: dict[str, Any] = {
        "data_points": int(close.size),
        "as_of": dates[-1] if dates else None,
        "last_close": float(close[-1]) if close.size else None,
        "reference_horizon": config.reference_horizon,
        "indicators": indicators,
        "overall_score": overall_score,
        "composite_score": momentum_composite_score(close, config=config, momentum=momentum),
        "ml": ml_block,
    }

    if include_series:
        series: dict[str, Any] = momentum.to_dict()
        series["price"] = close.tolist()
        series["dates"] = dates
        result["series"] = series

    duration_ms = (perf_counter() - start_time) * 1000
    result["meta"] = build_meta("momentum_summary", duration_ms)

    return result
