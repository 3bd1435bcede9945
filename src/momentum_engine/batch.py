"""Score many symbols concurrently, one engine call per symbol."""

import logging
import os
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from momentum_engine.config import MomentumConfig
from momentum_engine.engine import IndicatorSeries, compute_momentum

logger = logging.getLogger(__name__)

# Bounded concurrency for batch scoring
_default_workers = int(os.environ.get("MOMENTUM_MAX_WORKERS", "4"))


def compute_momentum_batch(
    series_by_symbol: Mapping[str, Sequence[float] | np.ndarray],
    config: MomentumConfig | None = None,
    max_workers: int | None = None,
) -> dict[str, IndicatorSeries]:
    """
    Run compute_momentum for every symbol on a thread pool.

    The engine is pure, so calls share nothing but the immutable config.
    A symbol whose series is rejected is logged and left out of the result.

    Args:
        series_by_symbol: Mapping of symbol -> close prices
        config: Engine config shared by every call
        max_workers: Pool size (default: MOMENTUM_MAX_WORKERS or 4)

    Returns:
        Dict of symbol -> IndicatorSeries, in input order
    """
    if config is None:
        config = MomentumConfig()
    if not series_by_symbol:
        return {}

    workers = max(1, max_workers or _default_workers)
    symbols = list(series_by_symbol)

    with ThreadPoolExecutor(max_workers=min(workers, len(symbols))) as executor:
        futures = {
            symbol: executor.submit(compute_momentum, series_by_symbol[symbol], config)
            for symbol in symbols
        }
        results: dict[str, IndicatorSeries] = {}
        for symbol in symbols:
            try:
                results[symbol] = futures[symbol].result()
            except ValueError as e:
                logger.warning(f"Skipping {symbol}: {e}")

    return results
