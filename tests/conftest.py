"""Pytest configuration and fixtures."""

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def constant_closes() -> list[float]:
    """Flat price series: no volatility, no trend."""
    return [100.0] * 200


@pytest.fixture
def rising_closes() -> list[float]:
    """Strictly increasing series 100, 101, ..., 300."""
    return [float(x) for x in range(100, 301)]


@pytest.fixture
def spike_closes() -> tuple[list[float], int]:
    """Flat series with a one-day spike and immediate reversion."""
    closes = [100.0] * 200
    spike_idx = 150
    closes[spike_idx] = 120.0
    return closes, spike_idx


@pytest.fixture
def noisy_closes() -> np.ndarray:
    """Deterministic random walk with a cycle, ~5 years of daily bars."""
    rng = np.random.default_rng(7)
    n = 1260
    steps = rng.normal(0.0, 1.0, n)
    cycle = 8.0 * np.sin(np.arange(n) / 40.0)
    return 150.0 + np.cumsum(steps) + cycle


@pytest.fixture
def sample_ml_bundle() -> dict:
    """ML weight bundle as produced by the training pipeline."""
    return {
        "asOf": "2025-11-01",
        "confidence": 0.8,
        "minConfidence": 0.6,
        "indicator": {
            "trend": {"band": 0.1, "rsi": 0.3, "macd": 0.6},
            "range": {"band": 0.6, "rsi": 0.3, "macd": 0.1},
            "extreme": {"band": 0.5, "rsi": 0.4, "macd": 0.1},
            "default": {"band": 1.0, "rsi": 1.0, "macd": 1.0},
        },
        "horizon": {"5": 0.1, "10": 0.2, "20": 0.3, "40": 0.2, "80": 0.1, "160": 0.1},
        "applyPerBar": True,
    }


@pytest.fixture
def sample_history_df() -> pd.DataFrame:
    """Daily history in download shape: Date index, capitalized columns, unsorted, dupes."""
    dates = pd.to_datetime(
        ["2024-01-03", "2024-01-02", "2024-01-04", "2024-01-04", "2024-01-05"]
    )
    return pd.DataFrame(
        {
            "Open": [101.0, 100.0, 102.0, 102.0, 103.0],
            "Close": [101.5, 100.5, 102.5, 102.75, float("nan")],
        },
        index=pd.DatetimeIndex(dates, name="Date"),
    )
