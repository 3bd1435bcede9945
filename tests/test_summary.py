"""Tests for the momentum summary payload."""

import json

import numpy as np
import pytest

from momentum_engine import ENGINE_VERSION, SCHEMA_VERSION
from momentum_engine.config import IndicatorWeights, MLConfig, RegimeBucket, build_config
from momentum_engine.engine import compute_momentum
from momentum_engine.summary import EQUAL_WEIGHTS, display_weights, momentum_summary


class TestMomentumSummary:
    """Tests for momentum_summary."""

    def test_top_level_keys(self, noisy_closes: np.ndarray) -> None:
        """Payload carries every section."""
        result = momentum_summary(noisy_closes)
        assert set(result) == {
            "data_points",
            "as_of",
            "last_close",
            "reference_horizon",
            "indicators",
            "overall_score",
            "composite_score",
            "ml",
            "series",
            "meta",
        }
        assert result["data_points"] == noisy_closes.size
        assert result["reference_horizon"] == 40

    def test_latest_scores_match_engine(self, noisy_closes: np.ndarray) -> None:
        """Indicator readings are the rounded last engine values."""
        momentum = compute_momentum(noisy_closes)
        indicators = momentum_summary(noisy_closes)["indicators"]
        assert indicators["band"] == int(np.floor(momentum.score_band[-1] + 0.5))
        assert indicators["rsi"] == int(np.floor(-momentum.score_oscillator[-1] + 0.5))
        assert indicators["macd"] == int(np.floor(momentum.score_impulse[-1] + 0.5))

    def test_overall_score_range(self, noisy_closes: np.ndarray) -> None:
        """Overall and composite scores are 0-100 integers."""
        result = momentum_summary(noisy_closes)
        assert 0 <= result["overall_score"] <= 100
        assert 0 <= result["composite_score"] <= 100

    def test_constant_series_neutral(self, constant_closes: list[float]) -> None:
        """Flat prices give a neutral overall score."""
        result = momentum_summary(constant_closes)
        assert result["overall_score"] == 50
        assert result["indicators"] == {"band": 0, "rsi": 0, "macd": 0}

    def test_dates(self, rising_closes: list[float]) -> None:
        """as_of is the last date and dates flow into the series block."""
        dates = [f"d{i}" for i in range(len(rising_closes))]
        result = momentum_summary(rising_closes, dates=dates)
        assert result["as_of"] == dates[-1]
        assert result["series"]["dates"] == dates
        assert result["series"]["price"] == rising_closes

    def test_dates_length_mismatch(self, rising_closes: list[float]) -> None:
        """Dates must align to closes."""
        with pytest.raises(ValueError, match="dates"):
            momentum_summary(rising_closes, dates=["2024-01-01"])

    def test_without_series(self, rising_closes: list[float]) -> None:
        """include_series=False omits the bulky block."""
        assert "series" not in momentum_summary(rising_closes, include_series=False)

    def test_empty(self) -> None:
        """Empty input gives an empty but well-formed payload."""
        result = momentum_summary([])
        assert result["data_points"] == 0
        assert result["last_close"] is None
        assert result["overall_score"] is None
        assert result["composite_score"] is None
        assert result["indicators"] == {"band": None, "rsi": None, "macd": None}

    def test_meta(self, rising_closes: list[float]) -> None:
        """Meta carries versions, tool name and timing."""
        meta = momentum_summary(rising_closes)["meta"]
        assert meta["engine_version"] == ENGINE_VERSION
        assert meta["schema_version"] == SCHEMA_VERSION
        assert meta["tool"] == "momentum_summary"
        assert meta["duration_ms"] >= 0

    def test_json_serializable(self, rising_closes: list[float], sample_ml_bundle: dict) -> None:
        """Payload dumps to JSON without a custom encoder."""
        result = momentum_summary(rising_closes, config=build_config(ml=sample_ml_bundle))
        json.dumps(result)

    def test_engine_runs_once(
        self, noisy_closes: np.ndarray, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """The composite score reuses the summary's engine output."""
        expected = momentum_summary(noisy_closes)["composite_score"]

        def fail(*args, **kwargs):
            raise AssertionError("compute_momentum called again")

        monkeypatch.setattr("momentum_engine.signals.compute_momentum", fail)
        assert momentum_summary(noisy_closes)["composite_score"] == expected


class TestMLProvenance:
    """Tests for the ml block of the summary."""

    def test_rule_based(self, rising_closes: list[float]) -> None:
        """Without a bundle the source is rule-based with equal weights."""
        ml = momentum_summary(rising_closes)["ml"]
        assert ml["source"] == "rule_based"
        assert ml["applied"] is False
        assert ml["warnings"] == []
        assert ml["weights"] == EQUAL_WEIGHTS.as_dict()

    def test_applied(self, rising_closes: list[float], sample_ml_bundle: dict) -> None:
        """A confident bundle is reported as applied."""
        ml = momentum_summary(rising_closes, config=build_config(ml=sample_ml_bundle))["ml"]
        assert ml["source"] == "ml"
        assert ml["applied"] is True
        assert ml["confidence"] == 0.8
        assert ml["as_of"] == "2025-11-01"
        assert ml["weights"]["band"] == pytest.approx(1 / 3)

    def test_below_gate_warns(self, rising_closes: list[float], sample_ml_bundle: dict) -> None:
        """An unconfident bundle is reported but not applied."""
        config = build_config(ml={**sample_ml_bundle, "confidence": 0.1})
        ml = momentum_summary(rising_closes, config=config)["ml"]
        assert ml["applied"] is False
        assert ml["source"] == "rule_based"
        assert ml["warnings"] == ["ml_below_confidence"]
        assert ml["weights"] == EQUAL_WEIGHTS.as_dict()


class TestDisplayWeights:
    """Tests for display_weights."""

    def test_default_first(self) -> None:
        """The default entry wins."""
        default = IndicatorWeights(band=1.0)
        ml = MLConfig(indicator={RegimeBucket.TREND: IndicatorWeights(rsi=1.0)}, default_weights=default)
        assert display_weights(ml) == default

    def test_bucket_order(self) -> None:
        """trend before range before extreme."""
        range_w = IndicatorWeights(rsi=1.0)
        extreme_w = IndicatorWeights(macd=1.0)
        ml = MLConfig(indicator={RegimeBucket.EXTREME: extreme_w, RegimeBucket.RANGE: range_w})
        assert display_weights(ml) == range_w

    def test_equal_fallback(self) -> None:
        """No bundle or no weights gives equal thirds."""
        assert display_weights(None) is EQUAL_WEIGHTS
        assert display_weights(MLConfig()) is EQUAL_WEIGHTS
