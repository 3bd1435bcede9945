"""Tests for horizon weighting and aggregation."""

import numpy as np
import pytest

from momentum_engine.config import MLConfig
from momentum_engine.scoring.horizons import (
    aggregate,
    horizon_weights,
    ml_horizon_weights,
    rule_horizon_weights,
)

HORIZONS = (5, 10, 20, 40, 80, 160)


class TestRuleHorizonWeights:
    """Tests for rule-based horizon weights."""

    def test_sum_to_one(self) -> None:
        """Weights sum to 1 for any blend fraction."""
        for blend in (0.0, 0.25, 0.4, 1.0):
            assert abs(rule_horizon_weights(HORIZONS, True, blend).sum() - 1.0) < 1e-9

    def test_pure_inverse(self) -> None:
        """blend 0 gives weights proportional to 1/h."""
        w = rule_horizon_weights(HORIZONS, True, 0.0)
        assert w[0] / w[1] == pytest.approx(2.0)
        assert w[0] > w[-1]

    def test_pure_equal(self) -> None:
        """blend 1 gives equal weights."""
        w = rule_horizon_weights(HORIZONS, True, 1.0)
        assert np.allclose(w, 1 / 6)

    def test_uniform_start(self) -> None:
        """Without inverse weighting every blend is uniform."""
        w = rule_horizon_weights(HORIZONS, False, 0.3)
        assert np.allclose(w, 1 / 6)

    def test_blend_reduces_short_horizon(self) -> None:
        """Blending toward equal weight shrinks the shortest horizon's share."""
        assert rule_horizon_weights(HORIZONS, True, 0.4)[0] < rule_horizon_weights(HORIZONS, True, 0.0)[0]

    def test_empty(self) -> None:
        """No horizons, no weights."""
        assert rule_horizon_weights((), True, 0.4).size == 0


class TestMLHorizonWeights:
    """Tests for the ML horizon override."""

    def test_override_used_when_confident(self) -> None:
        """A confident override replaces the rule weights."""
        ml = MLConfig(confidence=0.9, horizon={5: 1.0, 10: 1.0, 20: 2.0})
        w = horizon_weights(HORIZONS, ml=ml)
        assert w.tolist() == pytest.approx([0.25, 0.25, 0.5, 0.0, 0.0, 0.0])
        assert abs(w.sum() - 1.0) < 1e-9

    def test_override_ignored_below_gate(self) -> None:
        """An unconfident bundle keeps the rule weights."""
        ml = MLConfig(confidence=0.3, horizon={5: 1.0})
        assert np.array_equal(horizon_weights(HORIZONS, ml=ml), horizon_weights(HORIZONS))

    def test_all_zero_override_ignored(self) -> None:
        """An all-zero override keeps the rule weights."""
        ml = MLConfig(confidence=1.0, horizon={h: 0.0 for h in HORIZONS})
        assert ml_horizon_weights(HORIZONS, ml) is None
        assert np.allclose(horizon_weights(HORIZONS, ml=ml), horizon_weights(HORIZONS))

    def test_unmatched_override_ignored(self) -> None:
        """Override keys that match no configured horizon sum to zero."""
        ml = MLConfig(confidence=1.0, horizon={7: 1.0, 9: 2.0})
        assert np.allclose(horizon_weights(HORIZONS, ml=ml), horizon_weights(HORIZONS))

    def test_missing_confidence_counts_as_confident(self) -> None:
        """A bundle without a confidence value passes the gate."""
        ml = MLConfig(horizon={160: 3.0})
        assert horizon_weights(HORIZONS, ml=ml)[-1] == pytest.approx(1.0)


class TestAggregate:
    """Tests for aggregate."""

    def test_weighted_sum(self) -> None:
        """Combines per-horizon series with the weights."""
        scores = [np.array([10.0, 20.0]), np.array([30.0, 40.0])]
        out = aggregate(scores, np.array([0.25, 0.75]))
        assert out.tolist() == pytest.approx([25.0, 35.0])

    def test_clipped(self) -> None:
        """Result stays in [-100, 100]."""
        scores = [np.array([100.0]), np.array([100.0])]
        assert aggregate(scores, np.array([1.0, 1.0])).tolist() == [100.0]
