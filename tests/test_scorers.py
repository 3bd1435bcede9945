"""Tests for the per-horizon indicator scorers."""

import numpy as np
import pytest

from momentum_engine.scoring.scorers import (
    OscillatorThresholds,
    band_score,
    impulse_score,
    oscillator_score,
    percent_b,
    slow_span,
    trend_strength,
)


class TestBandScore:
    """Tests for the band scorer."""

    def test_flat_series_scores_zero(self) -> None:
        """No distance from the mean means no score."""
        result = band_score(np.full(100, 50.0), 20)
        assert (result.score == 0.0).all()
        assert (result.std == 0.0).all()

    def test_bands_are_two_std(self, noisy_closes: np.ndarray) -> None:
        """Upper/lower overlays sit at +-2 std."""
        result = band_score(noisy_closes, 20)
        assert np.allclose(result.upper - result.mean, 2 * result.std)
        assert np.allclose(result.mean - result.lower, 2 * result.std)

    def test_mean_reversion_sign(self) -> None:
        """Above the mean scores negative, below scores positive."""
        up = np.array([100.0] * 50 + [105.0])
        down = np.array([100.0] * 50 + [95.0])
        assert band_score(up, 10).score[-1] < 0
        assert band_score(down, 10).score[-1] > 0

    def test_extremity_boost(self) -> None:
        """A bigger gain pushes an edge-hugging score further out."""
        closes = np.array([100.0] * 60 + [101.0])
        plain = band_score(closes, 40, extremity_gain=0.0).score[-1]
        boosted = band_score(closes, 40, extremity_gain=0.6).score[-1]
        assert abs(boosted) > abs(plain)

    def test_volatility_damping(self) -> None:
        """Wider bands shrink the score."""
        closes = np.array([100.0, 104.0] * 30 + [112.0])
        calm = band_score(closes, 10, volatility_damping=0.0).score[-1]
        damped = band_score(closes, 10, volatility_damping=5.0).score[-1]
        assert abs(damped) < abs(calm)

    def test_bounded(self, noisy_closes: np.ndarray) -> None:
        """Score stays in [-100, 100]."""
        score = band_score(noisy_closes, 5, squash=0.1, extremity_gain=5.0).score
        assert score.min() >= -100 and score.max() <= 100


class TestPercentB:
    """Tests for percent_b."""

    def test_clamped(self) -> None:
        """Positions beyond the bands clamp to 0 / 1."""
        mean = np.array([100.0, 100.0, 100.0])
        std = np.array([1.0, 1.0, 1.0])
        closes = np.array([90.0, 100.0, 110.0])
        b = percent_b(closes, mean, std)
        assert b[0] == 0.0
        assert b[1] == pytest.approx(0.5)
        assert b[2] == 1.0


class TestOscillatorScore:
    """Tests for the oscillator scorer."""

    def test_flat_series_is_neutral(self) -> None:
        """No up or down moves reads 0, not oversold."""
        score = oscillator_score(np.full(100, 10.0), 14)
        assert (score == 0.0).all()

    def test_uptrend_positive(self, rising_closes: list[float]) -> None:
        """Only up moves pins the score high."""
        score = oscillator_score(np.array(rising_closes), 14)
        assert score[-1] > 90

    def test_downtrend_negative(self) -> None:
        """Only down moves pins the score low."""
        closes = np.array([300.0 - i for i in range(100)])
        score = oscillator_score(closes, 14)
        assert score[-1] < -90

    def test_adaptive_thresholds_widen_in_trend(self) -> None:
        """In a trend the dynamic overbought level is higher, so the same RSI scores lower."""
        rng = np.random.default_rng(3)
        closes = 100 + np.cumsum(0.6 + rng.normal(0, 1.0, 300))
        fixed = oscillator_score(closes, 14, thresholds=OscillatorThresholds(adaptive=False))
        adaptive = oscillator_score(
            closes, 14, thresholds=OscillatorThresholds(adaptive=True, shift_gain=100.0)
        )
        assert adaptive.mean() < fixed.mean()

    def test_slope_term_direction(self) -> None:
        """A fresh drop after a rally pulls the score down versus the bar before."""
        closes = np.array([100.0 + i for i in range(40)] + [120.0])
        score = oscillator_score(closes, 14)
        assert score[-1] < score[-2]

    def test_bounded(self, noisy_closes: np.ndarray) -> None:
        """Score stays in [-100, 100]."""
        score = oscillator_score(noisy_closes, 5, slope_scale=0.01)
        assert score.min() >= -100 and score.max() <= 100


class TestTrendStrength:
    """Tests for trend_strength."""

    def test_first_bar_zero(self, rising_closes: list[float]) -> None:
        """No slope on the first bar."""
        assert trend_strength(np.array(rising_closes), 20)[0] == 0.0

    def test_flat_is_zero(self) -> None:
        """No slope on a flat series."""
        assert (trend_strength(np.full(50, 5.0), 10) == 0.0).all()


class TestImpulseScore:
    """Tests for the trend-impulse scorer."""

    def test_histogram_identity(self, noisy_closes: np.ndarray) -> None:
        """Histogram = line - signal, line = fast - slow."""
        result = impulse_score(noisy_closes, 10)
        assert np.allclose(result.histogram, result.line - result.signal)
        assert np.allclose(result.line, result.ema_fast - result.ema_slow)

    def test_flat_series_scores_zero(self) -> None:
        """Flat prices have no impulse."""
        result = impulse_score(np.full(120, 75.0), 10)
        assert (result.score == 0.0).all()

    def test_acceleration_positive(self) -> None:
        """A fresh breakout from a flat base scores positive."""
        closes = np.array([100.0] * 80 + [100.0 + 0.5 * i for i in range(1, 11)])
        result = impulse_score(closes, 5)
        assert result.score[-1] > 0

    def test_bounded(self, noisy_closes: np.ndarray) -> None:
        """Score stays in [-100, 100]."""
        score = impulse_score(noisy_closes, 5, histogram_scale=0.01, signal_scale=0.01).score
        assert np.isfinite(score).all()
        assert score.min() >= -100 and score.max() <= 100


class TestSlowSpan:
    """Tests for slow_span."""

    def test_ratio(self) -> None:
        """Slow span = horizon * ratio."""
        assert slow_span(20, 4) == 80

    def test_rounds_half_up(self) -> None:
        """Fractional spans round half up."""
        assert slow_span(5, 2.5) == 13

    def test_floor_of_two(self) -> None:
        """Never below 2."""
        assert slow_span(1, 1.0) == 2
