"""Final conditioning: agreement damping, soft normalization, extrema snap."""

import numpy as np

from momentum_engine.scoring.regime import RegimeContext
from momentum_engine.scoring.scorers import BAND_EDGE_HIGH, BAND_EDGE_LOW
from momentum_engine.utils.smoothing import EPS, clip_score, ema_abs

# Amplitude divisor of the adaptive scale
SOFT_NORM_WIDTH = 1.8
SNAP_NUDGE = 10.0


def significant_sign(values: np.ndarray, threshold: float) -> np.ndarray:
    """Sign of each value, 0 where |value| is below threshold."""
    return np.where(np.abs(values) < threshold, 0.0, np.sign(values))


def agreement_damping(
    composite: np.ndarray,
    band: np.ndarray,
    oscillator: np.ndarray,
    impulse: np.ndarray,
    min_factor: float = 0.70,
    threshold: float = 10.0,
) -> np.ndarray:
    """
    Damp the composite when the three indicators disagree in sign.

    Args:
        composite: Raw composite
        band: Aggregated band score
        oscillator: Aggregated oscillator score
        impulse: Aggregated impulse score
        min_factor: Multiplier when there is no agreement at all
        threshold: Magnitude below which a score counts as neutral

    Returns:
        Damped composite
    """
    signs = (
        significant_sign(band, threshold)
        + significant_sign(oscillator, threshold)
        + significant_sign(impulse, threshold)
    )
    agreement = np.abs(signs) / 3.0
    return composite * (min_factor + (1.0 - min_factor) * agreement)


def soft_normalize(values: np.ndarray, span: int = 50) -> np.ndarray:
    """Scale by the EMA of its own magnitude and squash to [-100, 100]."""
    scale = ema_abs(values, span) + EPS
    return 100.0 * np.tanh(values / (SOFT_NORM_WIDTH * scale))


def extrema_snap(
    scores: np.ndarray,
    context: RegimeContext,
    impulse_signal: np.ndarray,
) -> np.ndarray:
    """
    Nudge the score near turning points confirmed by band, mean and signal.

    +10 at the lower band edge with a rising mean and rising signal line,
    -10 at the upper edge with both falling. The first bar is never nudged.

    Args:
        scores: Soft-normalized composite
        context: Reference-horizon regime context
        impulse_signal: Reference-horizon impulse signal line

    Returns:
        Nudged scores, clipped to [-100, 100]
    """
    out = scores.copy()
    if out.size < 2:
        return out

    signal_slope = np.zeros_like(impulse_signal)
    signal_slope[1:] = np.diff(impulse_signal)
    b = context.percent_b
    mean_slope = context.mean_slope

    up = (b < BAND_EDGE_LOW) & (mean_slope > 0) & (signal_slope > 0)
    down = (b > BAND_EDGE_HIGH) & (mean_slope < 0) & (signal_slope < 0)
    up[0] = False
    down[0] = False

    out[up] += SNAP_NUDGE
    out[down] -= SNAP_NUDGE
    return clip_score(out)
