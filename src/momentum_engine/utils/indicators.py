"""Classic technical indicators used by the display signal layer."""

import numpy as np
import pandas as pd


def calculate_rsi(prices: pd.Series, period: int = 14) -> pd.Series:
    """
    Calculate Relative Strength Index.

    Uses Wilder's smoothing method (exponential moving average).

    Args:
        prices: Price series (typically close prices)
        period: RSI period (default: 14)

    Returns:
        RSI series (0-100 scale), NaN during warm-up
    """
    delta = prices.diff()

    gain = delta.where(delta > 0, 0.0)
    loss = (-delta).where(delta < 0, 0.0)

    # Wilder's smoothing: alpha = 1/period
    avg_gain = gain.ewm(alpha=1 / period, min_periods=period, adjust=False).mean()
    avg_loss = loss.ewm(alpha=1 / period, min_periods=period, adjust=False).mean()

    total = avg_gain + avg_loss
    rsi = 100 * avg_gain / total

    # Flat window: neither gains nor losses
    rsi = rsi.mask(total == 0, 50.0)

    return rsi


def synthesize_ohlc(close: pd.Series) -> pd.DataFrame:
    """
    Build a plausible OHLC frame from closes only.

    Open is the previous close; high/low pad the open-close range by
    max(25% of the move, 0.2% of price).

    Args:
        close: Close price series

    Returns:
        DataFrame with open, high, low, close columns
    """
    prev = close.shift(1).fillna(close)
    wiggle = np.maximum((close - prev).abs() * 0.25, close * 0.002)
    return pd.DataFrame(
        {
            "open": prev,
            "high": np.maximum(prev, close) + wiggle,
            "low": np.minimum(prev, close) - wiggle,
            "close": close,
        },
        index=close.index,
    )


def calculate_true_range(high: pd.Series, low: pd.Series, close: pd.Series) -> pd.Series:
    """True range: max of high-low and the gaps against the previous close."""
    prev_close = close.shift(1)

    tr1 = high - low
    tr2 = (high - prev_close).abs()
    tr3 = (low - prev_close).abs()

    return pd.concat([tr1, tr2, tr3], axis=1).max(axis=1)


def calculate_adx(
    high: pd.Series,
    low: pd.Series,
    close: pd.Series,
    period: int = 14,
) -> dict[str, pd.Series]:
    """
    Calculate Average Directional Index and the dominant direction.

    Args:
        high: High price series
        low: Low price series
        close: Close price series
        period: ADX period (default: 14)

    Returns:
        Dict with 'adx' (0-100) and 'direction' (+1 when +DI >= -DI, else -1)
        series; both NaN during warm-up
    """
    up_move = high.diff()
    down_move = -low.diff()

    plus_dm = up_move.where((up_move > down_move) & (up_move > 0), 0.0)
    minus_dm = down_move.where((down_move > up_move) & (down_move > 0), 0.0)

    # Wilder's smoothing for ATR and directional movement
    def wilder(series: pd.Series) -> pd.Series:
        return series.ewm(alpha=1 / period, min_periods=period, adjust=False).mean()

    atr = wilder(calculate_true_range(high, low, close))
    plus_di = (100 * wilder(plus_dm) / atr).mask(atr == 0, 0.0)
    minus_di = (100 * wilder(minus_dm) / atr).mask(atr == 0, 0.0)

    di_sum = plus_di + minus_di
    dx = (100 * (plus_di - minus_di).abs() / di_sum).mask(di_sum == 0, 0.0)
    adx = wilder(dx)

    direction = pd.Series(
        np.where(plus_di >= minus_di, 1.0, -1.0),
        index=close.index,
    ).where(plus_di.notna())

    return {"adx": adx, "direction": direction}
