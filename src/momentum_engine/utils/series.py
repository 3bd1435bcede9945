"""Price-history preparation and carry-forward lookups."""

import math
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import numpy as np
import pandas as pd

# Fewer points than this cannot tell daily bars from anything else
MIN_POINTS_FOR_CADENCE = 15
MAX_DAILY_MEDIAN_GAP_DAYS = 2


def standardize_closes(data: pd.DataFrame | Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """
    Standardize a price history to a date/close schema.

    Output columns (always, in this order): date, close. Rows without a date
    or a finite close are dropped, duplicate dates keep the last value, and
    rows are sorted ascending by date.

    Args:
        data: DataFrame (date column or DatetimeIndex, close column; any case)
            or an iterable of {"date", "close"} mappings

    Returns:
        Standardized DataFrame with ISO date strings
    """
    if isinstance(data, pd.DataFrame):
        df = data.copy()
    else:
        df = pd.DataFrame(list(data))

    # Handle multi-index from multi-ticker downloads
    if isinstance(df.columns, pd.MultiIndex):
        df.columns = df.columns.get_level_values(0)

    df.columns = [str(c).lower() for c in df.columns]

    if "date" not in df.columns:
        df = df.reset_index()
        df.columns = [str(c).lower() for c in df.columns]
        date_cols = [c for c in df.columns if c in ("date", "datetime", "index", "timestamp")]
        if date_cols:
            df = df.rename(columns={date_cols[0]: "date"})

    if "close" not in df.columns and "adj close" in df.columns:
        df = df.rename(columns={"adj close": "close"})

    if "date" not in df.columns or "close" not in df.columns:
        return pd.DataFrame({"date": pd.Series(dtype=str), "close": pd.Series(dtype=float)})

    dates = pd.to_datetime(df["date"], errors="coerce")
    closes = pd.to_numeric(df["close"], errors="coerce")
    out = pd.DataFrame({"date": dates, "close": closes.astype(float)})
    out = out[out["date"].notna() & np.isfinite(out["close"])]

    out = out.drop_duplicates(subset="date", keep="last")
    out = out.sort_values("date", kind="stable").reset_index(drop=True)

    if len(out):
        has_time = (out["date"].dt.normalize() != out["date"]).any()
        fmt = "%Y-%m-%dT%H:%M:%S" if has_time else "%Y-%m-%d"
        out["date"] = out["date"].dt.strftime(fmt)
    else:
        out["date"] = out["date"].astype(str)

    return out[["date", "close"]]


def looks_daily(dates: Sequence[Any]) -> bool:
    """
    Check whether a date sequence has a daily (trading-day) cadence.

    The median gap between adjacent dates must be at most 2 days, which
    tolerates weekends and holidays. Short sequences are rejected.

    Args:
        dates: Ascending dates (strings, datetimes or Timestamps)

    Returns:
        True if the cadence looks daily
    """
    if len(dates) < MIN_POINTS_FOR_CADENCE:
        return False
    stamps = pd.to_datetime(pd.Series(list(dates)), errors="coerce")
    gaps = stamps.diff().dropna().dt.total_seconds() / 86400.0
    if gaps.empty:
        return False
    return float(gaps.round().median()) <= MAX_DAILY_MEDIAN_GAP_DAYS


def slice_recent_years(frame: pd.DataFrame, years: int = 5) -> pd.DataFrame:
    """
    Keep the rows within `years` calendar years of the last date.

    Args:
        frame: Standardized date/close frame (ascending)
        years: Window length in years; non-positive keeps everything

    Returns:
        Sliced copy of the frame
    """
    if frame.empty or years <= 0:
        return frame.copy()
    stamps = pd.to_datetime(frame["date"], errors="coerce")
    last = stamps.iloc[-1]
    if pd.isna(last):
        return frame.copy()
    cutoff = (last - pd.DateOffset(years=years)).normalize()
    return frame[stamps >= cutoff].reset_index(drop=True)


def value_at(series: Sequence[float] | np.ndarray, index: int, default: float = 0.0) -> float:
    """
    Read a value with carry-forward semantics.

    Out-of-range indexes (including negative ones) and NaN samples fall back
    to the last value; if that is missing too, `default` is returned. Used
    when a hover index outruns a shorter series.

    Args:
        series: Score or price series
        index: Requested position
        default: Neutral value for an empty series

    Returns:
        The value at index, the last value, or default
    """
    size = len(series)
    if 0 <= index < size:
        value = float(series[index])
        if not math.isnan(value):
            return value
    if size:
        last = float(series[size - 1])
        if not math.isnan(last):
            return last
    return default
