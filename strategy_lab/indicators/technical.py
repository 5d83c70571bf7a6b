"""
Technical indicators used by selectors and signal generators.

All functions are pure: they take a price Series (or an OHLCV DataFrame) and
return a Series aligned to the input index. NaN marks "undefined" (not enough
history); callers must treat NaN as ineligible, never as zero.

Smoothing policies (fixed per indicator):
- EMA: k = 2 / (period + 1), seeded by the simple average of the first `period` values.
- ATR and RSI: Wilder smoothing, value[i] = (value[i-1] * (period - 1) + x[i]) / period,
  seeded by the simple average of the first `period` inputs.
"""
import numpy as np
import pandas as pd
from typing import Tuple

from ..shared.defaults import (
    ATR_PERIOD, RSI_PERIOD,
    MACD_FAST, MACD_SLOW, MACD_SIGNAL,
    BOLLINGER_PERIOD, BOLLINGER_STD,
    KELTNER_EMA_PERIOD, KELTNER_ATR_PERIOD, KELTNER_MULTIPLIER,
    STOCHASTIC_K_PERIOD, STOCHASTIC_D_PERIOD,
    MOMENTUM_PERIOD,
)


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")


def _first_valid(arr: np.ndarray) -> int:
    """Position of the first non-NaN value, or len(arr) if there is none."""
    valid = np.flatnonzero(~np.isnan(arr))
    return int(valid[0]) if len(valid) else len(arr)


def _seeded_recurrence(arr: np.ndarray, period: int, alpha: float) -> np.ndarray:
    """
    Exponential recurrence out[i] = alpha * arr[i] + (1 - alpha) * out[i-1].

    Leading NaNs are skipped; the first output is the mean of the first `period`
    valid inputs, placed at the last of them.
    """
    out = np.full(len(arr), np.nan)
    start = _first_valid(arr)
    seed_at = start + period - 1
    if seed_at >= len(arr):
        return out
    out[seed_at] = arr[start:seed_at + 1].mean()
    for i in range(seed_at + 1, len(arr)):
        out[i] = alpha * arr[i] + (1.0 - alpha) * out[i - 1]
    return out


def sma(values: pd.Series, period: int) -> pd.Series:
    """Simple moving average."""
    _check_period(period)
    return values.astype(float).rolling(window=period, min_periods=period).mean()


def ema(values: pd.Series, period: int) -> pd.Series:
    """Exponential moving average (k = 2 / (period + 1), SMA seed)."""
    _check_period(period)
    arr = values.to_numpy(dtype=float)
    return pd.Series(_seeded_recurrence(arr, period, 2.0 / (period + 1)), index=values.index)


def wilder(values: pd.Series, period: int) -> pd.Series:
    """Wilder smoothing (alpha = 1 / period, SMA seed)."""
    _check_period(period)
    arr = values.to_numpy(dtype=float)
    return pd.Series(_seeded_recurrence(arr, period, 1.0 / period), index=values.index)


def macd(
    prices: pd.Series,
    fast: int = MACD_FAST,
    slow: int = MACD_SLOW,
    signal: int = MACD_SIGNAL,
) -> Tuple[pd.Series, pd.Series, pd.Series]:
    """
    Calculate MACD (Moving Average Convergence Divergence).

    Returns:
        Tuple of (MACD line, Signal line, Histogram)
    """
    if fast >= slow:
        raise ValueError(f"MACD fast period ({fast}) must be less than slow period ({slow})")
    macd_line = ema(prices, fast) - ema(prices, slow)
    signal_line = ema(macd_line, signal)
    histogram = macd_line - signal_line
    return macd_line, signal_line, histogram


def rsi(prices: pd.Series, period: int = RSI_PERIOD) -> pd.Series:
    """
    Relative Strength Index with Wilder smoothing.

    RSI = 100 - (100 / (1 + RS)), RS = average gain / average loss.
    Defined as 100 when the average loss is zero.
    """
    _check_period(period)
    delta = prices.astype(float).diff()
    gain = delta.clip(lower=0.0)
    loss = (-delta).clip(lower=0.0)
    # First change is NaN, so the seed covers changes 1..period
    avg_gain = wilder(gain, period).to_numpy()
    avg_loss = wilder(loss, period).to_numpy()

    with np.errstate(divide="ignore", invalid="ignore"):
        rs = avg_gain / avg_loss
        values = 100.0 - 100.0 / (1.0 + rs)
    values = np.where((avg_loss == 0) & ~np.isnan(avg_gain), 100.0, values)
    return pd.Series(values, index=prices.index)


def true_range(data: pd.DataFrame) -> pd.Series:
    """
    True range: max(high - low, |high - prev_close|, |low - prev_close|).

    The first bar has no previous close and uses high - low.
    """
    high = data["High"].astype(float)
    low = data["Low"].astype(float)
    prev_close = data["Close"].astype(float).shift(1)
    ranges = pd.concat(
        [high - low, (high - prev_close).abs(), (low - prev_close).abs()],
        axis=1,
    )
    return ranges.max(axis=1, skipna=True)


def atr(data: pd.DataFrame, period: int = ATR_PERIOD) -> pd.Series:
    """Average True Range (Wilder smoothing over true_range)."""
    return wilder(true_range(data), period)


def standard_deviation(values: pd.Series, period: int) -> pd.Series:
    """Rolling population standard deviation."""
    _check_period(period)
    return values.astype(float).rolling(window=period, min_periods=period).std(ddof=0)


def bollinger_bands(
    prices: pd.Series,
    period: int = BOLLINGER_PERIOD,
    num_std: float = BOLLINGER_STD,
) -> Tuple[pd.Series, pd.Series, pd.Series]:
    """Returns (middle, upper, lower): SMA +/- num_std * population std."""
    middle = sma(prices, period)
    width = standard_deviation(prices, period) * num_std
    return middle, middle + width, middle - width


def keltner_channel(
    data: pd.DataFrame,
    ema_period: int = KELTNER_EMA_PERIOD,
    atr_period: int = KELTNER_ATR_PERIOD,
    multiplier: float = KELTNER_MULTIPLIER,
) -> Tuple[pd.Series, pd.Series, pd.Series]:
    """Returns (middle, upper, lower): EMA(close) +/- multiplier * ATR."""
    middle = ema(data["Close"], ema_period)
    width = atr(data, atr_period) * multiplier
    return middle, middle + width, middle - width


def stochastic(
    data: pd.DataFrame,
    k_period: int = STOCHASTIC_K_PERIOD,
    d_period: int = STOCHASTIC_D_PERIOD,
) -> Tuple[pd.Series, pd.Series]:
    """
    Stochastic oscillator.

    %K = 100 * (close - lowest low) / (highest high - lowest low), 50 on a flat window.
    %D = SMA(%K, d_period).
    """
    _check_period(k_period)
    lowest = data["Low"].astype(float).rolling(window=k_period, min_periods=k_period).min()
    highest = data["High"].astype(float).rolling(window=k_period, min_periods=k_period).max()
    span = (highest - lowest).to_numpy()
    close = data["Close"].astype(float).to_numpy()

    with np.errstate(divide="ignore", invalid="ignore"):
        k_values = 100.0 * (close - lowest.to_numpy()) / span
    k_values = np.where(span == 0, 50.0, k_values)
    percent_k = pd.Series(k_values, index=data.index)
    percent_d = sma(percent_k, d_period)
    return percent_k, percent_d


def momentum(prices: pd.Series, period: int = MOMENTUM_PERIOD) -> pd.Series:
    """Price change over `period` bars: close[i] - close[i - period]."""
    _check_period(period)
    return prices.astype(float).diff(period)
