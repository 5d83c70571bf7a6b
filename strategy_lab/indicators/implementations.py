"""
Individual indicator implementations following the Indicator interface.

Thin wrappers over the pure functions in ``technical`` that carry their own
parameters, so selectors can hold configured indicator objects.
"""
import pandas as pd
from typing import Optional, Tuple

from .base import Indicator
from . import technical
from ..shared.defaults import (
    ATR_PERIOD, RSI_PERIOD,
    MACD_FAST, MACD_SLOW, MACD_SIGNAL,
    STOCHASTIC_K_PERIOD, STOCHASTIC_D_PERIOD,
    MOMENTUM_PERIOD,
)


class EMAIndicator(Indicator):
    """Exponential Moving Average of the close."""

    def __init__(self, period: int):
        self.period = period
        self.min_history = period

    def calculate(self, data: pd.DataFrame) -> pd.Series:
        return technical.ema(data["Close"], self.period)


class ATRIndicator(Indicator):
    """Average True Range (Wilder)."""

    def __init__(self, period: int = ATR_PERIOD):
        self.period = period
        self.min_history = period

    def calculate(self, data: pd.DataFrame) -> pd.Series:
        return technical.atr(data, self.period)

    def normalized(self, data: pd.DataFrame) -> Optional[float]:
        """ATR on the last row divided by that row's close."""
        value = self.latest(data)
        close = float(data["Close"].iloc[-1])
        if value is None or close <= 0:
            return None
        return value / close


class RSIIndicator(Indicator):
    """Relative Strength Index (Wilder)."""

    def __init__(self, period: int = RSI_PERIOD):
        self.period = period
        # One extra bar: the first price change needs a previous close
        self.min_history = period + 1

    def calculate(self, data: pd.DataFrame) -> pd.Series:
        return technical.rsi(data["Close"], self.period)

    def last_two(self, data: pd.DataFrame) -> Optional[Tuple[float, float]]:
        """(previous, current) RSI, or None unless both are defined."""
        if len(data) < self.min_history + 1:
            return None
        values = self.calculate(data)
        prev, current = values.iloc[-2], values.iloc[-1]
        if pd.isna(prev) or pd.isna(current):
            return None
        return float(prev), float(current)


class MACDIndicator(Indicator):
    """MACD histogram (MACD line - Signal line)."""

    def __init__(
        self,
        fast: int = MACD_FAST,
        slow: int = MACD_SLOW,
        signal: int = MACD_SIGNAL,
    ):
        if fast >= slow:
            raise ValueError(f"MACD fast period ({fast}) must be less than slow period ({slow})")
        self.fast = fast
        self.slow = slow
        self.signal = signal
        self.min_history = slow + signal - 1

    def calculate(self, data: pd.DataFrame) -> pd.Series:
        _, _, histogram = self.calculate_components(data)
        return histogram

    def calculate_components(self, data: pd.DataFrame) -> Tuple[pd.Series, pd.Series, pd.Series]:
        """Calculate all MACD components: line, signal, histogram."""
        return technical.macd(data["Close"], self.fast, self.slow, self.signal)

    def last_two(self, data: pd.DataFrame) -> Optional[Tuple[float, float]]:
        """(previous, current) histogram, or None unless both are defined."""
        if len(data) < self.min_history + 1:
            return None
        histogram = self.calculate(data)
        prev, current = histogram.iloc[-2], histogram.iloc[-1]
        if pd.isna(prev) or pd.isna(current):
            return None
        return float(prev), float(current)


class StochasticIndicator(Indicator):
    """Stochastic %K."""

    def __init__(self, k_period: int = STOCHASTIC_K_PERIOD, d_period: int = STOCHASTIC_D_PERIOD):
        self.k_period = k_period
        self.d_period = d_period
        self.min_history = k_period

    def calculate(self, data: pd.DataFrame) -> pd.Series:
        percent_k, _ = technical.stochastic(data, self.k_period, self.d_period)
        return percent_k


class MomentumIndicator(Indicator):
    """Close change over a fixed number of bars."""

    def __init__(self, period: int = MOMENTUM_PERIOD):
        self.period = period
        self.min_history = period + 1

    def calculate(self, data: pd.DataFrame) -> pd.Series:
        return technical.momentum(data["Close"], self.period)


__all__ = [
    'EMAIndicator',
    'ATRIndicator',
    'RSIIndicator',
    'MACDIndicator',
    'StochasticIndicator',
    'MomentumIndicator',
]
