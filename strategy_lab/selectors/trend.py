"""Trend-following selectors: ATR-weighted trend score and MACD histogram turns."""
from typing import Dict, Optional

import pandas as pd

from .base import Selector, ScoreResult
from ..indicators.implementations import ATRIndicator, MACDIndicator
from ..shared.defaults import (
    TOP_N, ATR_PERIOD, ATR_LOOKBACK_DAYS, ATR_WEIGHT, VOLUME_WEIGHT, TREND_WEIGHT,
    MACD_FAST, MACD_SLOW, MACD_SIGNAL,
)
from ..shared.errors import ConfigurationError, require_positive_int, require_non_negative


class AtrSelector(Selector):
    """
    Combines volatility, liquidity and trend into one weighted score.

    score = atr_weight * ATR / close
          + volume_weight * (last volume / mean volume over lookback)
          + trend_weight * (close / start close - 1)

    The start close is the first of the last ``lookback_days`` closes, i.e.
    lookback_days - 1 bars before the evaluation day.
    """

    kind = "atr"
    display_name = "ATR selector"

    def __init__(
        self,
        top_n: int = TOP_N,
        lookback_days: int = ATR_LOOKBACK_DAYS,
        atr_weight: float = ATR_WEIGHT,
        volume_weight: float = VOLUME_WEIGHT,
        trend_weight: float = TREND_WEIGHT,
        atr_period: int = ATR_PERIOD,
        name: Optional[str] = None,
    ):
        super().__init__(top_n, name)
        self.lookback_days = require_positive_int("lookback_days", lookback_days)
        self.atr_period = require_positive_int("atr_period", atr_period)
        self.atr_weight = require_non_negative("atr_weight", atr_weight)
        self.volume_weight = require_non_negative("volume_weight", volume_weight)
        self.trend_weight = require_non_negative("trend_weight", trend_weight)
        if self.atr_weight + self.volume_weight + self.trend_weight == 0:
            raise ConfigurationError("atr_weight", "at least one score weight must be > 0")
        self._atr = ATRIndicator(self.atr_period)

    @property
    def min_history(self) -> int:
        return max(self.lookback_days, self.atr_period) + 1

    def params(self) -> Dict[str, object]:
        return {
            "top_n": self.top_n,
            "lookback_days": self.lookback_days,
            "weights": (self.atr_weight, self.volume_weight, self.trend_weight),
        }

    def score(self, history: pd.DataFrame) -> ScoreResult:
        window = history.iloc[-self.min_history:]
        normalized_atr = self._atr.normalized(window)
        if normalized_atr is None:
            return None

        volumes = window["Volume"].iloc[-self.lookback_days:]
        avg_volume = float(volumes.mean())
        if avg_volume <= 0:
            return None
        volume_ratio = float(volumes.iloc[-1]) / avg_volume

        start_price = float(window["Close"].iloc[-self.lookback_days])
        if start_price <= 0:
            return None
        trend = float(window["Close"].iloc[-1]) / start_price - 1.0

        total = (
            normalized_atr * self.atr_weight
            + volume_ratio * self.volume_weight
            + trend * self.trend_weight
        )
        return total, {"atr_pct": normalized_atr, "volume_ratio": volume_ratio, "trend": trend}


class MacdSelector(Selector):
    """
    Picks symbols whose MACD histogram is turning up.

    100 when the histogram crosses from negative to positive,
    50 + (h - h_prev) * 10 while it is rising, otherwise ineligible.
    """

    kind = "macd"
    display_name = "MACD selector"

    def __init__(
        self,
        top_n: int = TOP_N,
        fast: int = MACD_FAST,
        slow: int = MACD_SLOW,
        signal: int = MACD_SIGNAL,
        name: Optional[str] = None,
    ):
        super().__init__(top_n, name)
        require_positive_int("fast", fast)
        require_positive_int("slow", slow)
        require_positive_int("signal", signal)
        if fast >= slow:
            raise ConfigurationError("fast", f"must be less than slow ({slow}), got {fast}")
        self._macd = MACDIndicator(fast, slow, signal)

    @property
    def min_history(self) -> int:
        # Two defined histogram values
        return self._macd.min_history + 1

    def params(self) -> Dict[str, object]:
        return {
            "top_n": self.top_n,
            "fast": self._macd.fast,
            "slow": self._macd.slow,
            "signal": self._macd.signal,
        }

    def score(self, history: pd.DataFrame) -> ScoreResult:
        pair = self._macd.last_two(history)
        if pair is None:
            return None
        prev, current = pair
        if prev < 0 < current:
            value = 100.0
        elif current > prev:
            value = 50.0 + (current - prev) * 10.0
        else:
            return None
        return value, {"macd_histogram": current, "macd_histogram_prev": prev}
