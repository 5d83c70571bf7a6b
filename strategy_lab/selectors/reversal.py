"""Reversal selectors: breakout-then-pullback setups and RSI oversold rebounds."""
from typing import Dict, Optional

import pandas as pd

from .base import Selector, ScoreResult
from ..indicators.implementations import RSIIndicator
from ..shared.defaults import (
    TOP_N, BREAKTHROUGH_LOOKBACK_DAYS, MIN_BREAKTHROUGH_PERCENT, MAX_PULLBACK_PERCENT,
    PULLBACK_VOLUME_DECLINE_RATIO, RSI_PERIOD, RSI_OVERSOLD,
)
from ..shared.errors import ConfigurationError, require_positive_int, require_non_negative


class BreakthroughPullbackSelector(Selector):
    """
    Finds a recent breakout day followed by a quiet pullback.

    Breakout: within the lookback, a close at least ``min_breakthrough_percent``
    above the previous close on rising volume (the most recent one is used).
    Pullback: the evaluation close is between 0 and ``max_pullback_percent``
    below the breakout close, on volume at most ``volume_decline_ratio`` times
    the breakout volume.

    score = breakout % - pullback %
    """

    kind = "breakthrough_pullback"
    display_name = "Breakthrough pullback selector"

    def __init__(
        self,
        top_n: int = TOP_N,
        lookback_days: int = BREAKTHROUGH_LOOKBACK_DAYS,
        min_breakthrough_percent: float = MIN_BREAKTHROUGH_PERCENT,
        max_pullback_percent: float = MAX_PULLBACK_PERCENT,
        volume_decline_ratio: float = PULLBACK_VOLUME_DECLINE_RATIO,
        name: Optional[str] = None,
    ):
        super().__init__(top_n, name)
        self.lookback_days = require_positive_int("lookback_days", lookback_days)
        if self.lookback_days < 2:
            raise ConfigurationError("lookback_days", f"must be >= 2, got {lookback_days}")
        self.min_breakthrough_percent = require_non_negative("min_breakthrough_percent", min_breakthrough_percent)
        self.max_pullback_percent = require_non_negative("max_pullback_percent", max_pullback_percent)
        self.volume_decline_ratio = require_non_negative("volume_decline_ratio", volume_decline_ratio)

    @property
    def min_history(self) -> int:
        return self.lookback_days + 1

    def params(self) -> Dict[str, object]:
        return {
            "top_n": self.top_n,
            "lookback_days": self.lookback_days,
            "min_breakthrough_percent": self.min_breakthrough_percent,
            "max_pullback_percent": self.max_pullback_percent,
            "volume_decline_ratio": self.volume_decline_ratio,
        }

    def score(self, history: pd.DataFrame) -> ScoreResult:
        closes = history["Close"].to_numpy(dtype=float)
        volumes = history["Volume"].to_numpy(dtype=float)

        breakout = None
        # Day i bars before the evaluation day, most recent first
        for i in range(1, self.lookback_days):
            current, prev = -1 - i, -2 - i
            if closes[prev] <= 0:
                continue
            change_pct = (closes[current] - closes[prev]) / closes[prev] * 100.0
            if change_pct >= self.min_breakthrough_percent and volumes[current] > volumes[prev]:
                breakout = (current, change_pct)
                break
        if breakout is None:
            return None

        position, change_pct = breakout
        breakout_close = closes[position]
        pullback_pct = (breakout_close - closes[-1]) / breakout_close * 100.0
        if not 0.0 < pullback_pct <= self.max_pullback_percent:
            return None
        if volumes[-1] > volumes[position] * self.volume_decline_ratio:
            return None

        return change_pct - pullback_pct, {
            "breakthrough_percent": change_pct,
            "pullback_percent": pullback_pct,
            "breakthrough_volume": float(volumes[position]),
        }


class RsiSelector(Selector):
    """
    Picks oversold symbols, preferring those already turning up.

    Leaving oversold upward (prev < threshold, rsi > prev): 100 - rsi + (rsi - prev) * 5
    Still oversold: 50 - rsi
    Otherwise ineligible.
    """

    kind = "rsi"
    display_name = "RSI selector"

    def __init__(
        self,
        top_n: int = TOP_N,
        period: int = RSI_PERIOD,
        oversold: float = RSI_OVERSOLD,
        name: Optional[str] = None,
    ):
        super().__init__(top_n, name)
        self.period = require_positive_int("period", period)
        self.oversold = require_non_negative("oversold", oversold)
        if self.oversold > 100:
            raise ConfigurationError("oversold", f"must be <= 100, got {oversold}")
        self._rsi = RSIIndicator(self.period)

    @property
    def min_history(self) -> int:
        return self._rsi.min_history + 1

    def params(self) -> Dict[str, object]:
        return {"top_n": self.top_n, "period": self.period, "oversold": self.oversold}

    def score(self, history: pd.DataFrame) -> ScoreResult:
        pair = self._rsi.last_two(history)
        if pair is None:
            return None
        prev, current = pair
        if prev < self.oversold and current > prev:
            value = 100.0 - current + (current - prev) * 5.0
        elif current < self.oversold:
            value = 50.0 - current
        else:
            return None
        return value, {"rsi": current, "rsi_prev": prev}
