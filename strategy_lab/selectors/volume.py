"""Volume-based selector: shrinking volume near support, far from resistance."""
from typing import Dict, Optional

import pandas as pd

from .base import Selector, ScoreResult
from ..shared.defaults import (
    TOP_N, VOLUME_DECLINE_LOOKBACK_DAYS, MIN_CONSECUTIVE_DECLINE_DAYS,
    MIN_VOLUME_DECLINE_RATIO, SUPPORT_PRICE_PERIOD, MAX_SUPPORT_RATIO,
)
from ..shared.errors import ConfigurationError, require_positive_int, require_non_negative


class VolumeDeclineSelector(Selector):
    """
    Selects symbols whose volume has dried up for several days in a row.

    Eligible when each of the last ``min_consecutive_decline_days`` volumes is at
    most (1 - min_volume_decline_ratio) of the day before, and (optionally) the
    close sits within ``max_support_ratio`` of the ``price_period`` low.

    score = (highest high over price_period - close) / close,
    i.e. room left before the recent resistance level.
    """

    kind = "volume_decline"
    display_name = "Volume decline selector"

    def __init__(
        self,
        top_n: int = TOP_N,
        lookback_days: int = VOLUME_DECLINE_LOOKBACK_DAYS,
        min_consecutive_decline_days: int = MIN_CONSECUTIVE_DECLINE_DAYS,
        min_volume_decline_ratio: float = MIN_VOLUME_DECLINE_RATIO,
        price_period: int = SUPPORT_PRICE_PERIOD,
        check_support_level: bool = True,
        max_support_ratio: float = MAX_SUPPORT_RATIO,
        name: Optional[str] = None,
    ):
        super().__init__(top_n, name)
        self.lookback_days = require_positive_int("lookback_days", lookback_days)
        self.min_consecutive_decline_days = require_positive_int(
            "min_consecutive_decline_days", min_consecutive_decline_days
        )
        if self.min_consecutive_decline_days >= self.lookback_days:
            raise ConfigurationError(
                "min_consecutive_decline_days",
                f"must be less than lookback_days ({lookback_days}), got {min_consecutive_decline_days}",
            )
        self.min_volume_decline_ratio = require_non_negative("min_volume_decline_ratio", min_volume_decline_ratio)
        if self.min_volume_decline_ratio >= 1:
            raise ConfigurationError(
                "min_volume_decline_ratio", f"must be < 1, got {min_volume_decline_ratio}"
            )
        self.price_period = require_positive_int("price_period", price_period)
        self.check_support_level = bool(check_support_level)
        self.max_support_ratio = require_non_negative("max_support_ratio", max_support_ratio)

    @property
    def min_history(self) -> int:
        return max(self.lookback_days, self.price_period) + 1

    def params(self) -> Dict[str, object]:
        return {
            "top_n": self.top_n,
            "lookback_days": self.lookback_days,
            "min_consecutive_decline_days": self.min_consecutive_decline_days,
            "min_volume_decline_ratio": self.min_volume_decline_ratio,
            "price_period": self.price_period,
            "check_support_level": self.check_support_level,
            "max_support_ratio": self.max_support_ratio,
        }

    def _consecutive_declines(self, volumes) -> int:
        """Number of back-to-back shrinking-volume days ending on the evaluation day."""
        threshold = 1.0 - self.min_volume_decline_ratio
        count = 0
        for i in range(self.lookback_days - 1):
            current, prev = volumes[-1 - i], volumes[-2 - i]
            if prev > 0 and current / prev <= threshold:
                count += 1
            else:
                break
        return count

    def score(self, history: pd.DataFrame) -> ScoreResult:
        volumes = history["Volume"].to_numpy(dtype=float)
        declines = self._consecutive_declines(volumes)
        if declines < self.min_consecutive_decline_days:
            return None

        recent = history.iloc[-self.price_period:]
        close = float(history["Close"].iloc[-1])
        if close <= 0:
            return None

        support = float(recent["Low"].min())
        support_ratio = (close - support) / close
        if self.check_support_level and support_ratio > self.max_support_ratio:
            return None

        resistance = float(recent["High"].max())
        resistance_ratio = (resistance - close) / close if resistance > close else 0.0
        return resistance_ratio, {
            "decline_days": float(declines),
            "support_ratio": support_ratio,
            "resistance_ratio": resistance_ratio,
        }
