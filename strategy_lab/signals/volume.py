"""Volume-gated signals: surge above the recent average, or several days of shrinking volume."""
from typing import Dict, Optional

import pandas as pd

from .base import PriceRuleSignal
from ..shared.defaults import (
    SURGE_VOLUME_RATIO, SURGE_AVERAGE_DAYS,
    DECLINE_SIGNAL_DAYS, DECLINE_SIGNAL_RATIO,
)
from ..shared.errors import require_positive_int, require_non_negative


class VolumeSurgeSignal(PriceRuleSignal):
    """
    Evaluation-day volume at least ``volume_ratio`` times the mean of the
    previous ``average_days`` volumes; with ``price_filter`` the close must
    also be above the previous close.
    """

    kind = "volume_surge"
    display_name = "Volume surge signal"

    def __init__(
        self,
        volume_ratio: float = SURGE_VOLUME_RATIO,
        average_days: int = SURGE_AVERAGE_DAYS,
        price_filter: bool = True,
        price_rule: str = "close",
        name: Optional[str] = None,
    ):
        super().__init__(price_rule, name)
        self.volume_ratio = require_non_negative("volume_ratio", volume_ratio)
        self.average_days = require_positive_int("average_days", average_days)
        self.price_filter = bool(price_filter)

    @property
    def min_history(self) -> int:
        return self.average_days + 1

    def params(self) -> Dict[str, object]:
        return {
            "volume_ratio": self.volume_ratio,
            "average_days": self.average_days,
            "price_filter": self.price_filter,
            "price_rule": self.price_rule,
        }

    def triggers(self, history: pd.DataFrame) -> bool:
        volumes = history["Volume"]
        today_volume = float(volumes.iloc[-1])
        avg_volume = float(volumes.iloc[-1 - self.average_days:-1].mean())
        if today_volume < avg_volume * self.volume_ratio:
            return False
        if self.price_filter:
            return bool(history["Close"].iloc[-1] > history["Close"].iloc[-2])
        return True


class VolumeDeclineSignal(PriceRuleSignal):
    """
    Each of the last ``min_consecutive_days`` volumes is at most
    ``decline_ratio`` times the volume of the day before; with ``price_filter``
    the close must not be below the close ``min_consecutive_days`` bars earlier.
    """

    kind = "volume_decline"
    display_name = "Volume decline signal"

    def __init__(
        self,
        min_consecutive_days: int = DECLINE_SIGNAL_DAYS,
        decline_ratio: float = DECLINE_SIGNAL_RATIO,
        price_filter: bool = True,
        price_rule: str = "close",
        name: Optional[str] = None,
    ):
        super().__init__(price_rule, name)
        self.min_consecutive_days = require_positive_int("min_consecutive_days", min_consecutive_days)
        self.decline_ratio = require_non_negative("decline_ratio", decline_ratio)
        self.price_filter = bool(price_filter)

    @property
    def min_history(self) -> int:
        return self.min_consecutive_days + 1

    def params(self) -> Dict[str, object]:
        return {
            "min_consecutive_days": self.min_consecutive_days,
            "decline_ratio": self.decline_ratio,
            "price_filter": self.price_filter,
            "price_rule": self.price_rule,
        }

    def triggers(self, history: pd.DataFrame) -> bool:
        volumes = history["Volume"].to_numpy(dtype=float)
        for i in range(self.min_consecutive_days):
            if volumes[-1 - i] > volumes[-2 - i] * self.decline_ratio:
                return False
        if self.price_filter:
            closes = history["Close"]
            return bool(closes.iloc[-1] >= closes.iloc[-1 - self.min_consecutive_days])
        return True
