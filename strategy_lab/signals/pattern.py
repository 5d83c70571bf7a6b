"""Candlestick pattern signals."""
from typing import Dict, Optional

import pandas as pd

from .base import PriceRuleSignal
from ..shared.defaults import MIN_BODY_RATIO
from ..shared.errors import require_non_negative


class BottomReverseSignal(PriceRuleSignal):
    """
    Two-bar reversal on the evaluation day.

    The day opens above the previous close and closes below the previous open,
    with a body at least ``min_body_ratio`` times the previous day's body.
    """

    kind = "bottom_reverse"
    display_name = "Bottom reverse signal"

    def __init__(self, min_body_ratio: float = MIN_BODY_RATIO, price_rule: str = "close", name: Optional[str] = None):
        super().__init__(price_rule, name)
        self.min_body_ratio = require_non_negative("min_body_ratio", min_body_ratio)

    @property
    def min_history(self) -> int:
        return 2

    def params(self) -> Dict[str, object]:
        return {"min_body_ratio": self.min_body_ratio, "price_rule": self.price_rule}

    def triggers(self, history: pd.DataFrame) -> bool:
        today = history.iloc[-1]
        yesterday = history.iloc[-2]
        if not (today["Open"] > yesterday["Close"] and today["Close"] < yesterday["Open"]):
            return False
        today_body = abs(today["Close"] - today["Open"])
        yesterday_body = abs(yesterday["Close"] - yesterday["Open"])
        return bool(today_body >= yesterday_body * self.min_body_ratio)
