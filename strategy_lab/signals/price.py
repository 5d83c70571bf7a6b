"""Plain price-rule signals: next close, next open, and a conditional limit order."""
from typing import Dict, Optional

import pandas as pd

from .base import SignalGenerator, PriceRuleSignal
from ..shared.defaults import LIMIT_PRICE_RATIO
from ..shared.errors import ConfigurationError
from ..shared.types import Candidate, Signal


class CloseSignal(PriceRuleSignal):
    """Buy at the close of the bar after the evaluation day."""

    kind = "close"
    display_name = "Close price signal"

    def __init__(self, name: Optional[str] = None):
        super().__init__("close", name)

    def params(self) -> Dict[str, object]:
        return {}


class OpenSignal(PriceRuleSignal):
    """Buy at the open of the bar after the evaluation day."""

    kind = "open"
    display_name = "Open price signal"

    def __init__(self, name: Optional[str] = None):
        super().__init__("open", name)

    def params(self) -> Dict[str, object]:
        return {}


class LimitPriceSignal(SignalGenerator):
    """
    Limit buy at ``price_ratio`` times the evaluation close.

    Triggers only if the next bar trades down to the limit. A bar that opens
    below the limit fills at its open.
    """

    kind = "limit"
    display_name = "Limit price signal"

    def __init__(self, price_ratio: float = LIMIT_PRICE_RATIO, name: Optional[str] = None):
        super().__init__(name)
        if isinstance(price_ratio, bool) or not isinstance(price_ratio, (int, float)) or price_ratio <= 0:
            raise ConfigurationError("price_ratio", f"must be a number > 0, got {price_ratio!r}")
        self.price_ratio = float(price_ratio)

    def params(self) -> Dict[str, object]:
        return {"price_ratio": self.price_ratio}

    def build_signal(self, candidate: Candidate, frame: pd.DataFrame) -> Optional[Signal]:
        reference = float(frame["Close"].iloc[candidate.evaluation_position])
        limit = reference * self.price_ratio
        entry_position = candidate.evaluation_position + 1
        next_bar = frame.iloc[entry_position]
        if float(next_bar["Low"]) > limit:
            return None
        entry_price = min(limit, float(next_bar["Open"]))
        if not entry_price > 0:
            return None
        return Signal(
            symbol=candidate.symbol,
            entry_position=entry_position,
            entry_date=frame.index[entry_position],
            entry_price=entry_price,
            evaluation_position=candidate.evaluation_position,
            reference_price=reference,
        )

    def quote(self, candidate: Candidate, frame: pd.DataFrame) -> Optional[float]:
        return float(frame["Close"].iloc[candidate.evaluation_position]) * self.price_ratio
