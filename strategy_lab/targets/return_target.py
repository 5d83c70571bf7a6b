"""Return target: take profit at a fixed return, cut losses at a fixed stop."""
from typing import Dict, List, Optional

from .base import PathTarget, stop_fill, target_fill
from ..shared.errors import ConfigurationError, require_non_negative
from ..shared.types import Bar, Signal, Trade, TradeOutcome


class ReturnTarget(PathTarget):
    """
    Exits at ``target_return`` or ``stop_loss`` within ``in_days`` bars.

    Outcomes: TargetHit (success), StopLossHit, Timeout.
    A bar that reaches both levels counts as StopLossHit.
    """

    kind = "return"
    display_name = "Return target"

    def __init__(self, target_return: float, stop_loss: float, in_days: int, name: Optional[str] = None):
        super().__init__(in_days, name)
        self.target_return = require_non_negative("target_return", target_return)
        self.stop_loss = require_non_negative("stop_loss", stop_loss)
        if self.target_return == 0:
            raise ConfigurationError("target_return", "must be > 0")
        if self.stop_loss >= 1:
            raise ConfigurationError("stop_loss", f"must be < 1, got {stop_loss}")

    def params(self) -> Dict[str, object]:
        return {"target_return": self.target_return, "stop_loss": self.stop_loss, "in_days": self.in_days}

    def describe(self) -> str:
        return (f"+{self.target_return:.1%} within {self.in_days} days, "
                f"stop -{self.stop_loss:.1%}")

    def walk(self, signal: Signal, bars: List[Bar]) -> Trade:
        stop_level = signal.entry_price * (1.0 - self.stop_loss)
        target_level = signal.entry_price * (1.0 + self.target_return)

        for day, bar in enumerate(bars, start=1):
            if bar.low <= stop_level:
                return self.make_trade(signal, bar, day, stop_fill(bar.open, stop_level),
                                       TradeOutcome.STOP_LOSS_HIT, success=False)
            if bar.high >= target_level:
                return self.make_trade(signal, bar, day, target_fill(bar.open, target_level),
                                       TradeOutcome.TARGET_HIT, success=True)

        last = bars[-1]
        return self.make_trade(signal, last, len(bars), last.close, TradeOutcome.TIMEOUT, success=False)
