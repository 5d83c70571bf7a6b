"""Guard target: succeeds when the stop is never touched during the guard period."""
from typing import Dict, List, Optional

from .base import PathTarget, stop_fill
from ..shared.errors import ConfigurationError, require_non_negative
from ..shared.types import Bar, Signal, Trade, TradeOutcome


class GuardTarget(PathTarget):
    """
    Holds for ``in_days`` bars unless the stop is breached.

    Outcomes: Timeout (success, the stop held), StopLossHit, or StopLossFailure
    when the fill is worse than -(stop_loss + failure_tolerance), e.g. after a
    gap through the stop. ``failure_tolerance`` defaults to ``stop_loss``.
    """

    kind = "guard"
    display_name = "Stop-loss guard"

    def __init__(
        self,
        stop_loss: float,
        in_days: int,
        failure_tolerance: Optional[float] = None,
        name: Optional[str] = None,
    ):
        super().__init__(in_days, name)
        self.stop_loss = require_non_negative("stop_loss", stop_loss)
        if self.stop_loss >= 1:
            raise ConfigurationError("stop_loss", f"must be < 1, got {stop_loss}")
        if failure_tolerance is None:
            failure_tolerance = self.stop_loss
        self.failure_tolerance = require_non_negative("failure_tolerance", failure_tolerance)

    def params(self) -> Dict[str, object]:
        return {
            "stop_loss": self.stop_loss,
            "in_days": self.in_days,
            "failure_tolerance": self.failure_tolerance,
        }

    def describe(self) -> str:
        return f"No -{self.stop_loss:.1%} stop within {self.in_days} days"

    def walk(self, signal: Signal, bars: List[Bar]) -> Trade:
        stop_level = signal.entry_price * (1.0 - self.stop_loss)
        failure_return = -(self.stop_loss + self.failure_tolerance)

        for day, bar in enumerate(bars, start=1):
            if bar.low <= stop_level:
                fill = stop_fill(bar.open, stop_level)
                realized = fill / signal.entry_price - 1.0
                outcome = (TradeOutcome.STOP_LOSS_FAILURE if realized <= failure_return
                           else TradeOutcome.STOP_LOSS_HIT)
                return self.make_trade(signal, bar, day, fill, outcome, success=False)

        last = bars[-1]
        return self.make_trade(signal, last, len(bars), last.close, TradeOutcome.TIMEOUT, success=True)
