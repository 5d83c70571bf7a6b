"""
Base exit target interfaces.

ExitTarget turns a Signal into the resulting Trade. PathTarget is the common
case: it walks forward one bar at a time, starting the bar after entry and
stopping after at most ``in_days`` bars. Every walk ends in exactly one
terminal outcome.

Fill conventions (daily bars, no intraday path):
- stop level = entry * (1 - stop_loss); a bar whose low reaches it fills at
  min(open, stop level), so a gap down fills at the open
- target level = entry * (1 + target_return); a bar whose high reaches it fills
  at max(open, target level)
- timeout exits at the close of the last bar walked
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import pandas as pd

from ..shared.errors import require_positive_int
from ..shared.types import Bar, Signal, Trade, TradeOutcome, component_id, frame_to_bars

logger = logging.getLogger(__name__)


def stop_fill(open_price: float, stop_level: float) -> float:
    return min(open_price, stop_level)


def target_fill(open_price: float, target_level: float) -> float:
    return max(open_price, target_level)


class ExitTarget(ABC):
    """Decides how and when a trade opened by a Signal is closed."""

    kind: str = "target"
    display_name: str = "Target"

    #: Return the position aims for (None when the target only guards)
    target_return: Optional[float] = None
    #: Loss fraction that triggers the stop (None when there is no stop)
    stop_loss: Optional[float] = None

    def __init__(self, in_days: int, name: Optional[str] = None):
        self.in_days = require_positive_int("in_days", in_days)
        self._name = name

    def params(self) -> Dict[str, object]:
        return {"in_days": self.in_days}

    @property
    def id(self) -> str:
        return self._name or component_id(self.kind, self.params())

    @property
    def name(self) -> str:
        return self._name or self.describe()

    def describe(self) -> str:
        return self.display_name

    @abstractmethod
    def evaluate(self, signal: Signal, frame: pd.DataFrame) -> Optional[Trade]:
        """
        Simulate the exit for one signal.

        Args:
            signal: Entry event
            frame: Full series of the signal's symbol

        Returns:
            The completed Trade, or None if fewer than ``in_days`` bars follow the entry
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id})"


class PathTarget(ExitTarget):
    """Exit target that walks the ``in_days`` bars after entry itself."""

    def evaluate(self, signal: Signal, frame: pd.DataFrame) -> Optional[Trade]:
        start = signal.entry_position + 1
        path = frame.iloc[start:start + self.in_days]
        if len(path) < self.in_days:
            logger.debug("%s: %s entered %s lacks %d exit bars",
                         self.id, signal.symbol, signal.entry_date.date(), self.in_days)
            return None
        return self.walk(signal, frame_to_bars(path))

    @abstractmethod
    def walk(self, signal: Signal, bars: List[Bar]) -> Trade:
        """Walk exactly ``in_days`` bars after entry and return the terminal Trade."""
        pass

    @staticmethod
    def make_trade(
        signal: Signal,
        bar: Bar,
        day: int,
        exit_price: float,
        outcome: TradeOutcome,
        success: bool,
    ) -> Trade:
        """Trade exiting on ``bar``, the ``day``-th bar of the walk (1-based)."""
        return Trade(
            symbol=signal.symbol,
            entry_date=signal.entry_date,
            entry_price=signal.entry_price,
            exit_date=bar.date,
            exit_price=float(exit_price),
            outcome=outcome,
            holding_days=day,
            realized_return=float(exit_price) / signal.entry_price - 1.0,
            success=success,
        )
