"""
Base signal generator interface.

Turns ranked candidates into concrete entry events. The entry bar is always
the bar after the candidate's evaluation day, so no signal can enter on
information it was selected with. Candidates that fail their trigger are
dropped, not converted into empty signals.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, Optional, Sequence

import pandas as pd

from ..shared.errors import ConfigurationError
from ..shared.types import Candidate, Signal, component_id

logger = logging.getLogger(__name__)

PRICE_RULES = ("close", "open")


class SignalGenerator(ABC):
    """Converts candidates into Signals for one evaluation day."""

    kind: str = "signal"
    display_name: str = "Signal"

    def __init__(self, name: Optional[str] = None):
        self._name = name

    def params(self) -> Dict[str, object]:
        return {}

    @property
    def id(self) -> str:
        return self._name or component_id(self.kind, self.params())

    @property
    def name(self) -> str:
        return self._name or self.display_name

    def generate(self, candidates: Sequence[Candidate], universe: Mapping[str, pd.DataFrame]) -> List[Signal]:
        """
        Build signals for the candidates that trigger.

        Candidates whose symbol has no bar after the evaluation day are skipped.
        """
        signals = []
        for candidate in candidates:
            frame = universe[candidate.symbol]
            if candidate.evaluation_position + 1 >= len(frame):
                logger.debug("%s: no bar after %s for %s", self.id, candidate.evaluation_date, candidate.symbol)
                continue
            signal = self.build_signal(candidate, frame)
            if signal is not None:
                signals.append(signal)
        return signals

    @abstractmethod
    def build_signal(self, candidate: Candidate, frame: pd.DataFrame) -> Optional[Signal]:
        """Signal for one candidate, or None if it does not trigger. ``frame`` is the full series."""
        pass

    @abstractmethod
    def quote(self, candidate: Candidate, frame: pd.DataFrame) -> Optional[float]:
        """
        Indicative buy price known at the close of the evaluation day.

        Used for recommendations on the latest day, where no next bar exists yet.
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id})"


class PriceRuleSignal(SignalGenerator):
    """
    Enters on the next bar's close or open, optionally gated by ``triggers``.

    Subclasses override ``triggers`` (and ``min_history``) to add a predicate
    computed from bars up to and including the evaluation day.
    """

    kind = "price"
    display_name = "Price signal"

    def __init__(self, price_rule: str = "close", name: Optional[str] = None):
        super().__init__(name)
        if price_rule not in PRICE_RULES:
            raise ConfigurationError("price_rule", f"must be one of {PRICE_RULES}, got {price_rule!r}")
        self.price_rule = price_rule

    @property
    def min_history(self) -> int:
        return 1

    def params(self) -> Dict[str, object]:
        return {"price_rule": self.price_rule}

    def triggers(self, history: pd.DataFrame) -> bool:
        """Entry predicate over bars up to and including the evaluation day."""
        return True

    def _history(self, candidate: Candidate, frame: pd.DataFrame) -> Optional[pd.DataFrame]:
        history = frame.iloc[:candidate.evaluation_position + 1]
        if len(history) < self.min_history:
            return None
        return history

    def build_signal(self, candidate: Candidate, frame: pd.DataFrame) -> Optional[Signal]:
        history = self._history(candidate, frame)
        if history is None or not self.triggers(history):
            return None

        entry_position = candidate.evaluation_position + 1
        column = "Close" if self.price_rule == "close" else "Open"
        entry_price = float(frame[column].iloc[entry_position])
        if not entry_price > 0:
            return None
        return Signal(
            symbol=candidate.symbol,
            entry_position=entry_position,
            entry_date=frame.index[entry_position],
            entry_price=entry_price,
            evaluation_position=candidate.evaluation_position,
            reference_price=float(history["Close"].iloc[-1]),
        )

    def quote(self, candidate: Candidate, frame: pd.DataFrame) -> Optional[float]:
        history = self._history(candidate, frame)
        if history is None or not self.triggers(history):
            return None
        return float(history["Close"].iloc[-1])
