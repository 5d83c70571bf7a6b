"""
Base selector interface.

A selector scores every symbol as of one evaluation day and returns the best
``top_n`` as Candidates. The base class owns the two rules every variant must
follow, so variants only implement ``score``:

1. No look-ahead: ``score`` receives the symbol's frame cut at the evaluation
   day (``iloc[:position + 1]``); later bars are never visible.
2. Deterministic total order: candidates sort by (-score, symbol).
"""
import logging
import math
from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, Optional, Tuple

import pandas as pd

from ..shared.defaults import TOP_N
from ..shared.errors import require_positive_int
from ..shared.types import Candidate, component_id

logger = logging.getLogger(__name__)

ScoreResult = Optional[Tuple[float, Dict[str, float]]]


def evaluation_position(frame: pd.DataFrame, evaluation_index: int) -> int:
    """Positional index of the day ``evaluation_index`` bars before the last bar (may be < 0)."""
    return len(frame) - 1 - evaluation_index


class Selector(ABC):
    """Ranks symbols as buy prospects for one evaluation day."""

    kind: str = "selector"
    display_name: str = "Selector"

    def __init__(self, top_n: int = TOP_N, name: Optional[str] = None):
        self.top_n = require_positive_int("top_n", top_n)
        self._name = name

    @property
    def min_history(self) -> int:
        """Bars (up to and including the evaluation day) needed to score a symbol."""
        return 1

    def params(self) -> Dict[str, object]:
        return {"top_n": self.top_n}

    @property
    def id(self) -> str:
        return self._name or component_id(self.kind, self.params())

    @property
    def name(self) -> str:
        return self._name or self.display_name

    def select(self, universe: Mapping[str, pd.DataFrame], evaluation_index: int) -> List[Candidate]:
        """
        Score all symbols as of ``evaluation_index`` bars before each symbol's last bar.

        Symbols without enough history, or whose score is undefined, are skipped.

        Returns:
            Up to ``top_n`` candidates, best first
        """
        if evaluation_index < 0:
            raise ValueError(f"evaluation_index must be >= 0, got {evaluation_index}")

        candidates = []
        for symbol in sorted(universe):
            frame = universe[symbol]
            position = evaluation_position(frame, evaluation_index)
            if position + 1 < self.min_history:
                logger.debug("%s: %s has %d bars at offset %d, needs %d",
                             self.id, symbol, max(position + 1, 0), evaluation_index, self.min_history)
                continue

            history = frame.iloc[:position + 1]
            result = self.score(history)
            if result is None:
                continue
            score, values = result
            if score is None or not math.isfinite(score):
                continue
            candidates.append(Candidate(
                symbol=symbol,
                score=float(score),
                evaluation_position=position,
                evaluation_date=frame.index[position],
                indicators=values,
            ))

        candidates.sort(key=lambda c: (-c.score, c.symbol))
        return candidates[:self.top_n]

    @abstractmethod
    def score(self, history: pd.DataFrame) -> ScoreResult:
        """
        Score one symbol.

        Args:
            history: Bars up to and including the evaluation day (at least ``min_history`` rows)

        Returns:
            (score, supporting indicator values), or None if the symbol is ineligible
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id})"
