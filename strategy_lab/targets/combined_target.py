"""Combined target: all constituent targets must succeed."""
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

import pandas as pd

from .base import ExitTarget
from ..shared.errors import ConfigurationError
from ..shared.types import Signal, Trade, TradeOutcome


class CombinedTarget(ExitTarget):
    """
    Intersection of several exit targets evaluated on the same signal.

    - TargetHit only when every constituent succeeds; reported at the latest
      constituent exit
    - Otherwise the most adverse failing outcome
      (StopLossFailure > StopLossHit > Timeout), earliest exit on ties

    Summary levels: in_days = max, stop_loss = min, target_return = weighted
    mean of the constituents that define one.
    """

    kind = "combined"
    display_name = "Combined target"

    def __init__(
        self,
        targets: Sequence[ExitTarget],
        weights: Optional[Sequence[float]] = None,
        name: Optional[str] = None,
    ):
        targets = list(targets)
        if len(targets) < 2:
            raise ConfigurationError("targets", f"combined target needs at least 2 targets, got {len(targets)}")
        if weights is None:
            weights = [1.0] * len(targets)
        weights = [float(w) for w in weights]
        if len(weights) != len(targets):
            raise ConfigurationError("weights", f"expected {len(targets)} weights, got {len(weights)}")
        if any(w < 0 for w in weights) or sum(weights) == 0:
            raise ConfigurationError("weights", f"must be >= 0 with a positive sum, got {weights}")

        super().__init__(max(t.in_days for t in targets), name)
        self.targets: List[ExitTarget] = targets
        self.weights = weights

        stops = [t.stop_loss for t in targets if t.stop_loss is not None]
        self.stop_loss = min(stops) if stops else None

        weighted = [(t.target_return, w) for t, w in zip(targets, weights) if t.target_return is not None]
        total_weight = sum(w for _, w in weighted)
        if weighted and total_weight > 0:
            self.target_return = sum(r * w for r, w in weighted) / total_weight
        else:
            self.target_return = None

    def params(self) -> Dict[str, object]:
        return {"targets": [t.id for t in self.targets], "weights": self.weights}

    def describe(self) -> str:
        return " & ".join(t.describe() for t in self.targets)

    def evaluate(self, signal: Signal, frame: pd.DataFrame) -> Optional[Trade]:
        trades = []
        for target in self.targets:
            trade = target.evaluate(signal, frame)
            if trade is None:
                return None
            trades.append(trade)

        if all(t.success for t in trades):
            latest = max(trades, key=lambda t: t.exit_date)
            return replace(latest, outcome=TradeOutcome.TARGET_HIT, success=True)

        failing = [t for t in trades if not t.success]
        worst = min(failing, key=lambda t: (-t.outcome.severity, t.exit_date))
        return replace(worst, success=False)
