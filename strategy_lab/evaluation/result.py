"""
Backtest result types: additive trade tallies, performance metrics, results.

TradeTally keeps only counts and sums, so tallies of disjoint trade sets merge
associatively and commutatively. Metrics derived from a merged tally equal the
metrics of the combined trades regardless of how the trades were split or in
which order partial results arrived.

Drawdown-family metrics (max drawdown, Calmar, cumulative return) depend on
trade order and are computed over trades in canonical order (Trade.sort_key).
"""
from __future__ import annotations

import math
from dataclasses import dataclass, asdict, field
from functools import reduce
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..indicators import stats
from ..shared.types import Trade, TradeOutcome


@dataclass(frozen=True)
class TradeTally:
    """Order-independent sub-totals over a set of trades."""
    count: int = 0
    target_hits: int = 0
    stop_loss_hits: int = 0
    stop_loss_failures: int = 0
    timeouts: int = 0
    successes: int = 0
    sum_return: float = 0.0
    sum_squares: float = 0.0
    downside_squares: float = 0.0
    downside_count: int = 0
    gross_profit: float = 0.0
    gross_loss: float = 0.0  # Positive number
    wins: int = 0
    losses: int = 0
    max_return: float = -math.inf
    min_return: float = math.inf
    sum_hold_days: int = 0

    @classmethod
    def of_trade(cls, trade: Trade) -> "TradeTally":
        r = trade.realized_return
        return cls(
            count=1,
            target_hits=int(trade.outcome is TradeOutcome.TARGET_HIT),
            stop_loss_hits=int(trade.outcome is TradeOutcome.STOP_LOSS_HIT),
            stop_loss_failures=int(trade.outcome is TradeOutcome.STOP_LOSS_FAILURE),
            timeouts=int(trade.outcome is TradeOutcome.TIMEOUT),
            successes=int(trade.success),
            sum_return=r,
            sum_squares=r * r,
            downside_squares=r * r if r < 0 else 0.0,
            downside_count=int(r < 0),
            gross_profit=r if r > 0 else 0.0,
            gross_loss=-r if r < 0 else 0.0,
            wins=int(r > 0),
            losses=int(r < 0),
            max_return=r,
            min_return=r,
            sum_hold_days=trade.holding_days,
        )

    @classmethod
    def from_trades(cls, trades: Iterable[Trade]) -> "TradeTally":
        return reduce(TradeTally.merge, (cls.of_trade(t) for t in trades), cls())

    def merge(self, other: "TradeTally") -> "TradeTally":
        """Combine two tallies; TradeTally() is the identity."""
        return TradeTally(
            count=self.count + other.count,
            target_hits=self.target_hits + other.target_hits,
            stop_loss_hits=self.stop_loss_hits + other.stop_loss_hits,
            stop_loss_failures=self.stop_loss_failures + other.stop_loss_failures,
            timeouts=self.timeouts + other.timeouts,
            successes=self.successes + other.successes,
            sum_return=self.sum_return + other.sum_return,
            sum_squares=self.sum_squares + other.sum_squares,
            downside_squares=self.downside_squares + other.downside_squares,
            downside_count=self.downside_count + other.downside_count,
            gross_profit=self.gross_profit + other.gross_profit,
            gross_loss=self.gross_loss + other.gross_loss,
            wins=self.wins + other.wins,
            losses=self.losses + other.losses,
            max_return=max(self.max_return, other.max_return),
            min_return=min(self.min_return, other.min_return),
            sum_hold_days=self.sum_hold_days + other.sum_hold_days,
        )

    def metrics(self, ordered_returns: Optional[Sequence[float]] = None) -> "PerformanceMetrics":
        """
        Derive performance metrics.

        Args:
            ordered_returns: Realized returns in canonical trade order, for the
                drawdown-family metrics. When omitted those stay at 0.
        """
        if self.count == 0:
            return PerformanceMetrics()

        n = self.count
        win_rate = self.wins / n
        avg_win = self.gross_profit / self.wins if self.wins else 0.0
        avg_loss = -self.gross_loss / self.losses if self.losses else 0.0

        if ordered_returns is not None and len(ordered_returns) > 0:
            drawdown = stats.max_drawdown(ordered_returns)
            calmar = stats.calmar_ratio(ordered_returns)
            cumulative = stats.cumulative_return(ordered_returns)
        else:
            drawdown, calmar, cumulative = 0.0, 0.0, 0.0

        return PerformanceMetrics(
            total_trades=n,
            success_rate=self.successes / n,
            target_hit_rate=self.target_hits / n,
            stop_loss_rate=(self.stop_loss_hits + self.stop_loss_failures) / n,
            stop_loss_fail_rate=self.stop_loss_failures / n,
            timeout_rate=self.timeouts / n,
            avg_return=self.sum_return / n,
            max_return=self.max_return,
            min_return=self.min_return,
            avg_hold_days=self.sum_hold_days / n,
            sharpe_ratio=stats.sharpe_from_moments(n, self.sum_return, self.sum_squares),
            sortino_ratio=stats.sortino_from_moments(
                n, self.sum_return, self.downside_squares, self.downside_count
            ),
            calmar_ratio=calmar,
            max_drawdown=drawdown,
            cumulative_return=cumulative,
            profit_factor=stats.profit_factor(self.gross_profit, self.gross_loss),
            expectancy=stats.expectancy(win_rate, avg_win, avg_loss),
        )


@dataclass(frozen=True)
class PerformanceMetrics:
    """
    Summary of one combination's trades.

    Rates are fractions of total_trades. Returns are fractions (0.02 == +2%).
    stop_loss_rate counts both StopLossHit and StopLossFailure;
    stop_loss_fail_rate counts StopLossFailure alone.
    """
    total_trades: int = 0
    success_rate: float = 0.0
    target_hit_rate: float = 0.0
    stop_loss_rate: float = 0.0
    stop_loss_fail_rate: float = 0.0
    timeout_rate: float = 0.0
    avg_return: float = 0.0
    max_return: float = 0.0
    min_return: float = 0.0  # Largest loss (reported as max_loss)
    avg_hold_days: float = 0.0
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0
    calmar_ratio: float = 0.0
    max_drawdown: float = 0.0
    cumulative_return: float = 0.0
    profit_factor: float = 0.0  # inf with gains and no losses
    expectancy: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def compute_metrics(trades: Sequence[Trade]) -> PerformanceMetrics:
    """Metrics for a trade collection (any order)."""
    ordered = sorted(trades, key=Trade.sort_key)
    return TradeTally.from_trades(ordered).metrics([t.realized_return for t in ordered])


@dataclass(frozen=True)
class BacktestResult:
    """All trades of one (selector, signal, target) combination plus derived metrics."""
    selector_id: str
    signal_id: str
    target_id: str
    trades: Tuple[Trade, ...]
    offsets: Tuple[int, ...]
    tally: TradeTally = field(default_factory=TradeTally)
    metrics: PerformanceMetrics = field(default_factory=PerformanceMetrics)

    @classmethod
    def build(
        cls,
        selector_id: str,
        signal_id: str,
        target_id: str,
        trades: Iterable[Trade],
        offsets: Iterable[int],
    ) -> "BacktestResult":
        """Sort trades canonically and derive tally and metrics."""
        ordered = tuple(sorted(trades, key=Trade.sort_key))
        tally = TradeTally.from_trades(ordered)
        return cls(
            selector_id=selector_id,
            signal_id=signal_id,
            target_id=target_id,
            trades=ordered,
            offsets=tuple(sorted(offsets)),
            tally=tally,
            metrics=tally.metrics([t.realized_return for t in ordered]),
        )

    @property
    def total_trades(self) -> int:
        return len(self.trades)

    def to_dict(self, include_trades: bool = True) -> dict:
        data = {
            "selector_id": self.selector_id,
            "signal_id": self.signal_id,
            "target_id": self.target_id,
            "offsets": list(self.offsets),
            "metrics": self.metrics.to_dict(),
        }
        if include_trades:
            data["trades"] = [t.to_dict() for t in self.trades]
        return data


def trades_by_outcome(trades: Iterable[Trade]) -> Dict[TradeOutcome, List[Trade]]:
    """Group trades by outcome (every outcome key present)."""
    grouped: Dict[TradeOutcome, List[Trade]] = {outcome: [] for outcome in TradeOutcome}
    for trade in trades:
        grouped[trade.outcome].append(trade)
    return grouped
