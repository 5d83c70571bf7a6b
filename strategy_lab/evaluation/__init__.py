"""
Backtest evaluation.

- BacktestEngine: walk-forward simulation of one selector/signal/target combination
- TradeTally / PerformanceMetrics / BacktestResult: result types and metrics
"""
from .engine import BacktestEngine, evaluation_offsets, simulate_offset
from .result import (
    BacktestResult,
    PerformanceMetrics,
    TradeTally,
    compute_metrics,
    trades_by_outcome,
)

__all__ = [
    'BacktestEngine',
    'evaluation_offsets',
    'simulate_offset',
    'BacktestResult',
    'PerformanceMetrics',
    'TradeTally',
    'compute_metrics',
    'trades_by_outcome',
]
