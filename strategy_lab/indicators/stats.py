"""
Summary statistics over per-trade (or per-period) returns.

Used both by selectors and by the final performance report. Returns are plain
fractions (0.02 == +2%). Ratio metrics never raise on a zero denominator:

- sharpe_ratio: 0.0 when the standard deviation is zero
- sortino_ratio: inf when there is no downside and the mean is positive, else 0.0
- calmar_ratio: inf when there is no drawdown and the mean is positive, else 0.0
- profit_factor: inf when there are gains but no losses, 0.0 when neither
"""
import math
import numpy as np
from typing import Sequence

# Variances below this are treated as zero (float noise from sum-of-squares)
VARIANCE_EPSILON = 1e-12


def cumulative_return(returns: Sequence[float]) -> float:
    """Compounded return of applying each return in order."""
    if len(returns) == 0:
        return 0.0
    return float(np.prod(1.0 + np.asarray(returns, dtype=float)) - 1.0)


def max_drawdown(returns: Sequence[float]) -> float:
    """
    Largest peak-to-trough decline of the compounded equity curve.

    Returned as a positive fraction (0.25 == 25% below the running peak).
    The curve starts at 1.0, so a loss on the first return counts.
    """
    if len(returns) == 0:
        return 0.0
    equity = np.cumprod(1.0 + np.asarray(returns, dtype=float))
    equity = np.concatenate(([1.0], equity))
    peaks = np.maximum.accumulate(equity)
    drawdowns = (peaks - equity) / peaks
    return float(drawdowns.max())


def sharpe_from_moments(count: int, total: float, total_squares: float, risk_free: float = 0.0) -> float:
    """Sharpe ratio from count, sum and sum of squares (population std)."""
    if count == 0:
        return 0.0
    mean = total / count
    variance = total_squares / count - mean * mean
    if variance <= VARIANCE_EPSILON:
        return 0.0
    return (mean - risk_free) / math.sqrt(variance)


def sharpe_ratio(returns: Sequence[float], risk_free: float = 0.0) -> float:
    """(mean - risk_free) / population std of returns."""
    arr = np.asarray(returns, dtype=float)
    return sharpe_from_moments(len(arr), float(arr.sum()), float((arr * arr).sum()), risk_free)


def sortino_from_moments(
    count: int,
    total: float,
    downside_squares: float,
    downside_count: int,
    risk_free: float = 0.0,
) -> float:
    """Sortino ratio from sub-totals; downside deviation over negative returns only."""
    if count == 0:
        return 0.0
    excess = total / count - risk_free
    if downside_count == 0 or downside_squares <= 0:
        return math.inf if excess > 0 else 0.0
    return excess / math.sqrt(downside_squares / downside_count)


def sortino_ratio(returns: Sequence[float], risk_free: float = 0.0) -> float:
    """(mean - risk_free) / downside deviation of the negative excess returns."""
    arr = np.asarray(returns, dtype=float)
    downside = arr[arr - risk_free < 0] - risk_free
    return sortino_from_moments(
        len(arr),
        float(arr.sum()),
        float((downside * downside).sum()),
        len(downside),
        risk_free,
    )


def calmar_ratio(returns: Sequence[float], risk_free: float = 0.0) -> float:
    """Mean excess return divided by the maximum drawdown."""
    if len(returns) == 0:
        return 0.0
    excess = float(np.mean(returns)) - risk_free
    drawdown = max_drawdown(returns)
    if drawdown == 0:
        return math.inf if excess > 0 else 0.0
    return excess / drawdown


def profit_factor(gross_profit: float, gross_loss: float) -> float:
    """Gross gains / gross losses (both as positive numbers)."""
    if gross_loss > 0:
        return gross_profit / gross_loss
    return math.inf if gross_profit > 0 else 0.0


def expectancy(win_rate: float, avg_win: float, avg_loss: float) -> float:
    """Expected return per trade; avg_loss is negative."""
    return win_rate * avg_win + (1.0 - win_rate) * avg_loss
