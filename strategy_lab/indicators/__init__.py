"""
Indicator calculation module.

Provides the technical indicators (moving averages, ATR, RSI, MACD, bands,
channels, oscillators) and the return statistics used by performance reports.
Undefined values are NaN in series and None in point lookups.
"""
from .base import Indicator
from .technical import (
    sma,
    ema,
    wilder,
    macd,
    rsi,
    true_range,
    atr,
    standard_deviation,
    bollinger_bands,
    keltner_channel,
    stochastic,
    momentum,
)
from .implementations import (
    EMAIndicator,
    ATRIndicator,
    RSIIndicator,
    MACDIndicator,
    StochasticIndicator,
    MomentumIndicator,
)
from .stats import (
    cumulative_return,
    max_drawdown,
    sharpe_ratio,
    sortino_ratio,
    calmar_ratio,
    profit_factor,
    expectancy,
)

__all__ = [
    'Indicator',
    'sma',
    'ema',
    'wilder',
    'macd',
    'rsi',
    'true_range',
    'atr',
    'standard_deviation',
    'bollinger_bands',
    'keltner_channel',
    'stochastic',
    'momentum',
    'EMAIndicator',
    'ATRIndicator',
    'RSIIndicator',
    'MACDIndicator',
    'StochasticIndicator',
    'MomentumIndicator',
    'cumulative_return',
    'max_drawdown',
    'sharpe_ratio',
    'sortino_ratio',
    'calmar_ratio',
    'profit_factor',
    'expectancy',
]
