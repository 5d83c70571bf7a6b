"""
Stock selectors.

Each selector scores symbols as of an evaluation day and returns the top
candidates in a deterministic order:
- Trend: AtrSelector, MacdSelector
- Reversal: BreakthroughPullbackSelector, RsiSelector
- Volume: VolumeDeclineSelector
"""
from .base import Selector, evaluation_position
from .trend import AtrSelector, MacdSelector
from .reversal import BreakthroughPullbackSelector, RsiSelector
from .volume import VolumeDeclineSelector

__all__ = [
    'Selector',
    'evaluation_position',
    'AtrSelector',
    'MacdSelector',
    'BreakthroughPullbackSelector',
    'RsiSelector',
    'VolumeDeclineSelector',
]
