"""
Exit targets.

Decide the outcome of a trade from its entry onwards:
- ReturnTarget: take-profit / stop-loss / timeout
- GuardTarget: success when the stop holds for the whole period
- CombinedTarget: all constituents must succeed
"""
from .base import ExitTarget, PathTarget, stop_fill, target_fill
from .return_target import ReturnTarget
from .guard_target import GuardTarget
from .combined_target import CombinedTarget

__all__ = [
    'ExitTarget',
    'PathTarget',
    'stop_fill',
    'target_fill',
    'ReturnTarget',
    'GuardTarget',
    'CombinedTarget',
]
