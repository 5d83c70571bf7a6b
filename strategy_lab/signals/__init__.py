"""
Signal generators.

Convert selector candidates into entry events on the bar after the
evaluation day:
- Price: CloseSignal, OpenSignal, LimitPriceSignal
- Pattern: BottomReverseSignal
- Volume: VolumeSurgeSignal, VolumeDeclineSignal
"""
from .base import SignalGenerator, PriceRuleSignal, PRICE_RULES
from .price import CloseSignal, OpenSignal, LimitPriceSignal
from .pattern import BottomReverseSignal
from .volume import VolumeSurgeSignal, VolumeDeclineSignal

__all__ = [
    'SignalGenerator',
    'PriceRuleSignal',
    'PRICE_RULES',
    'CloseSignal',
    'OpenSignal',
    'LimitPriceSignal',
    'BottomReverseSignal',
    'VolumeSurgeSignal',
    'VolumeDeclineSignal',
]
