"""Shared types, defaults and errors used across the strategy lab packages."""
from .errors import ConfigurationError
from .types import (
    Bar,
    Candidate,
    Signal,
    Trade,
    TradeOutcome,
    OHLCV_COLUMNS,
    component_id,
    frame_to_bars,
)

__all__ = [
    "Bar",
    "Candidate",
    "ConfigurationError",
    "Signal",
    "Trade",
    "TradeOutcome",
    "OHLCV_COLUMNS",
    "component_id",
    "frame_to_bars",
]
