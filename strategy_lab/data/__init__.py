"""
Data collaborator: loads, filters and serves per-symbol OHLCV frames.

The pipeline never fetches data itself; it receives a MarketUniverse.
"""
from .universe import MarketUniverse, DataLoadError, filter_universe, prepare_frame
from .loader import list_available_symbols, load_symbol_csv, load_universe_from_dir
from .synthetic import trending_frame, random_walk_frame, synthetic_universe

__all__ = [
    'MarketUniverse',
    'DataLoadError',
    'filter_universe',
    'prepare_frame',
    'list_available_symbols',
    'load_symbol_csv',
    'load_universe_from_dir',
    'trending_frame',
    'random_walk_frame',
    'synthetic_universe',
]
