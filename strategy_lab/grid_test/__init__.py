"""
Scorecard (grid test) module.

Runs every selector x signal x target combination through the backtest
engine, ranks them by a composite score and writes reports.
"""
from .config import ScorecardConfig, DataConfig, validate_config
from .config_loader import load_scorecard_config, config_from_dict
from .registry import build_selectors, build_signals, build_targets, expand_spec
from .scorecard import Scorecard, ScorecardEntry, ScorecardResult
from .report import ScorecardReporter, build_report, build_recommendations

__all__ = [
    'ScorecardConfig',
    'DataConfig',
    'validate_config',
    'load_scorecard_config',
    'config_from_dict',
    'build_selectors',
    'build_signals',
    'build_targets',
    'expand_spec',
    'Scorecard',
    'ScorecardEntry',
    'ScorecardResult',
    'ScorecardReporter',
    'build_report',
    'build_recommendations',
]
