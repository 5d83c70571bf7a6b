"""
Scorecard configuration.

Holds the selector/signal/target specs plus run, ranking, report and data
settings. Validation runs at construction time (fail fast with clear errors),
so a bad config never starts a simulation.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..shared.defaults import (
    BACK_DAYS, MIN_TRADES, BEST_N, SUCCESS_WEIGHT, RETURN_WEIGHT,
    RECOMMENDATIONS_PER_STRATEGY, MIN_BARS, EXCLUDED_PREFIXES,
)
from ..shared.errors import ConfigurationError, require_positive_int, require_non_negative

EXECUTORS = ("process", "thread")


@dataclass
class DataConfig:
    """Where bars come from and which symbols reach the pipeline."""
    data_dir: Optional[str] = None
    symbols: Optional[List[str]] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    min_bars: int = MIN_BARS
    excluded_prefixes: List[str] = field(default_factory=lambda: list(EXCLUDED_PREFIXES))
    min_avg_volume: Optional[float] = None

    def __post_init__(self):
        if isinstance(self.min_bars, bool) or not isinstance(self.min_bars, int) or self.min_bars < 0:
            raise ConfigurationError("data.min_bars", f"must be an integer >= 0, got {self.min_bars!r}")
        if self.min_avg_volume is not None:
            require_non_negative("data.min_avg_volume", self.min_avg_volume)
        self.excluded_prefixes = [str(p) for p in (self.excluded_prefixes or [])]


@dataclass
class ScorecardConfig:
    """Complete scorecard run configuration."""
    name: str = "scorecard"
    description: str = ""
    selectors: List[Dict[str, Any]] = field(default_factory=list)
    signals: List[Dict[str, Any]] = field(default_factory=list)
    targets: List[Dict[str, Any]] = field(default_factory=list)

    # Run
    back_days: int = BACK_DAYS
    max_workers: Optional[int] = None  # None = CPU count
    executor: str = "process"

    # Ranking
    min_trades: int = MIN_TRADES
    best_n: int = BEST_N
    success_weight: float = SUCCESS_WEIGHT
    return_weight: float = RETURN_WEIGHT

    # Report
    recommendations_per_strategy: int = RECOMMENDATIONS_PER_STRATEGY

    data: DataConfig = field(default_factory=DataConfig)

    def __post_init__(self):
        validate_config(self)


def validate_config(config: ScorecardConfig) -> None:
    """Validate structural parameters. Raises ConfigurationError naming the offending parameter."""
    for section in ("selectors", "signals", "targets"):
        specs = getattr(config, section)
        if not isinstance(specs, list) or not specs:
            raise ConfigurationError(section, "must be a non-empty list")

    require_positive_int("back_days", config.back_days)
    if config.max_workers is not None:
        require_positive_int("max_workers", config.max_workers)
    if config.executor not in EXECUTORS:
        raise ConfigurationError("executor", f"must be one of {EXECUTORS}, got {config.executor!r}")

    if isinstance(config.min_trades, bool) or not isinstance(config.min_trades, int) or config.min_trades < 0:
        raise ConfigurationError("min_trades", f"must be an integer >= 0, got {config.min_trades!r}")
    require_positive_int("best_n", config.best_n)
    require_non_negative("success_weight", config.success_weight)
    require_non_negative("return_weight", config.return_weight)
    if config.success_weight + config.return_weight == 0:
        raise ConfigurationError("success_weight", "success_weight and return_weight cannot both be 0")

    if isinstance(config.recommendations_per_strategy, bool) or not isinstance(
        config.recommendations_per_strategy, int
    ) or config.recommendations_per_strategy < 0:
        raise ConfigurationError(
            "recommendations_per_strategy",
            f"must be an integer >= 0, got {config.recommendations_per_strategy!r}",
        )
