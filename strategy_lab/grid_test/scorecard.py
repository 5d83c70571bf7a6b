"""
Scorecard: backtests every selector x signal x target combination and ranks them.

Each combination is an independent unit of work that reads the shared,
read-only universe and returns its own BacktestResult. Results are placed by
combination index, so the ranking is identical whether the combinations ran
sequentially, on threads or on processes, and in whatever order they finished.
"""
import itertools
import logging
import multiprocessing
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .config import ScorecardConfig, EXECUTORS
from .registry import build_selectors, build_signals, build_targets
from ..evaluation.engine import BacktestEngine, evaluation_offsets
from ..evaluation.result import BacktestResult, PerformanceMetrics
from ..selectors.base import Selector
from ..signals.base import SignalGenerator
from ..targets.base import ExitTarget
from ..shared.defaults import BACK_DAYS, MIN_TRADES, BEST_N, SUCCESS_WEIGHT, RETURN_WEIGHT
from ..shared.errors import ConfigurationError, require_positive_int, require_non_negative

logger = logging.getLogger(__name__)

Triple = Tuple[Selector, SignalGenerator, ExitTarget]

# Universe shared with process-pool workers (set once per worker by the initializer)
_WORKER_UNIVERSE: Optional[Mapping[str, pd.DataFrame]] = None


def _init_worker(universe: Mapping[str, pd.DataFrame]) -> None:
    global _WORKER_UNIVERSE
    _WORKER_UNIVERSE = universe


def _run_triple_worker(args: tuple) -> Tuple[int, BacktestResult]:
    """
    Worker function for one combination.

    This is a module-level function so it can be pickled for ProcessPoolExecutor.

    Args:
        args: Tuple of (index, selector, signal_generator, target, offsets, universe).
              universe is None in process workers (taken from the initializer).
    """
    index, selector, signal_generator, target, offsets, universe = args
    if universe is None:
        universe = _WORKER_UNIVERSE
    result = BacktestEngine().run(universe, selector, signal_generator, target, offsets)
    return index, result


@dataclass(frozen=True)
class ScorecardEntry:
    """One combination's backtest result and composite score (None = unranked)."""
    selector_id: str
    signal_id: str
    target_id: str
    result: BacktestResult
    score: Optional[float]
    selector: Selector = field(compare=False, repr=False)
    signal_generator: SignalGenerator = field(compare=False, repr=False)
    target: ExitTarget = field(compare=False, repr=False)

    @property
    def ranked(self) -> bool:
        return self.score is not None

    @property
    def metrics(self) -> PerformanceMetrics:
        return self.result.metrics

    @property
    def sort_key(self):
        return (-self.score, self.selector_id, self.signal_id, self.target_id)


@dataclass(frozen=True)
class ScorecardResult:
    """All entries in combination order, the ranked order, and the best-N indices."""
    entries: Tuple[ScorecardEntry, ...]
    ranking: Tuple[int, ...]
    best_indices: Tuple[int, ...]

    @property
    def best_entries(self) -> List[ScorecardEntry]:
        return [self.entries[i] for i in self.best_indices]

    @property
    def unranked_indices(self) -> Tuple[int, ...]:
        return tuple(i for i, entry in enumerate(self.entries) if not entry.ranked)


class Scorecard:
    """Runs and ranks the full selector x signal x target grid."""

    def __init__(
        self,
        selectors: Sequence[Selector],
        signals: Sequence[SignalGenerator],
        targets: Sequence[ExitTarget],
        back_days: int = BACK_DAYS,
        min_trades: int = MIN_TRADES,
        best_n: int = BEST_N,
        success_weight: float = SUCCESS_WEIGHT,
        return_weight: float = RETURN_WEIGHT,
        max_workers: Optional[int] = None,
        executor: str = "process",
    ):
        """
        Args:
            selectors: Selector instances (non-empty)
            signals: Signal generator instances (non-empty)
            targets: Exit target instances (non-empty)
            back_days: Number of evaluation offsets per combination
            min_trades: Combinations with fewer trades stay unranked
            best_n: Number of best combinations to report
            success_weight: Composite-score weight of the success rate
            return_weight: Composite-score weight of the average return
            max_workers: Parallel workers (default: CPU count); 1 = sequential
            executor: "process" or "thread"
        """
        for section, items in (("selectors", selectors), ("signals", signals), ("targets", targets)):
            if not items:
                raise ConfigurationError(section, "must contain at least one entry")
        self.selectors = list(selectors)
        self.signals = list(signals)
        self.targets = list(targets)
        self.back_days = require_positive_int("back_days", back_days)
        if isinstance(min_trades, bool) or not isinstance(min_trades, int) or min_trades < 0:
            raise ConfigurationError("min_trades", f"must be an integer >= 0, got {min_trades!r}")
        self.min_trades = min_trades
        self.best_n = require_positive_int("best_n", best_n)
        self.success_weight = require_non_negative("success_weight", success_weight)
        self.return_weight = require_non_negative("return_weight", return_weight)
        if max_workers is not None:
            require_positive_int("max_workers", max_workers)
        self.max_workers = max_workers
        if executor not in EXECUTORS:
            raise ConfigurationError("executor", f"must be one of {EXECUTORS}, got {executor!r}")
        self.executor = executor

    @classmethod
    def from_config(cls, config: ScorecardConfig, max_workers: Optional[int] = None) -> "Scorecard":
        """Build all components from a validated config (raises ConfigurationError on bad specs)."""
        return cls(
            selectors=build_selectors(config.selectors),
            signals=build_signals(config.signals),
            targets=build_targets(config.targets),
            back_days=config.back_days,
            min_trades=config.min_trades,
            best_n=config.best_n,
            success_weight=config.success_weight,
            return_weight=config.return_weight,
            max_workers=max_workers if max_workers is not None else config.max_workers,
            executor=config.executor,
        )

    def triples(self) -> List[Triple]:
        """Every combination, selector-major order."""
        return list(itertools.product(self.selectors, self.signals, self.targets))

    def composite_score(self, metrics: PerformanceMetrics) -> Optional[float]:
        """
        Weighted success rate and average return.

        None (unranked) for combinations with no trades or fewer than min_trades.
        """
        if metrics.total_trades == 0 or metrics.total_trades < self.min_trades:
            return None
        return self.success_weight * metrics.success_rate + self.return_weight * metrics.avg_return

    def _worker_count(self, n_jobs: int) -> int:
        workers = self.max_workers if self.max_workers is not None else (multiprocessing.cpu_count() or 1)
        return max(1, min(workers, n_jobs))

    def _execute(self, universe: Mapping[str, pd.DataFrame], triples: List[Triple]) -> Dict[int, BacktestResult]:
        jobs = [
            (index, selector, signal, target, evaluation_offsets(target.in_days, self.back_days))
            for index, (selector, signal, target) in enumerate(triples)
        ]
        workers = self._worker_count(len(jobs))
        results: Dict[int, BacktestResult] = {}

        if workers <= 1:
            for job in jobs:
                index, result = _run_triple_worker(job + (universe,))
                results[index] = result
            return results

        logger.info("Running %d combinations on %d %s workers", len(jobs), workers, self.executor)
        if self.executor == "thread":
            pool = ThreadPoolExecutor(max_workers=workers)
            submitted = [job + (universe,) for job in jobs]
        else:
            pool = ProcessPoolExecutor(
                max_workers=workers,
                mp_context=multiprocessing.get_context("spawn"),
                initializer=_init_worker,
                initargs=(universe,),
            )
            submitted = [job + (None,) for job in jobs]

        with pool as executor:
            futures = [executor.submit(_run_triple_worker, args) for args in submitted]
            completed = 0
            for future in as_completed(futures):
                index, result = future.result()
                results[index] = result
                completed += 1
                logger.debug("[%d/%d] combination %d done (%d trades)",
                             completed, len(jobs), index, result.total_trades)
        return results

    def run(self, universe: Mapping[str, pd.DataFrame]) -> ScorecardResult:
        """
        Backtest every combination and rank them.

        Combinations with zero trades (or fewer than min_trades) are kept in
        ``entries`` but excluded from ``ranking`` and ``best_indices``.
        """
        triples = self.triples()
        logger.info(
            "Scorecard: %d selectors x %d signals x %d targets = %d combinations over %d symbols",
            len(self.selectors), len(self.signals), len(self.targets), len(triples), len(universe),
        )
        results = self._execute(universe, triples)

        entries = []
        for index, (selector, signal, target) in enumerate(triples):
            result = results[index]
            entries.append(ScorecardEntry(
                selector_id=selector.id,
                signal_id=signal.id,
                target_id=target.id,
                result=result,
                score=self.composite_score(result.metrics),
                selector=selector,
                signal_generator=signal,
                target=target,
            ))

        ranked = [i for i, entry in enumerate(entries) if entry.ranked]
        ranking = tuple(sorted(ranked, key=lambda i: entries[i].sort_key + (i,)))
        best = ranking[:self.best_n]
        logger.info("Ranked %d of %d combinations; best: %s", len(ranking), len(entries), list(best))
        return ScorecardResult(entries=tuple(entries), ranking=ranking, best_indices=best)
