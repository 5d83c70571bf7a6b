"""
Walk-forward backtest engine.

For every evaluation offset (N bars before each symbol's last bar) runs
selector -> signal generator -> exit target and collects the trades. Offsets
are independent units of work: each one reads the shared universe and returns
its own trade list; the lists are combined only at the end, in offset order,
so the thread pool's completion order never reaches the result.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Iterable, List, Mapping

import pandas as pd

from .result import BacktestResult
from ..selectors.base import Selector
from ..signals.base import SignalGenerator
from ..targets.base import ExitTarget
from ..shared.errors import ConfigurationError, require_positive_int
from ..shared.types import Trade

logger = logging.getLogger(__name__)


def evaluation_offsets(in_days: int, back_days: int) -> List[int]:
    """
    Offsets whose whole exit window still lies inside the data.

    Entry is one bar after the evaluation day and the exit walk needs
    ``in_days`` more bars, so the most recent usable offset is in_days + 1.
    """
    require_positive_int("in_days", in_days)
    require_positive_int("back_days", back_days)
    return list(range(in_days + 1, in_days + back_days + 1))


def simulate_offset(
    universe: Mapping[str, pd.DataFrame],
    selector: Selector,
    signal_generator: SignalGenerator,
    target: ExitTarget,
    offset: int,
) -> List[Trade]:
    """Run one evaluation offset end to end."""
    candidates = selector.select(universe, offset)
    signals = signal_generator.generate(candidates, universe)
    trades = []
    for signal in signals:
        trade = target.evaluate(signal, universe[signal.symbol])
        if trade is not None:
            trades.append(trade)
    logger.debug(
        "offset %d: %d candidates, %d signals, %d trades",
        offset, len(candidates), len(signals), len(trades),
    )
    return trades


def _validate_offsets(offsets: Iterable[int]) -> List[int]:
    values = list(offsets)
    if not values:
        raise ConfigurationError("evaluation_offsets", "must not be empty")
    for offset in values:
        if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
            raise ConfigurationError("evaluation_offsets", f"offsets must be integers >= 0, got {offset!r}")
    return sorted(set(values))


class BacktestEngine:
    """Runs one (selector, signal generator, exit target) combination over many offsets."""

    def __init__(self, max_workers: int = 1):
        """
        Args:
            max_workers: Thread pool size for offsets; 1 = sequential
        """
        self.max_workers = max(1, int(max_workers))

    def run(
        self,
        universe: Mapping[str, pd.DataFrame],
        selector: Selector,
        signal_generator: SignalGenerator,
        target: ExitTarget,
        evaluation_offsets: Iterable[int],
    ) -> BacktestResult:
        """
        Backtest one combination.

        Symbols too short for an offset are skipped for that offset; a combination
        that never trades returns a result with zero trades.

        Raises:
            ConfigurationError: If the offsets are empty or negative
        """
        offsets = _validate_offsets(evaluation_offsets)
        per_offset: Dict[int, List[Trade]] = {}

        if self.max_workers <= 1 or len(offsets) == 1:
            for offset in offsets:
                per_offset[offset] = simulate_offset(universe, selector, signal_generator, target, offset)
        else:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(offsets))) as executor:
                futures = {
                    executor.submit(simulate_offset, universe, selector, signal_generator, target, offset): offset
                    for offset in offsets
                }
                for future in as_completed(futures):
                    per_offset[futures[future]] = future.result()

        trades = [trade for offset in offsets for trade in per_offset[offset]]
        result = BacktestResult.build(
            selector_id=selector.id,
            signal_id=signal_generator.id,
            target_id=target.id,
            trades=trades,
            offsets=offsets,
        )
        logger.info(
            "%s | %s | %s: %d trades over %d offsets, success rate %.1f%%",
            selector.id, signal_generator.id, target.id,
            result.total_trades, len(offsets), result.metrics.success_rate * 100,
        )
        return result
