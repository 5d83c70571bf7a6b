"""
Scorecard reporter.

Turns a ScorecardResult into the consumed report formats:
- JSON document for the stock dashboard (update_date, strategies[], best_combinations[])
- CSV summaries of all combinations and of individual trades
- console summary table
"""
import json
import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

import pandas as pd

from .scorecard import ScorecardEntry, ScorecardResult
from ..evaluation.result import BacktestResult
from ..shared.defaults import RECOMMENDATIONS_PER_STRATEGY

logger = logging.getLogger(__name__)

# Performance fields of the dashboard contract, in output order
PERFORMANCE_FIELDS = (
    "success_rate",
    "stop_loss_rate",
    "stop_loss_fail_rate",
    "avg_return",
    "max_return",
    "max_loss",
    "avg_hold_days",
    "sharpe_ratio",
    "max_drawdown",
)


def _json_number(value: float, digits: int = 6) -> Optional[float]:
    """Round for the report; non-finite values become null."""
    if value is None or not math.isfinite(value):
        return None
    return round(float(value), digits)


def build_performance(entry: ScorecardEntry) -> Dict[str, Optional[float]]:
    m = entry.metrics
    values = {
        "success_rate": m.success_rate,
        "stop_loss_rate": m.stop_loss_rate,
        "stop_loss_fail_rate": m.stop_loss_fail_rate,
        "avg_return": m.avg_return,
        "max_return": m.max_return,
        "max_loss": m.min_return,
        "avg_hold_days": m.avg_hold_days,
        "sharpe_ratio": m.sharpe_ratio,
        "max_drawdown": m.max_drawdown,
    }
    return {key: _json_number(values[key]) for key in PERFORMANCE_FIELDS}


def build_recommendations(
    entry: ScorecardEntry,
    universe: Mapping[str, pd.DataFrame],
    limit: int = RECOMMENDATIONS_PER_STRATEGY,
) -> List[dict]:
    """
    Current picks of one combination: its selector on the latest bar, priced by its signal.

    buy_price is the signal's indicative price at the latest close; target and
    stop prices follow the exit target's levels.
    """
    if limit <= 0:
        return []
    candidates = entry.selector.select(universe, 0)
    target = entry.target
    picks = []
    for candidate in candidates:
        frame = universe[candidate.symbol]
        buy_price = entry.signal_generator.quote(candidate, frame)
        if buy_price is None or not buy_price > 0:
            continue
        prev_close = float(frame["Close"].iloc[-2]) if len(frame) > 1 else None
        picks.append({
            "symbol": candidate.symbol,
            "score": _json_number(candidate.score),
            "buy_price": _json_number(buy_price, 4),
            "target_price": (_json_number(buy_price * (1.0 + target.target_return), 4)
                             if target.target_return is not None else None),
            "stop_loss_price": (_json_number(buy_price * (1.0 - target.stop_loss), 4)
                                if target.stop_loss is not None else None),
            "prev_close": _json_number(prev_close, 4) if prev_close is not None else None,
        })
        if len(picks) >= limit:
            break
    return picks


def build_report(
    result: ScorecardResult,
    universe: Mapping[str, pd.DataFrame],
    recommendations_per_strategy: int = RECOMMENDATIONS_PER_STRATEGY,
    update_date: Optional[str] = None,
) -> dict:
    """
    Dashboard report. ``strategies`` lists every combination in scorecard order;
    ``best_combinations`` holds indices into it.
    """
    if update_date is None:
        latest = max((df.index[-1] for df in universe.values() if len(df)), default=None)
        update_date = latest.strftime("%Y-%m-%d") if latest is not None else datetime.now().strftime("%Y-%m-%d")

    strategies = []
    for entry in result.entries:
        strategies.append({
            "strategy_name": entry.selector.name,
            "signal_name": entry.signal_generator.name,
            "target_name": entry.target.name,
            "selector_id": entry.selector_id,
            "signal_id": entry.signal_id,
            "target_id": entry.target_id,
            "total_trades": entry.metrics.total_trades,
            "score": _json_number(entry.score) if entry.ranked else None,
            "performance": build_performance(entry),
            "recommendations": build_recommendations(entry, universe, recommendations_per_strategy),
        })

    return {
        "update_date": update_date,
        "strategies": strategies,
        "best_combinations": list(result.best_indices),
    }


class ScorecardReporter:
    """Writes scorecard reports to an output directory and prints summaries."""

    def __init__(self, output_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the reporter.

        Args:
            output_dir: Directory for output files (default: current directory)
        """
        self.output_dir = Path(output_dir) if output_dir else Path.cwd()
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, filename: Optional[str], prefix: str, suffix: str) -> Path:
        if filename is None:
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            filename = f"{prefix}_{timestamp}{suffix}"
        return self.output_dir / filename

    def write_json(self, report: dict, filename: str = "stocks.json") -> Path:
        """Write the dashboard JSON (UTF-8, indented)."""
        output_path = self._path(filename, "scorecard", ".json")
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(report, f, ensure_ascii=False, indent=2)
        logger.info("Wrote report with %d strategies to %s", len(report.get("strategies", [])), output_path)
        return output_path

    def save_results_csv(self, result: ScorecardResult, filename: Optional[str] = None) -> Path:
        """One row per combination with all metrics, rank and score."""
        rank_of = {index: rank for rank, index in enumerate(result.ranking, start=1)}
        rows = []
        for index, entry in enumerate(result.entries):
            row = {
                "index": index,
                "rank": rank_of.get(index),
                "selector": entry.selector_id,
                "signal": entry.signal_id,
                "target": entry.target_id,
                "score": entry.score,
            }
            row.update(entry.metrics.to_dict())
            rows.append(row)
        output_path = self._path(filename, "scorecard_results", ".csv")
        pd.DataFrame(rows).to_csv(output_path, index=False)
        return output_path

    def save_trades_csv(self, result: BacktestResult, filename: Optional[str] = None) -> Path:
        """All trades of one combination in canonical order."""
        columns = ["symbol", "entry_date", "entry_price", "exit_date", "exit_price",
                   "outcome", "holding_days", "realized_return", "success"]
        df = pd.DataFrame([t.to_dict() for t in result.trades], columns=columns)
        output_path = self._path(filename, "scorecard_trades", ".csv")
        df.to_csv(output_path, index=False)
        return output_path

    def print_summary(self, result: ScorecardResult, top_n: int = 10) -> None:
        """Print the ranked combinations as a table."""
        print("\n" + "=" * 110)
        print("SCORECARD")
        print("=" * 110)
        print(f"Combinations: {len(result.entries)}  Ranked: {len(result.ranking)}  "
              f"Unranked (too few trades): {len(result.unranked_indices)}")

        if not result.ranking:
            print("No combination produced enough trades to rank.")
            return

        print("-" * 110)
        print(f"{'#':>3} {'Selector':<28} {'Signal':<20} {'Target':<30} {'Trades':>6} "
              f"{'Succ%':>6} {'Avg%':>6} {'PF':>5} {'Score':>6}")
        print("-" * 110)
        for rank, index in enumerate(result.ranking[:top_n], start=1):
            entry = result.entries[index]
            m = entry.metrics
            pf = "inf" if m.profit_factor == float('inf') else f"{m.profit_factor:.2f}"
            marker = "*" if index in result.best_indices else " "
            print(f"{rank:>2}{marker} "
                  f"{entry.selector.name[:28]:<28} "
                  f"{entry.signal_generator.name[:20]:<20} "
                  f"{entry.target.name[:30]:<30} "
                  f"{m.total_trades:>6} "
                  f"{m.success_rate * 100:>5.1f}% "
                  f"{m.avg_return * 100:>+5.2f}% "
                  f"{pf:>5} "
                  f"{entry.score:>6.3f}")
        print("-" * 110)
        print("* = best combination")
