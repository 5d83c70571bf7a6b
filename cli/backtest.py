#!/usr/bin/env python3
"""
Single combination backtest CLI.

Runs one selector / signal / target combination from a scorecard config and
lists its trades, which is handy when a scorecard row needs a closer look.
"""
import argparse
import sys
from pathlib import Path

from cli.scorecard import load_universe, setup_logging
from strategy_lab.data import DataLoadError
from strategy_lab.evaluation import BacktestEngine, evaluation_offsets, trades_by_outcome
from strategy_lab.grid_test import (
    ScorecardReporter,
    build_selectors,
    build_signals,
    build_targets,
    load_scorecard_config,
)
from strategy_lab.shared.errors import ConfigurationError


def _pick(items, index, section):
    if not 0 <= index < len(items):
        raise ConfigurationError(section, f"index {index} out of range (config has {len(items)})")
    return items[index]


def print_trades(trades, limit: int):
    print("-" * 100)
    print(f"{'Symbol':<10} {'Entry':<11} {'Entry $':>9} {'Exit':<11} {'Exit $':>9} "
          f"{'Outcome':<18} {'Days':>4} {'Return':>8}")
    print("-" * 100)
    for trade in trades[:limit]:
        print(f"{trade.symbol:<10} "
              f"{trade.entry_date.strftime('%Y-%m-%d'):<11} "
              f"{trade.entry_price:>9.3f} "
              f"{trade.exit_date.strftime('%Y-%m-%d'):<11} "
              f"{trade.exit_price:>9.3f} "
              f"{trade.outcome.value:<18} "
              f"{trade.holding_days:>4} "
              f"{trade.realized_return * 100:>+7.2f}%")
    if len(trades) > limit:
        print(f"... {len(trades) - limit} more")


def main():
    parser = argparse.ArgumentParser(
        description="Backtest one selector/signal/target combination and list its trades",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # First selector, signal and target of the config
    python -m cli.backtest --config configs/scorecard.yaml --data-dir data/stocks

    # Second selector with the limit signal (third signal entry), 30 offsets
    python -m cli.backtest --selector 1 --signal 2 --target 0 --back-days 30 --synthetic
        """
    )
    parser.add_argument("--config", "-c", default="configs/scorecard.yaml",
                        help="Scorecard YAML config (default: configs/scorecard.yaml)")
    parser.add_argument("--data-dir", default=None,
                        help="Directory with one <SYMBOL>.csv per symbol (overrides data.data_dir)")
    parser.add_argument("--synthetic", action="store_true",
                        help="Use a seeded synthetic universe instead of CSV data")
    parser.add_argument("--selector", type=int, default=0,
                        help="Index into the expanded selectors list (default: 0)")
    parser.add_argument("--signal", type=int, default=0,
                        help="Index into the expanded signals list (default: 0)")
    parser.add_argument("--target", type=int, default=0,
                        help="Index into the expanded targets list (default: 0)")
    parser.add_argument("--back-days", type=int, default=None,
                        help="Number of evaluation offsets (default: config value)")
    parser.add_argument("--workers", type=int, default=1,
                        help="Threads across offsets (default: 1)")
    parser.add_argument("--limit", type=int, default=50,
                        help="Trades to print (default: 50)")
    parser.add_argument("--trades-csv", default=None,
                        help="Write all trades to this CSV file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logging(verbose=args.verbose)

    try:
        config = load_scorecard_config(args.config)
        selector = _pick(build_selectors(config.selectors), args.selector, "selectors")
        signal = _pick(build_signals(config.signals), args.signal, "signals")
        target = _pick(build_targets(config.targets), args.target, "targets")
        back_days = args.back_days if args.back_days is not None else config.back_days
        offsets = evaluation_offsets(target.in_days, back_days)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        return 1
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return 2
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    print("=" * 80)
    print("SINGLE COMBINATION BACKTEST")
    print("=" * 80)
    print(f"Selector: {selector.name}  [{selector.id}]")
    print(f"Signal:   {signal.name}  [{signal.id}]")
    print(f"Target:   {target.describe()}  [{target.id}]")
    print(f"Offsets:  {offsets[0]}..{offsets[-1]} bars before the latest bar")
    print()

    try:
        universe = load_universe(config, args.data_dir, args.synthetic)
    except DataLoadError as e:
        print(f"Error loading data: {e}")
        return 1

    result = BacktestEngine(max_workers=args.workers).run(universe, selector, signal, target, offsets)
    m = result.metrics

    print("\n" + "=" * 80)
    print("RESULTS")
    print("=" * 80)
    print(f"Symbols: {len(universe)}")
    print(f"Total Trades: {m.total_trades}")
    if m.total_trades == 0:
        print("No trades; nothing else to report.")
        return 0

    grouped = trades_by_outcome(result.trades)
    for outcome, trades in grouped.items():
        print(f"  {outcome.value:<18} {len(trades):>5}")
    print(f"Success Rate: {m.success_rate * 100:.1f}%")
    print(f"Avg Return: {m.avg_return * 100:+.2f}%  (max {m.max_return * 100:+.2f}%, "
          f"min {m.min_return * 100:+.2f}%)")
    print(f"Avg Hold: {m.avg_hold_days:.1f} days")
    print(f"Sharpe: {m.sharpe_ratio:.2f}  Sortino: {m.sortino_ratio:.2f}  "
          f"Max Drawdown: {m.max_drawdown * 100:.2f}%")
    print()
    print_trades(list(result.trades), args.limit)

    if args.trades_csv:
        path = Path(args.trades_csv)
        ScorecardReporter(path.parent).save_trades_csv(result, path.name)
        print(f"\nTrades CSV saved: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
