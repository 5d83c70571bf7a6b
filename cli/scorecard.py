#!/usr/bin/env python3
"""
Scorecard CLI.

Backtests every selector x signal x target combination from a YAML config,
ranks them and writes the dashboard JSON (plus optional CSV and chart).
"""
import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from strategy_lab.data import DataLoadError, load_universe_from_dir, synthetic_universe
from strategy_lab.grid_test import (
    Scorecard,
    ScorecardReporter,
    build_report,
    load_scorecard_config,
)
from strategy_lab.grid_test.charts import generate_comparison_chart
from strategy_lab.shared.errors import ConfigurationError


def setup_logging(log_path: Optional[Path] = None, verbose: bool = False):
    """
    Setup logging to stdout and optionally to file.

    Args:
        log_path: Path to log file (None = stdout only)
        verbose: If True, use DEBUG level, otherwise INFO
    """
    level = logging.DEBUG if verbose else logging.INFO

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def load_universe(config, data_dir: Optional[str], synthetic: bool):
    """Universe for the run: synthetic demo data or the CSV directory, then filtered."""
    if synthetic:
        universe = synthetic_universe(n_symbols=30, days=300)
    else:
        directory = data_dir or config.data.data_dir
        if not directory:
            raise DataLoadError("No data directory given (use --data-dir or data.data_dir in the config)")
        universe = load_universe_from_dir(
            directory,
            symbols=config.data.symbols,
            start_date=config.data.start_date,
            end_date=config.data.end_date,
        )
    return universe.filter(
        min_bars=config.data.min_bars,
        excluded_prefixes=config.data.excluded_prefixes,
        min_avg_volume=config.data.min_avg_volume,
    )


def main():
    parser = argparse.ArgumentParser(
        description="Backtest and rank selector/signal/target combinations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Full scorecard from cached CSVs, dashboard JSON to docs/data/stocks.json
    python -m cli.scorecard --config configs/scorecard.yaml --data-dir data/stocks

    # Demo on synthetic data, sequential, with CSV summary and chart
    python -m cli.scorecard --synthetic --workers 1 --csv --chart
        """
    )
    parser.add_argument(
        "--config", "-c",
        default="configs/scorecard.yaml",
        help="Scorecard YAML config (default: configs/scorecard.yaml)",
    )
    parser.add_argument(
        "--data-dir",
        default=None,
        help="Directory with one <SYMBOL>.csv per symbol (overrides data.data_dir)",
    )
    parser.add_argument(
        "--synthetic",
        action="store_true",
        help="Use a seeded synthetic universe instead of CSV data",
    )
    parser.add_argument(
        "--output", "-o",
        default="docs/data/stocks.json",
        help="Dashboard JSON path (default: docs/data/stocks.json)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of parallel workers (default: config value, else CPU count)",
    )
    parser.add_argument(
        "--csv",
        action="store_true",
        help="Also write scorecard_results.csv next to the JSON",
    )
    parser.add_argument(
        "--chart",
        action="store_true",
        help="Also write scorecard_comparison.png next to the JSON",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=10,
        help="Rows in the printed summary (default: 10)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write logs to this file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging",
    )
    args = parser.parse_args()

    setup_logging(Path(args.log_file) if args.log_file else None, args.verbose)

    # Config and components are validated before any data is touched
    try:
        config = load_scorecard_config(args.config)
        scorecard = Scorecard.from_config(config, max_workers=args.workers)
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
    print(f"SCORECARD: {config.name}")
    print("=" * 80)
    if config.description:
        print(config.description)

    try:
        universe = load_universe(config, args.data_dir, args.synthetic)
    except DataLoadError as e:
        print(f"Error loading data: {e}")
        return 1
    if len(universe) == 0:
        print("No symbols left after filtering; nothing to evaluate.")
        return 1

    print(f"Symbols: {len(universe)}")
    print(f"Combinations: {len(scorecard.triples())}")
    print(f"Evaluation offsets per combination: {config.back_days}")
    print()

    start = time.time()
    result = scorecard.run(universe)
    elapsed = time.time() - start

    output_path = Path(args.output)
    reporter = ScorecardReporter(output_path.parent)
    reporter.print_summary(result, top_n=args.top)

    report = build_report(result, universe, config.recommendations_per_strategy)
    json_path = reporter.write_json(report, output_path.name)
    print(f"\nReport: {json_path}")

    if args.csv:
        print(f"Results CSV: {reporter.save_results_csv(result, 'scorecard_results.csv')}")
    if args.chart:
        chart = generate_comparison_chart(result, output_path.parent / "scorecard_comparison.png")
        print(f"Chart: {chart or 'skipped (nothing ranked)'}")

    print(f"Finished in {elapsed:.1f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
