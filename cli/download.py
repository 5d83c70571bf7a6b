#!/usr/bin/env python3
"""
Data download CLI.

Fills the per-symbol CSV cache that the scorecard reads.
"""
import argparse
import sys

from cli.scorecard import setup_logging
from strategy_lab.data.download import download_symbols
from strategy_lab.data.loader import list_available_symbols


def main():
    parser = argparse.ArgumentParser(
        description="Download daily bars into the per-symbol CSV cache",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Download two symbols
    python -m cli.download 600000.SS 000001.SZ --data-dir data/stocks

    # Extend every cached symbol up to today
    python -m cli.download --update --data-dir data/stocks
        """
    )
    parser.add_argument("symbols", nargs="*", help="Symbols to download")
    parser.add_argument("--data-dir", default="data/stocks",
                        help="CSV cache directory (default: data/stocks)")
    parser.add_argument("--start-date", default="2015-01-01",
                        help="First date for new symbols (default: 2015-01-01)")
    parser.add_argument("--update", action="store_true",
                        help="Also update every symbol already in the cache")
    parser.add_argument("--force-refresh", action="store_true",
                        help="Re-download full history instead of extending the cache")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logging(verbose=args.verbose)

    symbols = list(args.symbols)
    if args.update:
        symbols.extend(s for s in list_available_symbols(args.data_dir) if s not in symbols)
    if not symbols:
        parser.error("no symbols given (pass symbols or --update)")

    print(f"Downloading {len(symbols)} symbols into {args.data_dir}...")
    results = download_symbols(symbols, args.data_dir, start_date=args.start_date,
                               force_refresh=args.force_refresh)
    failed = [s for s in symbols if s not in results]
    print(f"\n✓ {len(results)} updated")
    if failed:
        print(f"✗ {len(failed)} failed: {', '.join(failed)}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
