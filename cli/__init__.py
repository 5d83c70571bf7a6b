"""
Command-line entry points.

- scorecard: backtest and rank every configured combination, write the dashboard JSON
- backtest: run a single combination and list its trades
- download: fill the per-symbol CSV cache
"""
