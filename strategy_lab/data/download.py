"""Download daily bars from Yahoo Finance into the per-symbol CSV cache."""
import logging
import warnings
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

import pandas as pd
import yfinance as yf

from ..shared.types import OHLCV_COLUMNS

# Suppress yfinance's pandas deprecation warnings
warnings.filterwarnings('ignore', message='.*Timestamp.utcnow.*')

logger = logging.getLogger(__name__)


def _flatten_columns(df: pd.DataFrame) -> pd.DataFrame:
    """yfinance sometimes returns (field, ticker) MultiIndex columns."""
    if isinstance(df.columns, pd.MultiIndex):
        df = df.copy()
        df.columns = df.columns.get_level_values(0)
    return df


def download_symbol(
    symbol: str,
    data_dir: Union[str, Path],
    start_date: str = "2015-01-01",
    force_refresh: bool = False,
) -> Optional[pd.DataFrame]:
    """
    Download one symbol with incremental caching.

    A cached CSV is extended from its last date unless force_refresh is set.

    Returns:
        DataFrame with OHLCV data, or None if the download failed
    """
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    csv_file = data_dir / f"{symbol}.csv"

    cached = None
    download_start = start_date
    if csv_file.exists() and not force_refresh:
        cached = pd.read_csv(csv_file, index_col=0, parse_dates=True)
        if not cached.empty:
            download_start = (cached.index.max() + pd.Timedelta(days=1)).strftime('%Y-%m-%d')

    try:
        fresh = yf.download(symbol, start=download_start, progress=False, auto_adjust=False)
    except Exception as e:
        # yfinance surfaces network and parsing problems as assorted exception types
        logger.warning("Download failed for %s: %s", symbol, e)
        return cached

    if fresh is None or fresh.empty:
        if cached is None:
            logger.warning("No data returned for %s", symbol)
        return cached

    fresh = _flatten_columns(fresh)
    missing = [col for col in OHLCV_COLUMNS if col not in fresh.columns]
    if missing:
        logger.warning("Download for %s lacks columns %s", symbol, missing)
        return cached
    fresh = fresh.loc[:, list(OHLCV_COLUMNS)]

    if cached is not None and not cached.empty:
        df = pd.concat([cached, fresh]).sort_index()
        df = df[~df.index.duplicated(keep='last')]
    else:
        df = fresh

    df.to_csv(csv_file)
    logger.info("Saved %d rows for %s (%s to %s)", len(df), symbol, df.index.min().date(), df.index.max().date())
    return df


def download_symbols(
    symbols: Iterable[str],
    data_dir: Union[str, Path],
    start_date: str = "2015-01-01",
    force_refresh: bool = False,
) -> Dict[str, pd.DataFrame]:
    """Download several symbols; failures are logged and left out of the result."""
    results = {}
    for symbol in symbols:
        df = download_symbol(symbol, data_dir, start_date=start_date, force_refresh=force_refresh)
        if df is not None and not df.empty:
            results[symbol] = df
    logger.info("Downloaded %d symbols", len(results))
    return results
