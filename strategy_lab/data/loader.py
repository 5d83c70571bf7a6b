"""
CSV data loader: one file per symbol.

Files are named ``<SYMBOL>.csv`` with a date index column and
Open/High/Low/Close/Volume columns (the layout yfinance writes).
"""
import logging
import pandas as pd
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .universe import DataLoadError, MarketUniverse, prepare_frame

logger = logging.getLogger(__name__)


def list_available_symbols(data_dir: Union[str, Path]) -> List[str]:
    """Return sorted list of symbols in data_dir (CSV stems). Empty if dir missing."""
    data_dir = Path(data_dir)
    if not data_dir.exists():
        return []
    return sorted(p.stem for p in data_dir.glob("*.csv"))


def load_symbol_csv(
    csv_path: Union[str, Path],
    start_date: Optional[Union[str, pd.Timestamp]] = None,
    end_date: Optional[Union[str, pd.Timestamp]] = None,
) -> pd.DataFrame:
    """
    Load one symbol's bars from CSV with optional date filtering.

    Raises:
        FileNotFoundError: If the file doesn't exist
        DataLoadError: If the file can't be parsed
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Data file not found: {csv_path}")

    try:
        df = pd.read_csv(csv_path, index_col=0, parse_dates=True)
    except (ValueError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DataLoadError(f"Could not parse {csv_path}: {e}") from e

    if not isinstance(df.index, pd.DatetimeIndex):
        df.index = pd.to_datetime(df.index)
    df = df.sort_index()

    if start_date is not None:
        df = df[df.index >= pd.to_datetime(start_date)]
    if end_date is not None:
        df = df[df.index <= pd.to_datetime(end_date)]
    return df


def load_universe_from_dir(
    data_dir: Union[str, Path],
    symbols: Optional[Iterable[str]] = None,
    start_date: Optional[Union[str, pd.Timestamp]] = None,
    end_date: Optional[Union[str, pd.Timestamp]] = None,
) -> MarketUniverse:
    """
    Load every ``<SYMBOL>.csv`` in data_dir into a MarketUniverse.

    Unreadable files are logged and skipped; a missing directory raises.
    """
    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        raise DataLoadError(f"Data directory not found: {data_dir}")

    wanted = list(symbols) if symbols is not None else list_available_symbols(data_dir)
    frames = {}
    for symbol in wanted:
        try:
            frames[symbol] = prepare_frame(
                symbol, load_symbol_csv(data_dir / f"{symbol}.csv", start_date, end_date)
            )
        except (FileNotFoundError, DataLoadError) as e:
            logger.warning("Skipping %s: %s", symbol, e)
    logger.info("Loaded %d symbols from %s", len(frames), data_dir)
    return MarketUniverse(frames)
