"""
Read-only collection of per-symbol price frames.

The universe is built once at process start (loaded from CSV, downloaded, or
synthesized) and handed to every pipeline stage. Stages only read from it.
"""
import logging
from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, List, Optional

import pandas as pd

from ..shared.defaults import MIN_BARS, EXCLUDED_PREFIXES
from ..shared.types import OHLCV_COLUMNS

logger = logging.getLogger(__name__)


class DataLoadError(Exception):
    """Raised when price data cannot be read or is structurally invalid."""
    pass


def prepare_frame(symbol: str, frame: pd.DataFrame) -> pd.DataFrame:
    """
    Validate and normalise one symbol's OHLCV frame.

    - Requires Open/High/Low/Close/Volume columns
    - Drops duplicate dates (keep last), sorts by date and drops rows with missing prices
    - Drops bars whose high is below their low
    - Returns a new frame with only the OHLCV columns as floats

    Raises:
        DataLoadError: If columns are missing or the index is not date-like
    """
    missing = [col for col in OHLCV_COLUMNS if col not in frame.columns]
    if missing:
        raise DataLoadError(f"{symbol}: missing columns {missing}")

    df = frame.loc[:, list(OHLCV_COLUMNS)].copy()
    if not isinstance(df.index, pd.DatetimeIndex):
        try:
            df.index = pd.to_datetime(df.index)
        except (TypeError, ValueError) as e:
            raise DataLoadError(f"{symbol}: index is not date-like ({e})") from e

    df = df[~df.index.duplicated(keep="last")]
    df = df.sort_index()
    df = df.astype(float)
    df = df.dropna(subset=["Open", "High", "Low", "Close"])
    inverted = df["High"] < df["Low"]
    if inverted.any():
        logger.warning("%s: dropping %d bars with high below low", symbol, int(inverted.sum()))
        df = df[~inverted].copy()
    df["Volume"] = df["Volume"].fillna(0.0)
    df.index.name = "Date"
    return df


class MarketUniverse(Mapping):
    """
    Immutable mapping of symbol -> validated OHLCV frame.

    Iteration is in sorted symbol order so every consumer sees the same order.
    Frames are returned as-is; callers must not modify them.
    """

    def __init__(self, frames: Dict[str, pd.DataFrame]):
        prepared = {}
        for symbol in sorted(frames):
            prepared[symbol] = prepare_frame(symbol, frames[symbol])
        self._frames = prepared

    def __getitem__(self, symbol: str) -> pd.DataFrame:
        return self._frames[symbol]

    def __iter__(self) -> Iterator[str]:
        return iter(self._frames)

    def __len__(self) -> int:
        return len(self._frames)

    def __repr__(self) -> str:
        return f"MarketUniverse({len(self)} symbols)"

    @property
    def symbols(self) -> List[str]:
        return list(self._frames)

    def frame(self, symbol: str) -> pd.DataFrame:
        return self._frames[symbol]

    def latest_date(self) -> Optional[pd.Timestamp]:
        """Most recent bar date across all symbols (None when empty)."""
        dates = [df.index[-1] for df in self._frames.values() if len(df)]
        return max(dates) if dates else None

    def filter(
        self,
        min_bars: int = MIN_BARS,
        excluded_prefixes: Iterable[str] = EXCLUDED_PREFIXES,
        min_avg_volume: Optional[float] = None,
        symbols: Optional[Iterable[str]] = None,
    ) -> "MarketUniverse":
        """Return a new universe without illiquid, short or excluded symbols."""
        return filter_universe(self, min_bars, excluded_prefixes, min_avg_volume, symbols)


def filter_universe(
    universe: Mapping,
    min_bars: int = MIN_BARS,
    excluded_prefixes: Iterable[str] = EXCLUDED_PREFIXES,
    min_avg_volume: Optional[float] = None,
    symbols: Optional[Iterable[str]] = None,
) -> MarketUniverse:
    """
    Exclude symbols before they reach the pipeline.

    Args:
        universe: Mapping of symbol -> OHLCV frame
        min_bars: Minimum number of bars a symbol needs
        excluded_prefixes: Symbol prefixes to drop (e.g. board codes)
        min_avg_volume: Optional minimum average daily volume
        symbols: Optional allow-list of symbols

    Returns:
        A new MarketUniverse
    """
    prefixes = tuple(excluded_prefixes or ())
    allowed = set(symbols) if symbols is not None else None
    kept = {}
    for symbol in sorted(universe):
        frame = universe[symbol]
        if allowed is not None and symbol not in allowed:
            continue
        if prefixes and symbol.startswith(prefixes):
            logger.debug("Excluding %s: prefix filter", symbol)
            continue
        if len(frame) < min_bars:
            logger.debug("Excluding %s: %d bars < %d", symbol, len(frame), min_bars)
            continue
        if min_avg_volume is not None and frame["Volume"].mean() < min_avg_volume:
            logger.debug("Excluding %s: average volume below %s", symbol, min_avg_volume)
            continue
        kept[symbol] = frame
    logger.info("Universe filter kept %d of %d symbols", len(kept), len(universe))
    return MarketUniverse(kept)
