"""
Deterministic synthetic price series.

Used for demos (``--synthetic``) and for tests that need known outcomes,
e.g. a strictly rising series where every reachable target is hit.
"""
import numpy as np
import pandas as pd
from typing import Dict, Optional

from .universe import MarketUniverse


def trending_frame(
    days: int,
    daily_change: float,
    start_price: float = 100.0,
    start_date: str = "2024-01-01",
    gap: float = 0.0,
    wick: float = 0.0,
    volume: float = 1_000_000.0,
    volume_change: float = 0.0,
) -> pd.DataFrame:
    """
    Build a series that moves by ``daily_change`` every bar.

    Each bar opens at the previous close times (1 + gap) and closes at
    open * (1 + daily_change). High/low are the body extremes widened by ``wick``.
    With gap = wick = 0 and daily_change > 0 the series never dips.
    """
    if days < 1:
        raise ValueError(f"days must be >= 1, got {days}")
    opens = np.empty(days)
    closes = np.empty(days)
    price = start_price
    for i in range(days):
        opens[i] = price * (1.0 + gap) if i else price
        closes[i] = opens[i] * (1.0 + daily_change)
        price = closes[i]
    highs = np.maximum(opens, closes) * (1.0 + wick)
    lows = np.minimum(opens, closes) * (1.0 - wick)
    volumes = volume * (1.0 + volume_change) ** np.arange(days)
    index = pd.bdate_range(start=start_date, periods=days, name="Date")
    return pd.DataFrame(
        {"Open": opens, "High": highs, "Low": lows, "Close": closes, "Volume": volumes},
        index=index,
    )


def random_walk_frame(
    days: int,
    seed: int,
    start_price: float = 50.0,
    drift: float = 0.0005,
    volatility: float = 0.02,
    start_date: str = "2024-01-01",
) -> pd.DataFrame:
    """Seeded geometric random walk with plausible OHLCV bars."""
    rng = np.random.default_rng(seed)
    returns = rng.normal(drift, volatility, size=days)
    closes = start_price * np.cumprod(1.0 + returns)
    opens = np.concatenate(([start_price], closes[:-1])) * (1.0 + rng.normal(0.0, volatility / 4, size=days))
    spread = np.abs(rng.normal(0.0, volatility / 2, size=days))
    highs = np.maximum(opens, closes) * (1.0 + spread)
    lows = np.minimum(opens, closes) * (1.0 - spread)
    volumes = rng.lognormal(mean=13.0, sigma=0.4, size=days).round()
    index = pd.bdate_range(start=start_date, periods=days, name="Date")
    return pd.DataFrame(
        {"Open": opens, "High": highs, "Low": lows, "Close": closes, "Volume": volumes},
        index=index,
    )


def synthetic_universe(
    n_symbols: int = 20,
    days: int = 250,
    seed: int = 7,
    start_date: str = "2024-01-01",
    symbols: Optional[list] = None,
) -> MarketUniverse:
    """Universe of seeded random walks named SYN000, SYN001, ..."""
    names = symbols or [f"SYN{i:03d}" for i in range(n_symbols)]
    frames: Dict[str, pd.DataFrame] = {}
    for offset, name in enumerate(names):
        frames[name] = random_walk_frame(days, seed=seed + offset, start_date=start_date)
    return MarketUniverse(frames)
