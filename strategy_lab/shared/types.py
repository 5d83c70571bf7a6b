"""
Shared value types for the evaluation pipeline.

Every stage produces new frozen values for the next one:
bars -> Candidate -> Signal -> Trade. Nothing here is mutated after creation.
"""
import pandas as pd
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, List, Mapping, Optional

# Column layout of every price frame handed to the pipeline
OHLCV_COLUMNS = ("Open", "High", "Low", "Close", "Volume")


def component_id(kind: str, params: Mapping[str, Any]) -> str:
    """Stable identifier for a configured component, e.g. ``atr(top_n=10)``."""
    if not params:
        return kind
    rendered = ",".join(f"{key}={_format_param(value)}" for key, value in params.items())
    return f"{kind}({rendered})"


def _format_param(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    if isinstance(value, (list, tuple)):
        return "[" + ";".join(_format_param(v) for v in value) + "]"
    return str(value)


class TradeOutcome(Enum):
    """Terminal state of a simulated trade."""
    TARGET_HIT = "target_hit"
    STOP_LOSS_HIT = "stop_loss_hit"
    STOP_LOSS_FAILURE = "stop_loss_failure"  # Stop breached beyond the failure tolerance
    TIMEOUT = "timeout"

    @property
    def severity(self) -> int:
        """Adversity rank used when several exits disagree (higher = worse)."""
        return _SEVERITY[self]


_SEVERITY = {
    TradeOutcome.TARGET_HIT: 0,
    TradeOutcome.TIMEOUT: 1,
    TradeOutcome.STOP_LOSS_HIT: 2,
    TradeOutcome.STOP_LOSS_FAILURE: 3,
}


@dataclass(frozen=True)
class Bar:
    """One trading day of one symbol."""
    date: pd.Timestamp
    open: float
    high: float
    low: float
    close: float
    volume: float

    def __post_init__(self):
        if self.high < self.low:
            raise ValueError(f"Bar {self.date}: high ({self.high}) below low ({self.low})")

    @classmethod
    def from_row(cls, timestamp: pd.Timestamp, row: pd.Series) -> "Bar":
        return cls(
            date=pd.Timestamp(timestamp),
            open=float(row["Open"]),
            high=float(row["High"]),
            low=float(row["Low"]),
            close=float(row["Close"]),
            volume=float(row["Volume"]),
        )


def frame_to_bars(frame: pd.DataFrame) -> List[Bar]:
    """Bars of an OHLCV frame in date order."""
    return [Bar.from_row(timestamp, row) for timestamp, row in frame.iterrows()]


@dataclass(frozen=True)
class Candidate:
    """
    A symbol ranked by a selector as of one evaluation day.

    ``evaluation_position`` is the positional index of the evaluation day in the
    symbol's full frame; the selector only saw bars up to and including it.
    """
    symbol: str
    score: float
    evaluation_position: int
    evaluation_date: pd.Timestamp
    indicators: Mapping[str, float] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "indicators", MappingProxyType(dict(self.indicators)))


@dataclass(frozen=True)
class Signal:
    """A concrete entry event derived from a Candidate."""
    symbol: str
    entry_position: int
    entry_date: pd.Timestamp
    entry_price: float
    evaluation_position: int
    reference_price: Optional[float] = None  # e.g. the close a limit order was priced from

    def __post_init__(self):
        if self.entry_position <= self.evaluation_position:
            raise ValueError(
                f"Signal for {self.symbol}: entry position ({self.entry_position}) must be after "
                f"evaluation position ({self.evaluation_position})"
            )
        if not self.entry_price > 0:
            raise ValueError(f"Signal for {self.symbol}: entry price must be > 0, got {self.entry_price}")


@dataclass(frozen=True)
class Trade:
    """One complete simulated entry-to-exit cycle."""
    symbol: str
    entry_date: pd.Timestamp
    entry_price: float
    exit_date: pd.Timestamp
    exit_price: float
    outcome: TradeOutcome
    holding_days: int
    realized_return: float
    success: bool

    def sort_key(self):
        """Canonical order used wherever trade order matters (drawdown, reports)."""
        return (self.entry_date, self.symbol, self.exit_date, self.outcome.value, self.realized_return)

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "entry_date": self.entry_date.strftime("%Y-%m-%d"),
            "entry_price": self.entry_price,
            "exit_date": self.exit_date.strftime("%Y-%m-%d"),
            "exit_price": self.exit_price,
            "outcome": self.outcome.value,
            "holding_days": self.holding_days,
            "realized_return": self.realized_return,
            "success": self.success,
        }
