"""
Base indicator interface.

All indicators follow this pattern:
1. Calculate a value series from an OHLCV frame
2. Report "undefined" (None) instead of a sentinel when history is too short
"""
from abc import ABC, abstractmethod
from typing import Optional
import pandas as pd


class Indicator(ABC):
    """
    Base class for all indicators.

    Indicators calculate values from price data that selectors and signal
    generators use for scoring. They never look past the last row they are given.
    """

    #: Minimum number of bars before the first defined value
    min_history: int = 1

    @abstractmethod
    def calculate(self, data: pd.DataFrame) -> pd.Series:
        """
        Calculate indicator values from price data.

        Args:
            data: OHLCV frame with datetime index

        Returns:
            Series with indicator values (same index as data), NaN where undefined
        """
        pass

    def get_value_at(self, data: pd.DataFrame, timestamp: pd.Timestamp) -> Optional[float]:
        """
        Get indicator value at a specific timestamp.

        Only rows up to and including ``timestamp`` are used.

        Returns:
            Indicator value at timestamp, or None if undefined
        """
        history = data.loc[:timestamp]
        if history.empty or history.index[-1] != timestamp:
            return None
        return self.latest(history)

    def latest(self, data: pd.DataFrame) -> Optional[float]:
        """Value on the last row of ``data``, or None if undefined."""
        if len(data) < self.min_history:
            return None
        values = self.calculate(data)
        value = values.iloc[-1]
        return None if pd.isna(value) else float(value)
