"""
Tests for the Indicator classes: point lookups, undefined values, no look-ahead.
"""
import numpy as np
import pandas as pd
import pytest

from strategy_lab.indicators import (
    ATRIndicator,
    EMAIndicator,
    MACDIndicator,
    MomentumIndicator,
    RSIIndicator,
    StochasticIndicator,
)
from strategy_lab.data.synthetic import random_walk_frame


@pytest.fixture
def frame():
    return random_walk_frame(days=120, seed=3)


class TestPointLookups:
    """get_value_at / latest return floats or None, never NaN."""

    def test_short_history_is_none(self, frame):
        assert ATRIndicator(14).latest(frame.iloc[:5]) is None
        assert RSIIndicator(14).latest(frame.iloc[:14]) is None
        assert MACDIndicator().latest(frame.iloc[:30]) is None

    def test_defined_after_min_history(self, frame):
        for indicator in (ATRIndicator(14), RSIIndicator(14), MACDIndicator(),
                          EMAIndicator(10), StochasticIndicator(), MomentumIndicator(10)):
            value = indicator.latest(frame.iloc[:indicator.min_history])
            assert value is not None, type(indicator).__name__
            assert np.isfinite(value)

    def test_get_value_at_ignores_later_rows(self, frame):
        """Changing rows after the timestamp does not change the value."""
        indicator = RSIIndicator(14)
        timestamp = frame.index[60]
        before = indicator.get_value_at(frame, timestamp)

        altered = frame.copy()
        altered.iloc[61:, altered.columns.get_loc('Close')] *= 3
        assert indicator.get_value_at(altered, timestamp) == pytest.approx(before)

    def test_get_value_at_unknown_timestamp(self, frame):
        missing = frame.index[10] + pd.Timedelta(hours=1)
        assert EMAIndicator(5).get_value_at(frame, missing) is None


class TestIndicatorHelpers:
    """Test last_two and normalized helpers."""

    def test_last_two(self, frame):
        pair = MACDIndicator().last_two(frame)
        assert pair is not None
        histogram = MACDIndicator().calculate(frame)
        assert pair == pytest.approx((histogram.iloc[-2], histogram.iloc[-1]))

    def test_last_two_needs_one_extra_bar(self, frame):
        indicator = RSIIndicator(14)
        assert indicator.last_two(frame.iloc[:15]) is None
        assert indicator.last_two(frame.iloc[:16]) is not None

    def test_normalized_atr(self, frame):
        indicator = ATRIndicator(14)
        expected = indicator.latest(frame) / frame['Close'].iloc[-1]
        assert indicator.normalized(frame) == pytest.approx(expected)

    def test_macd_rejects_bad_periods(self):
        with pytest.raises(ValueError):
            MACDIndicator(fast=30, slow=20)
