"""
Tests for selectors: no look-ahead, deterministic ordering, history handling and scoring rules.
"""
import numpy as np
import pandas as pd
import pytest

from strategy_lab.data.synthetic import synthetic_universe, trending_frame
from strategy_lab.selectors import (
    AtrSelector,
    BreakthroughPullbackSelector,
    MacdSelector,
    RsiSelector,
    VolumeDeclineSelector,
)
from strategy_lab.shared.errors import ConfigurationError


def make_frame(closes, volumes, spread=0.01, start="2024-01-01"):
    closes = np.asarray(closes, dtype=float)
    index = pd.bdate_range(start=start, periods=len(closes), name="Date")
    return pd.DataFrame({
        "Open": closes,
        "High": closes * (1 + spread),
        "Low": closes * (1 - spread),
        "Close": closes,
        "Volume": np.asarray(volumes, dtype=float),
    }, index=index)


class _FixedPair:
    """Stands in for an indicator whose last two values are known."""

    def __init__(self, prev, current, min_history=2):
        self.pair = (prev, current)
        self.min_history = min_history

    def last_two(self, data):
        return self.pair


@pytest.fixture
def universe():
    return synthetic_universe(n_symbols=8, days=200, seed=11)


ALL_SELECTORS = [
    AtrSelector(top_n=5),
    MacdSelector(top_n=5),
    RsiSelector(top_n=5, oversold=45),
    BreakthroughPullbackSelector(top_n=5, min_breakthrough_percent=2.0),
    VolumeDeclineSelector(top_n=5, min_consecutive_decline_days=1, check_support_level=False),
]


class TestSelectorContract:
    """Rules shared by every selector."""

    @pytest.mark.parametrize("selector", ALL_SELECTORS, ids=lambda s: s.kind)
    def test_no_look_ahead(self, selector, universe):
        """Rewriting bars after the evaluation day leaves the selection unchanged."""
        offset = 5
        before = selector.select(universe, offset)

        altered = {}
        for symbol in universe:
            frame = universe[symbol].copy()
            frame.iloc[-offset:] = frame.iloc[-offset:] * 3.0
            altered[symbol] = frame
        after = selector.select(altered, offset)

        assert after == before

    @pytest.mark.parametrize("selector", ALL_SELECTORS, ids=lambda s: s.kind)
    def test_sorted_and_truncated(self, selector, universe):
        candidates = selector.select(universe, 3)
        assert len(candidates) <= selector.top_n
        keys = [(-c.score, c.symbol) for c in candidates]
        assert keys == sorted(keys)
        for candidate in candidates:
            frame = universe[candidate.symbol]
            assert candidate.evaluation_position == len(frame) - 1 - 3
            assert candidate.evaluation_date == frame.index[candidate.evaluation_position]

    def test_ties_break_by_symbol(self):
        frame = trending_frame(150, 0.01, wick=0.01)
        universe = {"ZZZ": frame, "AAA": frame.copy(), "MMM": frame.copy()}
        candidates = AtrSelector(top_n=2).select(universe, 0)
        assert [c.symbol for c in candidates] == ["AAA", "MMM"]
        assert candidates[0].score == candidates[1].score

    def test_short_symbols_skipped(self):
        universe = {
            "LONG": trending_frame(150, 0.01, wick=0.01),
            "SHORT": trending_frame(20, 0.01, wick=0.01),
        }
        candidates = AtrSelector().select(universe, 0)
        assert [c.symbol for c in candidates] == ["LONG"]

    def test_offset_beyond_history(self):
        universe = {"ONLY": trending_frame(150, 0.01, wick=0.01)}
        assert AtrSelector().select(universe, 149) == []

    def test_negative_offset_rejected(self, universe):
        with pytest.raises(ValueError):
            AtrSelector().select(universe, -1)

    def test_candidate_carries_indicators(self):
        universe = {"UP": trending_frame(150, 0.01, wick=0.01)}
        candidate = AtrSelector().select(universe, 0)[0]
        assert set(candidate.indicators) == {"atr_pct", "volume_ratio", "trend"}


class TestAtrSelector:
    """Weighted ATR / volume / trend score."""

    def test_score_components(self):
        frame = trending_frame(150, 0.01, wick=0.01)
        selector = AtrSelector(atr_weight=0.0, volume_weight=0.0, trend_weight=1.0)
        candidate = selector.select({"UP": frame}, 0)[0]
        expected = frame["Close"].iloc[-1] / frame["Close"].iloc[-100] - 1.0
        assert candidate.score == pytest.approx(expected)

    def test_stronger_trend_ranks_first(self):
        universe = {
            "SLOW": trending_frame(150, 0.002, wick=0.01),
            "FAST": trending_frame(150, 0.01, wick=0.01),
        }
        candidates = AtrSelector().select(universe, 0)
        assert candidates[0].symbol == "FAST"

    def test_all_zero_weights_rejected(self):
        with pytest.raises(ConfigurationError) as exc:
            AtrSelector(atr_weight=0, volume_weight=0, trend_weight=0)
        assert exc.value.parameter == "atr_weight"

    def test_id_includes_parameters(self):
        assert AtrSelector(top_n=3, lookback_days=50).id.startswith("atr(")
        assert "lookback_days=50" in AtrSelector(lookback_days=50).id
        assert AtrSelector(name="custom").id == "custom"


class TestMacdSelector:
    """Histogram turn scoring."""

    def _score(self, prev, current):
        selector = MacdSelector()
        selector._macd = _FixedPair(prev, current)
        return selector.score(pd.DataFrame())

    def test_cross_above_zero(self):
        assert self._score(-0.2, 0.1)[0] == 100.0

    def test_rising(self):
        assert self._score(0.1, 0.3)[0] == pytest.approx(52.0)

    def test_falling_is_ineligible(self):
        assert self._score(0.3, 0.1) is None

    def test_fast_must_be_below_slow(self):
        with pytest.raises(ConfigurationError):
            MacdSelector(fast=26, slow=12)


class TestRsiSelector:
    """Oversold scoring."""

    def test_leaving_oversold(self):
        selector = RsiSelector()
        selector._rsi = _FixedPair(25.0, 28.0)
        score, values = selector.score(pd.DataFrame())
        assert score == pytest.approx(100.0 - 28.0 + 3.0 * 5.0)
        assert values == {"rsi": 28.0, "rsi_prev": 25.0}

    def test_still_oversold_on_falling_series(self):
        frame = trending_frame(40, -0.01)
        candidate = RsiSelector().select({"DOWN": frame}, 0)[0]
        # No gains at all: RSI is 0
        assert candidate.score == pytest.approx(50.0)

    def test_not_oversold_is_ineligible(self):
        frame = trending_frame(40, 0.01)
        assert RsiSelector().select({"UP": frame}, 0) == []

    def test_oversold_bounds(self):
        with pytest.raises(ConfigurationError):
            RsiSelector(oversold=120)


class TestBreakthroughPullbackSelector:
    """Breakout followed by a low-volume pullback."""

    @staticmethod
    def _setup(last_volume):
        closes = [10.0] * 15 + [10.6, 10.5, 10.4]
        volumes = [1000.0] * 15 + [3000.0, 1000.0, last_volume]
        return make_frame(closes, volumes)

    def test_pullback_scored(self):
        candidate = BreakthroughPullbackSelector().select({"BRK": self._setup(900.0)}, 0)[0]
        pullback = (10.6 - 10.4) / 10.6 * 100.0
        assert candidate.indicators["breakthrough_percent"] == pytest.approx(6.0)
        assert candidate.indicators["pullback_percent"] == pytest.approx(pullback)
        assert candidate.score == pytest.approx(6.0 - pullback)

    def test_heavy_pullback_volume_rejected(self):
        assert BreakthroughPullbackSelector().select({"BRK": self._setup(2500.0)}, 0) == []

    def test_no_breakout(self):
        frame = make_frame([10.0] * 18, [1000.0] * 18)
        assert BreakthroughPullbackSelector().select({"FLAT": frame}, 0) == []

    def test_close_above_breakout_is_not_a_pullback(self):
        closes = [10.0] * 15 + [10.6, 10.7, 10.8]
        volumes = [1000.0] * 15 + [3000.0, 1000.0, 900.0]
        assert BreakthroughPullbackSelector().select({"UP": make_frame(closes, volumes)}, 0) == []

    def test_lookback_minimum(self):
        with pytest.raises(ConfigurationError):
            BreakthroughPullbackSelector(lookback_days=1)


class TestVolumeDeclineSelector:
    """Consecutive volume declines near support."""

    @staticmethod
    def _frame(tail_volumes):
        frame = trending_frame(40, 0.0, wick=0.02)
        volumes = [1000.0] * (40 - len(tail_volumes)) + list(tail_volumes)
        frame["Volume"] = volumes
        return frame

    def test_three_declines_selected(self):
        candidate = VolumeDeclineSelector().select({"DRY": self._frame([800.0, 600.0, 450.0])}, 0)[0]
        assert candidate.indicators["decline_days"] == 3.0
        assert candidate.indicators["support_ratio"] == pytest.approx(0.02)
        assert candidate.score == pytest.approx(0.02)

    def test_two_declines_not_enough(self):
        assert VolumeDeclineSelector().select({"DRY": self._frame([800.0, 600.0])}, 0) == []

    def test_small_declines_do_not_count(self):
        # Each drop is only 5%, below the 10% minimum
        assert VolumeDeclineSelector().select({"DRY": self._frame([950.0, 902.5, 857.4])}, 0) == []

    def test_far_from_support_rejected(self):
        frame = self._frame([800.0, 600.0, 450.0])
        frame.iloc[-1, frame.columns.get_loc("Close")] = 106.0
        frame.iloc[-1, frame.columns.get_loc("High")] = 107.0
        assert VolumeDeclineSelector().select({"DRY": frame}, 0) == []
        assert len(VolumeDeclineSelector(check_support_level=False).select({"DRY": frame}, 0)) == 1

    def test_parameter_validation(self):
        with pytest.raises(ConfigurationError):
            VolumeDeclineSelector(lookback_days=3, min_consecutive_decline_days=3)
        with pytest.raises(ConfigurationError):
            VolumeDeclineSelector(min_volume_decline_ratio=1.0)
