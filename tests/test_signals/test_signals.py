"""
Tests for signal generators: entry timing, price rules, limit fills and gated predicates.
"""
import pandas as pd
import pytest

from strategy_lab.signals import (
    BottomReverseSignal,
    CloseSignal,
    LimitPriceSignal,
    OpenSignal,
    VolumeDeclineSignal,
    VolumeSurgeSignal,
)
from strategy_lab.shared.errors import ConfigurationError
from strategy_lab.shared.types import Candidate


def make_bars(rows):
    """rows: list of (open, high, low, close, volume)."""
    index = pd.bdate_range(start="2024-03-01", periods=len(rows), name="Date")
    return pd.DataFrame(rows, columns=["Open", "High", "Low", "Close", "Volume"], index=index, dtype=float)


def candidate_at(frame, position, symbol="TEST"):
    return Candidate(symbol=symbol, score=1.0, evaluation_position=position,
                     evaluation_date=frame.index[position])


@pytest.fixture
def bars():
    return make_bars([
        (10.0, 10.5, 9.5, 10.0, 1000),
        (10.0, 10.8, 9.9, 10.5, 1200),
        (10.6, 11.0, 10.2, 10.8, 1500),
        (10.7, 10.9, 10.4, 10.6, 1100),
    ])


class TestPriceRuleSignals:
    """Next-bar close / open entries."""

    def test_close_enters_next_bar(self, bars):
        signals = CloseSignal().generate([candidate_at(bars, 1)], {"TEST": bars})
        assert len(signals) == 1
        signal = signals[0]
        assert signal.entry_position == 2
        assert signal.entry_date == bars.index[2]
        assert signal.entry_price == 10.8
        assert signal.reference_price == 10.5
        assert signal.evaluation_position == 1

    def test_open_enters_next_bar(self, bars):
        signal = OpenSignal().generate([candidate_at(bars, 1)], {"TEST": bars})[0]
        assert signal.entry_price == 10.6

    def test_entry_always_after_evaluation(self, bars):
        candidates = [candidate_at(bars, p) for p in range(3)]
        for generator in (CloseSignal(), OpenSignal(), LimitPriceSignal(1.0)):
            for signal in generator.generate(candidates, {"TEST": bars}):
                assert signal.entry_position > signal.evaluation_position

    def test_no_next_bar_skipped(self, bars):
        assert CloseSignal().generate([candidate_at(bars, 3)], {"TEST": bars}) == []

    def test_order_follows_candidates(self, bars):
        universe = {"AAA": bars, "BBB": bars}
        candidates = [candidate_at(bars, 1, "BBB"), candidate_at(bars, 1, "AAA")]
        assert [s.symbol for s in CloseSignal().generate(candidates, universe)] == ["BBB", "AAA"]

    def test_quote_is_evaluation_close(self, bars):
        assert CloseSignal().quote(candidate_at(bars, 3), bars) == 10.6

    def test_ids(self):
        assert CloseSignal().id == "close"
        assert OpenSignal(name="at open").id == "at open"


class TestLimitPriceSignal:
    """Limit order at a fraction of the evaluation close."""

    def test_triggers_when_low_reaches_limit(self, bars):
        # Limit 10.8 * 0.97 = 10.476; next low 10.4
        signal = LimitPriceSignal(0.97).generate([candidate_at(bars, 2)], {"TEST": bars})[0]
        assert signal.entry_price == pytest.approx(10.476)
        assert signal.reference_price == 10.8

    def test_not_triggered_above_limit(self, bars):
        # Limit 10.8 * 0.95 = 10.26; next low 10.4
        assert LimitPriceSignal(0.95).generate([candidate_at(bars, 2)], {"TEST": bars}) == []

    def test_gap_below_limit_fills_at_open(self):
        frame = make_bars([
            (10.0, 10.2, 9.8, 10.0, 1000),
            (9.0, 9.5, 8.8, 9.2, 1000),
        ])
        signal = LimitPriceSignal(0.98).generate([candidate_at(frame, 0)], {"TEST": frame})[0]
        assert signal.entry_price == 9.0

    def test_quote(self, bars):
        assert LimitPriceSignal(0.98).quote(candidate_at(bars, 3), bars) == pytest.approx(10.6 * 0.98)

    def test_invalid_ratio(self):
        with pytest.raises(ConfigurationError):
            LimitPriceSignal(0)
        with pytest.raises(ConfigurationError):
            LimitPriceSignal("0.98")


class TestBottomReverseSignal:
    """Two-bar reversal predicate."""

    @pytest.fixture
    def reversal(self):
        return make_bars([
            (10.0, 10.6, 9.9, 10.5, 1000),   # up day, body 0.5
            (10.7, 10.8, 9.8, 9.9, 1500),    # opens above 10.5, closes below 10.0, body 0.8
            (9.9, 10.3, 9.7, 10.2, 1200),
        ])

    def test_triggers(self, reversal):
        signal = BottomReverseSignal().generate([candidate_at(reversal, 1)], {"TEST": reversal})[0]
        assert signal.entry_price == 10.2

    def test_open_price_rule(self, reversal):
        signal = BottomReverseSignal(price_rule="open").generate([candidate_at(reversal, 1)], {"TEST": reversal})[0]
        assert signal.entry_price == 9.9

    def test_small_body_rejected(self, reversal):
        assert BottomReverseSignal(min_body_ratio=2.0).generate(
            [candidate_at(reversal, 1)], {"TEST": reversal}) == []

    def test_pattern_absent(self, reversal):
        assert BottomReverseSignal().generate([candidate_at(reversal, 0)], {"TEST": reversal}) == []

    def test_quote_respects_trigger(self, reversal):
        assert BottomReverseSignal().quote(candidate_at(reversal, 1), reversal) == 9.9
        assert BottomReverseSignal().quote(candidate_at(reversal, 2), reversal) is None

    def test_bad_price_rule(self):
        with pytest.raises(ConfigurationError) as exc:
            BottomReverseSignal(price_rule="vwap")
        assert exc.value.parameter == "price_rule"


class TestVolumeSignals:
    """Volume surge and volume decline gates."""

    @staticmethod
    def _with_volumes(volumes, closes=None):
        closes = closes or [10.0 + 0.1 * i for i in range(len(volumes))]
        rows = [(c, c * 1.01, c * 0.99, c, v) for c, v in zip(closes, volumes)]
        return make_bars(rows)

    def test_surge_triggers(self):
        frame = self._with_volumes([1000, 1000, 1000, 1000, 1000, 2500, 1000])
        signals = VolumeSurgeSignal().generate([candidate_at(frame, 5)], {"TEST": frame})
        assert len(signals) == 1
        assert signals[0].entry_position == 6

    def test_surge_too_small(self):
        frame = self._with_volumes([1000, 1000, 1000, 1000, 1000, 1500, 1000])
        assert VolumeSurgeSignal().generate([candidate_at(frame, 5)], {"TEST": frame}) == []

    def test_surge_price_filter(self):
        closes = [10.0, 10.1, 10.2, 10.3, 10.4, 10.2, 10.5]
        frame = self._with_volumes([1000, 1000, 1000, 1000, 1000, 2500, 1000], closes)
        assert VolumeSurgeSignal().generate([candidate_at(frame, 5)], {"TEST": frame}) == []
        assert len(VolumeSurgeSignal(price_filter=False).generate([candidate_at(frame, 5)], {"TEST": frame})) == 1

    def test_surge_needs_history(self):
        frame = self._with_volumes([1000, 1000, 5000, 1000])
        assert VolumeSurgeSignal(average_days=5).generate([candidate_at(frame, 2)], {"TEST": frame}) == []

    def test_decline_triggers(self):
        frame = self._with_volumes([1000, 1000, 800, 640, 500, 900])
        signals = VolumeDeclineSignal().generate([candidate_at(frame, 4)], {"TEST": frame})
        assert len(signals) == 1

    def test_decline_interrupted(self):
        frame = self._with_volumes([1000, 1000, 800, 790, 500, 900])
        assert VolumeDeclineSignal().generate([candidate_at(frame, 4)], {"TEST": frame}) == []

    def test_decline_price_filter(self):
        closes = [10.0, 10.0, 9.8, 9.6, 9.4, 9.5]
        frame = self._with_volumes([1000, 1000, 800, 640, 500, 900], closes)
        assert VolumeDeclineSignal().generate([candidate_at(frame, 4)], {"TEST": frame}) == []
        assert len(VolumeDeclineSignal(price_filter=False).generate(
            [candidate_at(frame, 4)], {"TEST": frame})) == 1
