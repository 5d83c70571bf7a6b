"""
Tests for the scorecard: determinism across executors, ranking and unranked entries.
"""
import pytest

from strategy_lab.data.synthetic import synthetic_universe, trending_frame
from strategy_lab.evaluation.result import PerformanceMetrics
from strategy_lab.grid_test import Scorecard, config_from_dict
from strategy_lab.selectors import AtrSelector, BreakthroughPullbackSelector, RsiSelector
from strategy_lab.shared.errors import ConfigurationError
from strategy_lab.signals import CloseSignal, LimitPriceSignal
from strategy_lab.targets import GuardTarget, ReturnTarget


@pytest.fixture(scope="module")
def universe():
    return synthetic_universe(n_symbols=8, days=160, seed=5)


def make_scorecard(**kwargs):
    options = dict(
        selectors=[AtrSelector(top_n=3), RsiSelector(top_n=3, oversold=50)],
        signals=[CloseSignal(), LimitPriceSignal(0.99)],
        targets=[ReturnTarget(0.02, 0.02, 2), GuardTarget(0.03, 3)],
        back_days=6,
        min_trades=1,
        best_n=2,
    )
    options.update(kwargs)
    return Scorecard(**options)


class TestScorecardRun:
    """Running the full grid."""

    def test_selector_major_order(self, universe):
        scorecard = make_scorecard(max_workers=1)
        result = scorecard.run(universe)
        assert len(result.entries) == 8
        ids = [(e.selector_id, e.signal_id, e.target_id) for e in result.entries]
        expected = [(s.id, g.id, t.id) for s in scorecard.selectors
                    for g in scorecard.signals for t in scorecard.targets]
        assert ids == expected

    def test_thread_pool_matches_sequential(self, universe):
        sequential = make_scorecard(max_workers=1).run(universe)
        threaded = make_scorecard(max_workers=3, executor="thread").run(universe)
        assert threaded == sequential

    def test_process_pool_matches_sequential(self, universe):
        sequential = make_scorecard(max_workers=1).run(universe)
        parallel = make_scorecard(max_workers=2, executor="process").run(universe)
        assert parallel == sequential

    def test_repeated_runs_identical(self, universe):
        scorecard = make_scorecard(max_workers=1)
        assert scorecard.run(universe) == scorecard.run(universe)

    def test_ranking_order(self, universe):
        result = make_scorecard(max_workers=1).run(universe)
        scores = [result.entries[i].score for i in result.ranking]
        assert scores == sorted(scores, reverse=True)
        assert result.best_indices == result.ranking[:2]
        assert [e.selector_id for e in result.best_entries] == [
            result.entries[i].selector_id for i in result.best_indices
        ]

    def test_zero_trade_entries_unranked(self):
        # Smooth 1% days never produce a 5% breakout
        rising = {"UP1": trending_frame(150, 0.01), "UP2": trending_frame(150, 0.012)}
        scorecard = Scorecard(
            selectors=[AtrSelector(), BreakthroughPullbackSelector()],
            signals=[CloseSignal()],
            targets=[ReturnTarget(0.02, 0.01, 3)],
            back_days=5, min_trades=1, best_n=5, max_workers=1,
        )
        result = scorecard.run(rising)
        atr_entry, breakout_entry = result.entries
        assert atr_entry.ranked
        assert atr_entry.metrics.success_rate == 1.0
        assert breakout_entry.result.total_trades == 0
        assert breakout_entry.score is None
        assert result.ranking == (0,)
        assert result.best_indices == (0,)
        assert result.unranked_indices == (1,)

    def test_ties_break_by_ids(self):
        rising = {"UP": trending_frame(150, 0.01)}
        scorecard = Scorecard(
            selectors=[AtrSelector(name="b-atr"), AtrSelector(name="a-atr")],
            signals=[CloseSignal()],
            targets=[ReturnTarget(0.02, 0.01, 3)],
            back_days=5, min_trades=1, best_n=1, max_workers=1,
        )
        result = scorecard.run(rising)
        assert result.entries[0].score == result.entries[1].score
        assert result.ranking == (1, 0)
        assert result.best_entries[0].selector_id == "a-atr"


class TestCompositeScore:
    """Weighted success rate and average return."""

    def test_weights(self):
        scorecard = make_scorecard(min_trades=5)
        metrics = PerformanceMetrics(total_trades=10, success_rate=0.5, avg_return=0.01)
        assert scorecard.composite_score(metrics) == pytest.approx(0.7 * 0.5 + 0.3 * 0.01)

    def test_below_min_trades(self):
        scorecard = make_scorecard(min_trades=5)
        assert scorecard.composite_score(PerformanceMetrics(total_trades=4, success_rate=1.0)) is None

    def test_zero_trades_with_zero_minimum(self):
        scorecard = make_scorecard(min_trades=0)
        assert scorecard.composite_score(PerformanceMetrics()) is None


class TestScorecardConstruction:
    """Validation and config wiring."""

    def test_empty_components(self):
        with pytest.raises(ConfigurationError) as exc:
            make_scorecard(signals=[])
        assert exc.value.parameter == "signals"

    def test_invalid_executor(self):
        with pytest.raises(ConfigurationError):
            make_scorecard(executor="cluster")

    def test_invalid_workers(self):
        with pytest.raises(ConfigurationError):
            make_scorecard(max_workers=0)

    def test_from_config(self):
        config = config_from_dict({
            "run": {"back_days": 4, "max_workers": 3, "executor": "thread"},
            "ranking": {"min_trades": 2, "best_n": 3},
            "selectors": [{"type": "atr", "top_n": [3, 5]}],
            "signals": [{"type": "close"}, {"type": "open"}],
            "targets": [{"type": "guard", "stop_loss": 0.02, "in_days": 5}],
        })
        scorecard = Scorecard.from_config(config)
        assert len(scorecard.triples()) == 4
        assert scorecard.back_days == 4
        assert scorecard.max_workers == 3
        assert scorecard.executor == "thread"
        assert Scorecard.from_config(config, max_workers=1).max_workers == 1

    def test_from_config_rejects_bad_component(self):
        config = config_from_dict({
            "selectors": [{"type": "atr"}],
            "signals": [{"type": "limit", "price_ratio": -1}],
            "targets": [{"type": "guard", "stop_loss": 0.02, "in_days": 5}],
        })
        with pytest.raises(ConfigurationError) as exc:
            Scorecard.from_config(config)
        assert exc.value.parameter == "signals[0].price_ratio"
