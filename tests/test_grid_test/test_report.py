"""
Tests for the dashboard report, CSV output, console summary and chart.
"""
import json
import math

import pandas as pd
import pytest

from strategy_lab.data.synthetic import trending_frame
from strategy_lab.grid_test import Scorecard, ScorecardReporter, build_recommendations, build_report
from strategy_lab.grid_test.charts import generate_comparison_chart
from strategy_lab.grid_test.report import PERFORMANCE_FIELDS, _json_number
from strategy_lab.selectors import AtrSelector, BreakthroughPullbackSelector
from strategy_lab.signals import CloseSignal, LimitPriceSignal
from strategy_lab.targets import GuardTarget, ReturnTarget


@pytest.fixture(scope="module")
def universe():
    return {
        "AAA": trending_frame(150, 0.01),
        "BBB": trending_frame(150, 0.005),
        "CCC": trending_frame(150, 0.015),
    }


@pytest.fixture(scope="module")
def result(universe):
    scorecard = Scorecard(
        selectors=[AtrSelector(top_n=2), BreakthroughPullbackSelector()],
        signals=[CloseSignal(), LimitPriceSignal(0.98)],
        targets=[ReturnTarget(0.02, 0.01, 3), GuardTarget(0.03, 3)],
        back_days=5, min_trades=1, best_n=2, max_workers=1,
    )
    return scorecard.run(universe)


class TestBuildReport:
    """Dashboard JSON structure."""

    def test_top_level_shape(self, result, universe):
        report = build_report(result, universe, recommendations_per_strategy=2)
        assert set(report) == {"update_date", "strategies", "best_combinations"}
        assert report["update_date"] == trending_frame(150, 0.01).index[-1].strftime("%Y-%m-%d")
        assert len(report["strategies"]) == len(result.entries)
        assert report["best_combinations"] == list(result.best_indices)

    def test_strategy_entries(self, result, universe):
        report = build_report(result, universe, 2, update_date="2024-06-28")
        assert report["update_date"] == "2024-06-28"
        first = report["strategies"][0]
        assert first["strategy_name"] == "ATR selector"
        assert first["signal_name"] == "Close price signal"
        assert first["target_name"] == "+2.0% within 3 days, stop -1.0%"
        assert list(first["performance"]) == list(PERFORMANCE_FIELDS)
        assert first["total_trades"] == 10
        assert first["performance"]["success_rate"] == 1.0

    def test_unranked_score_is_null(self, result, universe):
        report = build_report(result, universe, 0)
        for index in result.unranked_indices:
            assert report["strategies"][index]["score"] is None
            assert report["strategies"][index]["recommendations"] == []

    def test_json_serialisable_without_nan(self, result, universe):
        report = build_report(result, universe, 2)
        json.dumps(report, allow_nan=False)

    def test_json_number(self):
        assert _json_number(math.inf) is None
        assert _json_number(float("nan")) is None
        assert _json_number(0.1234567891) == 0.123457


class TestRecommendations:
    """Current picks per combination."""

    def test_return_target_prices(self, result, universe):
        entry = result.entries[0]
        picks = build_recommendations(entry, universe, limit=5)
        assert [p["symbol"] for p in picks] == ["CCC", "AAA"]
        frame = universe["CCC"]
        close = frame["Close"].iloc[-1]
        assert picks[0]["buy_price"] == pytest.approx(close, abs=1e-4)
        assert picks[0]["target_price"] == pytest.approx(close * 1.02, abs=1e-4)
        assert picks[0]["stop_loss_price"] == pytest.approx(close * 0.99, abs=1e-4)
        assert picks[0]["prev_close"] == pytest.approx(frame["Close"].iloc[-2], abs=1e-4)

    def test_guard_has_no_target_price(self, result, universe):
        entry = result.entries[1]
        assert entry.target_id.startswith("guard")
        picks = build_recommendations(entry, universe, limit=1)
        assert len(picks) == 1
        assert picks[0]["target_price"] is None
        assert picks[0]["stop_loss_price"] is not None

    def test_limit_signal_prices_below_close(self, result, universe):
        entry = result.entries[2]
        assert entry.signal_id.startswith("limit")
        pick = build_recommendations(entry, universe, limit=1)[0]
        close = universe[pick["symbol"]]["Close"].iloc[-1]
        assert pick["buy_price"] == pytest.approx(close * 0.98, abs=1e-4)


class TestScorecardReporter:
    """Files and console output."""

    def test_write_json(self, tmp_path, result, universe):
        reporter = ScorecardReporter(tmp_path / "out")
        report = build_report(result, universe, 1, update_date="2024-06-28")
        path = reporter.write_json(report)
        assert path.name == "stocks.json"
        assert json.loads(path.read_text(encoding="utf-8")) == report

    def test_results_csv(self, tmp_path, result):
        path = ScorecardReporter(tmp_path).save_results_csv(result, "results.csv")
        df = pd.read_csv(path)
        assert len(df) == len(result.entries)
        assert {"selector", "signal", "target", "score", "rank", "success_rate"} <= set(df.columns)
        assert df.loc[result.ranking[0], "rank"] == 1

    def test_trades_csv(self, tmp_path, result):
        entry = result.entries[0]
        path = ScorecardReporter(tmp_path).save_trades_csv(entry.result, "trades.csv")
        df = pd.read_csv(path)
        assert len(df) == entry.result.total_trades
        assert set(df["outcome"]) == {"target_hit"}

    def test_print_summary(self, tmp_path, capsys, result):
        ScorecardReporter(tmp_path).print_summary(result, top_n=3)
        out = capsys.readouterr().out
        assert "SCORECARD" in out
        assert f"Combinations: {len(result.entries)}" in out


class TestComparisonChart:
    """Matplotlib comparison chart."""

    def test_chart_written(self, tmp_path, result):
        path = generate_comparison_chart(result, tmp_path / "chart.png")
        assert path.endswith("chart.png")
        assert (tmp_path / "chart.png").stat().st_size > 0
