"""
Tests for the CSV loader and the Yahoo Finance download cache.
"""
import pandas as pd
import pytest
from unittest.mock import patch

from strategy_lab.data import DataLoadError, list_available_symbols, load_symbol_csv, load_universe_from_dir
from strategy_lab.data.download import download_symbol, download_symbols
from strategy_lab.data.synthetic import trending_frame


@pytest.fixture
def data_dir(tmp_path):
    trending_frame(30, 0.01, start_date="2024-01-01").to_csv(tmp_path / "AAA.csv")
    trending_frame(30, -0.01, start_date="2024-01-01").to_csv(tmp_path / "BBB.csv")
    (tmp_path / "notes.txt").write_text("not data")
    return tmp_path


class TestLoader:
    """Per-symbol CSV files."""

    def test_list_available_symbols(self, data_dir, tmp_path):
        assert list_available_symbols(data_dir) == ["AAA", "BBB"]
        assert list_available_symbols(tmp_path / "missing") == []

    def test_load_symbol_csv_date_filter(self, data_dir):
        df = load_symbol_csv(data_dir / "AAA.csv", start_date="2024-01-10", end_date="2024-01-20")
        assert df.index.min() >= pd.Timestamp("2024-01-10")
        assert df.index.max() <= pd.Timestamp("2024-01-20")

    def test_load_symbol_csv_missing(self, data_dir):
        with pytest.raises(FileNotFoundError):
            load_symbol_csv(data_dir / "ZZZ.csv")

    def test_load_universe(self, data_dir):
        universe = load_universe_from_dir(data_dir)
        assert universe.symbols == ["AAA", "BBB"]
        assert len(universe["AAA"]) == 30
        pd.testing.assert_series_equal(
            universe["AAA"]["Close"],
            trending_frame(30, 0.01)["Close"],
            check_freq=False,
        )

    def test_bad_file_skipped(self, data_dir):
        pd.DataFrame({"Close": [1.0, 2.0]}, index=pd.date_range("2024-01-01", periods=2)).to_csv(
            data_dir / "CCC.csv"
        )
        universe = load_universe_from_dir(data_dir, symbols=["AAA", "CCC", "DDD"])
        assert universe.symbols == ["AAA"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(DataLoadError):
            load_universe_from_dir(tmp_path / "nope")


class TestDownload:
    """Incremental download cache with yfinance mocked out."""

    def test_fresh_download_written(self, tmp_path):
        fresh = trending_frame(10, 0.01)
        fresh["Adj Close"] = fresh["Close"]
        with patch("strategy_lab.data.download.yf.download", return_value=fresh) as mock_download:
            df = download_symbol("AAA", tmp_path)
        assert mock_download.call_args.kwargs["start"] == "2015-01-01"
        assert list(df.columns) == ["Open", "High", "Low", "Close", "Volume"]
        assert (tmp_path / "AAA.csv").exists()

    def test_cache_extended_from_last_date(self, tmp_path):
        full = trending_frame(20, 0.01)
        full.iloc[:15].to_csv(tmp_path / "AAA.csv")
        with patch("strategy_lab.data.download.yf.download", return_value=full.iloc[15:]) as mock_download:
            df = download_symbol("AAA", tmp_path)
        expected_start = (full.index[14] + pd.Timedelta(days=1)).strftime("%Y-%m-%d")
        assert mock_download.call_args.kwargs["start"] == expected_start
        assert len(df) == 20
        assert len(pd.read_csv(tmp_path / "AAA.csv", index_col=0)) == 20

    def test_multiindex_columns_flattened(self, tmp_path):
        fresh = trending_frame(5, 0.01)
        fresh.columns = pd.MultiIndex.from_product([fresh.columns, ["AAA"]])
        with patch("strategy_lab.data.download.yf.download", return_value=fresh):
            df = download_symbol("AAA", tmp_path)
        assert list(df.columns) == ["Open", "High", "Low", "Close", "Volume"]

    def test_failure_returns_cache(self, tmp_path):
        cached = trending_frame(5, 0.01)
        cached.to_csv(tmp_path / "AAA.csv")
        with patch("strategy_lab.data.download.yf.download", side_effect=ConnectionError("offline")):
            df = download_symbol("AAA", tmp_path)
        assert len(df) == 5

    def test_download_symbols_skips_failures(self, tmp_path):
        def fake_download(symbol, **kwargs):
            return trending_frame(5, 0.01) if symbol == "AAA" else pd.DataFrame()

        with patch("strategy_lab.data.download.yf.download", side_effect=fake_download):
            results = download_symbols(["AAA", "BBB"], tmp_path)
        assert list(results) == ["AAA"]
