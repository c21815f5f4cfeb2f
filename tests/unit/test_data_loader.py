"""
Unit tests for the bar loader and DataFrame conversion.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pandas as pd
import pytest

from decimal_ta.data.loader import BarLoader, DataSource, bars_from_dataframe, results_to_dataframe
from decimal_ta.indicators.trend.sma import SMA
from decimal_ta.indicators.volatility.bollinger import BollingerBands
from decimal_ta.models.errors import InvalidDataFormat


class TestSyntheticSource:

    def test_deterministic(self):
        first = BarLoader().load("EURUSD", "M15", 50)
        second = BarLoader({"source": "synthetic"}).load("EURUSD", "M15", 50)
        assert first.bars == second.bars
        assert first.symbol == "EURUSD" and first.timeframe == "M15"

    def test_bars_are_valid_and_spaced(self):
        series = BarLoader().load("EURUSD", "M15", 10)
        assert len(series) == 10
        for bar in series:
            assert bar.validate() is None
            assert bar.volume == Decimal(1000000)
        assert series.bars[1].timestamp - series.bars[0].timestamp == timedelta(minutes=15)
        assert series.bars[0].timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_source_name(self):
        assert BarLoader().get_source() == DataSource.SYNTHETIC.value

    def test_unknown_source(self):
        with pytest.raises(ValueError):
            BarLoader({"source": "broker"})


class TestDataFrameConversion:

    def test_bars_from_dataframe(self):
        df = pd.DataFrame({
            "Timestamp": ["2024-01-01T00:15:00Z", "2024-01-01T00:00:00Z"],
            "Open": [1.1, 1.0],
            "High": [1.2, 1.1],
            "Low": [1.0, 0.9],
            "Close": [1.15, 1.05],
            "Volume": [200, 100],
        })
        bars = bars_from_dataframe(df)
        assert [bar.close for bar in bars] == [Decimal("1.05"), Decimal("1.15")]
        assert bars[0].timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert bars[1].volume == Decimal(200)

    def test_volume_column_optional(self):
        df = pd.DataFrame({"open": [1], "high": [2], "low": [1], "close": [2]})
        bars = bars_from_dataframe(df)
        assert bars[0].volume is None
        assert bars[0].timestamp is None

    def test_missing_price_column(self):
        with pytest.raises(InvalidDataFormat):
            bars_from_dataframe(pd.DataFrame({"open": [1], "close": [1]}))

    def test_results_to_dataframe(self, synthetic_bars):
        single = results_to_dataframe(SMA().calculate(synthetic_bars, {"period": 5}).values)
        assert list(single.columns) == ["timestamp", "value"]
        assert len(single) == len(synthetic_bars) - 4

        multi = results_to_dataframe(BollingerBands().calculate(synthetic_bars).values)
        assert {"upper", "middle", "lower", "percent_b", "bandwidth"} <= set(multi.columns)


class TestCsvAndCache:

    def test_csv_source(self, tmp_path):
        path = tmp_path / "bars.csv"
        path.write_text(
            "timestamp,open,high,low,close,volume\n"
            "2024-01-01T00:00:00Z,1.0,1.1,0.9,1.05,100\n"
            "2024-01-01T00:15:00Z,1.05,1.2,1.0,1.15,200\n"
            "2024-01-01T00:30:00Z,1.15,1.3,1.1,1.25,300\n",
            encoding="utf-8",
        )
        series = BarLoader({"source": "csv", "csv_path": str(path)}).load("EURUSD", "M15", 2)
        assert [bar.close for bar in series] == [Decimal("1.15"), Decimal("1.25")]

    def test_csv_missing_file(self, tmp_path):
        loader = BarLoader({"source": "csv", "csv_path": str(tmp_path / "absent.csv")})
        assert loader.load("EURUSD", "M15", 10) is None

    def test_cache_round_trip(self, tmp_path):
        config = {"source": "cache", "cache": {"path": str(tmp_path)}}
        original = BarLoader().load("GBPUSD", "H1", 30)
        loader = BarLoader(config)
        loader.cache_bars(original)

        restored = loader.load("GBPUSD", "H1", 30)
        assert restored.bars == original.bars

    def test_cache_miss(self, tmp_path):
        loader = BarLoader({"source": "cache", "cache": {"path": str(tmp_path)}})
        assert loader.load("USDJPY", "M5", 10) is None
