"""
Unit tests for the category facades and the top-level helpers.
"""

from decimal import Decimal

import pytest

import decimal_ta
from decimal_ta.indicators.momentum.manager import MomentumIndicators
from decimal_ta.indicators.trend.manager import TrendIndicators
from decimal_ta.indicators.volatility.manager import VolatilityIndicators
from decimal_ta.indicators.volume.manager import VolumeIndicators
from decimal_ta.models.errors import InvalidDataFormat, InvalidParams, StreamStateError, ValidationError
from decimal_ta.models.metadata import OutputType, ParamType


class TestCategoryContents:

    @pytest.mark.parametrize("facade,expected", [
        (TrendIndicators, ["sma", "ema", "wma", "hma", "kama", "macd"]),
        (MomentumIndicators, ["rsi", "stochastic", "williams_r", "cci", "roc", "momentum"]),
        (VolatilityIndicators, ["atr", "bollinger_bands", "standard_deviation", "volatility_index"]),
        (VolumeIndicators, ["obv", "vwap", "ad", "cmf"]),
    ])
    def test_available_indicators(self, facade, expected):
        assert facade().available_indicators() == expected

    def test_lookup_by_key_or_name(self):
        trend = TrendIndicators()
        assert trend.get("SMA") is trend.get("sma")
        assert "macd" in trend
        assert "rsi" not in trend

    def test_unknown_indicator(self):
        with pytest.raises(InvalidParams) as exc:
            TrendIndicators().get("rsi")
        assert exc.value.param == "indicator"

    def test_calculate_unknown_indicator_is_a_result(self, series):
        result = MomentumIndicators().calculate("macd", series(1, 2, 3))
        assert not result.success
        assert isinstance(result.error, InvalidParams)


class TestDispatch:

    def test_convenience_methods_match_generic_calculate(self, synthetic_bars):
        trend = TrendIndicators()
        assert trend.sma(synthetic_bars, {"period": 5}).values == \
            trend.calculate("sma", synthetic_bars, {"period": 5}).values

    def test_volume_convenience(self, synthetic_bars):
        volume = VolumeIndicators()
        assert volume.obv(synthetic_bars).success
        assert volume.accumulation_distribution(synthetic_bars).success
        assert volume.chaikin_money_flow(synthetic_bars).success
        assert volume.vwap(synthetic_bars, {"session_reset": "daily"}).success

    def test_stream_dispatch_by_state_type(self, synthetic_bars):
        momentum = MomentumIndicators()
        state = momentum.init_stream("rsi", {"period": 5})
        for bar in synthetic_bars[:10]:
            update = momentum.update_stream(state, bar)
            assert update.success
            state = update.state
        assert state.count == 10

    def test_update_stream_with_foreign_state(self, synthetic_bars):
        state = TrendIndicators().init_stream("sma")
        update = VolatilityIndicators().update_stream(state, synthetic_bars[0])
        assert isinstance(update.error, StreamStateError)
        assert update.state is state

    def test_process_and_reset_stream(self, synthetic_bars):
        volatility = VolatilityIndicators()
        state = volatility.init_stream("atr", {"period": 5})
        outcome = volatility.process_stream(state, synthetic_bars[:12])
        assert outcome.processed == 12
        assert len(outcome.results) == 8
        fresh = volatility.reset_stream(outcome.state)
        assert fresh.count == 0 and fresh.params.period == 5

    def test_reset_foreign_stream(self):
        with pytest.raises(StreamStateError):
            VolumeIndicators().reset_stream(TrendIndicators().init_stream("ema"))


class TestConfiguration:

    def test_precision_and_overrides(self, series):
        trend = TrendIndicators({"precision": 2, "indicators": {"sma": {"period": 3}}})
        result = trend.sma(series(1, 1, 2))
        assert str(result.values[0].value) == "1.33"
        assert trend.get("sma").required_periods() == 3

    def test_invalid_override_raises(self):
        with pytest.raises(InvalidParams):
            MomentumIndicators({"indicators": {"rsi": {"period": 0}}})

    def test_info(self):
        info = VolatilityIndicators().indicator_info("bollinger_bands")
        assert info["key"] == "bollinger_bands"
        assert info["required_periods"] == 20
        assert info["supports_streaming"] is True
        assert info["outputs"]["type"] == OutputType.MULTI_VALUE.value
        assert [p["name"] for p in info["parameters"]] == ["period", "multiplier", "source"]

    def test_all_info_and_metadata(self):
        infos = VolumeIndicators().all_indicators_info()
        assert set(infos) == {"obv", "vwap", "ad", "cmf"}
        assert infos["obv"]["parameters"] == []

        descriptors = TrendIndicators().get("ema").parameter_metadata()
        smoothing = next(d for d in descriptors if d.name == "smoothing")
        assert smoothing.type == ParamType.DECIMAL
        assert smoothing.nullable


class TestTopLevelApi:

    def test_categories(self):
        assert decimal_ta.categories() == ["trend", "momentum", "volatility", "volume"]
        assert isinstance(decimal_ta.category("volume"), VolumeIndicators)
        with pytest.raises(KeyError):
            decimal_ta.category("sentiment")

    def test_validate_data(self, bar):
        assert decimal_ta.validate_data([bar(1, 2, 1, 2)]) is None
        error = decimal_ta.validate_data([bar(1, 2, 1, 2), bar(1, 1, 2, 1)])
        assert isinstance(error, ValidationError)
        assert error.index == 1
        assert isinstance(decimal_ta.validate_data([Decimal(1), "x"]), InvalidDataFormat)
        assert isinstance(decimal_ta.validate_data([Decimal(-1)]), ValidationError)

    def test_extract_series(self, bar):
        bars = [bar(1, 4, 0, 2), bar(2, 5, 1, 3)]
        assert decimal_ta.extract_series(bars, "high") == (Decimal(4), Decimal(5))
        assert decimal_ta.extract_series([1, 2]) == (Decimal(1), Decimal(2))

    def test_create_result(self):
        result = decimal_ta.create_result(Decimal("1.5"), metadata={"indicator": "X"})
        assert result.value == Decimal("1.5")
        assert result.timestamp is None
        assert result.indicator == "X"
