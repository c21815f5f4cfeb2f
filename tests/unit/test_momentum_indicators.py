"""
Unit tests for momentum indicators.

Tests cover:
- Positive: RSI reference series, Wilder vs SMA smoothing, known ROC/Momentum values
- Bounds: RSI and Stochastic in [0, 100], Williams %R in [-100, 0]
- Degenerate: flat ranges give 50 (%K), -50 (%R) and 0 (CCI)
- Negative: level ordering, OHLC-only indicators fed bare prices
"""

from decimal import Decimal

import pytest

from decimal_ta.indicators.momentum.cci import CCI
from decimal_ta.indicators.momentum.momentum import Momentum
from decimal_ta.indicators.momentum.roc import ROC
from decimal_ta.indicators.momentum.rsi import RSI
from decimal_ta.indicators.momentum.stochastic import Stochastic
from decimal_ta.indicators.momentum.williams_r import WilliamsR
from decimal_ta.models.errors import InvalidDataFormat, InvalidParams


def values_of(result):
    assert result.success, result.error
    return [r.value for r in result.values]


class TestRSI:

    def test_reference_series_emits_one_value(self, rsi_closes):
        result = RSI().calculate(rsi_closes, {"period": 14})

        assert result.success
        assert len(result.values) == 1
        value = result.values[0]
        assert Decimal(0) < value.value < Decimal(100)
        assert value.metadata["period"] == 14
        assert value.metadata["indicator"] == "RSI"

    def test_wilder_smoothing(self, series):
        result = RSI().calculate(series(1, 2, 1, 2), {"period": 2})
        assert values_of(result) == [Decimal(50), Decimal(75)]

    def test_sma_smoothing(self, series):
        result = RSI().calculate(series(1, 2, 1, 2), {"period": 2, "smoothing": "sma"})
        assert values_of(result) == [Decimal(50), Decimal(50)]

    def test_only_gains_is_100(self):
        data = [Decimal(i) for i in range(1, 20)]
        result = RSI().calculate(data)
        assert set(values_of(result)) == {Decimal(100)}
        assert result.values[-1].metadata["signal"] == "overbought"

    def test_only_losses_is_0(self):
        data = [Decimal(i) for i in range(40, 20, -1)]
        result = RSI().calculate(data)
        assert set(values_of(result)) == {Decimal(0)}
        assert result.values[-1].metadata["signal"] == "oversold"

    def test_bounds(self, synthetic_bars):
        for value in values_of(RSI().calculate(synthetic_bars)):
            assert Decimal(0) <= value <= Decimal(100)

    def test_required_periods(self):
        assert RSI().required_periods() == 15

    def test_levels_must_be_ordered(self, rsi_closes):
        result = RSI().calculate(rsi_closes, {"overbought": 30, "oversold": 70})
        assert isinstance(result.error, InvalidParams)
        assert result.error.param == "oversold"

    @pytest.mark.parametrize("options", [{"overbought": 120}, {"oversold": -1},
                                         {"smoothing": "ema"}])
    def test_invalid_options(self, rsi_closes, options):
        assert isinstance(RSI().calculate(rsi_closes, options).error, InvalidParams)


class TestStochastic:

    def test_close_at_high_reads_100(self, bar):
        bars = [bar(i, i + 1, i - 1, i + 1) for i in range(10, 20)]
        result = Stochastic().calculate(bars, {"k_period": 3, "d_period": 2})
        assert values_of(result)[-1] == {"k": Decimal(100), "d": Decimal(100)}
        assert result.values[-1].metadata["k_signal"] == "overbought"

    def test_flat_range_reads_50(self, bar):
        bars = [bar(5, 5, 5, 5) for _ in range(6)]
        result = Stochastic().calculate(bars, {"k_period": 3, "d_period": 2})
        assert all(v == {"k": Decimal(50), "d": Decimal(50)} for v in values_of(result))
        assert result.values[0].metadata["crossover"] == "neutral"

    def test_required_periods(self):
        assert Stochastic().required_periods() == 16
        assert Stochastic().required_periods({"k_period": 5, "d_period": 3,
                                              "k_smoothing": 3}) == 9

    def test_bounds(self, synthetic_bars):
        for value in values_of(Stochastic().calculate(synthetic_bars, {"k_smoothing": 3})):
            assert Decimal(0) <= value["k"] <= Decimal(100)
            assert Decimal(0) <= value["d"] <= Decimal(100)

    def test_rejects_price_series(self, series):
        result = Stochastic().calculate(series(*range(20)), {"k_period": 3})
        assert isinstance(result.error, InvalidDataFormat)
        assert result.error.index == 0


class TestWilliamsR:

    def test_extremes(self, bar):
        at_high = [bar(10, 12, 8, 12)] * 3
        at_low = [bar(10, 12, 8, 8)] * 3
        assert values_of(WilliamsR().calculate(at_high, {"period": 3})) == [Decimal(0)]
        assert values_of(WilliamsR().calculate(at_low, {"period": 3})) == [Decimal(-100)]

    def test_zero_range_is_minus_50(self, bar):
        bars = [bar(7, 7, 7, 7)] * 4
        result = WilliamsR().calculate(bars, {"period": 3})
        assert values_of(result) == [Decimal(-50), Decimal(-50)]
        assert result.values[0].metadata["signal"] == "neutral"

    def test_bounds(self, synthetic_bars):
        for value in values_of(WilliamsR().calculate(synthetic_bars)):
            assert Decimal(-100) <= value <= Decimal(0)

    def test_levels_within_range(self, bar):
        result = WilliamsR().calculate([bar(1, 2, 1, 2)] * 20, {"overbought": 10})
        assert result.error.param == "overbought"


class TestCCI:

    def test_flat_series_is_zero(self, bar):
        result = CCI().calculate([bar(5, 6, 4, 5)] * 5, {"period": 3})
        assert values_of(result) == [Decimal(0)] * 3

    def test_known_value(self, bar):
        bars = [bar(1, 1, 1, 1), bar(2, 2, 2, 2), bar(3, 3, 3, 3)]
        # TP = 1, 2, 3; mean 2; mean deviation 2/3; (3 - 2) / (0.015 * 2/3) = 100
        assert values_of(CCI().calculate(bars, {"period": 3})) == [Decimal(100)]

    def test_constant_must_be_positive(self, bar):
        result = CCI().calculate([bar(1, 2, 1, 2)] * 25, {"constant": 0})
        assert result.error.param == "constant"


class TestROC:

    def test_percentage_and_price(self, series):
        data = series(50, 60)
        assert values_of(ROC().calculate(data, {"period": 1})) == [Decimal(20)]
        assert values_of(ROC().calculate(data, {"period": 1, "variant": "price"})) == [Decimal(10)]

    def test_zero_base(self, series):
        assert values_of(ROC().calculate(series(0, 5), {"period": 1})) == [Decimal(0)]

    def test_signal(self, series):
        result = ROC().calculate(series(10, 9, 9), {"period": 1})
        assert [r.metadata["signal"] for r in result.values] == ["bearish", "neutral"]

    def test_required_periods(self):
        assert ROC().required_periods({"period": 5}) == 6


class TestMomentum:

    def test_smoothing(self, series):
        result = Momentum().calculate(series(1, 2, 4), {"period": 1, "smoothing": 2})
        assert values_of(result) == [Decimal("1.5")]
        assert result.values[0].metadata["signal"] == "bullish"

    def test_normalized(self, series):
        result = Momentum().calculate(series(1, 2, 4), {"period": 1, "normalized": True})
        assert values_of(result) == [Decimal(1), Decimal(1)]

    def test_normalized_must_be_boolean(self, series):
        result = Momentum().calculate(series(1, 2, 4), {"period": 1, "normalized": "yes"})
        assert result.error.param == "normalized"

    def test_required_periods(self):
        assert Momentum().required_periods() == 11
