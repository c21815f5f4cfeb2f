"""
Commodity Channel Index (CCI) indicator.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import List, Optional, Tuple

from ..base import StreamingIndicator
from ...models.metadata import OutputDescriptor, OutputType, ParamDescriptor, ParamType
from ...models.result import IndicatorValue
from ...utils.numeric import ZERO
from ...utils.series import (
    mean,
    mean_absolute_deviation,
    sliding_window,
    threshold_label,
    typical_price,
)
from ...utils.validation import check_levels, require_bar
from ...utils.window import RollingWindow


@dataclass(frozen=True)
class CCIParams:
    period: int = 20
    constant: Decimal = Decimal("0.015")
    overbought: Decimal = Decimal(100)
    oversold: Decimal = Decimal(-100)


@dataclass(frozen=True)
class CCIState:
    params: CCIParams
    typical_prices: RollingWindow
    count: int = 0


def commodity_channel_index(window, constant: Decimal) -> Decimal:
    """(TP - SMA(TP)) / (constant * mean deviation); zero for a flat window."""
    deviation = mean_absolute_deviation(window)
    denominator = constant * deviation
    if denominator == 0:
        return ZERO
    return (window[-1] - mean(window)) / denominator


class CCI(StreamingIndicator):
    name = "CCI"
    key = "cci"
    category = "momentum"
    params_class = CCIParams
    state_class = CCIState
    PARAMETERS = (
        ParamDescriptor("period", ParamType.INTEGER, "Lookback period", min=1),
        ParamDescriptor("constant", ParamType.DECIMAL, "Lambert constant", min=0,
                        exclusive_min=True),
        ParamDescriptor("overbought", ParamType.DECIMAL, "Overbought level"),
        ParamDescriptor("oversold", ParamType.DECIMAL, "Oversold level"),
    )
    OUTPUT = OutputDescriptor(
        OutputType.SINGLE_VALUE,
        "Commodity channel index, unbounded, usually within +/-100",
        example="112.345679",
    )

    def _required(self, params: CCIParams) -> int:
        return params.period

    def _check_relationships(self, params: CCIParams):
        return check_levels(params.overbought, params.oversold)

    def _result(self, value: Decimal, point, params: CCIParams, tp: Decimal) -> IndicatorValue:
        return self._emit(value, point, params, typical_price=tp,
                          signal=threshold_label(value, params.overbought, params.oversold))

    def _calculate(self, points, params: CCIParams) -> List[IndicatorValue]:
        bars = [require_bar(point, i) for i, point in enumerate(points)]
        prices = tuple(typical_price(bar) for bar in bars)
        offset = params.period - 1
        results = []
        for i, window in enumerate(sliding_window(prices, params.period)):
            value = commodity_channel_index(window, params.constant)
            results.append(self._result(value, bars[offset + i], params, window[-1]))
        return results

    def _init_state(self, params: CCIParams) -> CCIState:
        return CCIState(params=params, typical_prices=RollingWindow(params.period))

    def _update(self, state: CCIState, point) -> Tuple[CCIState, Optional[IndicatorValue]]:
        bar = require_bar(point, None)
        window = state.typical_prices.push(typical_price(bar))
        new_state = replace(state, typical_prices=window, count=state.count + 1)
        if not window.full:
            return new_state, None
        value = commodity_channel_index(window.items, state.params.constant)
        return new_state, self._result(value, bar, state.params, window.last)
