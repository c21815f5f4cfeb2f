"""
Hull Moving Average (HMA) indicator.

raw = 2 * WMA(period // 2) - WMA(period)
HMA = WMA(raw, round(sqrt(period)))
"""

import math
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import List, Optional, Tuple

from ..base import StreamingIndicator
from .sma import SOURCE_PARAM
from ...models.metadata import OutputDescriptor, OutputType, ParamDescriptor, ParamType
from ...models.result import IndicatorValue
from ...utils.series import weighted_mean
from ...utils.validation import extract_field, price_of
from ...utils.window import RollingWindow

TWO = Decimal(2)


@dataclass(frozen=True)
class HMAParams:
    period: int = 14
    source: str = "close"

    @property
    def half_period(self) -> int:
        return self.period // 2

    @property
    def sqrt_period(self) -> int:
        # Half-up rounding, so period 2 gives 1 and period 14 gives 4
        return int(math.floor(math.sqrt(self.period) + 0.5))


@dataclass(frozen=True)
class HMAState:
    params: HMAParams
    prices: RollingWindow
    raw: RollingWindow
    count: int = 0


def raw_hull(window) -> Decimal:
    """2 * WMA(half) - WMA(full) over a full price window."""
    half = len(window) // 2
    return TWO * weighted_mean(window[-half:]) - weighted_mean(window)


class HMA(StreamingIndicator):
    name = "HMA"
    key = "hma"
    category = "trend"
    params_class = HMAParams
    state_class = HMAState
    PARAMETERS = (
        ParamDescriptor("period", ParamType.INTEGER, "Hull period", min=2),
        SOURCE_PARAM,
    )
    OUTPUT = OutputDescriptor(
        OutputType.SINGLE_VALUE,
        "Hull moving average of the selected price",
        example="101.402500",
    )

    def _required(self, params: HMAParams) -> int:
        return params.period + params.sqrt_period - 1

    def _params_metadata(self, params: HMAParams):
        metadata = super()._params_metadata(params)
        metadata["half_period"] = params.half_period
        metadata["sqrt_period"] = params.sqrt_period
        return metadata

    def _calculate(self, points, params: HMAParams) -> List[IndicatorValue]:
        prices = extract_field(points, params.source)
        raw_series = [
            raw_hull(prices[end - params.period:end])
            for end in range(params.period, len(prices) + 1)
        ]
        # raw_series[0] belongs to index period - 1 of the input
        offset = params.period - 1
        results = []
        for end in range(params.sqrt_period, len(raw_series) + 1):
            value = weighted_mean(raw_series[end - params.sqrt_period:end])
            results.append(self._emit(value, points[offset + end - 1], params))
        return results

    def _init_state(self, params: HMAParams) -> HMAState:
        return HMAState(
            params=params,
            prices=RollingWindow(params.period),
            raw=RollingWindow(params.sqrt_period),
        )

    def _update(self, state: HMAState, point) -> Tuple[HMAState, Optional[IndicatorValue]]:
        prices = state.prices.push(price_of(point, state.params.source))
        new_state = replace(state, prices=prices, count=state.count + 1)
        if not prices.full:
            return new_state, None
        raw = state.raw.push(raw_hull(prices.items))
        new_state = replace(new_state, raw=raw)
        if not raw.full:
            return new_state, None
        return new_state, self._emit(weighted_mean(raw.items), point, state.params)
