"""
Simple Moving Average (SMA) indicator.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from ..base import StreamingIndicator
from ...models.metadata import OutputDescriptor, OutputType, ParamDescriptor, ParamType
from ...models.ohlcv import PRICE_FIELDS
from ...models.result import IndicatorValue
from ...utils.series import mean, sliding_window
from ...utils.validation import extract_field, price_of
from ...utils.window import RollingWindow

PERIOD_PARAM = ParamDescriptor("period", ParamType.INTEGER, "Number of periods to average", min=1)
SOURCE_PARAM = ParamDescriptor("source", ParamType.ENUM, "Price field to average", options=PRICE_FIELDS)


@dataclass(frozen=True)
class SMAParams:
    period: int = 20
    source: str = "close"


@dataclass(frozen=True)
class SMAState:
    params: SMAParams
    window: RollingWindow
    count: int = 0


class SMA(StreamingIndicator):
    """Arithmetic mean of the trailing `period` prices."""

    name = "SMA"
    key = "sma"
    category = "trend"
    params_class = SMAParams
    state_class = SMAState
    PARAMETERS = (PERIOD_PARAM, SOURCE_PARAM)
    OUTPUT = OutputDescriptor(
        OutputType.SINGLE_VALUE,
        "Simple moving average of the selected price",
        example="101.250000",
    )

    def _required(self, params: SMAParams) -> int:
        return params.period

    def _calculate(self, points, params: SMAParams) -> List[IndicatorValue]:
        prices = extract_field(points, params.source)
        offset = params.period - 1
        return [
            self._emit(mean(window), points[offset + i], params)
            for i, window in enumerate(sliding_window(prices, params.period))
        ]

    def _init_state(self, params: SMAParams) -> SMAState:
        return SMAState(params=params, window=RollingWindow(params.period))

    def _update(self, state: SMAState, point) -> Tuple[SMAState, Optional[IndicatorValue]]:
        window = state.window.push(price_of(point, state.params.source))
        new_state = replace(state, window=window, count=state.count + 1)
        if not window.full:
            return new_state, None
        return new_state, self._emit(mean(window.items), point, state.params)
