"""
Weighted Moving Average (WMA) indicator.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from ..base import StreamingIndicator
from .sma import PERIOD_PARAM, SOURCE_PARAM
from ...models.metadata import OutputDescriptor, OutputType
from ...models.result import IndicatorValue
from ...utils.series import sliding_window, weighted_mean
from ...utils.validation import extract_field, price_of
from ...utils.window import RollingWindow


@dataclass(frozen=True)
class WMAParams:
    period: int = 20
    source: str = "close"


@dataclass(frozen=True)
class WMAState:
    params: WMAParams
    window: RollingWindow
    count: int = 0


class WMA(StreamingIndicator):
    """Linearly weighted average, newest price weighted `period`, oldest 1."""

    name = "WMA"
    key = "wma"
    category = "trend"
    params_class = WMAParams
    state_class = WMAState
    PARAMETERS = (PERIOD_PARAM, SOURCE_PARAM)
    OUTPUT = OutputDescriptor(
        OutputType.SINGLE_VALUE,
        "Linearly weighted moving average of the selected price",
        example="101.316667",
    )

    def _required(self, params: WMAParams) -> int:
        return params.period

    def _calculate(self, points, params: WMAParams) -> List[IndicatorValue]:
        prices = extract_field(points, params.source)
        offset = params.period - 1
        return [
            self._emit(weighted_mean(window), points[offset + i], params)
            for i, window in enumerate(sliding_window(prices, params.period))
        ]

    def _init_state(self, params: WMAParams) -> WMAState:
        return WMAState(params=params, window=RollingWindow(params.period))

    def _update(self, state: WMAState, point) -> Tuple[WMAState, Optional[IndicatorValue]]:
        window = state.window.push(price_of(point, state.params.source))
        new_state = replace(state, window=window, count=state.count + 1)
        if not window.full:
            return new_state, None
        return new_state, self._emit(weighted_mean(window.items), point, state.params)
