"""
Rate of Change (ROC) indicator.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from ..base import StreamingIndicator
from ..trend.sma import SOURCE_PARAM
from ...models.metadata import OutputDescriptor, OutputType, ParamDescriptor, ParamType
from ...models.result import IndicatorValue
from ...utils.series import price_change, sign_label, sliding_window
from ...utils.validation import extract_field, price_of
from ...utils.window import RollingWindow

VARIANTS = ("percentage", "price")


@dataclass(frozen=True)
class ROCParams:
    period: int = 12
    source: str = "close"
    variant: str = "percentage"


@dataclass(frozen=True)
class ROCState:
    params: ROCParams
    window: RollingWindow
    count: int = 0


class ROC(StreamingIndicator):
    """
    Change against the price `period` bars ago.

    The percentage variant reports zero when the historical price is zero.
    """

    name = "ROC"
    key = "roc"
    category = "momentum"
    params_class = ROCParams
    state_class = ROCState
    PARAMETERS = (
        ParamDescriptor("period", ParamType.INTEGER, "Lookback period", min=1),
        SOURCE_PARAM,
        ParamDescriptor("variant", ParamType.ENUM, "Percentage or absolute price change",
                        options=VARIANTS),
    )
    OUTPUT = OutputDescriptor(
        OutputType.SINGLE_VALUE,
        "Rate of change; metadata signal is bullish, bearish or neutral",
        example="2.345679",
    )

    def _required(self, params: ROCParams) -> int:
        return params.period + 1

    def _result(self, window, point, params: ROCParams) -> IndicatorValue:
        current, historical = window[-1], window[0]
        value = price_change(current, historical, params.variant == "percentage")
        return self._emit(value, point, params, signal=sign_label(value),
                          current_price=current, historical_price=historical)

    def _calculate(self, points, params: ROCParams) -> List[IndicatorValue]:
        prices = extract_field(points, params.source)
        return [
            self._result(window, points[params.period + i], params)
            for i, window in enumerate(sliding_window(prices, params.period + 1))
        ]

    def _init_state(self, params: ROCParams) -> ROCState:
        return ROCState(params=params, window=RollingWindow(params.period + 1))

    def _update(self, state: ROCState, point) -> Tuple[ROCState, Optional[IndicatorValue]]:
        window = state.window.push(price_of(point, state.params.source))
        new_state = replace(state, window=window, count=state.count + 1)
        if not window.full:
            return new_state, None
        return new_state, self._result(window.items, point, state.params)
