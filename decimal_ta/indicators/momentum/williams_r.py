"""
Williams %R indicator.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import List, Optional, Tuple

from ..base import StreamingIndicator
from ...models.metadata import OutputDescriptor, OutputType, ParamDescriptor, ParamType
from ...models.result import IndicatorValue
from ...utils.series import highest, lowest, sliding_window, threshold_label
from ...utils.validation import check_levels, require_bar
from ...utils.window import RollingWindow

MIDPOINT = Decimal(-50)
SCALE = Decimal(-100)


@dataclass(frozen=True)
class WilliamsRParams:
    period: int = 14
    overbought: Decimal = Decimal(-20)
    oversold: Decimal = Decimal(-80)


@dataclass(frozen=True)
class WilliamsRState:
    params: WilliamsRParams
    bars: RollingWindow
    count: int = 0


def williams_r(bars) -> Decimal:
    """-100 * (HH - close) / (HH - LL); exactly -50 when the range is zero."""
    high = highest([bar.high for bar in bars])
    low = lowest([bar.low for bar in bars])
    if high == low:
        return MIDPOINT
    return SCALE * (high - bars[-1].close) / (high - low)


class WilliamsR(StreamingIndicator):
    name = "WilliamsR"
    key = "williams_r"
    category = "momentum"
    params_class = WilliamsRParams
    state_class = WilliamsRState
    PARAMETERS = (
        ParamDescriptor("period", ParamType.INTEGER, "Lookback period", min=1),
        ParamDescriptor("overbought", ParamType.DECIMAL, "Overbought level", min=-100, max=0),
        ParamDescriptor("oversold", ParamType.DECIMAL, "Oversold level", min=-100, max=0),
    )
    OUTPUT = OutputDescriptor(
        OutputType.SINGLE_VALUE,
        "Williams %R in [-100, 0]",
        example="-23.529412",
    )

    def _required(self, params: WilliamsRParams) -> int:
        return params.period

    def _check_relationships(self, params: WilliamsRParams):
        return check_levels(params.overbought, params.oversold)

    def _result(self, value: Decimal, point, params: WilliamsRParams) -> IndicatorValue:
        return self._emit(value, point, params,
                          signal=threshold_label(value, params.overbought, params.oversold))

    def _calculate(self, points, params: WilliamsRParams) -> List[IndicatorValue]:
        bars = [require_bar(point, i) for i, point in enumerate(points)]
        return [
            self._result(williams_r(window), window[-1], params)
            for window in sliding_window(bars, params.period)
        ]

    def _init_state(self, params: WilliamsRParams) -> WilliamsRState:
        return WilliamsRState(params=params, bars=RollingWindow(params.period))

    def _update(self, state: WilliamsRState, point) -> Tuple[WilliamsRState, Optional[IndicatorValue]]:
        bars = state.bars.push(require_bar(point, None))
        new_state = replace(state, bars=bars, count=state.count + 1)
        if not bars.full:
            return new_state, None
        return new_state, self._result(williams_r(bars.items), point, state.params)
