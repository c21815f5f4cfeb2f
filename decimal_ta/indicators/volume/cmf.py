"""
Chaikin Money Flow (CMF) indicator.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import List, Optional, Tuple

from ..base import StreamingIndicator
from ...models.metadata import OutputDescriptor, OutputType, ParamDescriptor, ParamType
from ...models.result import IndicatorValue
from ...utils.numeric import ZERO, decimal_sum
from ...utils.series import money_flow_volume, sliding_window
from ...utils.validation import require_volume_bar
from ...utils.window import RollingWindow


@dataclass(frozen=True)
class CMFParams:
    period: int = 20


@dataclass(frozen=True)
class CMFState:
    params: CMFParams
    bars: RollingWindow
    count: int = 0


def chaikin_money_flow(bars) -> Tuple[Decimal, Decimal, Decimal]:
    """
    Sum of money-flow volume over sum of volume.

    Returns (cmf, flow_sum, volume_sum); cmf is zero when no volume traded.
    """
    flow_sum = decimal_sum(money_flow_volume(bar) for bar in bars)
    volume_sum = decimal_sum(bar.volume for bar in bars)
    if volume_sum == 0:
        return ZERO, flow_sum, volume_sum
    return flow_sum / volume_sum, flow_sum, volume_sum


class ChaikinMoneyFlow(StreamingIndicator):
    name = "CMF"
    key = "cmf"
    category = "volume"
    params_class = CMFParams
    state_class = CMFState
    PARAMETERS = (
        ParamDescriptor("period", ParamType.INTEGER, "Lookback period", min=1),
    )
    OUTPUT = OutputDescriptor(
        OutputType.SINGLE_VALUE,
        "Chaikin money flow in [-1, 1]",
        example="0.184211",
    )

    def _required(self, params: CMFParams) -> int:
        return params.period

    def _result(self, bars, params: CMFParams) -> IndicatorValue:
        value, flow_sum, volume_sum = chaikin_money_flow(bars)
        return self._emit(value, bars[-1], params,
                          money_flow_volume_sum=flow_sum, volume_sum=volume_sum)

    def _calculate(self, points, params: CMFParams) -> List[IndicatorValue]:
        bars = [require_volume_bar(point, i) for i, point in enumerate(points)]
        return [self._result(window, params) for window in sliding_window(bars, params.period)]

    def _init_state(self, params: CMFParams) -> CMFState:
        return CMFState(params=params, bars=RollingWindow(params.period))

    def _update(self, state: CMFState, point) -> Tuple[CMFState, Optional[IndicatorValue]]:
        bars = state.bars.push(require_volume_bar(point, None))
        new_state = replace(state, bars=bars, count=state.count + 1)
        if not bars.full:
            return new_state, None
        return new_state, self._result(bars.items, state.params)
