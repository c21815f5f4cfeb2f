"""
Accumulation/Distribution Line (A/D) indicator.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import List, Optional, Tuple

from ..base import StreamingIndicator
from ...models.metadata import OutputDescriptor, OutputType
from ...models.result import IndicatorValue
from ...utils.numeric import ZERO
from ...utils.series import money_flow_multiplier
from ...utils.validation import require_volume_bar


@dataclass(frozen=True)
class ADParams:
    pass


@dataclass(frozen=True)
class ADState:
    params: ADParams
    value: Decimal = ZERO
    count: int = 0


class AccumulationDistribution(StreamingIndicator):
    """Cumulative money-flow volume."""

    name = "AD"
    key = "ad"
    category = "volume"
    params_class = ADParams
    state_class = ADState
    parameterless = True
    OUTPUT = OutputDescriptor(
        OutputType.SINGLE_VALUE,
        "Accumulation/distribution line; metadata carries the money-flow terms",
        example="4200.000000",
    )

    def _required(self, params: ADParams) -> int:
        return 1

    def _init_state(self, params: ADParams) -> ADState:
        return ADState(params=params)

    def _result(self, state: ADState, bar) -> Tuple[ADState, IndicatorValue]:
        multiplier = money_flow_multiplier(bar)
        flow_volume = multiplier * bar.volume
        value = state.value + flow_volume
        new_state = replace(state, value=value, count=state.count + 1)
        return new_state, self._emit(value, bar, state.params,
                                     money_flow_multiplier=multiplier,
                                     money_flow_volume=flow_volume)

    def _calculate(self, points, params: ADParams) -> List[IndicatorValue]:
        bars = [require_volume_bar(point, i) for i, point in enumerate(points)]
        state = self._init_state(params)
        results = []
        for bar in bars:
            state, result = self._result(state, bar)
            results.append(result)
        return results

    def _update(self, state: ADState, point) -> Tuple[ADState, Optional[IndicatorValue]]:
        return self._result(state, require_volume_bar(point, None))
