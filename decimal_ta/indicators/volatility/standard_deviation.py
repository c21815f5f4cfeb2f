"""
Standard Deviation indicator.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from ..base import StreamingIndicator
from ..trend.sma import SOURCE_PARAM
from ...models.metadata import OutputDescriptor, OutputType, ParamDescriptor, ParamType
from ...models.result import IndicatorValue
from ...utils.series import sliding_window, standard_deviation
from ...utils.validation import extract_field, price_of
from ...utils.window import RollingWindow

CALCULATIONS = ("sample", "population")


@dataclass(frozen=True)
class StandardDeviationParams:
    period: int = 20
    source: str = "close"
    calculation: str = "sample"

    @property
    def ddof(self) -> int:
        return 1 if self.calculation == "sample" else 0


@dataclass(frozen=True)
class StandardDeviationState:
    params: StandardDeviationParams
    window: RollingWindow
    count: int = 0


class StandardDeviation(StreamingIndicator):
    """Rolling sample (N - 1) or population (N) standard deviation."""

    name = "StandardDeviation"
    key = "standard_deviation"
    category = "volatility"
    params_class = StandardDeviationParams
    state_class = StandardDeviationState
    PARAMETERS = (
        ParamDescriptor("period", ParamType.INTEGER, "Window size", min=2),
        SOURCE_PARAM,
        ParamDescriptor("calculation", ParamType.ENUM, "Sample or population variance",
                        options=CALCULATIONS),
    )
    OUTPUT = OutputDescriptor(
        OutputType.SINGLE_VALUE,
        "Standard deviation of the selected price",
        example="1.870829",
    )

    def _required(self, params: StandardDeviationParams) -> int:
        return params.period

    def _calculate(self, points, params: StandardDeviationParams) -> List[IndicatorValue]:
        prices = extract_field(points, params.source)
        offset = params.period - 1
        return [
            self._emit(standard_deviation(window, params.ddof), points[offset + i], params)
            for i, window in enumerate(sliding_window(prices, params.period))
        ]

    def _init_state(self, params: StandardDeviationParams) -> StandardDeviationState:
        return StandardDeviationState(params=params, window=RollingWindow(params.period))

    def _update(self, state: StandardDeviationState,
                point) -> Tuple[StandardDeviationState, Optional[IndicatorValue]]:
        window = state.window.push(price_of(point, state.params.source))
        new_state = replace(state, window=window, count=state.count + 1)
        if not window.full:
            return new_state, None
        value = standard_deviation(window.items, state.params.ddof)
        return new_state, self._emit(value, point, state.params)
