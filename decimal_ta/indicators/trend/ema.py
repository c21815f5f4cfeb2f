"""
Exponential Moving Average (EMA) indicator.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import List, Optional, Tuple

from ..base import StreamingIndicator
from .sma import PERIOD_PARAM, SOURCE_PARAM
from ...models.metadata import OutputDescriptor, OutputType, ParamDescriptor, ParamType
from ...models.result import IndicatorValue
from ...utils.smoothing import ExponentialAverage, smoothing_factor
from ...utils.validation import extract_field, price_of

INITIALIZATIONS = ("sma_bootstrap", "first_value")


@dataclass(frozen=True)
class EMAParams:
    period: int = 12
    source: str = "close"
    smoothing: Optional[Decimal] = None
    initialization: str = "sma_bootstrap"

    @property
    def alpha(self) -> Decimal:
        if self.smoothing is not None:
            return self.smoothing
        return smoothing_factor(self.period)

    @property
    def seed_size(self) -> int:
        return self.period if self.initialization == "sma_bootstrap" else 1


@dataclass(frozen=True)
class EMAState:
    params: EMAParams
    average: ExponentialAverage
    count: int = 0


class EMA(StreamingIndicator):
    """
    Exponential moving average.

    With the default `sma_bootstrap` initialization the first value is the
    simple mean of the first `period` prices; `first_value` seeds from the
    very first price and emits immediately.
    """

    name = "EMA"
    key = "ema"
    category = "trend"
    params_class = EMAParams
    state_class = EMAState
    PARAMETERS = (
        PERIOD_PARAM,
        SOURCE_PARAM,
        ParamDescriptor("smoothing", ParamType.DECIMAL,
                        "Custom smoothing factor; defaults to 2 / (period + 1)",
                        min=0, max=1, exclusive_min=True, nullable=True),
        ParamDescriptor("initialization", ParamType.ENUM, "How the first value is seeded",
                        options=INITIALIZATIONS),
    )
    OUTPUT = OutputDescriptor(
        OutputType.SINGLE_VALUE,
        "Exponentially weighted average of the selected price",
        example="101.184211",
    )

    def _required(self, params: EMAParams) -> int:
        return params.seed_size

    def _params_metadata(self, params: EMAParams):
        metadata = super()._params_metadata(params)
        metadata["smoothing"] = params.alpha
        return metadata

    def _calculate(self, points, params: EMAParams) -> List[IndicatorValue]:
        average = self._new_average(params)
        results = []
        for point, price in zip(points, extract_field(points, params.source)):
            average = average.push(price)
            if average.warm:
                results.append(self._emit(average.value, point, params))
        return results

    def _new_average(self, params: EMAParams) -> ExponentialAverage:
        return ExponentialAverage.create(params.period, alpha=params.alpha,
                                         seed_size=params.seed_size)

    def _init_state(self, params: EMAParams) -> EMAState:
        return EMAState(params=params, average=self._new_average(params))

    def _update(self, state: EMAState, point) -> Tuple[EMAState, Optional[IndicatorValue]]:
        average = state.average.push(price_of(point, state.params.source))
        new_state = replace(state, average=average, count=state.count + 1)
        if not average.warm:
            return new_state, None
        return new_state, self._emit(average.value, point, state.params)
