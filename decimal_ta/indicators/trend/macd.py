"""
Moving Average Convergence Divergence (MACD) indicator.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from ..base import StreamingIndicator
from .sma import SOURCE_PARAM
from ...models.metadata import OutputDescriptor, OutputType, ParamDescriptor, ParamType
from ...models.result import IndicatorValue
from ...utils.series import sign_label
from ...utils.smoothing import ExponentialAverage
from ...utils.validation import check_period_order, extract_field, price_of


@dataclass(frozen=True)
class MACDParams:
    fast_period: int = 12
    slow_period: int = 26
    signal_period: int = 9
    source: str = "close"


@dataclass(frozen=True)
class MACDState:
    params: MACDParams
    fast: ExponentialAverage
    slow: ExponentialAverage
    signal: ExponentialAverage
    count: int = 0


class MACD(StreamingIndicator):
    """
    MACD line, signal line and histogram.

    Values start once the slow EMA is warm; signal and histogram stay None
    until the signal EMA has seen `signal_period` MACD values.
    """

    name = "MACD"
    key = "macd"
    category = "trend"
    params_class = MACDParams
    state_class = MACDState
    PARAMETERS = (
        ParamDescriptor("fast_period", ParamType.INTEGER, "Fast EMA period", min=1),
        ParamDescriptor("slow_period", ParamType.INTEGER, "Slow EMA period", min=1),
        ParamDescriptor("signal_period", ParamType.INTEGER, "Signal EMA period", min=1),
        SOURCE_PARAM,
    )
    OUTPUT = OutputDescriptor(
        OutputType.MULTI_VALUE,
        "MACD line, signal line and histogram",
        fields=("macd", "signal", "histogram"),
        example={"macd": "0.512300", "signal": "0.430100", "histogram": "0.082200"},
    )

    def _required(self, params: MACDParams) -> int:
        return params.slow_period

    def _check_relationships(self, params: MACDParams):
        return check_period_order(params.fast_period, params.slow_period)

    def _init_state(self, params: MACDParams) -> MACDState:
        return MACDState(
            params=params,
            fast=ExponentialAverage.create(params.fast_period),
            slow=ExponentialAverage.create(params.slow_period),
            signal=ExponentialAverage.create(params.signal_period),
        )

    def _advance(self, state: MACDState, price) -> Tuple[MACDState, Optional[dict]]:
        fast = state.fast.push(price)
        slow = state.slow.push(price)
        new_state = replace(state, fast=fast, slow=slow, count=state.count + 1)
        if not (fast.warm and slow.warm):
            return new_state, None

        macd_line = fast.value - slow.value
        signal = state.signal.push(macd_line)
        new_state = replace(new_state, signal=signal)
        signal_line = signal.value if signal.warm else None
        histogram = macd_line - signal_line if signal_line is not None else None
        return new_state, {"macd": macd_line, "signal": signal_line, "histogram": histogram}

    def _result(self, value: dict, point, params: MACDParams) -> IndicatorValue:
        extra = {}
        if value["histogram"] is not None:
            extra["signal"] = sign_label(value["histogram"])
        return self._emit(value, point, params, **extra)

    def _calculate(self, points, params: MACDParams) -> List[IndicatorValue]:
        state = self._init_state(params)
        results = []
        for point, price in zip(points, extract_field(points, params.source)):
            state, value = self._advance(state, price)
            if value is not None:
                results.append(self._result(value, point, params))
        return results

    def _update(self, state: MACDState, point) -> Tuple[MACDState, Optional[IndicatorValue]]:
        new_state, value = self._advance(state, price_of(point, state.params.source))
        if value is None:
            return new_state, None
        return new_state, self._result(value, point, state.params)
