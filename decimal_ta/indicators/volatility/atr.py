"""
Average True Range (ATR) indicator.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import List, Optional, Tuple, Union

from ..base import StreamingIndicator
from ...models.metadata import OutputDescriptor, OutputType, ParamDescriptor, ParamType
from ...models.ohlcv import Bar
from ...models.result import IndicatorValue
from ...utils.series import mean, true_range
from ...utils.smoothing import ExponentialAverage, WilderAverage
from ...utils.validation import require_bar
from ...utils.window import RollingWindow

SMOOTHINGS = ("rma", "sma", "ema")

Smoother = Union[RollingWindow, ExponentialAverage, WilderAverage]


@dataclass(frozen=True)
class ATRParams:
    period: int = 14
    smoothing: str = "rma"


@dataclass(frozen=True)
class ATRState:
    params: ATRParams
    smoother: Smoother
    previous: Optional[Bar] = None
    count: int = 0


def new_smoother(params: ATRParams) -> Smoother:
    """
    Smoother for the true-range series.

    EMA and RMA seed from the first true range and run from the first bar;
    SMA averages the trailing `period` true ranges.
    """
    if params.smoothing == "sma":
        return RollingWindow(params.period)
    if params.smoothing == "ema":
        return ExponentialAverage.create(params.period, seed_size=1)
    return WilderAverage.create(params.period, seed_size=1)


def smoothed_value(smoother: Smoother) -> Decimal:
    if isinstance(smoother, RollingWindow):
        return mean(smoother.items)
    return smoother.value


class ATR(StreamingIndicator):
    """
    Average True Range with sma, ema or rma (Wilder) smoothing.

    The first bar's true range is high - low. Values are emitted from the
    `period`-th bar on.
    """

    name = "ATR"
    key = "atr"
    category = "volatility"
    params_class = ATRParams
    state_class = ATRState
    PARAMETERS = (
        ParamDescriptor("period", ParamType.INTEGER, "Smoothing period", min=1),
        ParamDescriptor("smoothing", ParamType.ENUM, "True range smoothing", options=SMOOTHINGS),
    )
    OUTPUT = OutputDescriptor(
        OutputType.SINGLE_VALUE,
        "Average true range; metadata carries the bar's true range",
        example="1.285714",
    )

    def _required(self, params: ATRParams) -> int:
        return params.period

    def _init_state(self, params: ATRParams) -> ATRState:
        return ATRState(params=params, smoother=new_smoother(params))

    def _advance(self, state: ATRState, bar: Bar) -> Tuple[ATRState, Decimal, Optional[Decimal]]:
        tr = true_range(bar, state.previous)
        smoother = state.smoother.push(tr)
        count = state.count + 1
        new_state = replace(state, smoother=smoother, previous=bar, count=count)
        if count < state.params.period:
            return new_state, tr, None
        return new_state, tr, smoothed_value(smoother)

    def _calculate(self, points, params: ATRParams) -> List[IndicatorValue]:
        bars = [require_bar(point, i) for i, point in enumerate(points)]
        state = self._init_state(params)
        results = []
        for bar in bars:
            state, tr, value = self._advance(state, bar)
            if value is not None:
                results.append(self._emit(value, bar, params, true_range=tr))
        return results

    def _update(self, state: ATRState, point) -> Tuple[ATRState, Optional[IndicatorValue]]:
        bar = require_bar(point, None)
        new_state, tr, value = self._advance(state, bar)
        if value is None:
            return new_state, None
        return new_state, self._emit(value, bar, state.params, true_range=tr)
