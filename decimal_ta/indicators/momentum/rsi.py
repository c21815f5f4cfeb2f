"""
Relative Strength Index (RSI) indicator.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import List, Optional, Tuple

from ..base import StreamingIndicator
from ..trend.sma import SOURCE_PARAM
from ...models.metadata import OutputDescriptor, OutputType, ParamDescriptor, ParamType
from ...models.result import IndicatorValue
from ...utils.numeric import HUNDRED, ONE, ZERO
from ...utils.series import mean, threshold_label
from ...utils.smoothing import WilderAverage
from ...utils.validation import check_levels, extract_field, price_of
from ...utils.window import RollingWindow

SMOOTHINGS = ("wilder", "sma")


@dataclass(frozen=True)
class RSIParams:
    period: int = 14
    source: str = "close"
    smoothing: str = "wilder"
    overbought: Decimal = Decimal(70)
    oversold: Decimal = Decimal(30)


@dataclass(frozen=True)
class RSIState:
    params: RSIParams
    previous: Optional[Decimal] = None
    gain_average: Optional[WilderAverage] = None
    loss_average: Optional[WilderAverage] = None
    gains: Optional[RollingWindow] = None
    losses: Optional[RollingWindow] = None
    count: int = 0


def relative_strength_index(avg_gain: Decimal, avg_loss: Decimal) -> Decimal:
    if avg_loss == 0:
        return HUNDRED
    return HUNDRED - HUNDRED / (ONE + avg_gain / avg_loss)


class RSI(StreamingIndicator):
    """
    Wilder's RSI over `period` price changes.

    Wilder smoothing seeds both averages with the simple mean of the first
    `period` gains/losses, then applies ((n - 1) * prev + x) / n. The `sma`
    mode uses a plain trailing mean instead.
    """

    name = "RSI"
    key = "rsi"
    category = "momentum"
    params_class = RSIParams
    state_class = RSIState
    PARAMETERS = (
        ParamDescriptor("period", ParamType.INTEGER, "Number of price changes", min=1),
        SOURCE_PARAM,
        ParamDescriptor("smoothing", ParamType.ENUM, "Averaging of gains and losses",
                        options=SMOOTHINGS),
        ParamDescriptor("overbought", ParamType.DECIMAL, "Overbought level", min=0, max=100),
        ParamDescriptor("oversold", ParamType.DECIMAL, "Oversold level", min=0, max=100),
    )
    OUTPUT = OutputDescriptor(
        OutputType.SINGLE_VALUE,
        "RSI in [0, 100]; metadata signal is overbought, oversold or neutral",
        example="70.464135",
    )

    def _required(self, params: RSIParams) -> int:
        return params.period + 1

    def _check_relationships(self, params: RSIParams):
        return check_levels(params.overbought, params.oversold)

    def _init_state(self, params: RSIParams) -> RSIState:
        if params.smoothing == "wilder":
            return RSIState(
                params=params,
                gain_average=WilderAverage.create(params.period),
                loss_average=WilderAverage.create(params.period),
            )
        return RSIState(
            params=params,
            gains=RollingWindow(params.period),
            losses=RollingWindow(params.period),
        )

    def _advance(self, state: RSIState, price: Decimal) -> Tuple[RSIState, Optional[Decimal]]:
        if state.previous is None:
            return replace(state, previous=price, count=state.count + 1), None

        change = price - state.previous
        gain = change if change > 0 else ZERO
        loss = -change if change < 0 else ZERO

        if state.params.smoothing == "wilder":
            gain_average = state.gain_average.push(gain)
            loss_average = state.loss_average.push(loss)
            new_state = replace(state, previous=price, count=state.count + 1,
                                gain_average=gain_average, loss_average=loss_average)
            if not gain_average.warm:
                return new_state, None
            return new_state, relative_strength_index(gain_average.value, loss_average.value)

        gains = state.gains.push(gain)
        losses = state.losses.push(loss)
        new_state = replace(state, previous=price, count=state.count + 1,
                            gains=gains, losses=losses)
        if not gains.full:
            return new_state, None
        return new_state, relative_strength_index(mean(gains.items), mean(losses.items))

    def _result(self, value: Decimal, point, params: RSIParams) -> IndicatorValue:
        return self._emit(value, point, params,
                          signal=threshold_label(value, params.overbought, params.oversold))

    def _calculate(self, points, params: RSIParams) -> List[IndicatorValue]:
        state = self._init_state(params)
        results = []
        for point, price in zip(points, extract_field(points, params.source)):
            state, value = self._advance(state, price)
            if value is not None:
                results.append(self._result(value, point, params))
        return results

    def _update(self, state: RSIState, point) -> Tuple[RSIState, Optional[IndicatorValue]]:
        new_state, value = self._advance(state, price_of(point, state.params.source))
        if value is None:
            return new_state, None
        return new_state, self._result(value, point, state.params)
