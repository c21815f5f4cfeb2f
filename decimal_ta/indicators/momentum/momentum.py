"""
Momentum indicator.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import List, Optional, Tuple

from ..base import StreamingIndicator
from ..trend.sma import SOURCE_PARAM
from ...models.metadata import OutputDescriptor, OutputType, ParamDescriptor, ParamType
from ...models.result import IndicatorValue
from ...utils.numeric import ZERO
from ...utils.series import mean, sign_label
from ...utils.validation import extract_field, price_of
from ...utils.window import RollingWindow


@dataclass(frozen=True)
class MomentumParams:
    period: int = 10
    source: str = "close"
    smoothing: int = 1
    normalized: bool = False


@dataclass(frozen=True)
class MomentumState:
    params: MomentumParams
    prices: RollingWindow
    raw: RollingWindow
    count: int = 0


def raw_momentum(current: Decimal, historical: Decimal, normalized: bool) -> Decimal:
    """current - historical, or the ratio change when normalized (zero base gives 0)."""
    change = current - historical
    if not normalized:
        return change
    if historical == 0:
        return ZERO
    return change / historical


class Momentum(StreamingIndicator):
    """Price change over `period` bars, averaged over `smoothing` readings."""

    name = "Momentum"
    key = "momentum"
    category = "momentum"
    params_class = MomentumParams
    state_class = MomentumState
    PARAMETERS = (
        ParamDescriptor("period", ParamType.INTEGER, "Lookback period", min=1),
        SOURCE_PARAM,
        ParamDescriptor("smoothing", ParamType.INTEGER, "Readings averaged per value", min=1),
        ParamDescriptor("normalized", ParamType.BOOLEAN, "Divide by the historical price"),
    )
    OUTPUT = OutputDescriptor(
        OutputType.SINGLE_VALUE,
        "Momentum; metadata signal is bullish, bearish or neutral",
        example="1.250000",
    )

    def _required(self, params: MomentumParams) -> int:
        return params.period + params.smoothing

    def _init_state(self, params: MomentumParams) -> MomentumState:
        return MomentumState(
            params=params,
            prices=RollingWindow(params.period + 1),
            raw=RollingWindow(params.smoothing),
        )

    def _advance(self, state: MomentumState, price: Decimal) -> Tuple[MomentumState, Optional[Decimal]]:
        prices = state.prices.push(price)
        new_state = replace(state, prices=prices, count=state.count + 1)
        if not prices.full:
            return new_state, None
        raw = state.raw.push(raw_momentum(prices.last, prices.first, state.params.normalized))
        new_state = replace(new_state, raw=raw)
        if not raw.full:
            return new_state, None
        return new_state, mean(raw.items)

    def _calculate(self, points, params: MomentumParams) -> List[IndicatorValue]:
        state = self._init_state(params)
        results = []
        for point, price in zip(points, extract_field(points, params.source)):
            state, value = self._advance(state, price)
            if value is not None:
                results.append(self._emit(value, point, params, signal=sign_label(value)))
        return results

    def _update(self, state: MomentumState, point) -> Tuple[MomentumState, Optional[IndicatorValue]]:
        new_state, value = self._advance(state, price_of(point, state.params.source))
        if value is None:
            return new_state, None
        return new_state, self._emit(value, point, state.params, signal=sign_label(value))
