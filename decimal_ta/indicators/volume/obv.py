"""
On-Balance Volume (OBV) indicator.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import List, Optional, Tuple

from ..base import StreamingIndicator
from ...models.metadata import OutputDescriptor, OutputType
from ...models.ohlcv import Bar
from ...models.result import IndicatorValue
from ...utils.validation import require_volume_bar


@dataclass(frozen=True)
class OBVParams:
    pass


@dataclass(frozen=True)
class OBVState:
    params: OBVParams
    value: Optional[Decimal] = None
    previous_close: Optional[Decimal] = None
    count: int = 0


class OBV(StreamingIndicator):
    """
    Running volume total, added on up closes and subtracted on down closes.

    The first bar starts the line at its own volume.
    """

    name = "OBV"
    key = "obv"
    category = "volume"
    params_class = OBVParams
    state_class = OBVState
    parameterless = True
    OUTPUT = OutputDescriptor(
        OutputType.SINGLE_VALUE,
        "Cumulative on-balance volume; metadata carries the volume direction",
        example="15300.000000",
    )

    def _required(self, params: OBVParams) -> int:
        return 1

    def _init_state(self, params: OBVParams) -> OBVState:
        return OBVState(params=params)

    def _advance(self, state: OBVState, bar: Bar) -> Tuple[OBVState, Decimal, str]:
        if state.value is None:
            value, direction = bar.volume, "initial"
        elif bar.close > state.previous_close:
            value, direction = state.value + bar.volume, "positive"
        elif bar.close < state.previous_close:
            value, direction = state.value - bar.volume, "negative"
        else:
            value, direction = state.value, "neutral"
        new_state = replace(state, value=value, previous_close=bar.close, count=state.count + 1)
        return new_state, value, direction

    def _calculate(self, points, params: OBVParams) -> List[IndicatorValue]:
        bars = [require_volume_bar(point, i) for i, point in enumerate(points)]
        state = self._init_state(params)
        results = []
        for bar in bars:
            state, value, direction = self._advance(state, bar)
            results.append(self._emit(value, bar, params, volume_direction=direction))
        return results

    def _update(self, state: OBVState, point) -> Tuple[OBVState, Optional[IndicatorValue]]:
        bar = require_volume_bar(point, None)
        new_state, value, direction = self._advance(state, bar)
        return new_state, self._emit(value, bar, state.params, volume_direction=direction)
