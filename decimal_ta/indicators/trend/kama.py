"""
Kaufman Adaptive Moving Average (KAMA) indicator.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import List, Optional, Tuple

from ..base import StreamingIndicator
from ...models.metadata import OutputDescriptor, OutputType, ParamDescriptor, ParamType
from ...models.ohlcv import SERIES_FIELDS
from ...models.result import IndicatorValue
from ...utils.numeric import round_decimal
from ...utils.series import efficiency_ratio, sliding_window
from ...utils.smoothing import smoothing_factor
from ...utils.validation import check_period_order, extract_field, price_of
from ...utils.window import RollingWindow

KAMA_SOURCE_PARAM = ParamDescriptor("source", ParamType.ENUM, "Series to adapt to", options=SERIES_FIELDS)


@dataclass(frozen=True)
class KAMAParams:
    period: int = 10
    fast_period: int = 2
    slow_period: int = 30
    source: str = "close"


@dataclass(frozen=True)
class KAMAState:
    params: KAMAParams
    window: RollingWindow
    value: Optional[Decimal] = None
    count: int = 0


def adaptive_constant(ratio: Decimal, params: KAMAParams) -> Decimal:
    """Squared smoothing constant scaled between the slow and fast EMA alphas."""
    fast = smoothing_factor(params.fast_period)
    slow = smoothing_factor(params.slow_period)
    scaled = ratio * (fast - slow) + slow
    return scaled * scaled


class KAMA(StreamingIndicator):
    """
    Adaptive moving average driven by the efficiency ratio.

    The first value equals the price at which the window first fills;
    afterwards kama += sc * (price - kama).
    """

    name = "KAMA"
    key = "kama"
    category = "trend"
    params_class = KAMAParams
    state_class = KAMAState
    PARAMETERS = (
        ParamDescriptor("period", ParamType.INTEGER, "Efficiency ratio lookback", min=1),
        ParamDescriptor("fast_period", ParamType.INTEGER, "Fastest EMA period", min=1),
        ParamDescriptor("slow_period", ParamType.INTEGER, "Slowest EMA period", min=1),
        KAMA_SOURCE_PARAM,
    )
    OUTPUT = OutputDescriptor(
        OutputType.SINGLE_VALUE,
        "Adaptive moving average; metadata carries the efficiency ratio",
        example="101.087432",
    )

    def _required(self, params: KAMAParams) -> int:
        return params.period + 1

    def _check_relationships(self, params: KAMAParams):
        return check_period_order(params.fast_period, params.slow_period)

    def _step(self, previous: Optional[Decimal], window, params: KAMAParams):
        ratio = efficiency_ratio(window)
        price = window[-1]
        if previous is None:
            return price, ratio
        return previous + adaptive_constant(ratio, params) * (price - previous), ratio

    def _calculate(self, points, params: KAMAParams) -> List[IndicatorValue]:
        prices = extract_field(points, params.source)
        value = None
        results = []
        for i, window in enumerate(sliding_window(prices, params.period + 1)):
            value, ratio = self._step(value, window, params)
            results.append(self._emit(value, points[params.period + i], params,
                                      efficiency_ratio=round_decimal(ratio, 4)))
        return results

    def _init_state(self, params: KAMAParams) -> KAMAState:
        return KAMAState(params=params, window=RollingWindow(params.period + 1))

    def _update(self, state: KAMAState, point) -> Tuple[KAMAState, Optional[IndicatorValue]]:
        window = state.window.push(price_of(point, state.params.source))
        if not window.full:
            return replace(state, window=window, count=state.count + 1), None
        value, ratio = self._step(state.value, window.items, state.params)
        new_state = replace(state, window=window, value=value, count=state.count + 1)
        return new_state, self._emit(value, point, state.params,
                                     efficiency_ratio=round_decimal(ratio, 4))
