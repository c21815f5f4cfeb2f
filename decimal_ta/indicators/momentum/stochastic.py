"""
Stochastic Oscillator (%K / %D) indicator.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import List, Optional, Tuple

from ..base import StreamingIndicator
from ...models.metadata import OutputDescriptor, OutputType, ParamDescriptor, ParamType
from ...models.result import IndicatorValue
from ...utils.numeric import HUNDRED
from ...utils.series import highest, lowest, mean, threshold_label
from ...utils.validation import check_levels, require_bar
from ...utils.window import RollingWindow

NEUTRAL_K = Decimal(50)


@dataclass(frozen=True)
class StochasticParams:
    k_period: int = 14
    d_period: int = 3
    k_smoothing: int = 1
    overbought: Decimal = Decimal(80)
    oversold: Decimal = Decimal(20)


@dataclass(frozen=True)
class StochasticState:
    params: StochasticParams
    bars: RollingWindow
    raw_k: RollingWindow
    k_values: RollingWindow
    count: int = 0


def percent_k(bars) -> Decimal:
    """
    Close position within the highest-high / lowest-low range, x100.

    A window with no range reads as the neutral midpoint 50.
    """
    high = highest([bar.high for bar in bars])
    low = lowest([bar.low for bar in bars])
    if high == low:
        return NEUTRAL_K
    return (bars[-1].close - low) / (high - low) * HUNDRED


class Stochastic(StreamingIndicator):
    """
    %K over `k_period` bars, optionally smoothed over `k_smoothing`,
    and %D as the simple mean of the last `d_period` %K values.
    """

    name = "Stochastic"
    key = "stochastic"
    category = "momentum"
    params_class = StochasticParams
    state_class = StochasticState
    PARAMETERS = (
        ParamDescriptor("k_period", ParamType.INTEGER, "%K lookback", min=1),
        ParamDescriptor("d_period", ParamType.INTEGER, "%D smoothing period", min=1),
        ParamDescriptor("k_smoothing", ParamType.INTEGER, "%K smoothing period", min=1),
        ParamDescriptor("overbought", ParamType.DECIMAL, "Overbought level", min=0, max=100),
        ParamDescriptor("oversold", ParamType.DECIMAL, "Oversold level", min=0, max=100),
    )
    OUTPUT = OutputDescriptor(
        OutputType.MULTI_VALUE,
        "%K and %D in [0, 100]",
        fields=("k", "d"),
        example={"k": "82.142857", "d": "76.190476"},
    )

    def _required(self, params: StochasticParams) -> int:
        return params.k_period + params.k_smoothing - 1 + params.d_period - 1

    def _check_relationships(self, params: StochasticParams):
        return check_levels(params.overbought, params.oversold)

    def _init_state(self, params: StochasticParams) -> StochasticState:
        return StochasticState(
            params=params,
            bars=RollingWindow(params.k_period),
            raw_k=RollingWindow(params.k_smoothing),
            k_values=RollingWindow(params.d_period),
        )

    def _advance(self, state: StochasticState, bar) -> Tuple[StochasticState, Optional[dict]]:
        bars = state.bars.push(bar)
        new_state = replace(state, bars=bars, count=state.count + 1)
        if not bars.full:
            return new_state, None

        raw_k = state.raw_k.push(percent_k(bars.items))
        new_state = replace(new_state, raw_k=raw_k)
        if not raw_k.full:
            return new_state, None

        k_values = state.k_values.push(mean(raw_k.items))
        new_state = replace(new_state, k_values=k_values)
        if not k_values.full:
            return new_state, None
        return new_state, {"k": k_values.last, "d": mean(k_values.items)}

    def _result(self, value: dict, point, params: StochasticParams) -> IndicatorValue:
        k, d = value["k"], value["d"]
        if k > d:
            crossover = "bullish"
        elif k < d:
            crossover = "bearish"
        else:
            crossover = "neutral"
        k_signal = threshold_label(k, params.overbought, params.oversold)
        return self._emit(
            value, point, params,
            signal=k_signal,
            k_signal=k_signal,
            d_signal=threshold_label(d, params.overbought, params.oversold),
            crossover=crossover,
        )

    def _calculate(self, points, params: StochasticParams) -> List[IndicatorValue]:
        bars = [require_bar(point, i) for i, point in enumerate(points)]
        state = self._init_state(params)
        results = []
        for bar in bars:
            state, value = self._advance(state, bar)
            if value is not None:
                results.append(self._result(value, bar, params))
        return results

    def _update(self, state: StochasticState, point) -> Tuple[StochasticState, Optional[IndicatorValue]]:
        bar = require_bar(point, None)
        new_state, value = self._advance(state, bar)
        if value is None:
            return new_state, None
        return new_state, self._result(value, bar, state.params)
