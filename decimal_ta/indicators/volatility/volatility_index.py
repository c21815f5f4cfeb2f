"""
Volatility Index indicator.

Three annualized volatility estimators, all reported in percent:
    historical    stddev of log returns * sqrt(periods_per_year)
    garman_klass  ln(H/L)^2 - (2 ln 2 - 1) ln(C/O)^2, averaged
    parkinson     ln(H/L)^2 / (4 ln 2), averaged
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import List, Optional, Tuple

from ..base import StreamingIndicator
from ..trend.sma import SOURCE_PARAM
from ...models.metadata import OutputDescriptor, OutputType, ParamDescriptor, ParamType
from ...models.ohlcv import Bar
from ...models.result import IndicatorValue
from ...utils.numeric import HUNDRED, ONE, ln, safe_div, sqrt
from ...utils.series import mean, standard_deviation
from ...utils.validation import price_of, require_bar
from ...utils.window import RollingWindow

METHODS = ("historical", "garman_klass", "parkinson")

LN_2 = ln(Decimal(2))
GARMAN_KLASS_FACTOR = Decimal(2) * LN_2 - ONE
PARKINSON_DIVISOR = Decimal(4) * LN_2


@dataclass(frozen=True)
class VolatilityIndexParams:
    period: int = 20
    method: str = "historical"
    periods_per_year: int = 252
    source: str = "close"

    @property
    def uses_bars(self) -> bool:
        return self.method != "historical"


@dataclass(frozen=True)
class VolatilityIndexState:
    params: VolatilityIndexParams
    window: RollingWindow
    previous: Optional[Decimal] = None
    count: int = 0


def log_return(current: Decimal, previous: Decimal) -> Decimal:
    return ln(safe_div(current, previous, "log_return"), "log_return")


def garman_klass_term(bar: Bar) -> Decimal:
    high_low = ln(safe_div(bar.high, bar.low, "garman_klass"), "garman_klass")
    close_open = ln(safe_div(bar.close, bar.open, "garman_klass"), "garman_klass")
    return high_low * high_low - GARMAN_KLASS_FACTOR * close_open * close_open


def parkinson_term(bar: Bar) -> Decimal:
    high_low = ln(safe_div(bar.high, bar.low, "parkinson"), "parkinson")
    return high_low * high_low / PARKINSON_DIVISOR


class VolatilityIndex(StreamingIndicator):
    name = "VolatilityIndex"
    key = "volatility_index"
    category = "volatility"
    params_class = VolatilityIndexParams
    state_class = VolatilityIndexState
    PARAMETERS = (
        ParamDescriptor("period", ParamType.INTEGER, "Estimation window", min=2),
        ParamDescriptor("method", ParamType.ENUM, "Volatility estimator", options=METHODS),
        ParamDescriptor("periods_per_year", ParamType.INTEGER, "Annualization factor", min=1),
        SOURCE_PARAM,
    )
    OUTPUT = OutputDescriptor(
        OutputType.SINGLE_VALUE,
        "Annualized volatility in percent",
        example="18.734512",
    )

    def _required(self, params: VolatilityIndexParams) -> int:
        return params.period if params.uses_bars else params.period + 1

    def _init_state(self, params: VolatilityIndexParams) -> VolatilityIndexState:
        return VolatilityIndexState(params=params, window=RollingWindow(params.period))

    def _annualize(self, window, params: VolatilityIndexParams) -> Decimal:
        annual = Decimal(params.periods_per_year)
        if params.method == "historical":
            return standard_deviation(window, ddof=1) * sqrt(annual) * HUNDRED
        return sqrt(mean(window) * annual, params.method) * HUNDRED

    def _advance(self, state: VolatilityIndexState, point, index: Optional[int]):
        params = state.params
        if params.uses_bars:
            bar = require_bar(point, index, "OHLC bar for range-based volatility")
            term = garman_klass_term(bar) if params.method == "garman_klass" else parkinson_term(bar)
            window = state.window.push(term)
            new_state = replace(state, window=window, count=state.count + 1)
        else:
            price = price_of(point, params.source)
            if state.previous is None:
                return replace(state, previous=price, count=state.count + 1), None
            window = state.window.push(log_return(price, state.previous))
            new_state = replace(state, window=window, previous=price, count=state.count + 1)

        if not window.full:
            return new_state, None
        return new_state, self._annualize(window.items, params)

    def _calculate(self, points, params: VolatilityIndexParams) -> List[IndicatorValue]:
        if params.uses_bars:
            for i, point in enumerate(points):
                require_bar(point, i, "OHLC bar for range-based volatility")
        state = self._init_state(params)
        results = []
        for i, point in enumerate(points):
            state, value = self._advance(state, point, i)
            if value is not None:
                results.append(self._emit(value, point, params, annualized=True))
        return results

    def _update(self, state: VolatilityIndexState, point) -> Tuple[VolatilityIndexState, Optional[IndicatorValue]]:
        new_state, value = self._advance(state, point, None)
        if value is None:
            return new_state, None
        return new_state, self._emit(value, point, state.params, annualized=True)
