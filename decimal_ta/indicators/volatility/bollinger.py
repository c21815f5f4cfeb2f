"""
Bollinger Bands indicator.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from ..base import StreamingIndicator
from ..trend.sma import SOURCE_PARAM
from ...models.metadata import OutputDescriptor, OutputType, ParamDescriptor, ParamType
from ...models.result import IndicatorValue
from ...utils.numeric import HUNDRED, ZERO
from ...utils.series import mean, sliding_window, standard_deviation
from ...utils.validation import extract_field, price_of
from ...utils.window import RollingWindow

COLLAPSED_PERCENT_B = Decimal(50)


@dataclass(frozen=True)
class BollingerParams:
    period: int = 20
    multiplier: Decimal = Decimal(2)
    source: str = "close"


@dataclass(frozen=True)
class BollingerState:
    params: BollingerParams
    window: RollingWindow
    count: int = 0


def bollinger_bands(window, multiplier: Decimal) -> Dict[str, Decimal]:
    """
    Bands over one window using the population standard deviation.

    %B is 50 when the bands collapse; bandwidth is 0 when the middle is 0.
    """
    middle = mean(window)
    deviation = multiplier * standard_deviation(window, ddof=0)
    upper = middle + deviation
    lower = middle - deviation
    width = upper - lower
    price = window[-1]
    percent_b = COLLAPSED_PERCENT_B if width == 0 else (price - lower) / width * HUNDRED
    bandwidth = ZERO if middle == 0 else width / middle * HUNDRED
    return {
        "upper": upper,
        "middle": middle,
        "lower": lower,
        "percent_b": percent_b,
        "bandwidth": bandwidth,
    }


class BollingerBands(StreamingIndicator):
    name = "BollingerBands"
    key = "bollinger_bands"
    category = "volatility"
    params_class = BollingerParams
    state_class = BollingerState
    PARAMETERS = (
        ParamDescriptor("period", ParamType.INTEGER, "Moving average period", min=2),
        ParamDescriptor("multiplier", ParamType.DECIMAL, "Standard deviations per band",
                        min=0, exclusive_min=True),
        SOURCE_PARAM,
    )
    OUTPUT = OutputDescriptor(
        OutputType.MULTI_VALUE,
        "Upper, middle and lower bands with %B and bandwidth",
        fields=("upper", "middle", "lower", "percent_b", "bandwidth"),
        example={"upper": "104.2", "middle": "101.5", "lower": "98.8",
                 "percent_b": "63.0", "bandwidth": "5.3"},
    )

    def _required(self, params: BollingerParams) -> int:
        return params.period

    def _calculate(self, points, params: BollingerParams) -> List[IndicatorValue]:
        prices = extract_field(points, params.source)
        offset = params.period - 1
        return [
            self._emit(bollinger_bands(window, params.multiplier), points[offset + i], params)
            for i, window in enumerate(sliding_window(prices, params.period))
        ]

    def _init_state(self, params: BollingerParams) -> BollingerState:
        return BollingerState(params=params, window=RollingWindow(params.period))

    def _update(self, state: BollingerState, point) -> Tuple[BollingerState, Optional[IndicatorValue]]:
        window = state.window.push(price_of(point, state.params.source))
        new_state = replace(state, window=window, count=state.count + 1)
        if not window.full:
            return new_state, None
        value = bollinger_bands(window.items, state.params.multiplier)
        return new_state, self._emit(value, point, state.params)
