"""
Volume Weighted Average Price (VWAP) indicator.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional, Tuple, Union

from ..base import StreamingIndicator
from ...models.metadata import OutputDescriptor, OutputType, ParamDescriptor, ParamType
from ...models.ohlcv import Bar
from ...models.result import IndicatorValue
from ...utils.numeric import ZERO
from ...utils.series import typical_price, weighted_close
from ...utils.validation import require_timestamp, require_volume_bar

VARIANTS = ("close", "typical", "weighted")
SESSION_RESETS = ("none", "daily", "weekly", "monthly")


@dataclass(frozen=True)
class VWAPParams:
    variant: str = "close"
    session_reset: str = "none"


@dataclass(frozen=True)
class VWAPState:
    params: VWAPParams
    cumulative_price_volume: Decimal = ZERO
    cumulative_volume: Decimal = ZERO
    session_start: Optional[datetime] = None
    count: int = 0


def session_bucket(timestamp: datetime, session_reset: str) -> Union[date, Tuple[int, int], None]:
    """
    Reset-period bucket of a timestamp, evaluated in UTC.

    Weeks start on Monday. Naive timestamps are taken as UTC.
    """
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc)
    day = timestamp.date()
    if session_reset == "daily":
        return day
    if session_reset == "weekly":
        return day - timedelta(days=day.weekday())
    if session_reset == "monthly":
        return (day.year, day.month)
    return None


def bar_price(bar: Bar, variant: str) -> Decimal:
    if variant == "typical":
        return typical_price(bar)
    if variant == "weighted":
        return weighted_close(bar)
    return bar.close


class VWAP(StreamingIndicator):
    """
    Cumulative price * volume over cumulative volume.

    Zero-volume bars add nothing to either sum. They still emit the running
    VWAP when the session already has volume, and emit nothing while the
    session has seen no volume at all. Batch and streaming behave the same.
    """

    name = "VWAP"
    key = "vwap"
    category = "volume"
    params_class = VWAPParams
    state_class = VWAPState
    PARAMETERS = (
        ParamDescriptor("variant", ParamType.ENUM, "Price used per bar", options=VARIANTS),
        ParamDescriptor("session_reset", ParamType.ENUM, "When the cumulative sums restart",
                        options=SESSION_RESETS),
    )
    OUTPUT = OutputDescriptor(
        OutputType.SINGLE_VALUE,
        "Volume weighted average price for the current session",
        example="101.200000",
    )

    def _required(self, params: VWAPParams) -> int:
        return 1

    def _init_state(self, params: VWAPParams) -> VWAPState:
        return VWAPState(params=params)

    def _advance(self, state: VWAPState, bar: Bar, index: Optional[int]):
        params = state.params
        reset = False
        session_start = state.session_start
        if params.session_reset != "none":
            require_timestamp(bar, index)
            if session_start is None:
                session_start = bar.timestamp
            elif (session_bucket(bar.timestamp, params.session_reset)
                  != session_bucket(session_start, params.session_reset)):
                session_start = bar.timestamp
                reset = True

        price_volume = state.cumulative_price_volume
        volume = state.cumulative_volume
        if reset:
            price_volume, volume = ZERO, ZERO

        price = bar_price(bar, params.variant)
        price_volume += price * bar.volume
        volume += bar.volume
        new_state = replace(
            state,
            cumulative_price_volume=price_volume,
            cumulative_volume=volume,
            session_start=session_start,
            count=state.count + 1,
        )
        if volume == 0:
            return new_state, None

        return new_state, self._emit(
            price_volume / volume, bar, params,
            price_used=price,
            volume=bar.volume,
            cumulative_volume=volume,
            session_reset_occurred=reset,
        )

    def _calculate(self, points, params: VWAPParams) -> List[IndicatorValue]:
        bars = [require_volume_bar(point, i) for i, point in enumerate(points)]
        state = self._init_state(params)
        results = []
        for i, bar in enumerate(bars):
            state, result = self._advance(state, bar, i)
            if result is not None:
                results.append(result)
        return results

    def _update(self, state: VWAPState, point) -> Tuple[VWAPState, Optional[IndicatorValue]]:
        return self._advance(state, require_volume_bar(point, None), None)
