"""
Series utilities shared by all indicators.

Every helper here is pure and order-sensitive in the same way: batch and
streaming paths call the same function on the same tuple of values, which
is what keeps their results identical.
"""

from decimal import Decimal
from typing import Iterator, Optional, Sequence, Tuple

from ..models.ohlcv import Bar
from .numeric import D, ONE, ZERO, decimal_sum, safe_div, sqrt

TWO = Decimal(2)
THREE = Decimal(3)
FOUR = Decimal(4)


def sliding_window(series: Sequence, size: int) -> Iterator[Tuple]:
    """
    Lazily yield contiguous windows of exactly `size` elements.

    Yields len(series) - size + 1 windows, none when the series is shorter.
    """
    if size < 1:
        raise ValueError("window size must be >= 1")
    for end in range(size, len(series) + 1):
        yield tuple(series[end - size:end])


def mean(values: Sequence[Decimal]) -> Decimal:
    """Arithmetic mean; zero for an empty window."""
    if not values:
        return ZERO
    return decimal_sum(values) / Decimal(len(values))


def variance(values: Sequence[Decimal], ddof: int = 0) -> Decimal:
    """
    Variance over a window.

    Args:
        values: Window of values
        ddof: 0 for population (divide by N), 1 for sample (divide by N-1)

    Returns:
        Variance, zero when the window is too short for the requested ddof
    """
    n = len(values)
    if n - ddof <= 0:
        return ZERO
    avg = mean(values)
    squares = decimal_sum((v - avg) * (v - avg) for v in values)
    return squares / Decimal(n - ddof)


def standard_deviation(values: Sequence[Decimal], ddof: int = 0) -> Decimal:
    """Square root of variance(values, ddof)."""
    return sqrt(variance(values, ddof), "standard_deviation")


def mean_absolute_deviation(values: Sequence[Decimal]) -> Decimal:
    avg = mean(values)
    return mean(tuple(abs(v - avg) for v in values))


def weighted_mean(values: Sequence[Decimal]) -> Decimal:
    """Linearly weighted mean, weights 1..n from oldest to newest."""
    n = len(values)
    if n == 0:
        return ZERO
    numerator = decimal_sum(value * Decimal(i + 1) for i, value in enumerate(values))
    return numerator / Decimal(n * (n + 1) // 2)


def highest(values: Sequence[Decimal]) -> Decimal:
    return max(values)


def lowest(values: Sequence[Decimal]) -> Decimal:
    return min(values)


def true_range(current: Bar, previous: Optional[Bar] = None) -> Decimal:
    """
    True range of a bar.

    Without a previous bar this degrades to high - low.
    """
    high_low = current.high - current.low
    if previous is None:
        return high_low
    return max(
        high_low,
        abs(current.high - previous.close),
        abs(current.low - previous.close),
    )


def typical_price(bar: Bar) -> Decimal:
    """(high + low + close) / 3"""
    return (bar.high + bar.low + bar.close) / THREE


def weighted_close(bar: Bar) -> Decimal:
    """(high + low + 2 * close) / 4"""
    return (bar.high + bar.low + TWO * bar.close) / FOUR


def money_flow_multiplier(bar: Bar) -> Decimal:
    """
    Position of the close within the bar range, in [-1, 1].

    Defined as zero for a bar with no range.
    """
    price_range = bar.high - bar.low
    if price_range == 0:
        return ZERO
    return ((bar.close - bar.low) - (bar.high - bar.close)) / price_range


def money_flow_volume(bar: Bar) -> Decimal:
    return money_flow_multiplier(bar) * bar.volume


def price_change(current: Decimal, previous: Decimal, percentage: bool = True) -> Decimal:
    """
    Change from previous to current.

    Percentage changes from a zero base are reported as zero.
    """
    if not percentage:
        return current - previous
    if previous == 0:
        return ZERO
    return (current - previous) / previous * Decimal(100)


def sign_label(value: Decimal, positive: str = "bullish", negative: str = "bearish",
               flat: str = "neutral") -> str:
    if value > 0:
        return positive
    if value < 0:
        return negative
    return flat


def threshold_label(value: Decimal, overbought: Decimal, oversold: Decimal) -> str:
    """Qualitative overbought/oversold tag for an oscillator reading."""
    if value > overbought:
        return "overbought"
    if value < oversold:
        return "oversold"
    return "neutral"


def ratio(numerator: Decimal, denominator: Decimal, fallback: Decimal = ZERO) -> Decimal:
    """Divide, returning `fallback` for a zero denominator."""
    if denominator == 0:
        return fallback
    return safe_div(numerator, denominator)


def as_decimal_series(values: Sequence) -> Tuple[Decimal, ...]:
    return tuple(D(v) for v in values)


def efficiency_ratio(window: Sequence[Decimal]) -> Decimal:
    """
    Kaufman efficiency ratio over a window of prices.

    Net change divided by the sum of absolute bar-to-bar changes; a window
    with no movement at all counts as perfectly efficient.
    """
    direction = abs(window[-1] - window[0])
    volatility = decimal_sum(abs(window[i] - window[i - 1]) for i in range(1, len(window)))
    if volatility == 0:
        return ONE
    return direction / volatility
