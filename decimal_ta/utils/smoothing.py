"""
Immutable running averages shared by batch loops and streaming state.

Each accumulator collects `seed_size` values, seeds itself with their
simple mean, then applies its recurrence to every later value.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional, Tuple

from .numeric import ONE
from .series import mean


def smoothing_factor(period: int) -> Decimal:
    """Standard EMA alpha, 2 / (period + 1)."""
    return Decimal(2) / Decimal(period + 1)


def ema_step(value: Decimal, previous: Decimal, alpha: Decimal) -> Decimal:
    return alpha * value + (ONE - alpha) * previous


def rma_step(value: Decimal, previous: Decimal, period: int) -> Decimal:
    """Wilder's running average, ((n - 1) * prev + x) / n."""
    n = Decimal(period)
    return ((n - ONE) * previous + value) / n


@dataclass(frozen=True)
class ExponentialAverage:
    """Exponential moving average with a configurable seed."""
    alpha: Decimal
    seed_size: int
    seed: Tuple[Decimal, ...] = ()
    value: Optional[Decimal] = None

    @classmethod
    def create(cls, period: int, alpha: Optional[Decimal] = None,
               seed_size: Optional[int] = None) -> "ExponentialAverage":
        return cls(
            alpha=alpha if alpha is not None else smoothing_factor(period),
            seed_size=seed_size if seed_size is not None else period,
        )

    @property
    def warm(self) -> bool:
        return self.value is not None

    def push(self, x: Decimal) -> "ExponentialAverage":
        if self.value is None:
            seed = self.seed + (x,)
            if len(seed) < self.seed_size:
                return replace(self, seed=seed)
            return replace(self, seed=(), value=mean(seed))
        return replace(self, value=ema_step(x, self.value, self.alpha))


@dataclass(frozen=True)
class WilderAverage:
    """Wilder's running moving average (RMA)."""
    period: int
    seed_size: int
    seed: Tuple[Decimal, ...] = ()
    value: Optional[Decimal] = None

    @classmethod
    def create(cls, period: int, seed_size: Optional[int] = None) -> "WilderAverage":
        return cls(period=period, seed_size=seed_size if seed_size is not None else period)

    @property
    def warm(self) -> bool:
        return self.value is not None

    def push(self, x: Decimal) -> "WilderAverage":
        if self.value is None:
            seed = self.seed + (x,)
            if len(seed) < self.seed_size:
                return replace(self, seed=seed)
            return replace(self, seed=(), value=mean(seed))
        return replace(self, value=rma_step(x, self.value, self.period))
