"""
Result records returned by indicators.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from .errors import IndicatorError

IndicatorOutput = Union[Decimal, Dict[str, Optional[Decimal]]]


@dataclass(frozen=True)
class IndicatorValue:
    """Single indicator value with metadata."""
    value: IndicatorOutput
    timestamp: Optional[datetime] = None
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        if self.metadata is None:
            object.__setattr__(self, 'metadata', {})

    @property
    def indicator(self) -> Optional[str]:
        return self.metadata.get("indicator")

    @property
    def signal(self) -> Optional[str]:
        return self.metadata.get("signal")


@dataclass(frozen=True)
class BatchResult:
    """Outcome of a batch calculation: every value or a single error."""
    values: Tuple[IndicatorValue, ...] = ()
    error: Optional[IndicatorError] = None

    @property
    def success(self) -> bool:
        return self.error is None

    ok = success

    @classmethod
    def failure(cls, error: IndicatorError) -> "BatchResult":
        return cls(values=(), error=error)

    def unwrap(self) -> Tuple[IndicatorValue, ...]:
        """Return the values, raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.values

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self):
        return iter(self.values)

    def __getitem__(self, index):
        return self.values[index]


@dataclass(frozen=True)
class StreamUpdate:
    """
    Outcome of one streaming update.

    On failure `state` is the state passed in, unchanged, so the caller may
    retry with corrected input.
    """
    state: Any
    result: Optional[IndicatorValue] = None
    error: Optional[IndicatorError] = None

    @property
    def success(self) -> bool:
        return self.error is None

    ok = success

    @property
    def is_warm(self) -> bool:
        return self.result is not None

    def unwrap(self) -> Tuple[Any, Optional[IndicatorValue]]:
        """Return (state, result), raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.state, self.result


@dataclass(frozen=True)
class StreamBatch:
    """Outcome of folding several points through update_state."""
    state: Any
    results: Tuple[IndicatorValue, ...] = field(default_factory=tuple)
    error: Optional[IndicatorError] = None
    processed: int = 0

    @property
    def success(self) -> bool:
        return self.error is None

    ok = success
