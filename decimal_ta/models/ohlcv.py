"""
OHLCV data models for price bars and time series.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from .errors import InvalidDataFormat, ValidationError
from ..utils.numeric import D

PRICE_FIELDS = ("open", "high", "low", "close")
SERIES_FIELDS = PRICE_FIELDS + ("volume",)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing 'Z' for UTC."""
    text = value.strip()
    zulu = text.endswith("Z")
    if zulu:
        text = text[:-1]
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidDataFormat("ISO-8601 timestamp", repr(value))
    if zulu and parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Bar:
    """
    Single OHLCV bar (immutable).

    Numeric fields are coerced to Decimal on construction and must be
    finite. Price ordering is not enforced here; call validate() where
    physically consistent bars are required.
    """
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Optional[Decimal] = None
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        for name in PRICE_FIELDS:
            object.__setattr__(self, name, D(getattr(self, name)))
        if self.volume is not None:
            object.__setattr__(self, 'volume', D(self.volume))
        if isinstance(self.timestamp, str):
            object.__setattr__(self, 'timestamp', parse_timestamp(self.timestamp))
        if self.timestamp is not None and not isinstance(self.timestamp, datetime):
            raise InvalidDataFormat("datetime timestamp", type(self.timestamp).__name__)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], index: Optional[int] = None) -> "Bar":
        """
        Build a bar from a dict-like record.

        Args:
            data: Mapping with open/high/low/close keys, optional volume/timestamp
            index: Position in the source series, used in error reports

        Returns:
            Bar instance
        """
        missing = [name for name in PRICE_FIELDS if data.get(name) is None]
        if missing:
            raise InvalidDataFormat(
                "OHLCV record with open, high, low and close",
                f"record missing {', '.join(missing)}",
                index,
            )
        try:
            return cls(
                open=data["open"],
                high=data["high"],
                low=data["low"],
                close=data["close"],
                volume=data.get("volume"),
                timestamp=data.get("timestamp"),
            )
        except InvalidDataFormat as e:
            raise InvalidDataFormat(e.expected, e.received, index)

    def validate(self, index: Optional[int] = None) -> Optional[ValidationError]:
        """
        Check physical consistency of the bar.

        Returns:
            ValidationError for the first violated constraint, or None
        """
        for name in PRICE_FIELDS:
            value = getattr(self, name)
            if value < 0:
                return ValidationError(name, value, "must be non-negative", index)
        if self.volume is not None and self.volume < 0:
            return ValidationError("volume", self.volume, "must be non-negative", index)
        if self.high < self.low:
            return ValidationError("high", self.high, f"must be >= low ({self.low})", index)
        return None

    @property
    def range(self) -> Decimal:
        """High minus low."""
        return self.high - self.low

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open


@dataclass(frozen=True)
class OHLCV:
    """Time series of OHLCV bars."""
    symbol: str
    bars: Tuple[Bar, ...]
    timeframe: str

    @property
    def latest_bar(self) -> Optional[Bar]:
        """Get the most recent bar."""
        return self.bars[-1] if self.bars else None

    @property
    def length(self) -> int:
        """Number of bars."""
        return len(self.bars)

    def __len__(self) -> int:
        return len(self.bars)

    def __iter__(self):
        return iter(self.bars)
