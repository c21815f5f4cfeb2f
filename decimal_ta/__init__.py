"""
decimal-ta: technical-analysis indicators in exact decimal arithmetic.

Every indicator offers batch calculation over a full series and, through
init_state / update_state, incremental calculation that reproduces the
same values one point at a time.
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .indicators.momentum.manager import MomentumIndicators
from .indicators.trend.manager import TrendIndicators
from .indicators.volatility.manager import VolatilityIndicators
from .indicators.volume.manager import VolumeIndicators
from .models.errors import IndicatorError, InvalidDataFormat
from .models.result import IndicatorValue
from .utils.numeric import decimal_scope
from .utils.validation import (
    as_sequence,
    extract_field,
    first_invalid,
    normalize_points,
)

__version__ = "0.1.0"

CATEGORIES = {
    "trend": TrendIndicators,
    "momentum": MomentumIndicators,
    "volatility": VolatilityIndicators,
    "volume": VolumeIndicators,
}


def categories() -> List[str]:
    """Names of the indicator categories."""
    return list(CATEGORIES)


def category(name: str, config: Optional[Mapping[str, Any]] = None):
    """
    Build the facade for one category.

    Raises:
        KeyError: If the category does not exist
    """
    return CATEGORIES[name](config)


def validate_data(data) -> Optional[IndicatorError]:
    """
    Check a whole series for shape and physical validity.

    Returns:
        The first InvalidDataFormat / ValidationError found, or None
    """
    with decimal_scope():
        try:
            points = normalize_points(as_sequence(data))
        except InvalidDataFormat as e:
            return e
        return first_invalid(points)


def extract_series(data, field: str = "close") -> Tuple:
    """Flat Decimal series of one OHLC field."""
    return extract_field(normalize_points(as_sequence(data)), field)


def create_result(value, timestamp: Optional[datetime] = None,
                  metadata: Optional[Dict[str, Any]] = None) -> IndicatorValue:
    return IndicatorValue(value=value, timestamp=timestamp, metadata=dict(metadata or {}))
