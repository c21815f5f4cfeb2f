"""
Shared parameter and data validation.

Parameter checks are driven by each indicator's ParamDescriptor list so
the same rules back validate_params, parameter_metadata and the config
layer.
"""

from dataclasses import fields, is_dataclass
from decimal import Decimal
from functools import lru_cache
from typing import (
    Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union, get_args, get_origin, get_type_hints,
)

from ..models.errors import InvalidDataFormat, InvalidParams, ValidationError
from ..models.metadata import ParamDescriptor, ParamType
from ..models.ohlcv import OHLCV, Bar, SERIES_FIELDS
from .numeric import D

Point = Union[Bar, Decimal]


def check_options_map(options: Any) -> Optional[InvalidParams]:
    """Options must be a mapping (or None for all defaults)."""
    if options is None or isinstance(options, Mapping):
        return None
    return InvalidParams("options", options, "mapping of option names to values")


def _as_param_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    if not isinstance(value, (Decimal, int, float, str)):
        return None
    try:
        return D(value)
    except InvalidDataFormat:
        return None


def _range_text(descriptor: ParamDescriptor) -> str:
    low = descriptor.min
    high = descriptor.max
    if low is not None and high is not None:
        left = "(" if descriptor.exclusive_min else "["
        return f"in range {left}{low}, {high}]"
    if low is not None:
        return f"> {low}" if descriptor.exclusive_min else f">= {low}"
    if high is not None:
        return f"<= {high}"
    return ""


def check_param(descriptor: ParamDescriptor, value: Any) -> Optional[InvalidParams]:
    """
    Check one option value against its descriptor.

    Args:
        descriptor: Parameter descriptor
        value: Value supplied by the caller

    Returns:
        InvalidParams describing the violation, or None
    """
    name = descriptor.name
    if value is None and descriptor.nullable:
        return None

    if descriptor.type == ParamType.INTEGER:
        if isinstance(value, bool) or not isinstance(value, int):
            return InvalidParams(name, value, f"integer {_range_text(descriptor)}".strip())
        number = Decimal(value)
    elif descriptor.type == ParamType.DECIMAL:
        number = _as_param_decimal(value)
        if number is None:
            return InvalidParams(name, value, f"number {_range_text(descriptor)}".strip())
    elif descriptor.type == ParamType.BOOLEAN:
        if not isinstance(value, bool):
            return InvalidParams(name, value, "boolean")
        return None
    elif descriptor.type == ParamType.ENUM:
        if value not in descriptor.options:
            return InvalidParams(name, value, f"one of {', '.join(descriptor.options)}")
        return None
    else:
        return None

    expected = f"{descriptor.type.value} {_range_text(descriptor)}"
    if descriptor.min is not None:
        low = D(descriptor.min)
        if number < low or (descriptor.exclusive_min and number == low):
            return InvalidParams(name, value, expected)
    if descriptor.max is not None and number > D(descriptor.max):
        return InvalidParams(name, value, expected)
    return None


def check_params(options: Mapping[str, Any],
                 descriptors: Iterable[ParamDescriptor]) -> Optional[InvalidParams]:
    """Check every recognized option; unrecognized keys are ignored."""
    for descriptor in descriptors:
        if descriptor.name in options:
            error = check_param(descriptor, options[descriptor.name])
            if error is not None:
                return error
        elif descriptor.required:
            return InvalidParams(descriptor.name, None, "required parameter")
    return None


def coerce_params(options: Mapping[str, Any],
                  descriptors: Iterable[ParamDescriptor]) -> Dict[str, Any]:
    """Recognized options converted to their working types."""
    values = {}
    for descriptor in descriptors:
        if descriptor.name not in options:
            continue
        value = options[descriptor.name]
        if descriptor.type == ParamType.DECIMAL and value is not None:
            value = D(value)
        values[descriptor.name] = value
    return values


def check_levels(overbought: Decimal, oversold: Decimal) -> Optional[InvalidParams]:
    if oversold >= overbought:
        return InvalidParams(
            "oversold", oversold, f"less than overbought ({overbought})",
        )
    return None


def check_period_order(fast: int, slow: int, fast_name: str = "fast_period",
                       slow_name: str = "slow_period") -> Optional[InvalidParams]:
    if fast >= slow:
        return InvalidParams(fast_name, fast, f"less than {slow_name} ({slow})")
    return None


def as_sequence(data: Any) -> Tuple[Any, ...]:
    """
    Turn the caller's data argument into a tuple of raw elements.

    Raises:
        InvalidDataFormat: If data is not a sequence of records or prices
    """
    if isinstance(data, OHLCV):
        return tuple(data.bars)
    if data is None or isinstance(data, (str, bytes, Mapping, Bar)):
        return _not_a_series(data)
    try:
        return tuple(data)
    except TypeError:
        return _not_a_series(data)


def _not_a_series(data: Any):
    raise InvalidDataFormat("sequence of OHLCV records or prices", type(data).__name__)


def normalize_point(point: Any, index: Optional[int] = None) -> Point:
    """
    Convert one data element into a Bar or a bare Decimal price.

    Raises:
        InvalidDataFormat: For unsupported shapes or non-finite values
    """
    if isinstance(point, Bar):
        return point
    if isinstance(point, Mapping):
        return Bar.from_mapping(point, index)
    if isinstance(point, (Decimal, int, float)) and not isinstance(point, bool):
        try:
            return D(point)
        except InvalidDataFormat as e:
            raise InvalidDataFormat(e.expected, e.received, index)
    raise InvalidDataFormat("OHLCV record or Decimal price", type(point).__name__, index)


def normalize_points(series: Sequence[Any]) -> Tuple[Point, ...]:
    return tuple(normalize_point(point, i) for i, point in enumerate(series))


def price_of(point: Point, source: str = "close", index: Optional[int] = None) -> Decimal:
    """
    Select a series field; a bare price stands for any price source.

    Raises:
        InvalidDataFormat: If volume is selected and the point carries none
    """
    if source == "volume":
        bar = require_bar(point, index, "OHLCV bar with volume")
        if bar.volume is None:
            raise InvalidDataFormat("OHLCV bar with volume", "bar without volume", index)
        return bar.volume
    if isinstance(point, Bar):
        return getattr(point, source)
    return point


def extract_field(points: Sequence[Point], source: str = "close") -> Tuple[Decimal, ...]:
    """Pull one OHLCV field into a flat Decimal series."""
    if source not in SERIES_FIELDS:
        raise InvalidParams("source", source, f"one of {', '.join(SERIES_FIELDS)}")
    return tuple(price_of(point, source, i) for i, point in enumerate(points))


def require_bar(point: Point, index: Optional[int], needs: str = "OHLC bar") -> Bar:
    """The point as a Bar, or InvalidDataFormat for a bare price."""
    if not isinstance(point, Bar):
        raise InvalidDataFormat(needs, "price value", index)
    return point


def require_volume_bar(point: Point, index: Optional[int]) -> Bar:
    """A Bar carrying volume whose values are physically valid."""
    bar = require_bar(point, index, "OHLCV bar with volume")
    if bar.volume is None:
        raise InvalidDataFormat("OHLCV bar with volume", "bar without volume", index)
    error = bar.validate(index)
    if error is not None:
        raise error
    return bar


def require_timestamp(bar: Bar, index: Optional[int]) -> None:
    if bar.timestamp is None:
        raise InvalidDataFormat("bar with timestamp", "bar without timestamp", index)


def first_invalid(points: Sequence[Point]) -> Optional[ValidationError]:
    """First physically invalid bar in a series, if any."""
    for i, point in enumerate(points):
        if isinstance(point, Bar):
            error = point.validate(i)
            if error is not None:
                return error
        elif point < 0:
            return ValidationError("price", point, "must be non-negative", i)
    return None


@lru_cache(maxsize=None)
def _field_types(record_class: type) -> Tuple[Tuple[str, Any], ...]:
    hints = get_type_hints(record_class)
    return tuple((f.name, hints[f.name]) for f in fields(record_class))


def _matches(value: Any, expected: Any) -> bool:
    if expected is Any:
        return True
    origin = get_origin(expected)
    if origin is Union:
        return any(_matches(value, option) for option in get_args(expected))
    if origin is not None:
        return isinstance(value, origin)
    if expected is type(None):
        return value is None
    if expected is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if isinstance(expected, type):
        return isinstance(value, expected)
    return True


def record_shape_error(record: Any, path: str = "") -> Optional[str]:
    """
    Describe the first field of a dataclass record that does not hold a
    value of its annotated type. Nested dataclass values are checked the
    same way.

    Returns:
        e.g. 'window is NoneType', or None when every field matches
    """
    for name, expected in _field_types(type(record)):
        value = getattr(record, name)
        where = f"{path}{name}"
        if not _matches(value, expected):
            return f"{where} is {type(value).__name__}"
        if is_dataclass(value) and not isinstance(value, type):
            error = record_shape_error(value, f"{where}.")
            if error is not None:
                return error
    return None
