"""Numeric utilities for consistent Decimal handling."""

import math
from decimal import (
    Context,
    Decimal,
    DivisionByZero,
    InvalidOperation,
    ROUND_HALF_EVEN,
    ROUND_HALF_UP,
    localcontext,
)
from typing import Iterable

from ..models.errors import CalculationError, InvalidDataFormat

# Working precision for intermediates; entered locally, never set globally.
WORKING_PRECISION = 28
DEFAULT_PRECISION = 6

ZERO = Decimal(0)
ONE = Decimal(1)
HUNDRED = Decimal(100)


def calculation_context() -> Context:
    """Decimal context every public entry point computes in."""
    return Context(
        prec=WORKING_PRECISION,
        rounding=ROUND_HALF_EVEN,
        traps=[DivisionByZero, InvalidOperation],
    )


def decimal_scope():
    """Enter the calculation context for the duration of a with-block."""
    return localcontext(calculation_context())


def D(x) -> Decimal:
    """
    Robust Decimal conversion for ints/floats/strings/Decimals.

    Floats go through str() to avoid binary floating-point artifacts.
    NaN and infinities are rejected here so no algorithm ever sees them.

    Args:
        x: Value to convert (int, float, str, or Decimal)

    Returns:
        Decimal: Converted value

    Raises:
        InvalidDataFormat: If the type is unsupported or the value is not finite
    """
    if isinstance(x, bool):
        raise InvalidDataFormat("finite number", type(x).__name__)
    if isinstance(x, Decimal):
        value = x
    elif isinstance(x, int):
        value = Decimal(x)
    elif isinstance(x, float):
        value = Decimal(str(x))
    elif isinstance(x, str):
        try:
            value = Decimal(x.strip())
        except InvalidOperation:
            raise InvalidDataFormat("numeric string", repr(x))
    else:
        raise InvalidDataFormat("finite number", type(x).__name__)

    if not value.is_finite():
        raise InvalidDataFormat("finite number", str(value))
    return value


def is_finite_number(x) -> bool:
    """True when D(x) would accept the value."""
    try:
        D(x)
    except InvalidDataFormat:
        return False
    return True


def safe_div(numerator: Decimal, denominator: Decimal, operation: str = "division") -> Decimal:
    """Divide, surfacing a zero divisor as CalculationError."""
    if denominator == 0:
        raise CalculationError(operation, "division by zero", values=(numerator, denominator))
    return numerator / denominator


def sqrt(value: Decimal, operation: str = "sqrt") -> Decimal:
    """Square root through an IEEE double; precision loss is accepted."""
    if value < 0:
        raise CalculationError(operation, "square root of negative value", values=(value,))
    return Decimal(repr(math.sqrt(float(value))))


def ln(value: Decimal, operation: str = "ln") -> Decimal:
    """Natural logarithm through an IEEE double."""
    if value <= 0:
        raise CalculationError(operation, "logarithm of non-positive value", values=(value,))
    return Decimal(repr(math.log(float(value))))


def round_decimal(value: Decimal, places: int = DEFAULT_PRECISION) -> Decimal:
    """Quantize to a fixed number of fractional digits, half-up."""
    exponent = Decimal(1).scaleb(-places)
    with localcontext(calculation_context()) as ctx:
        # Large magnitudes need extra digits to hold the fractional part.
        ctx.prec = max(WORKING_PRECISION, value.adjusted() + places + 2)
        rounded = value.quantize(exponent, rounding=ROUND_HALF_UP)
    # No negative zero in output.
    return abs(rounded) if rounded == 0 else rounded


def decimal_sum(values: Iterable[Decimal]) -> Decimal:
    """Left-to-right sum starting from Decimal zero."""
    total = ZERO
    for value in values:
        total += value
    return total
