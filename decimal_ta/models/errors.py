"""
Error taxonomy shared by all indicators.

Errors are ordinary values: indicators return them inside a BatchResult or
StreamUpdate on the steady-state path and only raise them where no result
channel exists (facade lookups, init_state).
"""

from typing import Any, Dict, Optional


class IndicatorError(Exception):
    """Base class for every error produced by the library."""

    kind = "indicator_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """Structured view of the error for logging and serialization."""
        data = {"kind": self.kind, "message": self.message}
        data.update(self._fields())
        return data

    def _fields(self) -> Dict[str, Any]:
        return {}

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash((self.kind, self.message))


class InsufficientData(IndicatorError):
    """Input shorter than the indicator's required periods."""

    kind = "insufficient_data"

    def __init__(self, required: int, provided: int, indicator: Optional[str] = None):
        self.required = required
        self.provided = provided
        self.indicator = indicator
        prefix = f"{indicator} requires" if indicator else "Insufficient data: required"
        super().__init__(f"{prefix} {required} data points, got {provided}")

    def _fields(self):
        return {"required": self.required, "provided": self.provided}


class InvalidParams(IndicatorError, ValueError):
    """A recognized option failed its domain check."""

    kind = "invalid_params"

    def __init__(self, param: str, value: Any, expected: str, message: Optional[str] = None):
        self.param = param
        self.value = value
        self.expected = expected
        super().__init__(message or f"Invalid parameter '{param}': expected {expected}, got {value!r}")

    def _fields(self):
        return {"param": self.param, "value": self.value, "expected": self.expected}


class InvalidDataFormat(IndicatorError, TypeError):
    """A data element has the wrong shape for the computation."""

    kind = "invalid_data_format"

    def __init__(self, expected: str, received: Any, index: Optional[int] = None,
                 message: Optional[str] = None):
        self.expected = expected
        self.received = received
        self.index = index
        if message is None:
            where = f" at index {index}" if index is not None else ""
            message = f"Invalid data format{where}: expected {expected}, got {received}"
        super().__init__(message)

    def _fields(self):
        return {"expected": self.expected, "received": self.received, "index": self.index}


class ValidationError(IndicatorError, ValueError):
    """A data value is physically nonsensical (negative price, high < low)."""

    kind = "validation_error"

    def __init__(self, field: str, value: Any, constraint: str, index: Optional[int] = None):
        self.field = field
        self.value = value
        self.constraint = constraint
        self.index = index
        where = f" at index {index}" if index is not None else ""
        super().__init__(f"Validation failed for field '{field}'{where}: {constraint} (got {value})")

    def _fields(self):
        return {"field": self.field, "value": self.value, "constraint": self.constraint,
                "index": self.index}


class StreamStateError(IndicatorError):
    """A streaming call received a state this indicator cannot advance."""

    kind = "stream_state_error"

    def __init__(self, operation: str, reason: str, state: Any = None):
        self.operation = operation
        self.reason = reason
        self.state = state
        super().__init__(f"Stream state error during {operation}: {reason}")

    def _fields(self):
        return {"operation": self.operation, "reason": self.reason}


class CalculationError(IndicatorError, ArithmeticError):
    """Numeric failure surfaced from the decimal substrate."""

    kind = "calculation_error"

    def __init__(self, operation: str, reason: str, values: Any = None):
        self.operation = operation
        self.reason = reason
        self.values = values
        super().__init__(f"Calculation failed in {operation}: {reason}")

    def _fields(self):
        return {"operation": self.operation, "reason": self.reason}
