"""
Base indicator classes.

Every indicator implements the batch capability (Indicator). Indicators
that can run incrementally also implement the streaming capability
(StreamingIndicator): init_state / update_state over immutable state
records owned by the caller.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, fields, replace
from decimal import DivisionByZero, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..models.errors import (
    CalculationError,
    IndicatorError,
    InsufficientData,
    InvalidParams,
    StreamStateError,
)
from ..models.metadata import OutputDescriptor, ParamDescriptor
from ..models.ohlcv import Bar
from ..models.result import BatchResult, IndicatorValue, StreamBatch, StreamUpdate
from ..utils.numeric import DEFAULT_PRECISION, decimal_scope, round_decimal
from ..utils.smoothing import ExponentialAverage, WilderAverage
from ..utils.validation import (
    Point,
    as_sequence,
    check_options_map,
    check_params,
    coerce_params,
    normalize_point,
    normalize_points,
    record_shape_error,
)
from ..utils.window import RollingWindow

logger = logging.getLogger(__name__)

DECIMAL_FAULTS = (DivisionByZero, InvalidOperation)
BUFFER_TYPES = (RollingWindow, ExponentialAverage, WilderAverage)


class Indicator(ABC):
    """
    Batch capability shared by every indicator.

    Subclasses declare:
        name: Display name used in result metadata (e.g. 'SMA')
        key: Registry key (e.g. 'sma')
        category: 'trend', 'momentum', 'volatility' or 'volume'
        params_class: Frozen dataclass holding the default parameters
        PARAMETERS: ParamDescriptor tuple for every accepted option
        OUTPUT: OutputDescriptor for the result value
    """

    name: str = ""
    key: str = ""
    category: str = ""
    params_class: type = None
    PARAMETERS: Tuple[ParamDescriptor, ...] = ()
    OUTPUT: OutputDescriptor = None
    parameterless = False

    def __init__(self, defaults: Optional[Mapping[str, Any]] = None,
                 precision: int = DEFAULT_PRECISION):
        """
        Initialize indicator.

        Args:
            defaults: Overrides for the built-in default parameters
            precision: Fractional digits kept in emitted values

        Raises:
            InvalidParams: If an override fails validation
        """
        if isinstance(precision, bool) or not isinstance(precision, int) or precision < 0:
            raise InvalidParams("precision", precision, "non-negative integer")
        self.precision = precision
        self.defaults = self.params_class()
        error = self.validate_params(defaults)
        if error is not None:
            raise error
        self.defaults = self._resolve(defaults)

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    def validate_params(self, options: Optional[Mapping[str, Any]] = None) -> Optional[InvalidParams]:
        """
        Check options without touching any data.

        Returns:
            None when valid, otherwise the InvalidParams error
        """
        error = check_options_map(options)
        if error is not None:
            return error
        options = options or {}
        if self.parameterless:
            if options:
                return InvalidParams("unsupported_params", sorted(options), "no parameters",
                                     f"{self.name} does not accept parameters, got {sorted(options)}")
            return None
        error = check_params(options, self.PARAMETERS)
        if error is not None:
            return error
        return self._check_relationships(self._resolve(options))

    def _check_relationships(self, params) -> Optional[InvalidParams]:
        """Cross-field checks (e.g. fast < slow). Override where needed."""
        return None

    def _resolve(self, options: Optional[Mapping[str, Any]]):
        if not options or self.parameterless:
            return self.defaults
        return replace(self.defaults, **coerce_params(options, self.PARAMETERS))

    def resolve_params(self, options: Optional[Mapping[str, Any]] = None):
        """Effective parameters for options merged over the defaults."""
        error = self.validate_params(options)
        if error is not None:
            raise error
        return self._resolve(options)

    def required_periods(self, options: Optional[Mapping[str, Any]] = None) -> int:
        """Minimum input length that yields at least one value."""
        return self._required(self.resolve_params(options))

    @abstractmethod
    def _required(self, params) -> int:
        pass

    def parameter_metadata(self) -> Tuple[ParamDescriptor, ...]:
        """Descriptors for every accepted option, with effective defaults."""
        return tuple(
            replace(descriptor, default=getattr(self.defaults, descriptor.name))
            for descriptor in self.PARAMETERS
        )

    def output_fields_metadata(self) -> OutputDescriptor:
        return self.OUTPUT

    @property
    def supports_streaming(self) -> bool:
        return isinstance(self, StreamingIndicator)

    def info(self) -> Dict[str, Any]:
        """Summary used by the category facades."""
        return {
            "name": self.name,
            "key": self.key,
            "category": self.category,
            "required_periods": self._required(self.defaults),
            "supports_streaming": self.supports_streaming,
            "parameters": [d.to_dict() for d in self.parameter_metadata()],
            "outputs": self.OUTPUT.to_dict() if self.OUTPUT else None,
        }

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def calculate(self, data, options: Optional[Mapping[str, Any]] = None) -> BatchResult:
        """
        Compute the indicator over a full series.

        Validation order: options, then length, then element shape. The
        result is all-or-nothing.

        Args:
            data: Sequence of Bar / mapping records, an OHLCV series, or bare prices
            options: Indicator options merged over the defaults

        Returns:
            BatchResult with every emitted value, or the first error
        """
        with decimal_scope():
            error = self.validate_params(options)
            if error is not None:
                return self._batch_failed(error)
            params = self._resolve(options)
            try:
                series = as_sequence(data)
                required = self._required(params)
                if len(series) < required:
                    raise InsufficientData(required, len(series), self.name)
                points = normalize_points(series)
                values = self._calculate(points, params)
            except IndicatorError as e:
                return self._batch_failed(e)
            except DECIMAL_FAULTS as e:
                return self._batch_failed(CalculationError(self.key, type(e).__name__))
            return BatchResult(values=tuple(values))

    @abstractmethod
    def _calculate(self, points: Tuple[Point, ...], params) -> List[IndicatorValue]:
        """Pure transform over normalized points; may raise IndicatorError."""
        pass

    def _batch_failed(self, error: IndicatorError) -> BatchResult:
        log = logger.warning if isinstance(error, CalculationError) else logger.debug
        log("indicator_calculation_failed", extra={
            "indicator": self.key,
            "error": error.to_dict(),
        })
        return BatchResult.failure(error)

    # ------------------------------------------------------------------
    # Result construction
    # ------------------------------------------------------------------

    def _round(self, value):
        if value is None:
            return None
        if isinstance(value, dict):
            return {k: self._round(v) for k, v in value.items()}
        return round_decimal(value, self.precision)

    def _params_metadata(self, params) -> Dict[str, Any]:
        if params is None:
            return {}
        return asdict(params)

    def _emit(self, value, point: Point, params, **extra) -> IndicatorValue:
        """Build a result: rounded value, point timestamp, tagged metadata."""
        metadata = {"indicator": self.name}
        metadata.update(self._params_metadata(params))
        metadata.update(extra)
        return IndicatorValue(
            value=self._round(value),
            timestamp=point.timestamp if isinstance(point, Bar) else None,
            metadata=metadata,
        )


class StreamingIndicator(Indicator):
    """
    Streaming capability.

    State records are frozen dataclasses with a `params` field echoing the
    configuration; update_state always returns a new record.
    """

    state_class: type = None

    def init_state(self, options: Optional[Mapping[str, Any]] = None):
        """
        Create a fresh streaming state.

        Raises:
            InvalidParams: If options fail validation
        """
        with decimal_scope():
            return self._init_state(self.resolve_params(options))

    @abstractmethod
    def _init_state(self, params):
        pass

    def update_state(self, state, point) -> StreamUpdate:
        """
        Feed one point into the stream.

        Args:
            state: State produced by this indicator
            point: Bar, mapping record or bare price

        Returns:
            StreamUpdate with the new state and a result once warm; on
            failure the given state is returned untouched with the error
        """
        with decimal_scope():
            error = self._check_state(state, "update_state")
            if error is not None:
                return self._stream_failed(state, error)
            try:
                new_state, result = self._update(state, normalize_point(point))
            except IndicatorError as e:
                return self._stream_failed(state, e)
            except DECIMAL_FAULTS as e:
                return self._stream_failed(state, CalculationError(self.key, type(e).__name__))
            return StreamUpdate(state=new_state, result=result)

    @abstractmethod
    def _update(self, state, point: Point) -> Tuple[Any, Optional[IndicatorValue]]:
        pass

    def process_batch(self, state, points: Iterable) -> StreamBatch:
        """
        Fold several points through update_state.

        Stops at the first failing point; the returned state is the last
        good one and `processed` counts the points consumed.
        """
        current = state
        results = []
        processed = 0
        for point in as_sequence(points):
            update = self.update_state(current, point)
            if not update.success:
                return StreamBatch(state=current, results=tuple(results),
                                   error=update.error, processed=processed)
            current = update.state
            processed += 1
            if update.result is not None:
                results.append(update.result)
        return StreamBatch(state=current, results=tuple(results), processed=processed)

    def reset_state(self, state):
        """Fresh state with the same parameters as `state`."""
        error = self._check_state(state, "reset_state")
        if error is not None:
            raise error
        return self._init_state(state.params)

    def _check_state(self, state, operation: str) -> Optional[StreamStateError]:
        if not isinstance(state, self.state_class):
            return StreamStateError(
                operation,
                f"expected {self.state_class.__name__}, got {type(state).__name__}",
                state,
            )
        if not isinstance(state.params, self.params_class):
            return StreamStateError(
                operation,
                f"state params are {type(state.params).__name__}, "
                f"expected {self.params_class.__name__}",
                state,
            )
        reason = self._shape_error(state)
        if reason is not None:
            return StreamStateError(operation, f"malformed state: {reason}", state)
        return None

    def _shape_error(self, state) -> Optional[str]:
        """
        Why a state of the right class still cannot be advanced.

        Every field must hold its annotated type, the echoed params must
        pass validation, and each buffer must be the kind and size a fresh
        state for those params would carry.
        """
        reason = record_shape_error(state)
        if reason is not None:
            return reason
        options = {d.name: getattr(state.params, d.name) for d in self.PARAMETERS}
        error = self.validate_params(options)
        if error is not None:
            return f"params.{error.param} is invalid"
        fresh = self._init_state(state.params)
        for field in fields(state):
            expected = getattr(fresh, field.name)
            if not isinstance(expected, BUFFER_TYPES):
                continue
            actual = getattr(state, field.name)
            if type(actual) is not type(expected):
                return f"{field.name} is {type(actual).__name__}, expected {type(expected).__name__}"
            if isinstance(expected, RollingWindow) and actual.capacity != expected.capacity:
                return f"{field.name} capacity is {actual.capacity}, expected {expected.capacity}"
        return None

    def _stream_failed(self, state, error: IndicatorError) -> StreamUpdate:
        event = "stream_state_mismatch" if isinstance(error, StreamStateError) else "stream_update_failed"
        logger.debug(event, extra={"indicator": self.key, "error": error.to_dict()})
        return StreamUpdate(state=state, error=error)
