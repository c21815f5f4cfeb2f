"""Category dispatch facade - routes indicator names to implementations."""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .base import Indicator, StreamingIndicator
from ..models.errors import InvalidParams, StreamStateError
from ..models.result import BatchResult, StreamBatch, StreamUpdate
from ..utils.numeric import DEFAULT_PRECISION

logger = logging.getLogger(__name__)


class IndicatorCategory:
    """
    Holds one configured instance of every indicator in a category.

    Config layout:
        {
          "precision": 6,
          "indicators": {"sma": {"period": 30}, ...}
        }
    """

    category: str = ""
    INDICATORS: tuple = ()

    def __init__(self, config: Optional[Mapping[str, Any]] = None):
        self.config = dict(config or {})
        self.precision = self.config.get("precision", DEFAULT_PRECISION)
        self.indicators: Dict[str, Indicator] = {}
        self._initialize_indicators()

    @classmethod
    def from_loader(cls, loader) -> "IndicatorCategory":
        """Build the category from a configs.ConfigLoader."""
        return cls(loader.get_config("indicators"))

    def _initialize_indicators(self) -> None:
        overrides = self.config.get("indicators", {})
        for indicator_class in self.INDICATORS:
            defaults = overrides.get(indicator_class.key)
            self.indicators[indicator_class.key] = indicator_class(
                defaults=defaults, precision=self.precision,
            )

        if len(self.indicators) != len(self.INDICATORS):
            raise ValueError(f"Duplicate indicator keys in {self.category}: "
                             f"{[c.key for c in self.INDICATORS]}")
        self._by_state = {
            indicator.state_class: indicator
            for indicator in self.indicators.values()
            if isinstance(indicator, StreamingIndicator)
        }
        logger.debug("category_initialized", extra={
            "category": self.category,
            "indicators": list(self.indicators),
            "precision": self.precision,
        })

    def available_indicators(self) -> List[str]:
        return list(self.indicators)

    def get(self, name: str) -> Indicator:
        """
        Look up an indicator by key or display name, case-insensitively.

        Raises:
            InvalidParams: If the category has no such indicator
        """
        wanted = str(name).lower()
        for key, indicator in self.indicators.items():
            if wanted in (key, indicator.name.lower()):
                return indicator
        raise InvalidParams(
            "indicator", name, f"one of {', '.join(self.indicators)}",
            f"Unknown {self.category} indicator: {name}",
        )

    def __contains__(self, name: str) -> bool:
        try:
            self.get(name)
        except InvalidParams:
            return False
        return True

    def calculate(self, name: str, data, options: Optional[Mapping[str, Any]] = None) -> BatchResult:
        """Run a batch calculation; an unknown name is returned as an error."""
        try:
            indicator = self.get(name)
        except InvalidParams as e:
            return BatchResult.failure(e)
        return indicator.calculate(data, options)

    def init_stream(self, name: str, options: Optional[Mapping[str, Any]] = None):
        return self._streaming(name).init_state(options)

    def update_stream(self, state, point) -> StreamUpdate:
        """Dispatch an update to the indicator that produced `state`."""
        indicator = self._by_state.get(type(state))
        if indicator is None:
            error = StreamStateError(
                "update_stream",
                f"{type(state).__name__} is not a {self.category} stream state",
                state,
            )
            logger.debug("stream_state_mismatch", extra={
                "category": self.category,
                "state_type": type(state).__name__,
            })
            return StreamUpdate(state=state, error=error)
        return indicator.update_state(state, point)

    def process_stream(self, state, points: Iterable) -> StreamBatch:
        indicator = self._by_state.get(type(state))
        if indicator is None:
            error = StreamStateError(
                "process_stream",
                f"{type(state).__name__} is not a {self.category} stream state",
                state,
            )
            return StreamBatch(state=state, error=error)
        return indicator.process_batch(state, points)

    def reset_stream(self, state):
        indicator = self._by_state.get(type(state))
        if indicator is None:
            raise StreamStateError(
                "reset_stream",
                f"{type(state).__name__} is not a {self.category} stream state",
                state,
            )
        return indicator.reset_state(state)

    def indicator_info(self, name: str) -> Dict[str, Any]:
        return self.get(name).info()

    def all_indicators_info(self) -> Dict[str, Dict[str, Any]]:
        return {key: indicator.info() for key, indicator in self.indicators.items()}

    def _streaming(self, name: str) -> StreamingIndicator:
        indicator = self.get(name)
        if not isinstance(indicator, StreamingIndicator):
            raise InvalidParams("indicator", name, "indicator with streaming support")
        return indicator
