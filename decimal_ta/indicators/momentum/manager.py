"""Momentum indicators facade."""

from ..manager import IndicatorCategory
from .cci import CCI
from .momentum import Momentum
from .roc import ROC
from .rsi import RSI
from .stochastic import Stochastic
from .williams_r import WilliamsR


class MomentumIndicators(IndicatorCategory):
    """Oscillators and rate-of-change indicators."""

    category = "momentum"
    INDICATORS = (RSI, Stochastic, WilliamsR, CCI, ROC, Momentum)

    def rsi(self, data, options=None):
        return self.calculate("rsi", data, options)

    def stochastic(self, data, options=None):
        return self.calculate("stochastic", data, options)

    def williams_r(self, data, options=None):
        return self.calculate("williams_r", data, options)

    def cci(self, data, options=None):
        return self.calculate("cci", data, options)

    def roc(self, data, options=None):
        return self.calculate("roc", data, options)

    def momentum(self, data, options=None):
        return self.calculate("momentum", data, options)
