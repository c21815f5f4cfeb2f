"""Volatility indicators facade."""

from ..manager import IndicatorCategory
from .atr import ATR
from .bollinger import BollingerBands
from .standard_deviation import StandardDeviation
from .volatility_index import VolatilityIndex


class VolatilityIndicators(IndicatorCategory):
    """Range and dispersion indicators."""

    category = "volatility"
    INDICATORS = (ATR, BollingerBands, StandardDeviation, VolatilityIndex)

    def atr(self, data, options=None):
        return self.calculate("atr", data, options)

    def bollinger_bands(self, data, options=None):
        return self.calculate("bollinger_bands", data, options)

    def standard_deviation(self, data, options=None):
        return self.calculate("standard_deviation", data, options)

    def volatility_index(self, data, options=None):
        return self.calculate("volatility_index", data, options)
