"""Trend indicators facade."""

from ..manager import IndicatorCategory
from .ema import EMA
from .hma import HMA
from .kama import KAMA
from .macd import MACD
from .sma import SMA
from .wma import WMA


class TrendIndicators(IndicatorCategory):
    """Moving averages and MACD."""

    category = "trend"
    INDICATORS = (SMA, EMA, WMA, HMA, KAMA, MACD)

    def sma(self, data, options=None):
        return self.calculate("sma", data, options)

    def ema(self, data, options=None):
        return self.calculate("ema", data, options)

    def wma(self, data, options=None):
        return self.calculate("wma", data, options)

    def hma(self, data, options=None):
        return self.calculate("hma", data, options)

    def kama(self, data, options=None):
        return self.calculate("kama", data, options)

    def macd(self, data, options=None):
        return self.calculate("macd", data, options)
