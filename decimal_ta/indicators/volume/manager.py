"""Volume indicators facade."""

from ..manager import IndicatorCategory
from .accumulation_distribution import AccumulationDistribution
from .cmf import ChaikinMoneyFlow
from .obv import OBV
from .vwap import VWAP


class VolumeIndicators(IndicatorCategory):
    """Volume-weighted and money-flow indicators."""

    category = "volume"
    INDICATORS = (OBV, VWAP, AccumulationDistribution, ChaikinMoneyFlow)

    def obv(self, data, options=None):
        return self.calculate("obv", data, options)

    def vwap(self, data, options=None):
        return self.calculate("vwap", data, options)

    def accumulation_distribution(self, data, options=None):
        return self.calculate("ad", data, options)

    def chaikin_money_flow(self, data, options=None):
        return self.calculate("cmf", data, options)
