"""
Shared fixtures for the unit tests.
"""

from decimal import Decimal
from datetime import datetime, timedelta, timezone

import pytest

from decimal_ta.data.loader import BarLoader
from decimal_ta.models.ohlcv import Bar

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_bar(open_, high, low, close, volume=1000, minutes=0) -> Bar:
    """Bar from plain numbers, timestamped `minutes` after START."""
    return Bar(
        open=Decimal(str(open_)),
        high=Decimal(str(high)),
        low=Decimal(str(low)),
        close=Decimal(str(close)),
        volume=Decimal(str(volume)),
        timestamp=START + timedelta(minutes=minutes),
    )


def prices(*values):
    return [Decimal(str(v)) for v in values]


@pytest.fixture
def synthetic_bars():
    """120 deterministic 15-minute bars (spans two calendar days)."""
    loaded = BarLoader({"source": "synthetic"}).load("EURUSD", "M15", 120)
    return list(loaded.bars)


@pytest.fixture
def rsi_closes():
    return prices(44.34, 44.09, 44.15, 43.61, 44.33, 44.83, 45.85, 46.08,
                  45.89, 46.03, 46.83, 47.69, 46.55, 46.50, 46.75)


@pytest.fixture
def bar():
    """Factory fixture: bar(open, high, low, close, volume=1000, minutes=0)."""
    return make_bar


@pytest.fixture
def series():
    """Factory fixture: series(1, 2, 3) -> list of Decimals."""
    return prices
