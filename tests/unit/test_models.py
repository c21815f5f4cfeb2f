"""
Unit tests for core models.
"""

import unittest
from decimal import Decimal
from datetime import datetime, timezone, timedelta

from decimal_ta.models.errors import (
    CalculationError,
    IndicatorError,
    InsufficientData,
    InvalidDataFormat,
    InvalidParams,
    StreamStateError,
    ValidationError,
)
from decimal_ta.models.metadata import ParamDescriptor, ParamType
from decimal_ta.models.ohlcv import Bar, OHLCV
from decimal_ta.models.result import BatchResult, IndicatorValue, StreamUpdate


class TestBar(unittest.TestCase):
    """Test Bar model."""

    def test_bar_creation(self):
        """Test bar creation and coercion."""
        timestamp = datetime.now(timezone.utc)
        bar = Bar(
            open=Decimal('1.1000'),
            high=Decimal('1.1010'),
            low=Decimal('1.0990'),
            close=Decimal('1.1005'),
            volume=1000000,
            timestamp=timestamp
        )

        self.assertEqual(bar.open, Decimal('1.1000'))
        self.assertIsInstance(bar.volume, Decimal)
        self.assertTrue(bar.is_bullish)
        self.assertEqual(bar.range, Decimal('0.0020'))

    def test_float_inputs_avoid_binary_artifacts(self):
        bar = Bar(open=1.1, high=1.2, low=1.0, close=1.15)
        self.assertEqual(bar.open, Decimal('1.1'))
        self.assertIsNone(bar.volume)

    def test_non_finite_values_rejected(self):
        with self.assertRaises(InvalidDataFormat):
            Bar(open=Decimal('NaN'), high=1, low=1, close=1)
        with self.assertRaises(InvalidDataFormat):
            Bar(open=1, high=float('inf'), low=1, close=1)

    def test_validate_reports_high_below_low(self):
        """Ordering is checked by validate(), not by the constructor."""
        bar = Bar(open=1, high=Decimal('0.9'), low=Decimal('1.1'), close=1, volume=10)

        error = bar.validate(index=3)

        self.assertIsInstance(error, ValidationError)
        self.assertEqual(error.field, 'high')
        self.assertEqual(error.index, 3)

    def test_validate_reports_negative_volume(self):
        bar = Bar(open=1, high=2, low=1, close=1, volume=-5)
        error = bar.validate()
        self.assertEqual(error.field, 'volume')
        self.assertEqual(error.constraint, 'must be non-negative')

    def test_from_mapping_parses_iso_timestamp(self):
        bar = Bar.from_mapping({
            'open': '100', 'high': '101', 'low': '99', 'close': '100.5',
            'volume': 10, 'timestamp': '2024-03-01T09:30:00Z',
        })
        self.assertEqual(bar.timestamp, datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc))
        self.assertEqual(bar.close, Decimal('100.5'))

    def test_from_mapping_missing_field(self):
        with self.assertRaises(InvalidDataFormat) as ctx:
            Bar.from_mapping({'open': 1, 'high': 2, 'close': 1}, index=7)
        self.assertEqual(ctx.exception.index, 7)
        self.assertIn('low', ctx.exception.received)


class TestOHLCV(unittest.TestCase):
    """Test OHLCV model."""

    def setUp(self):
        """Set up test data."""
        self.bars = []
        timestamp = datetime(2024, 1, 1, tzinfo=timezone.utc)

        for i in range(5):
            bar = Bar(
                open=Decimal('1.1000') + Decimal(i) / 10000,
                high=Decimal('1.1010') + Decimal(i) / 10000,
                low=Decimal('1.0990') + Decimal(i) / 10000,
                close=Decimal('1.1005') + Decimal(i) / 10000,
                volume=Decimal('1000000'),
                timestamp=timestamp + timedelta(minutes=15 * i)
            )
            self.bars.append(bar)

    def test_ohlcv_creation(self):
        """Test OHLCV creation."""
        ohlcv = OHLCV(
            symbol='EURUSD',
            bars=tuple(self.bars),
            timeframe='15m'
        )

        self.assertEqual(ohlcv.symbol, 'EURUSD')
        self.assertEqual(ohlcv.length, 5)
        self.assertEqual(len(ohlcv), 5)
        self.assertEqual(ohlcv.latest_bar, self.bars[-1])
        self.assertEqual(list(ohlcv), self.bars)

    def test_empty_series(self):
        ohlcv = OHLCV(symbol='EURUSD', bars=(), timeframe='15m')
        self.assertIsNone(ohlcv.latest_bar)


class TestResults(unittest.TestCase):
    """Test result records."""

    def test_indicator_value_defaults_metadata(self):
        value = IndicatorValue(value=Decimal('1'))
        self.assertEqual(value.metadata, {})
        self.assertIsNone(value.timestamp)

    def test_batch_result_failure(self):
        error = InsufficientData(required=5, provided=2)
        result = BatchResult.failure(error)

        self.assertFalse(result.success)
        self.assertEqual(len(result), 0)
        with self.assertRaises(InsufficientData):
            result.unwrap()

    def test_stream_update_unwrap(self):
        update = StreamUpdate(state='s', result=None)
        self.assertTrue(update.success)
        self.assertFalse(update.is_warm)
        self.assertEqual(update.unwrap(), ('s', None))


class TestErrors(unittest.TestCase):
    """Test structured error values."""

    def test_errors_share_base_and_builtin_families(self):
        self.assertTrue(issubclass(InvalidParams, IndicatorError))
        self.assertTrue(issubclass(InvalidParams, ValueError))
        self.assertTrue(issubclass(ValidationError, ValueError))
        self.assertTrue(issubclass(InvalidDataFormat, TypeError))
        self.assertTrue(issubclass(CalculationError, ArithmeticError))
        self.assertTrue(issubclass(StreamStateError, IndicatorError))

    def test_insufficient_data_fields(self):
        error = InsufficientData(required=14, provided=3, indicator='RSI')
        self.assertEqual(error.required, 14)
        self.assertEqual(error.provided, 3)
        self.assertEqual(error.message, 'RSI requires 14 data points, got 3')

    def test_to_dict_carries_structured_fields(self):
        error = InvalidParams('period', 0, 'integer >= 1')
        data = error.to_dict()
        self.assertEqual(data['kind'], 'invalid_params')
        self.assertEqual(data['param'], 'period')
        self.assertEqual(data['value'], 0)

    def test_equal_errors_compare_equal(self):
        self.assertEqual(InvalidParams('period', 0, 'x'), InvalidParams('period', 0, 'x'))
        self.assertNotEqual(InvalidParams('period', 0, 'x'), InvalidParams('period', 1, 'x'))


class TestParamDescriptor(unittest.TestCase):

    def test_to_dict(self):
        descriptor = ParamDescriptor('source', ParamType.ENUM, 'Price field',
                                     default='close', options=('open', 'close'))
        data = descriptor.to_dict()
        self.assertEqual(data['type'], 'enum')
        self.assertEqual(data['options'], ['open', 'close'])
        self.assertEqual(data['default'], 'close')
