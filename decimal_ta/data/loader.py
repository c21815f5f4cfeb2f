"""
Bar Loader - Switchable Source (Synthetic | CSV | Cache)

Loads OHLCV history as Decimal Bar records ready for indicator input,
and converts indicator results back into pandas frames.
"""

import json
import logging
import os
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from ..models.errors import InvalidDataFormat
from ..models.ohlcv import OHLCV, Bar
from ..models.result import IndicatorValue

logger = logging.getLogger(__name__)

TIMESTAMP_COLUMNS = ("timestamp_utc", "timestamp", "datetime", "date", "time")


class DataSource(Enum):
    """Data source types."""
    SYNTHETIC = "synthetic"
    CSV = "csv"
    CACHE = "cache"


def bars_from_dataframe(df: pd.DataFrame) -> List[Bar]:
    """
    Convert a DataFrame with open/high/low/close[/volume] columns to bars.

    Column names are matched case-insensitively; the first recognised
    timestamp column is parsed as UTC. Rows are sorted by timestamp.

    Args:
        df: Source frame

    Returns:
        List of Bar objects, oldest first

    Raises:
        InvalidDataFormat: If a price column is missing
    """
    frame = df.copy()
    frame.columns = [str(c).strip().lower() for c in frame.columns]

    missing = [c for c in ("open", "high", "low", "close") if c not in frame.columns]
    if missing:
        raise InvalidDataFormat("columns open, high, low, close", f"missing {missing}")

    time_col = next((c for c in TIMESTAMP_COLUMNS if c in frame.columns), None)
    if time_col is not None:
        frame[time_col] = pd.to_datetime(frame[time_col], utc=True)
        frame = frame.sort_values(time_col)

    bars = []
    for index, row in enumerate(frame.itertuples(index=False)):
        record = row._asdict()
        volume = record.get("volume")
        timestamp = record[time_col].to_pydatetime() if time_col else None
        try:
            bars.append(Bar(
                open=_cell(record["open"]),
                high=_cell(record["high"]),
                low=_cell(record["low"]),
                close=_cell(record["close"]),
                volume=None if volume is None or pd.isna(volume) else _cell(volume),
                timestamp=timestamp,
            ))
        except InvalidDataFormat as e:
            raise InvalidDataFormat(e.expected, e.received, index)
    return bars


def _cell(value) -> Any:
    # numpy scalars are not int/float subclasses in every case
    if hasattr(value, "item"):
        value = value.item()
    if isinstance(value, float):
        return Decimal(str(value))
    return value


def results_to_dataframe(results: Iterable[IndicatorValue]) -> pd.DataFrame:
    """
    Tabulate indicator results.

    Scalar values land in a `value` column; multi-output values get one
    column per field. Metadata is not included.
    """
    rows = []
    for result in results:
        row = {"timestamp": result.timestamp}
        if isinstance(result.value, dict):
            row.update(result.value)
        else:
            row["value"] = result.value
        rows.append(row)
    return pd.DataFrame(rows)


class BarLoader:
    """
    Bar loader with switchable sources.

    Supports:
    - Synthetic data generation (deterministic, for tests and demos)
    - CSV files (pandas)
    - Cached JSON files
    """

    def __init__(self, config: Optional[Dict] = None):
        """
        Initialize bar loader.

        Args:
            config: Loader config
                {
                  "source": "synthetic|csv|cache",
                  "synthetic": {"base_price": "1.0950", "start": "2024-01-01T00:00:00Z",
                                "interval_minutes": 15},
                  "csv_path": "...",
                  "cache": {"path": "..."}
                }
        """
        self.config = config or {}
        self.source = DataSource(self.config.get("source", "synthetic"))
        self.synthetic_config = self.config.get("synthetic", {})
        self.cache_config = self.config.get("cache", {})
        logger.info("bar_loader_initialized", extra={"source": self.source.value})

    def load(self, symbol: str, timeframe: str, count: int) -> Optional[OHLCV]:
        """
        Load the latest `count` bars from the configured source.

        Returns:
            OHLCV series, or None when the source has no data
        """
        if self.source == DataSource.SYNTHETIC:
            bars = self._load_synthetic(count)
        elif self.source == DataSource.CSV:
            bars = self._load_csv(count)
        else:
            bars = self._load_cached(symbol, timeframe, count)

        if bars is None:
            return None
        logger.info("bars_loaded", extra={
            "source": self.source.value,
            "symbol": symbol,
            "timeframe": timeframe,
            "bars": len(bars),
        })
        return OHLCV(symbol=symbol, bars=tuple(bars), timeframe=timeframe)

    def _load_synthetic(self, count: int) -> List[Bar]:
        """
        Generate a deterministic synthetic series.

        Prices oscillate around base_price; timestamps step forward from
        a fixed start so repeated runs produce identical bars.
        """
        base_price = Decimal(str(self.synthetic_config.get("base_price", "1.0950")))
        start = self.synthetic_config.get("start", "2024-01-01T00:00:00+00:00")
        start_time = datetime.fromisoformat(start.replace("Z", "+00:00"))
        if start_time.tzinfo is None:
            start_time = start_time.replace(tzinfo=timezone.utc)
        step = timedelta(minutes=self.synthetic_config.get("interval_minutes", 15))

        bars = []
        for i in range(count):
            price_change = Decimal((i % 20 - 10) * 5) / Decimal(100000)
            open_price = base_price + price_change
            close_price = open_price + Decimal((i % 5 - 2) * 3) / Decimal(10000)
            bars.append(Bar(
                open=open_price,
                high=max(open_price, close_price) + Decimal("0.0008"),
                low=min(open_price, close_price) - Decimal("0.0005"),
                close=close_price,
                volume=Decimal(1000000),
                timestamp=start_time + step * i,
            ))
            base_price = close_price
        return bars

    def _load_csv(self, count: int) -> Optional[List[Bar]]:
        csv_path = self.config.get("csv_path")
        if not csv_path or not os.path.exists(csv_path):
            logger.error("csv_not_found", extra={"path": csv_path})
            return None
        df = pd.read_csv(csv_path)
        return bars_from_dataframe(df)[-count:] if count else []

    def _load_cached(self, symbol: str, timeframe: str, count: int) -> Optional[List[Bar]]:
        cache_path = self.cache_config.get("path", "data/cache")
        cache_file = os.path.join(cache_path, f"{symbol}_{timeframe}.json")
        if not os.path.exists(cache_file):
            logger.warning("cache_file_not_found", extra={"file": cache_file})
            return None

        with open(cache_file, "r", encoding="utf-8") as f:
            data = json.load(f)
        records = data.get("bars", [])[-count:] if count else []
        return [Bar.from_mapping(record, i) for i, record in enumerate(records)]

    def cache_bars(self, series: OHLCV) -> str:
        """
        Write a series to the cache directory.

        Decimals are stored as strings so they reload exactly.

        Returns:
            Path of the written file
        """
        cache_path = self.cache_config.get("path", "data/cache")
        os.makedirs(cache_path, exist_ok=True)
        cache_file = os.path.join(cache_path, f"{series.symbol}_{series.timeframe}.json")

        payload = {
            "symbol": series.symbol,
            "timeframe": series.timeframe,
            "cached_at": datetime.now(timezone.utc).isoformat(),
            "bars": [_bar_record(bar) for bar in series.bars],
        }
        with open(cache_file, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)

        logger.info("bars_cached", extra={"file": cache_file, "bars": len(series.bars)})
        return cache_file

    def get_source(self) -> str:
        """Get current data source."""
        return self.source.value


def _bar_record(bar: Bar) -> Dict[str, Any]:
    return {
        "timestamp": bar.timestamp.isoformat() if bar.timestamp else None,
        "open": str(bar.open),
        "high": str(bar.high),
        "low": str(bar.low),
        "close": str(bar.close),
        "volume": str(bar.volume) if bar.volume is not None else None,
    }
