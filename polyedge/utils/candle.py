import csv
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .logger import log

PRICE_FIELDS = ("open", "high", "low", "close")

@dataclass
class Candle:
    timestamp: float        # epoch seconds
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

@dataclass
class HACandle:
    """Heiken-Ashi synthetic candle."""
    timestamp: float
    open: float
    high: float
    low: float
    close: float

    @property
    def bullish(self) -> bool:
        return self.close > self.open

    @property
    def bearish(self) -> bool:
        return self.close < self.open

def parse_timestamp(value) -> float:
    """Epoch seconds from a number, a numeric string or an ISO-8601 string.
    Naive ISO times are taken as UTC."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    text = str(value).strip()
    try:
        return float(text)
    except ValueError:
        pass
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()

def parse_candle(raw) -> Candle:
    """Build a Candle from a Candle, a mapping, a
    [timestamp, open, high, low, close, volume?] row or an object with those attributes.
    Raises ValueError/TypeError/IndexError on unusable input."""
    if isinstance(raw, Candle):
        return raw
    if isinstance(raw, dict):
        get = raw.get
    elif isinstance(raw, (list, tuple)):
        if len(raw) < 5:
            raise IndexError(f"candle row needs 5 values, got {len(raw)}")
        row = dict(zip(("timestamp",) + PRICE_FIELDS + ("volume",), raw))
        get = row.get
    else:
        def get(key, default=None):
            return getattr(raw, key, default)

    ts = get("timestamp")
    if ts is None:
        ts = get("time")
    if ts is None:
        raise ValueError("candle has no timestamp")
    prices = {k: float(get(k)) for k in PRICE_FIELDS}
    return Candle(timestamp=parse_timestamp(ts), volume=float(get("volume") or 0), **prices)

def load_candles_csv(path: str, limit: Optional[int] = None) -> list[Candle]:
    """Load a headered `timestamp,open,high,low,close,volume` CSV, oldest first.

    `time` is accepted for the timestamp column and volume is optional.
    Malformed or non-finite rows are skipped. With `limit`, only the most
    recent `limit` candles are kept.
    """
    candles: list[Candle] = []
    skipped = 0

    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        columns = {c.strip().lower() for c in reader.fieldnames or []}
        if not ({"timestamp", "time"} & columns) or not set(PRICE_FIELDS) <= columns:
            raise ValueError(f"{path}: expected columns timestamp,open,high,low,close[,volume], "
                             f"got {reader.fieldnames}")

        for row in reader:
            row = {k.strip().lower(): (v or "").strip() for k, v in row.items() if k is not None}
            try:
                candle = parse_candle({k: v for k, v in row.items() if v != ""})
            except (ValueError, TypeError, OverflowError):
                skipped += 1
                continue
            if not all(math.isfinite(v) for v in (candle.timestamp, candle.open, candle.high,
                                                   candle.low, candle.close, candle.volume)):
                skipped += 1
                continue
            candles.append(candle)

    candles.sort(key=lambda c: c.timestamp)
    if limit is not None and limit > 0:
        candles = candles[-limit:]
    if skipped:
        log.debug("Skipped %d malformed rows in %s", skipped, path)
    log.info("Parsed %d candles from %s", len(candles), path)
    return candles
