"""
Technical indicators over candle sequences.

Every function is total: empty, short or malformed input yields ``None``
(or an empty list for the Heiken-Ashi transform) instead of raising.
"""
from typing import NamedTuple, Optional, Sequence

import numpy as np

from ..utils.candle import Candle, HACandle

class MACD(NamedTuple):
    line: float
    signal: float
    histogram: float

class HATrend(NamedTuple):
    direction: str      # "up" / "down" / "neutral"
    strength: float     # 0-1

# ---- Helpers ----
def _as_array(values) -> Optional[np.ndarray]:
    try:
        if values is None or len(values) == 0:
            return None
        arr = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError):
        return None
    if arr.ndim != 1 or not np.all(np.isfinite(arr)):
        return None
    return arr

def _column(candles: Sequence[Candle], attr: str) -> Optional[np.ndarray]:
    try:
        if candles is None or len(candles) == 0:
            return None
        if attr == "volume":
            raw = [getattr(c, "volume", 0) or 0 for c in candles]
        else:
            raw = [getattr(c, attr) for c in candles]
    except (TypeError, AttributeError):
        return None
    return _as_array(raw)

def _ohlc(candles: Sequence[Candle]):
    cols = [_column(candles, a) for a in ("open", "high", "low", "close")]
    if any(c is None for c in cols):
        return None
    return cols

# ---- Oscillators / averages ----
def rsi(candles: Sequence[Candle], period: int = 14) -> Optional[float]:
    """Relative Strength Index with Wilder's smoothing, rounded to 2 decimals."""
    closes = _column(candles, "close")
    if closes is None or period <= 0 or len(closes) < period + 1:
        return None

    deltas = np.diff(closes)
    gains = np.maximum(deltas, 0.0)
    losses = np.maximum(-deltas, 0.0)

    avg_gain = float(np.mean(gains[:period]))
    avg_loss = float(np.mean(losses[:period]))
    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return round(100.0 - 100.0 / (1.0 + rs), 2)

def ema(values, period: int) -> Optional[np.ndarray]:
    """EMA series seeded with the SMA of the first `period` values.
    out[0] lines up with values[period - 1]."""
    arr = _as_array(values)
    if arr is None or period <= 0 or len(arr) < period:
        return None
    k = 2.0 / (period + 1)
    out = np.empty(len(arr) - period + 1, dtype=np.float64)
    out[0] = np.mean(arr[:period])
    for i, v in enumerate(arr[period:], start=1):
        out[i] = (v - out[i - 1]) * k + out[i - 1]
    return out

def sma(values, period: int) -> Optional[float]:
    arr = _as_array(values)
    if arr is None or period <= 0 or len(arr) < period:
        return None
    return float(np.mean(arr[-period:]))

def macd(candles: Sequence[Candle], fast: int = 12, slow: int = 26,
         signal: int = 9) -> Optional[MACD]:
    """Latest MACD line, signal and histogram, rounded to 5 decimals."""
    if fast <= 0 or slow <= fast or signal <= 0:
        return None
    closes = _column(candles, "close")
    if closes is None or len(closes) < slow + signal:
        return None

    fast_ema = ema(closes, fast)
    slow_ema = ema(closes, slow)
    if fast_ema is None or slow_ema is None:
        return None

    # both series indexed by close position from slow - 1 onward
    macd_line = fast_ema[slow - fast:] - slow_ema
    signal_line = ema(macd_line, signal)
    if signal_line is None or len(signal_line) == 0:
        return None

    line = round(float(macd_line[-1]), 5)
    sig = round(float(signal_line[-1]), 5)
    return MACD(line=line, signal=sig, histogram=round(line - sig, 5))

def vwap(candles: Sequence[Candle]) -> Optional[float]:
    """Volume-weighted typical price; plain mean of typical prices when volume is all zero."""
    ohlc = _ohlc(candles)
    vols = _column(candles, "volume")
    if ohlc is None or vols is None:
        return None
    _, highs, lows, closes = ohlc
    typical = (highs + lows + closes) / 3.0

    total_vol = float(np.sum(vols))
    if total_vol == 0:
        return round(float(np.mean(typical)), 2)
    return round(float(np.sum(typical * vols) / total_vol), 2)

def atr(candles: Sequence[Candle], period: int = 14) -> Optional[float]:
    """Simple (non-Wilder) average of the last `period` true ranges."""
    ohlc = _ohlc(candles)
    if ohlc is None or period <= 0 or len(ohlc[3]) < period + 1:
        return None
    _, highs, lows, closes = ohlc
    tr = np.maximum(
        highs[1:] - lows[1:],
        np.maximum(
            np.abs(highs[1:] - closes[:-1]),
            np.abs(lows[1:] - closes[:-1]),
        ),
    )
    return float(np.mean(tr[-period:]))

# ---- Heiken-Ashi ----
def heiken_ashi(candles: Sequence[Candle]) -> list[HACandle]:
    ohlc = _ohlc(candles)
    if ohlc is None:
        return []
    opens, highs, lows, closes = ohlc

    out: list[HACandle] = []
    for i, c in enumerate(candles):
        ha_close = (opens[i] + highs[i] + lows[i] + closes[i]) / 4.0
        if i == 0:
            ha_open = (opens[i] + closes[i]) / 2.0
        else:
            prev = out[-1]
            ha_open = (prev.open + prev.close) / 2.0
        out.append(HACandle(
            timestamp=float(getattr(c, "timestamp", 0) or 0),
            open=float(ha_open),
            high=float(max(highs[i], ha_open, ha_close)),
            low=float(min(lows[i], ha_open, ha_close)),
            close=float(ha_close),
        ))
    return out

def ha_trend(ha_candles: Sequence[HACandle], lookback: int = 3) -> HATrend:
    """Majority vote of bullish vs bearish HA candles over the lookback window."""
    if not ha_candles or lookback <= 0 or len(ha_candles) < lookback:
        return HATrend("neutral", 0.0)

    recent = ha_candles[-lookback:]
    bullish = sum(1 for ha in recent if ha.bullish)
    bearish = sum(1 for ha in recent if ha.bearish)
    strength = max(bullish, bearish) / lookback

    if bullish > bearish:
        return HATrend("up", strength)
    if bearish > bullish:
        return HATrend("down", strength)
    return HATrend("neutral", 0.0)
