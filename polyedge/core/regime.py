import numpy as np
from ..constants import Regime
from ..utils.candle import Candle
from .indicators import sma

class RegimeDetector:
    @staticmethod
    def detect(candles: list[Candle], window: int = 20) -> Regime:
        if not candles or len(candles) < window:
            return Regime.CHOP

        try:
            closes = np.array([c.close for c in candles], dtype=np.float64)
            recent = candles[-window:]
            highs = np.array([c.high for c in recent], dtype=np.float64)
            lows = np.array([c.low for c in recent], dtype=np.float64)
        except (TypeError, ValueError, AttributeError):
            return Regime.CHOP

        sma10 = sma(closes, 10)
        sma20 = sma(closes, 20)
        if sma10 is None or sma20 is None:
            return Regime.CHOP

        window_closes = closes[-window:]
        avg_price = float(np.mean(window_closes))
        if avg_price == 0:
            return Regime.CHOP
        range_pct = float(np.max(window_closes) - np.min(window_closes)) / avg_price * 100

        # Directional movement over the window
        up_moves = highs[1:] - highs[:-1]
        down_moves = lows[:-1] - lows[1:]
        plus_dm = float(np.sum(np.where((up_moves > down_moves) & (up_moves > 0), up_moves, 0.0)))
        minus_dm = float(np.sum(np.where((down_moves > up_moves) & (down_moves > 0), down_moves, 0.0)))
        total_dm = plus_dm + minus_dm
        dm_ratio = abs(plus_dm - minus_dm) / total_dm if total_dm > 0 else 0.0

        trend_strength = abs(sma10 - sma20) / avg_price * 100
        price = float(closes[-1])

        if trend_strength > 0.5 and dm_ratio > 0.3:
            if sma10 > sma20 and price > sma10:
                return Regime.TREND_UP
            if sma10 < sma20 and price < sma10:
                return Regime.TREND_DOWN

        if range_pct < 3 and dm_ratio < 0.2:
            return Regime.RANGE
        return Regime.CHOP
