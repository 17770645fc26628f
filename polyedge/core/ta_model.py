from dataclasses import dataclass
from typing import Optional, Sequence

from ..config import TAConfig
from ..constants import Direction, Regime
from ..utils.candle import Candle
from ..utils.quote import MarketQuote
from . import indicators as ind
from .models import BaseModel, EvaluationResult
from .regime import RegimeDetector

REGIME_SIGNAL = {
    Regime.TREND_UP: 0.7,
    Regime.TREND_DOWN: -0.7,
    Regime.RANGE: 0.0,
    Regime.CHOP: 0.0,
}

@dataclass
class IndicatorSnapshot:
    rsi: Optional[float]
    macd: Optional[ind.MACD]
    vwap: Optional[float]
    ha_trend: ind.HATrend
    regime: Regime
    price: float

def _clamp(x: float, lo: float = -1.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, x))

class TAModel(BaseModel):
    """
    Technical-analysis model: RSI + MACD + VWAP + Heiken-Ashi + regime.

    Each indicator maps to a signal in [-1, 1]; the weighted composite picks
    the direction and is converted to a probability in [0.5, max_confidence].
    Edge is taken against the real market quote, never a fixed 50/50.
    """

    def __init__(self, config: Optional[TAConfig] = None, name: str = "TA-Model"):
        self.config = config or TAConfig()
        super().__init__(name=name, edge_threshold=self.config.edge_threshold)

    def evaluate(self, candles: Sequence[Candle], quote: MarketQuote,
                 remaining_minutes: Optional[int] = None) -> EvaluationResult:
        cfg = self.config
        got = len(candles) if isinstance(candles, (list, tuple)) else 0
        if got < cfg.min_candles:
            return self.no_trade(f"Insufficient candles: need {cfg.min_candles}, got {got}")
        if not self.validate_candles(candles, cfg.min_candles):
            return self.no_trade("Malformed candles")

        if not self.validate_quote(quote):
            return self.no_trade("Invalid market prices")

        try:
            snapshot = self.calculate_indicators(candles)
        except (TypeError, ValueError, AttributeError) as e:
            return self.no_trade(f"Failed to calculate indicators: {e}")

        signals = self.calculate_signals(snapshot)
        direction, probability, reasons = self.calculate_probability(signals, snapshot)

        if direction is None:
            return self.no_trade(f"No clear signal: {', '.join(reasons)}")

        edge = self.calculate_edge(direction, probability, quote)
        market_price = quote.price(direction)
        should_trade = self.should_make_trade(edge)

        parts = [
            f"Direction: {direction.value}",
            f"Model Prob: {probability:.1%}",
            f"Market Price: {market_price:.1%}",
            f"Edge: {edge:.1%}",
            *reasons,
        ]
        if not should_trade:
            parts.append(f"Edge {edge:.1%} below threshold {self.edge_threshold:.1%}")

        return self.create_result(
            direction=direction,
            confidence=probability,
            edge=edge,
            should_trade=should_trade,
            reason=" | ".join(parts),
        )

    # ------------------------------------------------------------------
    def calculate_indicators(self, candles: Sequence[Candle]) -> IndicatorSnapshot:
        cfg = self.config
        return IndicatorSnapshot(
            rsi=ind.rsi(candles, cfg.rsi_period),
            macd=ind.macd(candles, cfg.macd_fast, cfg.macd_slow, cfg.macd_signal),
            vwap=ind.vwap(candles),
            ha_trend=ind.ha_trend(ind.heiken_ashi(candles), cfg.ha_lookback),
            regime=RegimeDetector.detect(candles),
            price=float(candles[-1].close),
        )

    def calculate_signals(self, snap: IndicatorSnapshot) -> dict[str, float]:
        """Per-indicator scores, -1 (strong bearish) .. +1 (strong bullish)."""
        cfg = self.config
        signals = {"rsi": 0.0, "macd": 0.0, "vwap": 0.0, "heiken_ashi": 0.0, "regime": 0.0}

        # RSI: reversal bias at the extremes, mild trend bias in between
        if snap.rsi is not None:
            if snap.rsi <= cfg.rsi_oversold:
                signals["rsi"] = (cfg.rsi_oversold - snap.rsi) / cfg.rsi_oversold
            elif snap.rsi >= cfg.rsi_overbought:
                signals["rsi"] = -(snap.rsi - cfg.rsi_overbought) / (100 - cfg.rsi_overbought)
            else:
                signals["rsi"] = (snap.rsi - 50) / 100 * 0.3     # max ±0.15

        # MACD: histogram relative to line, plus crossover bonus
        if snap.macd is not None:
            scale = abs(snap.macd.line) or 1.0
            score = snap.macd.histogram / scale * 0.5
            score = min(0.5, score) if snap.macd.histogram > 0 else max(-0.5, score)
            if snap.macd.line > snap.macd.signal:
                score += 0.3
            elif snap.macd.line < snap.macd.signal:
                score -= 0.3
            signals["macd"] = _clamp(score)

        # VWAP: distance of price from VWAP
        if snap.vwap:
            signals["vwap"] = _clamp((snap.price - snap.vwap) / snap.vwap * 10)

        if snap.ha_trend.direction == "up":
            signals["heiken_ashi"] = snap.ha_trend.strength
        elif snap.ha_trend.direction == "down":
            signals["heiken_ashi"] = -snap.ha_trend.strength

        signals["regime"] = REGIME_SIGNAL[snap.regime]
        return signals

    def composite_score(self, signals: dict[str, float]) -> float:
        return sum(signals.get(k, 0.0) * w for k, w in self.config.weights.items())

    def calculate_probability(self, signals: dict[str, float], snap: IndicatorSnapshot
                              ) -> tuple[Optional[Direction], float, list[str]]:
        cfg = self.config
        reasons: list[str] = []

        for key, _ in cfg.weights.items():
            s = signals.get(key, 0.0)
            if abs(s) >= 0.3:
                reasons.append(f"{key}: {'bullish' if s > 0 else 'bearish'} ({s:.0%})")
        composite = self.composite_score(signals)

        if snap.rsi is not None:
            reasons.append(f"RSI: {snap.rsi:.1f}")
        if snap.macd is not None:
            reasons.append(f"MACD hist: {snap.macd.histogram:.5f}")
        reasons.append(f"Regime: {snap.regime.value}")

        if abs(composite) < cfg.min_confluence:
            reasons.append(f"Confluence too weak: {composite:.1%}")
            return None, 0.5, reasons

        direction = Direction.UP if composite > 0 else Direction.DOWN

        # |composite| in [0, 1] -> [0.5, 0.9]
        probability = 0.5 + abs(composite) * 0.4
        if snap.regime is Regime.CHOP:
            probability = 0.5 + (probability - 0.5) * cfg.chop_damping
            reasons.append("Reduced confidence due to choppy regime")

        probability = max(0.5, min(cfg.max_confidence, probability))
        return direction, probability, reasons
