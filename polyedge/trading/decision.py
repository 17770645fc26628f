from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..config import EngineConfig
from ..constants import Direction
from ..core.evaluator import StrategyEvaluator, create_evaluator
from ..utils.candle import Candle
from ..utils.logger import log
from ..utils.quote import MarketQuote, validate_quote
from .money_manager import MoneyManager

@dataclass
class Decision:
    should_trade: bool
    direction: Optional[Direction]
    stake: float
    entry_price: Optional[float]
    model_name: Optional[str]
    confidence: float
    edge: float
    indicators: dict = field(default_factory=dict)

    @property
    def reason(self) -> str:
        return self.indicators.get("reason", "")

class DecisionEngine:
    """
    Turns the evaluator's best recommendation into a sized paper trade.
    Never raises on bad ticks: every failure comes back as a no-trade Decision.
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 evaluator: Optional[StrategyEvaluator] = None):
        self.config = config or EngineConfig()
        self.evaluator = evaluator or create_evaluator()
        self.money_mgr = MoneyManager(self.config)

    def decide(self, candles: Sequence[Candle], quote: MarketQuote,
               remaining_minutes: Optional[int] = None) -> Decision:
        if not isinstance(candles, (list, tuple)) or len(candles) == 0:
            return self._no_decision("Missing candles")

        if not validate_quote(quote):
            return self._no_decision("Invalid market prices")

        run = self.evaluator.evaluate(candles, quote, remaining_minutes)
        rec = self.evaluator.get_model_recommendation(run)
        indicators = {
            "summary": self.evaluator.get_summary(run),
            "results": [r.to_dict() for r in run.results],
        }

        if rec is None or rec.direction is None:
            return self._no_decision("No model recommended a trade", indicators)

        entry_price = quote.price(rec.direction)
        sizing = self.money_mgr.size(rec.edge, entry_price)
        indicators["reason"] = sizing.reason

        decision = Decision(
            should_trade=sizing.should_trade,
            direction=rec.direction,
            stake=sizing.stake,
            entry_price=entry_price,
            model_name=rec.model,
            confidence=rec.confidence,
            edge=rec.edge,
            indicators=indicators,
        )
        if decision.should_trade:
            log.info("✅ %s %s  stake=$%.2f @ %.3f  edge=%+.1f%%  conf=%.1f%%",
                     rec.model, rec.direction.value, decision.stake, entry_price,
                     rec.edge * 100, rec.confidence * 100)
        else:
            log.info("⏸ %s %s rejected by sizing: %s", rec.model, rec.direction.value, sizing.reason)
        return decision

    @staticmethod
    def _no_decision(reason: str, indicators: Optional[dict] = None) -> Decision:
        return Decision(
            should_trade=False,
            direction=None,
            stake=0.0,
            entry_price=None,
            model_name=None,
            confidence=0.0,
            edge=0.0,
            indicators={"reason": reason, **(indicators or {})},
        )
