import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from numbers import Real
from typing import Optional, Sequence

from ..constants import Direction
from ..utils.candle import Candle
from ..utils.quote import MarketQuote, validate_quote

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

@dataclass
class EvaluationResult:
    """One model's verdict for one tick.
    edge = confidence - quote[direction] whenever direction is set."""

    model: str
    direction: Optional[Direction]
    confidence: float
    edge: float
    should_trade: bool
    reason: str
    timestamp: str = field(default_factory=_now_iso)

    def to_dict(self) -> dict:
        return {
            "model": self.model,
            "direction": self.direction.value if self.direction else None,
            "confidence": self.confidence,
            "edge": self.edge,
            "should_trade": self.should_trade,
            "reason": self.reason,
            "timestamp": self.timestamp,
        }

class BaseModel(ABC):
    """
    Contract for every strategy model:
        evaluate(candles, quote, remaining_minutes) -> EvaluationResult

    Edge is always measured against the live market quote:
        edge = model_probability - market_probability
    """

    def __init__(self, name: str, edge_threshold: float = 0.05):
        if not name:
            raise ValueError("Model requires a name")
        self.name = name
        self.edge_threshold = edge_threshold

    @abstractmethod
    def evaluate(self, candles: Sequence[Candle], quote: MarketQuote,
                 remaining_minutes: Optional[int] = None) -> EvaluationResult:
        ...

    # ------------------------------------------------------------------
    def calculate_edge(self, direction: Direction, probability: float,
                       quote: MarketQuote) -> float:
        if not validate_quote(quote):
            raise ValueError("Invalid market prices: must have up and down values in [0, 1]")
        return probability - quote.price(direction)

    def should_make_trade(self, edge: float) -> bool:
        return edge > self.edge_threshold

    def create_result(self, direction: Optional[Direction], confidence: float,
                      edge: float, should_trade: bool, reason: str) -> EvaluationResult:
        return EvaluationResult(
            model=self.name,
            direction=direction,
            confidence=round(float(confidence), 3),
            edge=round(float(edge), 3),
            should_trade=bool(should_trade),
            reason=reason or "No reason provided",
        )

    def no_trade(self, reason: str) -> EvaluationResult:
        return self.create_result(None, 0.0, 0.0, False, reason)

    @staticmethod
    def validate_candles(candles, min_required: int = 1) -> bool:
        if not isinstance(candles, (list, tuple)):
            return False
        if len(candles) < min_required or len(candles) == 0:
            return False
        close = getattr(candles[0], "close", None)
        return isinstance(close, Real) and not isinstance(close, bool)

    @staticmethod
    def validate_quote(quote) -> bool:
        return validate_quote(quote)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

class BaselineModel(BaseModel):
    """
    Always agrees with the market: picks the favoured side with confidence
    equal to its price, so edge is exactly 0. Used to confirm that the TA
    model adds something over naive market agreement.
    """

    def __init__(self, edge_threshold: float = 0.05, name: str = "Baseline-Model"):
        super().__init__(name=name, edge_threshold=edge_threshold)

    def evaluate(self, candles, quote, remaining_minutes=None) -> EvaluationResult:
        if not self.validate_quote(quote):
            return self.no_trade("Invalid market prices")

        direction = quote.favored()
        market_price = quote.price(direction)
        edge = self.calculate_edge(direction, market_price, quote)

        return self.create_result(
            direction=direction,
            confidence=market_price,
            edge=edge,
            should_trade=self.should_make_trade(edge),
            reason=f"Baseline: agrees with market at {market_price:.1%} (edge = 0)",
        )

class RandomModel(BaseModel):
    """
    Coin-flip direction with a confidence in [0.5, 0.9). Edge is computed
    honestly but the model never recommends a trade.
    """

    def __init__(self, edge_threshold: float = 0.05, rng: Optional[random.Random] = None,
                 seed: Optional[int] = None, name: str = "Random-Model"):
        super().__init__(name=name, edge_threshold=edge_threshold)
        self.rng = rng if rng is not None else random.Random(seed)

    def evaluate(self, candles, quote, remaining_minutes=None) -> EvaluationResult:
        if not self.validate_quote(quote):
            return self.no_trade("Invalid market prices")

        direction = Direction.UP if self.rng.random() > 0.5 else Direction.DOWN
        market_price = quote.price(direction)
        probability = 0.5 + self.rng.random() * 0.4
        edge = self.calculate_edge(direction, probability, quote)

        return self.create_result(
            direction=direction,
            confidence=probability,
            edge=edge,
            should_trade=False,
            reason=(f"Random: {direction.value} at {probability:.1%} "
                    f"vs market {market_price:.1%}"),
        )
