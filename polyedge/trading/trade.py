from dataclasses import dataclass
from typing import Optional

@dataclass(frozen=True)
class TradeRecord:
    market_id: str
    model_name: str
    direction: str                         # "Up" / "Down"
    entry_price: float
    shares: float                          # stake / entry_price
    stake: float
    confidence: float
    edge: float
    created_at: float
    indicators_json: Optional[str] = None  # evaluator summary as JSON
    id: Optional[int] = None
    outcome: Optional[str] = None          # "win" / "loss"
    pnl: Optional[float] = None
    exit_price: Optional[float] = None
    resolved_at: Optional[float] = None

    @property
    def is_resolved(self) -> bool:
        return self.outcome is not None
