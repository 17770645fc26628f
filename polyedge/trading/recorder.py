import json
import time
from typing import Optional

from ..utils.logger import log
from .decision import Decision
from .journal import TradeJournal
from .trade import TradeRecord

class TradeRecorder:
    """Persists a trading Decision as a pending paper trade.
    Callers make sure a market is traded at most once."""

    def __init__(self, journal: TradeJournal):
        if journal is None:
            raise ValueError("TradeRecorder requires a journal")
        self.journal = journal

    def record_trade(self, market_id: str, decision: Decision) -> TradeRecord:
        if not market_id or decision is None:
            raise ValueError("record_trade requires market_id and decision")
        if not decision.should_trade or decision.direction is None:
            raise ValueError("record_trade requires a decision with should_trade=True")

        entry_price = decision.entry_price or 0.0
        stake = decision.stake or 0.0
        shares = stake / entry_price if entry_price > 0 else 0.0

        trade = TradeRecord(
            market_id=str(market_id),
            model_name=decision.model_name,
            direction=decision.direction.value,
            entry_price=entry_price,
            shares=shares,
            stake=stake,
            confidence=decision.confidence,
            edge=decision.edge,
            created_at=time.time(),
            indicators_json=self._serialize(decision.indicators),
        )
        trade = self.journal.insert_trade(trade)
        log.info("📝 Recorded trade #%s  market=%s  %s %s  stake=$%.2f  shares=%.2f",
                 trade.id, trade.market_id, trade.model_name, trade.direction,
                 trade.stake, trade.shares)
        return trade

    @staticmethod
    def _serialize(indicators) -> Optional[str]:
        if not indicators:
            return None
        try:
            return json.dumps(indicators)
        except (TypeError, ValueError) as e:
            log.warning("Could not serialize indicator payload, storing null: %s", e)
            return None

    def get_pending_trades(self) -> list[TradeRecord]:
        return self.journal.pending_trades()

    def get_trades_by_model(self, model_name: str) -> list[TradeRecord]:
        return self.journal.trades_by_model(model_name)
