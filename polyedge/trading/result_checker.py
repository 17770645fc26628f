import time
from dataclasses import replace
from typing import Optional

from ..constants import Direction, Outcome
from ..utils.logger import log
from .journal import TradeJournal
from .trade import TradeRecord

class ResultChecker:
    """Settles a pending trade once the market's outcome is known.

    Settlement happens once: an already-resolved trade is returned as-is,
    and the journal refuses to overwrite a stored outcome.
    """

    def __init__(self, journal: TradeJournal):
        if journal is None:
            raise ValueError("ResultChecker requires a journal")
        self.journal = journal

    @staticmethod
    def settle(trade: TradeRecord, actual: Direction) -> tuple[Outcome, float, float]:
        """(outcome, pnl, exit_price) for a binary share bought at entry_price."""
        stake = trade.stake or 0.0
        entry_price = trade.entry_price or 0.0
        if Direction.parse(trade.direction) is actual:
            pnl = stake * (1 / entry_price - 1) if entry_price > 0 else 0.0
            return Outcome.WIN, pnl, 1.0
        return Outcome.LOSS, -stake, 0.0

    def check_and_update(self, trade: Optional[TradeRecord], actual_outcome) -> Optional[TradeRecord]:
        if trade is None or not actual_outcome:
            return None

        actual = Direction.parse(actual_outcome)
        if actual is None:
            log.warning("Unknown market outcome %r for trade #%s, leaving pending",
                        actual_outcome, trade.id)
            return None

        if trade.is_resolved:
            log.debug("Trade #%s already settled (%s), skipping", trade.id, trade.outcome)
            return trade

        outcome, pnl, exit_price = self.settle(trade, actual)
        resolved_at = time.time()

        if trade.id is not None and not self.journal.settle_trade(
                trade.id, outcome.value, pnl, exit_price, resolved_at):
            stored = self.journal.get_trade(trade.id)
            log.debug("Trade #%s was settled elsewhere, keeping stored result", trade.id)
            return stored

        settled = replace(trade, outcome=outcome.value, pnl=pnl,
                          exit_price=exit_price, resolved_at=resolved_at)
        log.info("%s Trade #%s %s  market=%s  actual=%s  P&L=$%+.2f",
                 "🟢" if outcome is Outcome.WIN else "🔴", trade.id, outcome.value.upper(),
                 trade.market_id, actual.value, pnl)
        return settled
