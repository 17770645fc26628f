import math
import time
from typing import Optional, Sequence

from .config import BotConfig
from .core.evaluator import create_evaluator
from .trading.decision import Decision, DecisionEngine
from .trading.journal import TradeJournal
from .trading.performance import PerformanceTracker
from .trading.recorder import TradeRecorder
from .trading.result_checker import ResultChecker
from .trading.trade import TradeRecord
from .utils.candle import Candle, parse_candle
from .utils.logger import log
from .utils.quote import MarketQuote

class PaperTrader:
    """
    Paper-trading caller of the decision core for one market tick at a time.
    Owns the "one trade per market" rule and settles trades once markets resolve.
    Scheduling (which market, how often) is up to whoever drives it.
    """

    def __init__(self, cfg: BotConfig, journal: Optional[TradeJournal] = None):
        self.cfg = cfg
        self.evaluator = create_evaluator(cfg.ta, include_random=cfg.include_random,
                                          seed=cfg.random_seed)
        self.engine = DecisionEngine(cfg.engine, self.evaluator)
        self.journal = journal if journal is not None else TradeJournal(cfg.db_path)
        self.recorder = TradeRecorder(self.journal)
        self.checker = ResultChecker(self.journal)
        self.perf = PerformanceTracker()
        self.perf.load(self.journal.completed_trades())
        self.last_decision: Optional[Decision] = None

    # ------------------------------------------------------------------
    @staticmethod
    def resolve_quote(up=None, down=None, fallback_up=None,
                      fallback_down=None) -> Optional[MarketQuote]:
        """Latest snapshot prices, falling back to the market's initial
        prices, with a missing side derived as 1 - other."""
        def finite(x):
            return isinstance(x, (int, float)) and not isinstance(x, bool) and math.isfinite(x)

        if not finite(up):
            up = fallback_up
        if not finite(down):
            down = fallback_down
        quote = MarketQuote.from_sides(up if finite(up) else None,
                                       down if finite(down) else None)
        return quote

    @staticmethod
    def remaining_minutes(time_remaining_seconds: Optional[float] = None,
                          end_time: Optional[float] = None,
                          now: Optional[float] = None) -> Optional[int]:
        """Whole minutes left (rounded up, never negative). end_time/now are epoch seconds."""
        if time_remaining_seconds is not None and math.isfinite(time_remaining_seconds):
            return max(0, math.ceil(time_remaining_seconds / 60))
        if end_time is None or not math.isfinite(end_time):
            return None
        now = time.time() if now is None else now
        return max(0, math.ceil((end_time - now) / 60))

    # ------------------------------------------------------------------
    def process_market(self, market_id: str, candles: Sequence, quote: Optional[MarketQuote],
                       remaining_minutes: Optional[int] = None) -> Optional[TradeRecord]:
        """Evaluate one tick and record a trade if the engine wants one."""
        if quote is None:
            log.debug("Missing market prices for market %s", market_id)
            return None

        try:
            parsed: list[Candle] = [parse_candle(c) for c in candles or []]
        except (TypeError, ValueError, IndexError) as e:
            log.warning("Malformed candles for market %s: %s", market_id, e)
            return None

        decision = self.engine.decide(parsed, quote, remaining_minutes)
        self.last_decision = decision
        log.debug("Decision for market %s: trade=%s reason=%s",
                  market_id, decision.should_trade, decision.reason)

        if not decision.should_trade:
            return None

        existing = self.journal.get_trade_for_market(market_id)
        if existing is not None:
            log.info("Skipping trade, market %s already traded (#%s)", market_id, existing.id)
            return None

        return self.recorder.record_trade(market_id, decision)

    def settle_market(self, market_id: str, outcome) -> Optional[TradeRecord]:
        """Settle the pending trade of a resolved market, if any."""
        trade = self.journal.get_trade_for_market(market_id)
        if trade is None or trade.is_resolved:
            return None
        settled = self.checker.check_and_update(trade, outcome)
        if settled is not None and settled.is_resolved:
            self.perf.record_trade(settled)
            log.info("📊 %s", self.perf.summary())
        return settled

    def status_line(self) -> str:
        pending = len(self.journal.pending_trades())
        return f"trades: {self.journal.total_trades()} ({pending} pending) | {self.perf.summary()}"

    def close(self):
        self.journal.close()
