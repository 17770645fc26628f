from collections import deque
from typing import Iterable, Optional

from .trade import TradeRecord

class PerformanceTracker:
    def __init__(self):
        self.wins = 0
        self.losses = 0
        self.total_profit = 0.0
        self.consec_losses = 0
        self.max_drawdown = 0.0
        self._peak = 0.0
        self.recent_results: deque[str] = deque(maxlen=100)
        # model name -> {"wins", "losses", "pnl"}
        self.by_model: dict[str, dict] = {}

    @property
    def total(self):
        return self.wins + self.losses

    @property
    def win_rate(self):
        return self.wins / self.total if self.total > 0 else 0.5

    def record(self, result: str, profit: float, model: Optional[str] = None):
        self.recent_results.append(result)
        self.total_profit += profit
        if result == "win":
            self.wins += 1
            self.consec_losses = 0
        elif result == "loss":
            self.losses += 1
            self.consec_losses += 1

        if model:
            bucket = self.by_model.setdefault(model, {"wins": 0, "losses": 0, "pnl": 0.0})
            if result in ("win", "loss"):
                bucket["wins" if result == "win" else "losses"] += 1
            bucket["pnl"] += profit

        # Drawdown
        if self.total_profit > self._peak:
            self._peak = self.total_profit
        dd = self._peak - self.total_profit
        if dd > self.max_drawdown:
            self.max_drawdown = dd

    def record_trade(self, trade: TradeRecord):
        if trade.is_resolved:
            self.record(trade.outcome, trade.pnl or 0.0, trade.model_name)

    def load(self, trades: Iterable[TradeRecord]):
        """Replay settled trades, e.g. from the journal at startup."""
        for t in trades:
            self.record_trade(t)

    def model_win_rate(self, model: str) -> float:
        b = self.by_model.get(model)
        if not b or b["wins"] + b["losses"] == 0:
            return 0.5
        return b["wins"] / (b["wins"] + b["losses"])

    def summary(self) -> str:
        return (
            f"W:{self.wins} L:{self.losses} "
            f"WR:{self.win_rate:.1%} "
            f"P&L:${self.total_profit:+.2f} "
            f"MaxDD:${self.max_drawdown:.2f} "
            f"Streak:{'L' if self.consec_losses else 'OK'}{self.consec_losses}"
        )
