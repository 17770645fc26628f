import math
from typing import NamedTuple
from ..config import EngineConfig

class Sizing(NamedTuple):
    stake: float
    should_trade: bool
    reason: str

class MoneyManager:
    def __init__(self, cfg: EngineConfig):
        self.cfg = cfg

    def _reject(self, reason: str) -> Sizing:
        return Sizing(0.0, False, reason)

    def size(self, edge: float, entry_price: float) -> Sizing:
        """Kelly-style sizing on binary odds, capped by max_stake.

        Buying a side at `entry_price` pays 1 on a win, so the net odds are
        b = 1/entry_price - 1 and stake = bankroll * edge / b.
        """
        if edge is None or not math.isfinite(edge) or edge < self.cfg.min_edge:
            return self._reject(f"Edge {edge} below min edge {self.cfg.min_edge}")

        if entry_price is None or not math.isfinite(entry_price) or not 0 < entry_price < 1:
            return self._reject(f"Entry price {entry_price} outside (0, 1)")

        odds = 1 / entry_price - 1
        if not math.isfinite(odds) or odds <= 0:
            return self._reject(f"Invalid odds {odds}")

        stake = self.cfg.bankroll * edge / odds
        if not math.isfinite(stake) or stake <= 0:
            return self._reject(f"Invalid stake {stake}")

        if stake > self.cfg.max_stake:
            return Sizing(self.cfg.max_stake, True, f"Stake capped at max {self.cfg.max_stake:.2f}")
        return Sizing(stake, True, "OK")
