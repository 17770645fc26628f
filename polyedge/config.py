import math
from dataclasses import dataclass, field
from typing import Optional

@dataclass(frozen=True)
class SignalWeights:
    """Weight of each signal in the TA composite score. Must sum to 1."""

    rsi: float = 0.20
    macd: float = 0.25
    vwap: float = 0.15
    heiken_ashi: float = 0.25
    regime: float = 0.15

    def items(self) -> list[tuple[str, float]]:
        return [
            ("rsi", self.rsi),
            ("macd", self.macd),
            ("vwap", self.vwap),
            ("heiken_ashi", self.heiken_ashi),
            ("regime", self.regime),
        ]

    @property
    def total(self) -> float:
        return sum(w for _, w in self.items())

@dataclass(frozen=True)
class TAConfig:
    """Knobs for the technical-analysis model."""

    edge_threshold: float = 0.05            # min confidence-over-market to act
    rsi_period: int = 14
    rsi_overbought: float = 70.0
    rsi_oversold: float = 30.0
    min_candles: int = 30                   # enough history for MACD to mostly warm up
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    ha_lookback: int = 3
    min_confluence: float = 0.15            # |composite| below this = no direction
    max_confidence: float = 0.90            # never claim more than 90%
    chop_damping: float = 0.5               # fraction of excess confidence kept in CHOP
    weights: SignalWeights = field(default_factory=SignalWeights)

    def __post_init__(self):
        if not math.isclose(self.weights.total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Signal weights must sum to 1.0, got {self.weights.total:.4f}")
        if not 0 < self.rsi_oversold < self.rsi_overbought < 100:
            raise ValueError("RSI thresholds must satisfy 0 < oversold < overbought < 100")
        if self.rsi_period <= 0 or self.min_candles <= 0 or self.ha_lookback <= 0:
            raise ValueError("Periods and lookbacks must be > 0")
        if not 0 < self.macd_fast < self.macd_slow or self.macd_signal <= 0:
            raise ValueError("MACD periods must satisfy 0 < fast < slow and signal > 0")
        if not 0.5 <= self.max_confidence <= 1.0:
            raise ValueError("max_confidence must be within [0.5, 1.0]")

@dataclass(frozen=True)
class EngineConfig:
    """Decision engine / stake sizing limits."""

    min_edge: float = 0.05
    max_stake: float = 100.0                # hard ceiling per trade ($)
    bankroll: float = 1000.0

    def __post_init__(self):
        if self.max_stake <= 0:
            raise ValueError("max_stake must be > 0")
        if self.bankroll <= 0:
            raise ValueError("bankroll must be > 0")

@dataclass
class BotConfig:
    """All tuneable knobs in one place."""

    # --- market tick ---
    market_id: str = ""
    candles_path: str = ""                  # CSV with OHLCV history
    candle_limit: int = 200                 # most recent candles fed to the models
    up_price: Optional[float] = None
    down_price: Optional[float] = None
    remaining_minutes: Optional[int] = None
    outcome: str = ""                       # "Up" / "Down" once the market resolves

    # --- models ---
    include_random: bool = False            # add the sanity-check random model
    random_seed: Optional[int] = None
    ta: TAConfig = field(default_factory=TAConfig)

    # --- money management ---
    engine: EngineConfig = field(default_factory=EngineConfig)

    # --- persistence ---
    db_path: str = "paper_trades.db"

    # --- misc ---
    log_level: str = "INFO"
