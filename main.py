import json
import math
import os
import sys

from polyedge.config import BotConfig, EngineConfig, TAConfig
from polyedge.paper import PaperTrader
from polyedge.utils.candle import load_candles_csv
from polyedge.utils.logger import set_level

def _opt_float(name):
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        value = math.nan
    if not math.isfinite(value):
        print(f"Warning: Invalid {name} '{raw}', ignoring")
        return None
    return value

def _opt_int(name):
    value = _opt_float(name)
    return int(value) if value is not None else None

def load_config() -> BotConfig:
    ta = TAConfig(edge_threshold=float(os.environ.get("PE_EDGE_THRESHOLD", "0.05")))
    engine = EngineConfig(
        min_edge=float(os.environ.get("PE_MIN_EDGE", "0.05")),
        max_stake=float(os.environ.get("PE_MAX_STAKE", "100.0")),
        bankroll=float(os.environ.get("PE_BANKROLL", "1000.0")),
    )
    return BotConfig(
        market_id=os.environ.get("PE_MARKET_ID", ""),
        candles_path=os.environ.get("PE_CANDLES", ""),
        candle_limit=_opt_int("PE_CANDLE_LIMIT") or 200,
        up_price=_opt_float("PE_UP"),
        down_price=_opt_float("PE_DOWN"),
        remaining_minutes=_opt_int("PE_REMAINING_MIN"),
        outcome=os.environ.get("PE_OUTCOME", ""),
        include_random=os.environ.get("PE_INCLUDE_RANDOM", "").lower() in ("1", "true", "yes"),
        random_seed=_opt_int("PE_SEED"),
        ta=ta,
        engine=engine,
        db_path=os.environ.get("PE_DB", "paper_trades.db"),
        log_level=os.environ.get("PE_LOG_LEVEL", "INFO").upper(),
    )

def main():
    try:
        cfg = load_config()
    except ValueError as e:
        print(f"Config error: {e}")
        sys.exit(2)

    set_level(cfg.log_level)

    if not cfg.market_id or not cfg.candles_path:
        print("=" * 60)
        print("  ERROR: No market or candle history provided!")
        print()
        print("  Set the market and a CSV of OHLCV candles:")
        print("    export PE_MARKET_ID='btc-updown-15m-1700000000'")
        print("    export PE_CANDLES='candles.csv'")
        print("    export PE_UP=0.55 PE_DOWN=0.45")
        print()
        print("  Optionally settle it once resolved: export PE_OUTCOME=Up")
        print("=" * 60)
        sys.exit(1)

    try:
        candles = load_candles_csv(cfg.candles_path, limit=cfg.candle_limit)
    except (OSError, ValueError) as e:
        print(f"Could not load candles from {cfg.candles_path}: {e}")
        sys.exit(1)

    quote = PaperTrader.resolve_quote(cfg.up_price, cfg.down_price)
    trader = PaperTrader(cfg)
    try:
        trader.process_market(cfg.market_id, candles, quote, cfg.remaining_minutes)
        if trader.last_decision is not None:
            summary = trader.last_decision.indicators.get("summary")
            if summary:
                print(json.dumps(summary, indent=2))
            print(f"Decision: {trader.last_decision.reason}")
        if cfg.outcome:
            trader.settle_market(cfg.market_id, cfg.outcome)
        print(trader.status_line())
    finally:
        trader.close()

if __name__ == "__main__":
    main()
