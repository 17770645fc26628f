import pytest

from polyedge.config import BotConfig
from polyedge.paper import PaperTrader
from polyedge.trading.journal import TradeJournal
from polyedge.utils.candle import load_candles_csv
from polyedge.utils.quote import MarketQuote


@pytest.fixture
def trader():
    t = PaperTrader(BotConfig(), journal=TradeJournal(":memory:"))
    yield t
    t.close()


def test_resolve_quote_fallbacks():
    assert PaperTrader.resolve_quote(0.6, 0.4) == MarketQuote(up=0.6, down=0.4)
    assert PaperTrader.resolve_quote(None, None, 0.55, 0.45) == MarketQuote(up=0.55, down=0.45)
    q = PaperTrader.resolve_quote(0.7)
    assert q.up == 0.7
    assert q.down == pytest.approx(0.3)
    assert PaperTrader.resolve_quote(float("nan"), None, None, 0.2).up == pytest.approx(0.8)
    assert PaperTrader.resolve_quote() is None


def test_remaining_minutes():
    assert PaperTrader.remaining_minutes(61) == 2
    assert PaperTrader.remaining_minutes(0) == 0
    assert PaperTrader.remaining_minutes(-30) == 0
    assert PaperTrader.remaining_minutes(end_time=1_000.0, now=700.0) == 5
    assert PaperTrader.remaining_minutes(end_time=100.0, now=700.0) == 0
    assert PaperTrader.remaining_minutes() is None


def test_one_trade_per_market(trader, uptrend, even_quote):
    first = trader.process_market("mkt-1", uptrend, even_quote, 10)
    assert first is not None
    assert first.market_id == "mkt-1"
    assert first.direction == "Up"

    assert trader.process_market("mkt-1", uptrend, even_quote, 9) is None
    assert trader.journal.total_trades() == 1

    assert trader.process_market("mkt-2", uptrend, even_quote, 10) is not None
    assert trader.journal.total_trades() == 2


def test_no_trade_paths(trader, uptrend, even_quote):
    assert trader.process_market("mkt", uptrend, None) is None
    assert trader.process_market("mkt", uptrend[:5], even_quote) is None
    assert trader.last_decision.should_trade is False
    assert trader.journal.total_trades() == 0


def test_process_market_accepts_raw_candles(trader, uptrend, even_quote):
    raw = [[c.timestamp, c.open, c.high, c.low, c.close, c.volume] for c in uptrend]
    assert trader.process_market("mkt", raw, even_quote) is not None


def test_settle_market_updates_performance(trader, uptrend, even_quote):
    trade = trader.process_market("mkt", uptrend, even_quote)
    settled = trader.settle_market("mkt", "Up")
    assert settled.id == trade.id
    assert settled.outcome == "win"
    assert settled.pnl == pytest.approx(trade.stake)
    assert trader.perf.wins == 1

    # second resolution notice is a no-op
    assert trader.settle_market("mkt", "Down") is None
    assert trader.perf.total == 1
    assert trader.settle_market("unknown", "Up") is None
    assert "trades: 1 (0 pending)" in trader.status_line()


def test_performance_reloaded_from_journal(uptrend, even_quote):
    journal = TradeJournal(":memory:")
    first = PaperTrader(BotConfig(), journal=journal)
    first.process_market("mkt", uptrend, even_quote)
    first.settle_market("mkt", "Down")

    second = PaperTrader(BotConfig(), journal=journal)
    assert second.perf.losses == 1
    journal.close()


def test_load_candles_csv(tmp_path):
    headered = tmp_path / "candles.csv"
    headered.write_text(
        "time,open,high,low,close,volume\n"
        "1700000060,1.1,1.3,1.0,1.2,5\n"
        "1700000000,1.0,1.2,0.9,1.1,4\n"
        "bad,row,,,,\n"
    )
    candles = load_candles_csv(str(headered))
    assert [c.timestamp for c in candles] == [1700000000, 1700000060]
    assert candles[1].close == 1.2



def test_load_candles_csv_iso_timestamps_and_limit(tmp_path):
    path = tmp_path / "iso.csv"
    path.write_text(
        "timestamp,open,high,low,close\n"
        "2024-01-02T00:02:00Z,1.2,1.4,1.1,1.3\n"
        "2024-01-02T00:00:00,1.0,1.2,0.9,1.1\n"
        "2024-01-02T00:01:00+00:00,1.1,1.3,1.0,1.2\n"
        "2024-01-02T00:03:00Z,1.3,nan,1.2,1.4\n"
        "2024-01-02T00:04:00Z,1.3,1.5\n"
    )
    candles = load_candles_csv(str(path))
    assert [c.close for c in candles] == [1.1, 1.2, 1.3]
    assert candles[0].timestamp == 1704153600.0
    assert candles[1].timestamp - candles[0].timestamp == 60
    assert all(c.volume == 0.0 for c in candles)

    recent = load_candles_csv(str(path), limit=2)
    assert [c.close for c in recent] == [1.2, 1.3]


def test_load_candles_csv_requires_candle_columns(tmp_path):
    path = tmp_path / "forex.csv"
    path.write_text("20240102 000000;1.1;1.2;1.0;1.15;0\n")
    with pytest.raises(ValueError):
        load_candles_csv(str(path))


def test_parse_candle_shapes():
    from polyedge.utils.candle import Candle, parse_candle

    expected = Candle(1700000000.0, 1.0, 2.0, 0.5, 1.5, 10.0)
    assert parse_candle(expected) is expected
    assert parse_candle([1700000000, 1, 2, 0.5, 1.5, 10]) == expected
    assert parse_candle({"time": "1700000000", "open": 1, "high": 2, "low": 0.5,
                         "close": 1.5, "volume": 10}) == expected
    assert parse_candle({"timestamp": "2023-11-14T22:13:20Z", "open": 1, "high": 2,
                         "low": 0.5, "close": 1.5}).timestamp == 1700000000.0
    with pytest.raises(IndexError):
        parse_candle([1, 2, 3])
    with pytest.raises(ValueError):
        parse_candle({"open": 1, "high": 2, "low": 0.5, "close": 1.5})
    with pytest.raises(TypeError):
        parse_candle({"timestamp": 1, "open": 1, "high": 2, "low": 0.5})


def test_set_level():
    import logging
    from polyedge.utils.logger import log, set_level

    before = log.level
    try:
        assert set_level("debug") == logging.DEBUG
        assert log.level == logging.DEBUG
        assert set_level("bogus") == logging.INFO
    finally:
        log.setLevel(before)
