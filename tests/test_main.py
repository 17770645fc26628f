import main


def test_load_config_ignores_non_finite_numbers(monkeypatch):
    monkeypatch.setenv("PE_REMAINING_MIN", "inf")
    monkeypatch.setenv("PE_SEED", "-inf")
    monkeypatch.setenv("PE_UP", "nan")
    monkeypatch.setenv("PE_DOWN", "0.4")
    monkeypatch.setenv("PE_CANDLE_LIMIT", "abc")
    cfg = main.load_config()
    assert cfg.remaining_minutes is None
    assert cfg.random_seed is None
    assert cfg.up_price is None
    assert cfg.down_price == 0.4
    assert cfg.candle_limit == 200


def test_load_config_reads_env(monkeypatch):
    monkeypatch.setenv("PE_MARKET_ID", "btc-15m")
    monkeypatch.setenv("PE_REMAINING_MIN", "7.0")
    monkeypatch.setenv("PE_MAX_STAKE", "25")
    monkeypatch.setenv("PE_INCLUDE_RANDOM", "yes")
    cfg = main.load_config()
    assert cfg.market_id == "btc-15m"
    assert cfg.remaining_minutes == 7
    assert cfg.engine.max_stake == 25.0
    assert cfg.include_random is True
