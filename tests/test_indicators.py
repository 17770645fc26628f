import pytest

from polyedge.constants import Regime
from polyedge.core import indicators as ind
from polyedge.core.regime import RegimeDetector
from polyedge.utils.candle import Candle

from conftest import make_trend


def test_rsi_extremes_and_short_input(uptrend, downtrend):
    assert ind.rsi(uptrend, 14) == 100.0
    assert ind.rsi(downtrend, 14) == 0.0
    assert ind.rsi(uptrend[:14], 14) is None
    assert ind.rsi([], 14) is None


def test_rsi_mixed_series_is_bounded():
    closes = [100, 101, 100.5, 102, 101, 103, 102.5, 104, 103, 102, 104, 105, 104.5, 106, 105, 107]
    candles = [Candle(i, c, c, c, c) for i, c in enumerate(closes)]
    value = ind.rsi(candles, 14)
    assert value is not None
    assert 50 < value < 100
    assert value == round(value, 2)


def test_ema_seeded_with_sma():
    out = ind.ema([1, 2, 3, 4, 5], 3)
    assert out is not None
    assert len(out) == 3
    assert out[0] == pytest.approx(2.0)
    assert out[1] == pytest.approx(3.0)
    assert ind.ema([1, 2], 3) is None


def test_sma_and_bad_values():
    assert ind.sma([1, 2, 3, 4], 2) == pytest.approx(3.5)
    assert ind.sma([1, float("nan"), 3], 2) is None
    assert ind.sma(None, 2) is None


def test_macd_needs_slow_plus_signal():
    candles = make_trend(34)
    assert ind.macd(candles, 12, 26, 9) is None
    result = ind.macd(make_trend(35), 12, 26, 9)
    assert result is not None
    # linear closes: both EMAs lag by a constant, so the line settles at slow-fast lag
    assert result.line == pytest.approx(7.0, abs=1e-4)
    assert result.histogram == pytest.approx(0.0, abs=1e-4)


def test_macd_rejects_bad_periods(uptrend):
    assert ind.macd(uptrend, 26, 12, 9) is None
    assert ind.macd(uptrend, 12, 26, 0) is None


def test_vwap_weighted_and_zero_volume():
    candles = [
        Candle(0, 10, 12, 9, 11, volume=1),
        Candle(1, 11, 15, 10, 14, volume=3),
    ]
    # typical prices 32/3 and 13
    expected = round((32 / 3 * 1 + 13 * 3) / 4, 2)
    assert ind.vwap(candles) == expected

    flat = [Candle(0, 10, 12, 9, 11), Candle(1, 11, 15, 10, 14)]
    assert ind.vwap(flat) == round((32 / 3 + 13) / 2, 2)
    assert ind.vwap([]) is None


def test_atr_simple_mean():
    candles = [Candle(i, 10, 11, 9, 10) for i in range(5)]
    assert ind.atr(candles, 3) == pytest.approx(2.0)
    assert ind.atr(candles[:3], 3) is None


def test_heiken_ashi_trend(uptrend, downtrend):
    ha_up = ind.heiken_ashi(uptrend)
    assert len(ha_up) == len(uptrend)
    assert ha_up[0].open == pytest.approx((uptrend[0].open + uptrend[0].close) / 2)
    assert ind.ha_trend(ha_up, 3) == ind.HATrend("up", 1.0)
    assert ind.ha_trend(ind.heiken_ashi(downtrend), 3) == ind.HATrend("down", 1.0)


def test_heiken_ashi_empty_and_short():
    assert ind.heiken_ashi([]) == []
    assert ind.ha_trend([], 3) == ind.HATrend("neutral", 0.0)
    assert ind.ha_trend(ind.heiken_ashi(make_trend(2)), 3).direction == "neutral"


def test_regime_trends(uptrend, downtrend):
    assert RegimeDetector.detect(uptrend) is Regime.TREND_UP
    assert RegimeDetector.detect(downtrend) is Regime.TREND_DOWN


def test_regime_range_and_short_history():
    # tiny oscillation with highs and lows alternating evenly
    candles = []
    for i in range(30):
        c = 100.0 + (0.1 if i % 2 else -0.1)
        candles.append(Candle(i, c, c + 0.05, c - 0.05, c))
    assert RegimeDetector.detect(candles) is Regime.RANGE
    assert RegimeDetector.detect(candles[:10]) is Regime.CHOP
