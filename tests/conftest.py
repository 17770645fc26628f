import sys
from pathlib import Path

import pytest

# make the project root importable so tests can use the top-level package name
ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from polyedge.utils.candle import Candle  # noqa: E402
from polyedge.utils.quote import MarketQuote  # noqa: E402


def make_trend(n: int = 40, start: float = 100.0, step: float = 1.0) -> list[Candle]:
    """Steady one-directional series: each bar closes `step` away from the last."""
    candles = []
    sign = 1.0 if step >= 0 else -1.0
    for i in range(n):
        close = start + i * step
        open_ = close - 0.5 * sign
        candles.append(Candle(
            timestamp=1_700_000_000 + i * 60,
            open=open_,
            high=max(open_, close) + 0.25,
            low=min(open_, close) - 0.25,
            close=close,
        ))
    return candles


@pytest.fixture
def uptrend():
    return make_trend(40, 100.0, 1.0)


@pytest.fixture
def downtrend():
    return make_trend(40, 200.0, -1.0)


@pytest.fixture
def even_quote():
    return MarketQuote(up=0.5, down=0.5)
