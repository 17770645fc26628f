import math
from dataclasses import dataclass
from numbers import Real
from typing import Optional

from ..constants import Direction

def _is_price(value) -> bool:
    return (isinstance(value, Real) and not isinstance(value, bool)
            and math.isfinite(value) and 0.0 <= value <= 1.0)

def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)

@dataclass(frozen=True)
class MarketQuote:
    """Two-sided binary market quote. Each side is the market's implied
    probability for that outcome; up + down is usually ~1 but not enforced."""

    up: float
    down: float

    @classmethod
    def from_sides(cls, up=None, down=None) -> Optional["MarketQuote"]:
        """Build a quote, deriving a missing side as 1 - other."""
        has_up, has_down = _is_number(up), _is_number(down)
        if has_up and not has_down:
            down = 1 - up
        elif has_down and not has_up:
            up = 1 - down
        elif not has_up and not has_down:
            return None
        return cls(up=float(up), down=float(down))

    def is_valid(self) -> bool:
        return _is_price(self.up) and _is_price(self.down)

    def price(self, direction: Direction) -> float:
        return self.up if direction is Direction.UP else self.down

    def favored(self) -> Direction:
        """Side the market leans to; ties go to Up."""
        return Direction.UP if self.up >= self.down else Direction.DOWN

    def to_dict(self) -> dict:
        return {"up": self.up, "down": self.down}

def validate_quote(quote) -> bool:
    return isinstance(quote, MarketQuote) and quote.is_valid()
