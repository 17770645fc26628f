from enum import Enum
from typing import Optional

class Direction(Enum):
    UP = "Up"
    DOWN = "Down"

    @property
    def opposite(self) -> "Direction":
        return Direction.DOWN if self is Direction.UP else Direction.UP

    @classmethod
    def parse(cls, value) -> Optional["Direction"]:
        """Accepts a Direction or a case-insensitive "up"/"down" string."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            v = value.strip().lower()
            if v == "up":
                return cls.UP
            if v == "down":
                return cls.DOWN
        return None

class Regime(Enum):
    TREND_UP = "TREND_UP"
    TREND_DOWN = "TREND_DOWN"
    RANGE = "RANGE"
    CHOP = "CHOP"

class Outcome(Enum):
    WIN = "win"
    LOSS = "loss"
