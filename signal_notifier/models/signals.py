"""
Signal data models.

Votes are the already-classified output of an indicator rule; the scoring
engine only ever sees these values, never raw indicator readings.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Vote(int, Enum):
    """Directional vote cast by a single indicator."""
    SELL = -1
    NEUTRAL = 0
    BUY = 1

    @property
    def label(self) -> str:
        return self.name.capitalize()


class SignalBucket(str, Enum):
    """Five-way signal derived from the total vote score."""
    STRONG_BUY = "strong_buy"
    BUY = "buy"
    HOLD = "hold"
    SELL = "sell"
    STRONG_SELL = "strong_sell"

    @property
    def label(self) -> str:
        """Display label, e.g. 'Strong Buy'."""
        return self.value.replace("_", " ").title()


@dataclass(frozen=True)
class IndicatorVote:
    """One indicator's name and its directional reading."""
    name: str
    vote: Vote

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "vote": self.vote.label}


@dataclass(frozen=True)
class SignalResult:
    """Aggregated signal for a ticker. Never persisted on its own."""
    ticker: str
    indicators: tuple[IndicatorVote, IndicatorVote, IndicatorVote]
    total_score: int
    bucket: SignalBucket

    @property
    def indicator_names(self) -> list[str]:
        return [indicator.name for indicator in self.indicators]

    def to_dict(self) -> dict[str, Any]:
        return {
            "ticker": self.ticker,
            "indicators": [indicator.to_dict() for indicator in self.indicators],
            "total_score": self.total_score,
            "bucket": self.bucket.value,
        }
