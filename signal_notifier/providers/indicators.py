"""
Fixed-rule indicator signal provider.

Picks three indicators from the subscriber's trading-strategy text and
classifies each one as Buy, Sell or Neutral from the latest closes. This is
the deterministic stand-in for a generative indicator-selection service.

Classification rules:
- Moving-average crossover: fast above slow -> Buy, below -> Sell
- RSI: below oversold -> Buy, above overbought -> Sell
- MACD: MACD line above signal line -> Buy, below -> Sell
- Rate of change: above +threshold -> Buy, below -threshold -> Sell

Anything else, including too little history for a rule, is Neutral.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Optional

import structlog

from ..errors import ProviderError
from ..metrics import (
    calculate_ema,
    calculate_macd,
    calculate_rate_of_change,
    calculate_rsi,
    calculate_sma,
)
from ..models.market import PricePoint
from ..models.signals import IndicatorVote, Vote
from .base import IndicatorSignalProvider

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class IndicatorRule:
    """A named indicator with its vote classification."""
    name: str
    evaluate: Callable[[Sequence[float]], Vote]


@dataclass(frozen=True)
class StrategyProfile:
    """Three indicator rules chosen for a family of trading strategies."""
    name: str
    keywords: tuple[str, ...]
    rules: tuple[IndicatorRule, IndicatorRule, IndicatorRule]


def _direction(value: Optional[float], lower: float, upper: float, inverted: bool = False) -> Vote:
    """Vote Buy above `upper` and Sell below `lower` (swapped when inverted)."""
    if value is None:
        return Vote.NEUTRAL
    if value > upper:
        return Vote.SELL if inverted else Vote.BUY
    if value < lower:
        return Vote.BUY if inverted else Vote.SELL
    return Vote.NEUTRAL


def moving_average_crossover(fast: int, slow: int, exponential: bool = False) -> IndicatorRule:
    average = calculate_ema if exponential else calculate_sma
    label = "EMA" if exponential else "SMA"

    def evaluate(closes: Sequence[float]) -> Vote:
        fast_value = average(closes, fast)
        slow_value = average(closes, slow)
        if fast_value is None or slow_value is None:
            return Vote.NEUTRAL
        return _direction(fast_value - slow_value, 0.0, 0.0)

    return IndicatorRule(name=f"{label} {fast}/{slow} Crossover", evaluate=evaluate)


def rsi_threshold(period: int = 14, oversold: float = 30.0, overbought: float = 70.0) -> IndicatorRule:
    def evaluate(closes: Sequence[float]) -> Vote:
        # Oversold reads as a buy, overbought as a sell
        return _direction(calculate_rsi(closes, period), oversold, overbought, inverted=True)

    return IndicatorRule(name=f"RSI ({period})", evaluate=evaluate)


def macd_crossover(fast: int = 12, slow: int = 26, signal: int = 9) -> IndicatorRule:
    def evaluate(closes: Sequence[float]) -> Vote:
        lines = calculate_macd(closes, fast, slow, signal)
        if lines is None:
            return Vote.NEUTRAL
        macd, signal_line = lines
        return _direction(macd - signal_line, 0.0, 0.0)

    return IndicatorRule(name=f"MACD ({fast},{slow},{signal})", evaluate=evaluate)


def rate_of_change(period: int, threshold_pct: float) -> IndicatorRule:
    def evaluate(closes: Sequence[float]) -> Vote:
        return _direction(calculate_rate_of_change(closes, period), -threshold_pct, threshold_pct)

    return IndicatorRule(name=f"Rate of Change ({period})", evaluate=evaluate)


SHORT_TERM = StrategyProfile(
    name="short_term",
    keywords=("short", "day", "swing", "scalp", "volatil", "momentum", "단기", "변동성"),
    rules=(
        moving_average_crossover(5, 20, exponential=True),
        rsi_threshold(7, oversold=25.0, overbought=75.0),
        rate_of_change(10, threshold_pct=2.0),
    ),
)

LONG_TERM = StrategyProfile(
    name="long_term",
    keywords=("long", "hold", "value", "invest", "dividend", "저점", "장기"),
    rules=(
        moving_average_crossover(50, 200),
        rsi_threshold(14),
        rate_of_change(126, threshold_pct=10.0),
    ),
)

BALANCED = StrategyProfile(
    name="balanced",
    keywords=(),
    rules=(
        moving_average_crossover(20, 50),
        rsi_threshold(14),
        macd_crossover(),
    ),
)

DEFAULT_PROFILES = (SHORT_TERM, LONG_TERM)


def select_profile(
    trading_strategy: Optional[str],
    profiles: Sequence[StrategyProfile] = DEFAULT_PROFILES,
    default: StrategyProfile = BALANCED
) -> StrategyProfile:
    """Pick the first profile whose keywords appear in the strategy text."""
    if not trading_strategy:
        return default

    text = trading_strategy.lower()
    for profile in profiles:
        if any(keyword in text for keyword in profile.keywords):
            return profile
    return default


class RuleBasedIndicatorProvider(IndicatorSignalProvider):
    """Deterministic indicator votes computed from closing prices."""

    def __init__(
        self,
        profiles: Sequence[StrategyProfile] = DEFAULT_PROFILES,
        default_profile: StrategyProfile = BALANCED
    ):
        self.profiles = tuple(profiles)
        self.default_profile = default_profile
        self.logger = logger

    def get_votes(
        self,
        ticker: str,
        trading_strategy: Optional[str],
        history: Sequence[PricePoint]
    ) -> list[IndicatorVote]:
        if not history:
            raise ProviderError(f"No price history to evaluate for {ticker}", ticker=ticker)

        profile = select_profile(trading_strategy, self.profiles, self.default_profile)
        closes = [point.close for point in history]

        votes = []
        for rule in profile.rules:
            try:
                vote = rule.evaluate(closes)
            except (ArithmeticError, ValueError) as e:
                raise ProviderError(
                    f"Indicator {rule.name} failed for {ticker}: {e}",
                    ticker=ticker
                ) from e
            votes.append(IndicatorVote(name=rule.name, vote=vote))

        self.logger.debug(
            "Computed indicator votes",
            ticker=ticker,
            profile=profile.name,
            votes={vote.name: vote.vote.label for vote in votes}
        )

        return votes
