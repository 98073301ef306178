"""Tests for the rule-based indicator provider."""

from datetime import date, timedelta

import pytest

from signal_notifier.errors import ProviderError
from signal_notifier.models.market import PricePoint
from signal_notifier.models.signals import Vote
from signal_notifier.providers.indicators import (
    BALANCED,
    LONG_TERM,
    SHORT_TERM,
    IndicatorRule,
    RuleBasedIndicatorProvider,
    StrategyProfile,
    select_profile,
)


def series(closes):
    start = date(2023, 1, 2)
    return [PricePoint(date=start + timedelta(days=i), close=close) for i, close in enumerate(closes)]


RISING = series([100.0 + i for i in range(60)])
FALLING = series([200.0 - i for i in range(60)])


class TestSelectProfile:

    @pytest.mark.parametrize("strategy,expected", [
        (None, BALANCED),
        ("", BALANCED),
        ("short-term volatility", SHORT_TERM),
        ("Swing trading", SHORT_TERM),
        ("long-term buy and hold", LONG_TERM),
        ("dividend investing", LONG_TERM),
        ("장기 투자", LONG_TERM),
        ("whatever works", BALANCED),
    ])
    def test_keyword_matching(self, strategy, expected):
        assert select_profile(strategy) is expected


class TestRuleBasedIndicatorProvider:

    def test_always_three_named_votes(self):
        provider = RuleBasedIndicatorProvider()
        for strategy in (None, "short", "long"):
            votes = provider.get_votes("AAPL", strategy, RISING)
            assert len(votes) == 3
            assert all(vote.name for vote in votes)
            assert all(isinstance(vote.vote, Vote) for vote in votes)

    def test_balanced_names(self):
        votes = RuleBasedIndicatorProvider().get_votes("AAPL", None, RISING)
        assert [v.name for v in votes] == ["SMA 20/50 Crossover", "RSI (14)", "MACD (12,26,9)"]

    def test_rising_series(self):
        votes = {v.name: v.vote for v in RuleBasedIndicatorProvider().get_votes("AAPL", "short", RISING)}

        assert votes == {
            "EMA 5/20 Crossover": Vote.BUY,
            "RSI (7)": Vote.SELL,
            "Rate of Change (10)": Vote.BUY,
        }

    def test_falling_series(self):
        votes = {v.name: v.vote for v in RuleBasedIndicatorProvider().get_votes("AAPL", None, FALLING)}

        assert votes["SMA 20/50 Crossover"] == Vote.SELL
        assert votes["RSI (14)"] == Vote.BUY

    def test_short_history_votes_neutral(self):
        votes = RuleBasedIndicatorProvider().get_votes("AAPL", "long-term", RISING[:30])

        assert [v.vote for v in votes] == [Vote.NEUTRAL, Vote.SELL, Vote.NEUTRAL]

    def test_flat_series(self):
        votes = {v.name: v.vote for v in RuleBasedIndicatorProvider().get_votes("AAPL", None, series([100.0] * 60))}

        assert votes["SMA 20/50 Crossover"] == Vote.NEUTRAL
        assert votes["RSI (14)"] == Vote.NEUTRAL

    def test_empty_history_raises(self):
        with pytest.raises(ProviderError):
            RuleBasedIndicatorProvider().get_votes("AAPL", None, [])

    def test_failing_rule_raises_provider_error(self):
        def broken(closes):
            return 1 / 0

        neutral = IndicatorRule(name="Neutral", evaluate=lambda closes: Vote.NEUTRAL)
        profile = StrategyProfile(
            name="broken",
            keywords=(),
            rules=(neutral, neutral, IndicatorRule(name="Broken", evaluate=broken))
        )

        with pytest.raises(ProviderError) as exc_info:
            RuleBasedIndicatorProvider(profiles=(), default_profile=profile).get_votes("AAPL", None, RISING)

        assert exc_info.value.ticker == "AAPL"
        assert "Broken" in str(exc_info.value)
