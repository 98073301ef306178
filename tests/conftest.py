"""Pytest configuration and shared fixtures."""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pytest

from signal_notifier.delivery.base import MailMessage, MailTransport
from signal_notifier.delivery.dispatcher import NotificationDispatcher
from signal_notifier.errors import TransportError
from signal_notifier.models.market import PricePoint
from signal_notifier.models.signals import IndicatorVote, Vote
from signal_notifier.persistence.subscription_store import SqliteSubscriptionStore
from signal_notifier.providers.base import IndicatorSignalProvider, MarketDataProvider

# 2024-03-15 05:00 in Asia/Seoul
RUN_TIME = datetime(2024, 3, 14, 20, 0, 0, tzinfo=timezone.utc)
RUN_DATE = date(2024, 3, 15)


class RecordingTransport(MailTransport):
    """Transport that keeps sent messages in memory and can be told to fail."""

    def __init__(self, failures: int = 0, retryable: bool = True, fail_for: Optional[set] = None):
        super().__init__("recording", None)
        self.failures = failures
        self.retryable = retryable
        self.fail_for = fail_for or set()
        self.sent: list[MailMessage] = []
        self.attempts = 0

    def send(self, message: MailMessage) -> None:
        self.attempts += 1
        if message.to in self.fail_for:
            raise TransportError("mailbox unavailable", retryable=self.retryable, recipient=message.to)
        if self.failures > 0:
            self.failures -= 1
            raise TransportError("relay timeout", retryable=self.retryable, recipient=message.to)
        self.sent.append(message)

    def health_check(self) -> bool:
        return True


class StaticMarketData(MarketDataProvider):
    """Returns the same short rising series for every known ticker."""

    def __init__(self, unknown: Optional[set] = None):
        self.unknown = unknown or set()
        self.calls: list[str] = []

    def get_history(self, ticker: str) -> list[PricePoint]:
        from signal_notifier.errors import DataFetchError

        self.calls.append(ticker)
        if ticker in self.unknown:
            raise DataFetchError(f"Unknown ticker: {ticker}", ticker=ticker)
        start = date(2024, 1, 1)
        return [PricePoint(date=start + timedelta(days=i), close=100.0 + i) for i in range(30)]


class StaticIndicators(IndicatorSignalProvider):
    """Returns configured votes per ticker."""

    def __init__(self, votes_by_ticker: dict[str, list[Vote]]):
        self.votes_by_ticker = votes_by_ticker

    def get_votes(self, ticker, trading_strategy, history):
        return [
            IndicatorVote(name=f"Indicator {i + 1}", vote=vote)
            for i, vote in enumerate(self.votes_by_ticker[ticker])
        ]


@pytest.fixture
def store(tmp_path) -> SqliteSubscriptionStore:
    """Fresh SQLite subscription store in a temp directory."""
    return SqliteSubscriptionStore(str(tmp_path / "subscriptions.db"))


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def fixed_clock():
    return lambda: RUN_TIME


@pytest.fixture
def dispatcher(transport, fixed_clock) -> NotificationDispatcher:
    """Dispatcher that never sleeps between retries."""
    return NotificationDispatcher(
        transport,
        max_attempts=3,
        base_delay_seconds=0.0,
        sleep=lambda _: None,
        clock=fixed_clock
    )


@pytest.fixture
def buy_votes() -> list[IndicatorVote]:
    return [
        IndicatorVote(name="SMA 20/50 Crossover", vote=Vote.BUY),
        IndicatorVote(name="RSI (14)", vote=Vote.BUY),
        IndicatorVote(name="MACD (12,26,9)", vote=Vote.NEUTRAL),
    ]
