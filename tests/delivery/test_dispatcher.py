"""Tests for the notification dispatcher."""

from datetime import date, datetime, timezone

import pytest

from signal_notifier.delivery.dispatcher import (
    SKIP_ALREADY_SENT,
    SKIP_HOLD,
    NotificationDispatcher,
)
from signal_notifier.models.notifications import NotificationOutcome
from signal_notifier.models.signals import IndicatorVote, Vote
from signal_notifier.models.subscription import Subscription
from signal_notifier.scoring.engine import score

from conftest import RUN_DATE, RUN_TIME, RecordingTransport


def make_subscription(**overrides) -> Subscription:
    fields = {
        "id": 1,
        "email": "investor@example.com",
        "ticker": "AAPL",
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "trading_strategy": "long-term",
    }
    fields.update(overrides)
    return Subscription(**fields)


def make_result(*votes: Vote, ticker: str = "AAPL"):
    return score(ticker, [IndicatorVote(name=f"Indicator {i}", vote=v) for i, v in enumerate(votes, 1)])


class TestNotificationPolicy:

    def test_hold_is_skipped_without_transport(self, dispatcher, transport):
        result = make_result(Vote.BUY, Vote.SELL, Vote.NEUTRAL)

        record = dispatcher.notify(make_subscription(), result, RUN_DATE, run_id="run-1")

        assert record.outcome == NotificationOutcome.SKIPPED
        assert record.reason == SKIP_HOLD
        assert record.run_id == "run-1"
        assert transport.attempts == 0

    @pytest.mark.parametrize("votes", [
        (Vote.BUY, Vote.BUY, Vote.BUY),
        (Vote.BUY, Vote.BUY, Vote.NEUTRAL),
        (Vote.SELL, Vote.NEUTRAL, Vote.NEUTRAL),
        (Vote.SELL, Vote.SELL, Vote.SELL),
    ])
    def test_non_hold_is_sent(self, dispatcher, transport, votes):
        result = make_result(*votes)

        record = dispatcher.notify(make_subscription(), result, RUN_DATE)

        assert record.outcome == NotificationOutcome.SENT
        assert record.bucket == result.bucket
        assert record.attempts == 1
        assert record.sent_at == RUN_TIME
        assert len(transport.sent) == 1

        message = transport.sent[0]
        assert message.to == "investor@example.com"
        assert result.bucket.label in message.subject
        for name in result.indicator_names:
            assert name in message.body

    def test_already_sent_today_is_skipped(self, dispatcher, transport):
        subscription = make_subscription(last_sent_on=RUN_DATE)

        record = dispatcher.notify(subscription, make_result(Vote.BUY, Vote.BUY, Vote.BUY), RUN_DATE)

        assert record.outcome == NotificationOutcome.SKIPPED
        assert record.reason == SKIP_ALREADY_SENT
        assert transport.attempts == 0

    def test_sent_on_previous_day_is_sent_again(self, dispatcher, transport):
        subscription = make_subscription(last_sent_on=date(2024, 3, 14))

        record = dispatcher.notify(subscription, make_result(Vote.BUY, Vote.BUY, Vote.BUY), RUN_DATE)

        assert record.outcome == NotificationOutcome.SENT
        assert len(transport.sent) == 1


class TestRetry:

    def test_transient_failure_then_success(self, fixed_clock):
        transport = RecordingTransport(failures=2)
        delays = []
        dispatcher = NotificationDispatcher(
            transport, max_attempts=3, base_delay_seconds=1.0,
            sleep=delays.append, clock=fixed_clock
        )

        record = dispatcher.notify(make_subscription(), make_result(Vote.BUY, Vote.BUY, Vote.BUY), RUN_DATE)

        assert record.outcome == NotificationOutcome.SENT
        assert record.attempts == 3
        assert delays == [1.0, 2.0]
        assert len(transport.sent) == 1

    def test_exhausted_retries_returns_failed(self, fixed_clock):
        transport = RecordingTransport(failures=10)
        dispatcher = NotificationDispatcher(
            transport, max_attempts=3, sleep=lambda _: None, clock=fixed_clock
        )

        record = dispatcher.notify(make_subscription(), make_result(Vote.SELL, Vote.SELL, Vote.SELL), RUN_DATE)

        assert record.outcome == NotificationOutcome.FAILED
        assert record.stage == "notify"
        assert record.attempts == 3
        assert "relay timeout" in record.reason
        assert transport.attempts == 3
        assert transport.sent == []

    def test_permanent_failure_is_not_retried(self, fixed_clock):
        transport = RecordingTransport(failures=10, retryable=False)
        delays = []
        dispatcher = NotificationDispatcher(transport, max_attempts=5, sleep=delays.append, clock=fixed_clock)

        record = dispatcher.notify(make_subscription(), make_result(Vote.BUY, Vote.BUY, Vote.BUY), RUN_DATE)

        assert record.outcome == NotificationOutcome.FAILED
        assert record.attempts == 1
        assert delays == []

    def test_unexpected_exception_is_retried(self, fixed_clock):
        class FlakyTransport(RecordingTransport):
            def send(self, message):
                self.attempts += 1
                if self.attempts == 1:
                    raise ConnectionResetError("peer reset")
                self.sent.append(message)

        transport = FlakyTransport()
        dispatcher = NotificationDispatcher(transport, sleep=lambda _: None, clock=fixed_clock)

        record = dispatcher.notify(make_subscription(), make_result(Vote.BUY, Vote.BUY, Vote.BUY), RUN_DATE)

        assert record.outcome == NotificationOutcome.SENT
        assert record.attempts == 2

    def test_backoff_delay_is_capped(self):
        dispatcher = NotificationDispatcher(
            RecordingTransport(), base_delay_seconds=1.0, max_delay_seconds=5.0
        )

        assert [dispatcher.backoff_delay(n) for n in range(1, 6)] == [1.0, 2.0, 4.0, 5.0, 5.0]

    def test_max_attempts_must_be_positive(self):
        with pytest.raises(ValueError):
            NotificationDispatcher(RecordingTransport(), max_attempts=0)


class TestStoreClaims:

    def test_claimed_elsewhere_is_skipped(self, store, transport, fixed_clock):
        subscription = store.add("investor@example.com", "AAPL")
        store.claim_send(subscription.id, RUN_DATE)
        dispatcher = NotificationDispatcher(transport, sleep=lambda _: None, clock=fixed_clock, store=store)

        # Snapshot predates the other claim
        record = dispatcher.notify(subscription, make_result(Vote.BUY, Vote.BUY, Vote.BUY), RUN_DATE)

        assert record.outcome == NotificationOutcome.SKIPPED
        assert record.reason == SKIP_ALREADY_SENT
        assert transport.attempts == 0

    def test_sent_keeps_claim(self, store, transport, fixed_clock):
        subscription = store.add("investor@example.com", "AAPL")
        dispatcher = NotificationDispatcher(transport, sleep=lambda _: None, clock=fixed_clock, store=store)

        record = dispatcher.notify(subscription, make_result(Vote.BUY, Vote.BUY, Vote.BUY), RUN_DATE)

        assert record.outcome == NotificationOutcome.SENT
        assert store.get(subscription.id).last_sent_on == RUN_DATE

    def test_failed_send_releases_claim(self, store, fixed_clock):
        subscription = store.add("investor@example.com", "AAPL")
        transport = RecordingTransport(failures=10, retryable=False)
        dispatcher = NotificationDispatcher(transport, sleep=lambda _: None, clock=fixed_clock, store=store)

        record = dispatcher.notify(subscription, make_result(Vote.BUY, Vote.BUY, Vote.BUY), RUN_DATE)

        assert record.outcome == NotificationOutcome.FAILED
        assert store.get(subscription.id).last_sent_on is None
        assert store.claim_send(subscription.id, RUN_DATE) is True
