"""
Notification dispatcher.

Decides whether a signal warrants mail, renders it and hands it to the
transport with bounded exponential backoff. Transport failures come back as
a Failed record; they are never raised to the caller.
"""

import time
from collections.abc import Callable
from datetime import date, datetime, timezone
from typing import Optional

import structlog

from ..errors import TransportError
from ..models.notifications import NotificationOutcome, NotificationRecord
from ..models.signals import SignalBucket, SignalResult
from ..models.subscription import Subscription
from ..persistence.subscription_store import SubscriptionStore
from .base import MailTransport
from .templates import render_signal_message

logger = structlog.get_logger(__name__)

SKIP_HOLD = "hold"
SKIP_ALREADY_SENT = "already_sent_today"


class NotificationDispatcher:
    """Renders and sends signal mail for one subscription at a time."""

    def __init__(
        self,
        transport: MailTransport,
        max_attempts: int = 3,
        base_delay_seconds: float = 1.0,
        max_delay_seconds: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Optional[Callable[[], datetime]] = None,
        store: Optional[SubscriptionStore] = None
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.transport = transport
        self.max_attempts = max_attempts
        self.base_delay_seconds = base_delay_seconds
        self.max_delay_seconds = max_delay_seconds
        self.sleep = sleep
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.store = store
        self.logger = logger

    def notify(
        self,
        subscription: Subscription,
        result: SignalResult,
        run_date: date,
        run_id: Optional[str] = None
    ) -> NotificationRecord:
        """
        Send the signal email unless policy says to skip it.

        Args:
            subscription: Subscriber to notify
            result: Scored signal for the subscription's ticker
            run_date: Calendar day of the run (idempotency window)
            run_id: Identifier of the scheduler run

        Returns:
            NotificationRecord with outcome SENT, SKIPPED or FAILED
        """
        if result.bucket == SignalBucket.HOLD:
            self.logger.info(
                "Hold signal, mail suppressed",
                subscription_id=subscription.id,
                ticker=result.ticker
            )
            return self._record(subscription, result, run_id, NotificationOutcome.SKIPPED, reason=SKIP_HOLD)

        if subscription.last_sent_on == run_date or not self._claim(subscription, run_date):
            self.logger.info(
                "Already notified in this run window, skipping",
                subscription_id=subscription.id,
                ticker=result.ticker,
                run_date=run_date.isoformat()
            )
            return self._record(
                subscription, result, run_id, NotificationOutcome.SKIPPED, reason=SKIP_ALREADY_SENT
            )

        message = render_signal_message(subscription, result, run_date)
        record = self._send_with_retry(subscription, result, run_id, message)

        if record.outcome == NotificationOutcome.FAILED and self.store is not None:
            # Free the run window so a later trigger today can retry delivery
            self.store.release_send(subscription.id, run_date, previous=subscription.last_sent_on)

        return record

    def _claim(self, subscription: Subscription, run_date: date) -> bool:
        """Reserve the run window in the store; without a store the snapshot decides."""
        if self.store is None:
            return True
        return self.store.claim_send(subscription.id, run_date)

    def backoff_delay(self, attempt: int) -> float:
        """Delay after the given (1-based) failed attempt."""
        return min(self.base_delay_seconds * (2 ** (attempt - 1)), self.max_delay_seconds)

    def _send_with_retry(self, subscription, result, run_id, message) -> NotificationRecord:
        attempt = 0
        last_error: Optional[TransportError] = None

        while attempt < self.max_attempts:
            attempt += 1
            try:
                self.transport.send(message)

            except TransportError as e:
                last_error = e

            except Exception as e:
                # Unknown transport error - treat as retryable
                last_error = TransportError(f"Unexpected transport error: {e}", recipient=message.to)

            else:
                self.logger.info(
                    "Signal mail sent",
                    subscription_id=subscription.id,
                    ticker=result.ticker,
                    bucket=result.bucket.value,
                    attempts=attempt
                )
                return self._record(
                    subscription, result, run_id, NotificationOutcome.SENT, attempts=attempt
                )

            if not last_error.retryable:
                self.logger.error(
                    "Permanent transport error, not retrying",
                    subscription_id=subscription.id,
                    attempt=attempt,
                    error=str(last_error)
                )
                break

            if attempt < self.max_attempts:
                delay = self.backoff_delay(attempt)
                self.logger.warning(
                    f"Send attempt {attempt} failed, retrying in {delay}s",
                    subscription_id=subscription.id,
                    error=str(last_error)
                )
                self.sleep(delay)

        self.logger.error(
            "Signal mail failed",
            subscription_id=subscription.id,
            ticker=result.ticker,
            attempts=attempt,
            error=str(last_error)
        )
        return self._record(
            subscription,
            result,
            run_id,
            NotificationOutcome.FAILED,
            stage=TransportError.stage,
            reason=str(last_error),
            attempts=attempt
        )

    def _record(
        self,
        subscription: Subscription,
        result: SignalResult,
        run_id: Optional[str],
        outcome: NotificationOutcome,
        stage: Optional[str] = None,
        reason: Optional[str] = None,
        attempts: int = 0
    ) -> NotificationRecord:
        return NotificationRecord(
            subscription_id=subscription.id,
            outcome=outcome,
            sent_at=self.clock(),
            bucket=result.bucket,
            run_id=run_id,
            stage=stage,
            reason=reason,
            attempts=attempts
        )
