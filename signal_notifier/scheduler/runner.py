"""
Single-run orchestration for the daily signal pipeline.

One run enumerates every active subscription and processes each one as an
independent unit of work on a bounded thread pool:

    fetch history -> indicator votes -> score -> notify -> record

Failures inside a unit are caught at the unit boundary, logged, and counted
as a Failed outcome; the run moves on. Only store failures end a run early,
because nothing can be recorded once the store is gone.
"""

import threading
import uuid
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date, datetime
from enum import Enum
from typing import Optional

from ..delivery.dispatcher import NotificationDispatcher
from ..errors import StoreError, UnitCancelledError, UnitFailureError
from ..logging.config import get_run_logger, log_run_summary, log_unit_failure
from ..models.notifications import NotificationOutcome, NotificationRecord, RunSummary
from ..models.signals import SignalBucket
from ..models.subscription import Subscription
from ..persistence.subscription_store import SubscriptionStore
from ..providers.base import IndicatorSignalProvider, MarketDataProvider
from ..scoring.engine import score
from ..utils.time import run_date, utc_now


class RunState(str, Enum):
    """Lifecycle of a single run."""
    IDLE = "idle"
    ENUMERATING = "enumerating"
    PROCESSING = "processing"
    FINALIZING = "finalizing"


class SignalRunner:
    """Executes one signal run at a time."""

    def __init__(
        self,
        store: SubscriptionStore,
        market_data: MarketDataProvider,
        indicators: IndicatorSignalProvider,
        dispatcher: NotificationDispatcher,
        max_workers: int = 4,
        timezone: str = "UTC",
        clock: Callable[[], datetime] = utc_now
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self.store = store
        self.market_data = market_data
        self.indicators = indicators
        self.dispatcher = dispatcher
        self.max_workers = max_workers
        self.timezone = timezone
        self.clock = clock
        self.logger = get_run_logger(__name__)

        self._run_lock = threading.Lock()
        self._cancel_event = threading.Event()
        self._state = RunState.IDLE
        self._last_summary: Optional[RunSummary] = None

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def last_summary(self) -> Optional[RunSummary]:
        return self._last_summary

    def cancel(self) -> None:
        """Ask in-flight units to stop at their next stage boundary."""
        if self._run_lock.locked():
            self.logger.warning("Cancelling in-flight run", state=self._state.value)
        self._cancel_event.set()

    def run_once(self, now: Optional[datetime] = None) -> Optional[RunSummary]:
        """
        Execute one run over all active subscriptions.

        Args:
            now: Trigger time, defaults to the runner's clock

        Returns:
            The finalized RunSummary, or None if a run was already in progress

        Raises:
            StoreError: If the subscription store fails; the partial summary
                is attached as ``error.context["summary"]``
        """
        if not self._run_lock.acquire(blocking=False):
            self.logger.warning(
                "Run already in progress, trigger ignored",
                state=self._state.value
            )
            return None

        try:
            self._cancel_event.clear()
            return self._run(now or self.clock())
        finally:
            self._state = RunState.IDLE
            self._run_lock.release()

    def _run(self, started_at: datetime) -> RunSummary:
        run_id = uuid.uuid4().hex[:12]
        day = run_date(started_at, self.timezone)
        summary = RunSummary(run_id=run_id, started_at=started_at)
        run_logger = self.logger.bind(run_id=run_id, run_date=day.isoformat())

        try:
            self._transition(RunState.ENUMERATING, run_logger)
            subscriptions = self.store.list_active()
            run_logger.info("Enumerated subscriptions", count=len(subscriptions))

            self._transition(RunState.PROCESSING, run_logger)
            self._process_all(subscriptions, run_id, day, summary)

        except StoreError as e:
            summary.aborted = True
            self._finalize(summary, run_logger)
            e.context["summary"] = summary
            raise

        self._finalize(summary, run_logger)
        return summary

    def _process_all(
        self,
        subscriptions: list[Subscription],
        run_id: str,
        day: date,
        summary: RunSummary
    ) -> None:
        """Fan units out over the worker pool and collect their records."""
        if not subscriptions:
            return

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="signal-unit") as executor:
            futures = [
                executor.submit(self._process_unit, subscription, run_id, day)
                for subscription in subscriptions
            ]

            counted = set()
            try:
                for future in as_completed(futures):
                    summary.add(future.result())
                    counted.add(future)
            except StoreError:
                # Store is gone: drop queued units and stop running ones early
                self._cancel_event.set()
                for future in futures:
                    future.cancel()
                executor.shutdown(wait=True)

                # Units that settled meanwhile already wrote their history row
                for future in futures:
                    if future in counted or future.cancelled() or future.exception() is not None:
                        continue
                    summary.add(future.result())
                raise

    def _process_unit(self, subscription: Subscription, run_id: str, day: date) -> NotificationRecord:
        """
        Run fetch -> score -> notify -> record for one subscription.

        Returns the unit's NotificationRecord, which is written to the store
        exactly once, after the unit has settled.
        """
        stage = "fetch"
        bucket: Optional[SignalBucket] = None

        try:
            self._check_cancelled(subscription)
            history = self.market_data.get_history(subscription.ticker)

            stage = "indicators"
            self._check_cancelled(subscription)
            votes = self.indicators.get_votes(subscription.ticker, subscription.trading_strategy, history)

            stage = "score"
            result = score(subscription.ticker, votes)
            bucket = result.bucket

            stage = "notify"
            self._check_cancelled(subscription)
            record = self.dispatcher.notify(subscription, result, day, run_id=run_id)

            stage = "record"
            self.store.record_outcome(
                subscription.id,
                result.bucket,
                self.clock(),
                sent_on=day if record.outcome == NotificationOutcome.SENT else None
            )

        except StoreError:
            raise

        except UnitFailureError as e:
            if isinstance(e, UnitCancelledError):
                stage = e.stage
            record = self._failed_record(subscription, run_id, stage, e, bucket)

        except Exception as e:
            record = self._failed_record(subscription, run_id, stage, e, bucket)

        self.store.record_notification(record)
        return record

    def _failed_record(
        self,
        subscription: Subscription,
        run_id: str,
        stage: str,
        error: Exception,
        bucket: Optional[SignalBucket]
    ) -> NotificationRecord:
        log_unit_failure(
            self.logger,
            subscription.id,
            stage,
            error,
            context={"run_id": run_id, "ticker": subscription.ticker}
        )
        return NotificationRecord(
            subscription_id=subscription.id,
            outcome=NotificationOutcome.FAILED,
            sent_at=self.clock(),
            bucket=bucket,
            run_id=run_id,
            stage=stage,
            reason=str(error)
        )

    def _check_cancelled(self, subscription: Subscription) -> None:
        if self._cancel_event.is_set():
            raise UnitCancelledError(
                f"Run cancelled before subscription {subscription.id} completed"
            )

    def _transition(self, new_state: RunState, run_logger) -> None:
        run_logger.info(
            "Run state transition",
            from_state=self._state.value,
            to_state=new_state.value
        )
        self._state = new_state

    def _finalize(self, summary: RunSummary, run_logger) -> None:
        self._transition(RunState.FINALIZING, run_logger)
        summary.finished_at = self.clock()
        self._last_summary = summary
        log_run_summary(run_logger, summary)
