"""Subscription persistence layer with notification audit history."""

import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Optional

import structlog

from ..errors import StoreError
from ..models.notifications import NotificationOutcome, NotificationRecord
from ..models.signals import SignalBucket
from ..models.subscription import Subscription
from ..validation.inputs import normalize_email, normalize_strategy, normalize_ticker

logger = structlog.get_logger(__name__)


class SubscriptionStore(ABC):
    """Durable record of who wants notifications for which ticker."""

    @abstractmethod
    def add(self, email: str, ticker: str, strategy: Optional[str] = None) -> Subscription:
        """
        Add or update a subscription keyed by (email, ticker).

        Re-subscribing an existing pair overwrites its trading strategy and
        keeps its id.

        Raises:
            ValidationError: If the email or ticker is invalid
            StoreError: If persistence is unavailable
        """
        pass

    @abstractmethod
    def get(self, subscription_id: int) -> Optional[Subscription]:
        """Get a subscription by id."""
        pass

    @abstractmethod
    def list_active(self) -> list[Subscription]:
        """List subscriptions eligible for the next run, ordered by id."""
        pass

    @abstractmethod
    def record_outcome(
        self,
        subscription_id: int,
        bucket: SignalBucket,
        timestamp: datetime,
        sent_on: Optional[date] = None
    ) -> bool:
        """
        Atomically update the run state of one subscription.

        Args:
            subscription_id: Subscription to update
            bucket: Signal bucket evaluated in this run
            timestamp: When the run evaluated the subscription
            sent_on: Run date, when a notification was sent

        Returns:
            True if the subscription still exists and was updated
        """
        pass

    @abstractmethod
    def claim_send(self, subscription_id: int, run_date: date) -> bool:
        """
        Atomically reserve today's notification for a subscription.

        Sets `last_sent_on` to `run_date` unless it already holds that date,
        so only one caller per run window gets True, across runners and
        processes sharing the store.

        Returns:
            True if this caller owns the send for `run_date`
        """
        pass

    @abstractmethod
    def release_send(
        self,
        subscription_id: int,
        run_date: date,
        previous: Optional[date] = None
    ) -> bool:
        """Undo a claim whose send failed, restoring the previous `last_sent_on`."""
        pass

    @abstractmethod
    def remove(self, email: str, ticker: str) -> bool:
        """Unsubscribe. Returns True if a subscription was removed."""
        pass

    @abstractmethod
    def record_notification(self, record: NotificationRecord) -> None:
        """Append a notification record to the audit history."""
        pass

    @abstractmethod
    def get_notifications(self, subscription_id: int, limit: int = 100) -> list[NotificationRecord]:
        """Get the most recent notification records for a subscription."""
        pass


class SqliteSubscriptionStore(SubscriptionStore):
    """SQLite-based subscription store."""

    def __init__(self, db_path: str = "subscriptions.db"):
        self.db_path = Path(db_path)
        self.logger = logger
        self._lock = threading.Lock()

        if self.db_path.parent and not self.db_path.parent.exists():
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection("init") as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS subscriptions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    email TEXT NOT NULL,
                    ticker TEXT NOT NULL,
                    trading_strategy TEXT,
                    created_at TEXT NOT NULL,
                    last_notified_signal TEXT,
                    last_run_at TEXT,
                    last_sent_on TEXT,
                    UNIQUE(email, ticker)
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS notifications (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    subscription_id INTEGER NOT NULL,
                    run_id TEXT,
                    outcome TEXT NOT NULL,
                    bucket TEXT,
                    sent_at TEXT NOT NULL,
                    stage TEXT,
                    reason TEXT,
                    attempts INTEGER DEFAULT 0
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_notifications_subscription
                ON notifications(subscription_id)
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_notifications_run_id ON notifications(run_id)
            """)

            conn.commit()

    @contextmanager
    def _get_connection(self, operation: str):
        """Get database connection, surfacing sqlite failures as StoreError."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error(
                "Database error",
                operation=operation,
                db_path=str(self.db_path),
                error=str(e)
            )
            raise StoreError(
                f"Subscription store {operation} failed: {e}",
                operation=operation,
                target=str(self.db_path)
            ) from e
        finally:
            if conn:
                conn.close()

    def add(self, email: str, ticker: str, strategy: Optional[str] = None) -> Subscription:
        email = normalize_email(email)
        ticker = normalize_ticker(ticker)
        strategy = normalize_strategy(strategy)

        with self._lock:
            with self._get_connection("add") as conn:
                now = datetime.now(timezone.utc).isoformat()
                conn.execute("""
                    INSERT INTO subscriptions (email, ticker, trading_strategy, created_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(email, ticker) DO UPDATE SET
                        trading_strategy = excluded.trading_strategy
                """, (email, ticker, strategy, now))
                conn.commit()

                row = conn.execute("""
                    SELECT * FROM subscriptions WHERE email = ? AND ticker = ?
                """, (email, ticker)).fetchone()

        subscription = self._row_to_subscription(row)
        self.logger.info(
            "Subscription saved",
            subscription_id=subscription.id,
            ticker=ticker,
            trading_strategy=strategy
        )
        return subscription

    def get(self, subscription_id: int) -> Optional[Subscription]:
        with self._get_connection("get") as conn:
            row = conn.execute("""
                SELECT * FROM subscriptions WHERE id = ?
            """, (subscription_id,)).fetchone()

        return self._row_to_subscription(row) if row else None

    def find(self, email: str, ticker: str) -> Optional[Subscription]:
        """Get a subscription by its (email, ticker) key."""
        with self._get_connection("find") as conn:
            row = conn.execute("""
                SELECT * FROM subscriptions WHERE email = ? AND ticker = ?
            """, (email.strip().lower(), ticker.strip().upper())).fetchone()

        return self._row_to_subscription(row) if row else None

    def list_active(self) -> list[Subscription]:
        with self._get_connection("list_active") as conn:
            rows = conn.execute("""
                SELECT * FROM subscriptions ORDER BY id
            """).fetchall()

        return [self._row_to_subscription(row) for row in rows]

    def record_outcome(
        self,
        subscription_id: int,
        bucket: SignalBucket,
        timestamp: datetime,
        sent_on: Optional[date] = None
    ) -> bool:
        with self._lock:
            with self._get_connection("record_outcome") as conn:
                # Single statement, so the row is never observed half-updated
                cursor = conn.execute("""
                    UPDATE subscriptions SET
                        last_notified_signal = ?,
                        last_run_at = ?,
                        last_sent_on = COALESCE(?, last_sent_on)
                    WHERE id = ?
                """, (
                    bucket.value,
                    timestamp.isoformat(),
                    sent_on.isoformat() if sent_on else None,
                    subscription_id
                ))
                conn.commit()
                updated = cursor.rowcount > 0

        if not updated:
            self.logger.warning(
                "Subscription vanished before outcome was recorded",
                subscription_id=subscription_id
            )
        return updated

    def claim_send(self, subscription_id: int, run_date: date) -> bool:
        with self._lock:
            with self._get_connection("claim_send") as conn:
                cursor = conn.execute("""
                    UPDATE subscriptions SET last_sent_on = ?
                    WHERE id = ? AND (last_sent_on IS NULL OR last_sent_on <> ?)
                """, (run_date.isoformat(), subscription_id, run_date.isoformat()))
                conn.commit()
                claimed = cursor.rowcount > 0

        if not claimed:
            self.logger.info(
                "Send already claimed for run date",
                subscription_id=subscription_id,
                run_date=run_date.isoformat()
            )
        return claimed

    def release_send(
        self,
        subscription_id: int,
        run_date: date,
        previous: Optional[date] = None
    ) -> bool:
        with self._lock:
            with self._get_connection("release_send") as conn:
                cursor = conn.execute("""
                    UPDATE subscriptions SET last_sent_on = ?
                    WHERE id = ? AND last_sent_on = ?
                """, (
                    previous.isoformat() if previous else None,
                    subscription_id,
                    run_date.isoformat()
                ))
                conn.commit()
                return cursor.rowcount > 0

    def remove(self, email: str, ticker: str) -> bool:
        with self._lock:
            with self._get_connection("remove") as conn:
                cursor = conn.execute("""
                    DELETE FROM subscriptions WHERE email = ? AND ticker = ?
                """, (email.strip().lower(), ticker.strip().upper()))
                conn.commit()
                removed = cursor.rowcount > 0

        if removed:
            self.logger.info("Subscription removed", ticker=ticker.strip().upper())
        return removed

    def record_notification(self, record: NotificationRecord) -> None:
        with self._lock:
            with self._get_connection("record_notification") as conn:
                conn.execute("""
                    INSERT INTO notifications (
                        subscription_id, run_id, outcome, bucket,
                        sent_at, stage, reason, attempts
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    record.subscription_id,
                    record.run_id,
                    record.outcome.value,
                    record.bucket.value if record.bucket else None,
                    record.sent_at.isoformat(),
                    record.stage,
                    record.reason,
                    record.attempts
                ))
                conn.commit()

    def get_notifications(self, subscription_id: int, limit: int = 100) -> list[NotificationRecord]:
        with self._get_connection("get_notifications") as conn:
            rows = conn.execute("""
                SELECT * FROM notifications WHERE subscription_id = ?
                ORDER BY id DESC LIMIT ?
            """, (subscription_id, limit)).fetchall()

        return [self._row_to_record(row) for row in rows]

    def get_stats(self) -> dict[str, Any]:
        """Get subscription and notification counts."""
        with self._get_connection("get_stats") as conn:
            total = conn.execute("SELECT COUNT(*) FROM subscriptions").fetchone()[0]

            outcome_counts = {}
            for row in conn.execute("""
                SELECT outcome, COUNT(*) as count FROM notifications GROUP BY outcome
            """):
                outcome_counts[row[0]] = row[1]

        return {
            "total_subscriptions": total,
            "notifications_by_outcome": outcome_counts
        }

    def _row_to_subscription(self, row: sqlite3.Row) -> Subscription:
        """Convert database row to Subscription object."""
        return Subscription(
            id=row["id"],
            email=row["email"],
            ticker=row["ticker"],
            trading_strategy=row["trading_strategy"],
            created_at=datetime.fromisoformat(row["created_at"]),
            last_notified_signal=(
                SignalBucket(row["last_notified_signal"]) if row["last_notified_signal"] else None
            ),
            last_run_at=datetime.fromisoformat(row["last_run_at"]) if row["last_run_at"] else None,
            last_sent_on=date.fromisoformat(row["last_sent_on"]) if row["last_sent_on"] else None
        )

    def _row_to_record(self, row: sqlite3.Row) -> NotificationRecord:
        """Convert database row to NotificationRecord object."""
        return NotificationRecord(
            subscription_id=row["subscription_id"],
            outcome=NotificationOutcome(row["outcome"]),
            sent_at=datetime.fromisoformat(row["sent_at"]),
            bucket=SignalBucket(row["bucket"]) if row["bucket"] else None,
            run_id=row["run_id"],
            stage=row["stage"],
            reason=row["reason"],
            attempts=row["attempts"]
        )
