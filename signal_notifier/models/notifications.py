"""
Notification outcome and run summary models.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from .signals import SignalBucket


class NotificationOutcome(str, Enum):
    """Result of processing one subscription in a run."""
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class NotificationRecord:
    """Audit record written exactly once per subscription per run."""
    subscription_id: int
    outcome: NotificationOutcome
    sent_at: datetime
    bucket: Optional[SignalBucket] = None
    run_id: Optional[str] = None
    stage: Optional[str] = None                      # Failing stage for FAILED records
    reason: Optional[str] = None                     # Skip reason or error message
    attempts: int = 0                                # Transport attempts made

    def to_dict(self) -> dict[str, Any]:
        return {
            "subscription_id": self.subscription_id,
            "outcome": self.outcome.value,
            "sent_at": self.sent_at.isoformat(),
            "bucket": self.bucket.value if self.bucket else None,
            "run_id": self.run_id,
            "stage": self.stage,
            "reason": self.reason,
            "attempts": self.attempts,
        }


@dataclass
class RunSummary:
    """Outcome counts for one scheduler trigger."""
    run_id: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    processed: int = 0
    sent: int = 0
    skipped: int = 0
    failed: int = 0
    aborted: bool = False
    records: list[NotificationRecord] = field(default_factory=list)

    def add(self, record: NotificationRecord) -> None:
        """Count a settled unit of work."""
        self.records.append(record)
        self.processed += 1
        if record.outcome == NotificationOutcome.SENT:
            self.sent += 1
        elif record.outcome == NotificationOutcome.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "processed": self.processed,
            "sent": self.sent,
            "skipped": self.skipped,
            "failed": self.failed,
            "aborted": self.aborted,
        }
