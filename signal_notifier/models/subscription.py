"""Subscription model."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from .signals import SignalBucket


@dataclass(frozen=True)
class Subscription:
    """
    A subscriber's request for daily signals on one ticker.

    The identity key is (email, ticker). ``last_sent_on`` holds the run date
    of the most recent Sent notification and is the idempotency key for the
    once-per-day guarantee.
    """
    id: int
    email: str
    ticker: str
    created_at: datetime
    trading_strategy: Optional[str] = None
    last_notified_signal: Optional[SignalBucket] = None
    last_run_at: Optional[datetime] = None
    last_sent_on: Optional[date] = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.email, self.ticker)
