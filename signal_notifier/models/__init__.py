"""
Data models shared across the notification pipeline.
"""
from .market import PricePoint
from .notifications import NotificationOutcome, NotificationRecord, RunSummary
from .signals import IndicatorVote, SignalBucket, SignalResult, Vote
from .subscription import Subscription

__all__ = [
    "PricePoint",
    "NotificationOutcome",
    "NotificationRecord",
    "RunSummary",
    "IndicatorVote",
    "SignalBucket",
    "SignalResult",
    "Vote",
    "Subscription",
]
