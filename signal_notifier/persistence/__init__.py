"""
Subscription persistence.
"""
from .subscription_store import SqliteSubscriptionStore, SubscriptionStore

__all__ = ["SqliteSubscriptionStore", "SubscriptionStore"]
