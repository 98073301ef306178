"""
System failure classifications.

These errors end the current run early. Nothing can be recorded durably
once the subscription store is unavailable, so the run is aborted and
reported instead of continuing.
"""

from typing import Any, Dict, Optional


class SystemFailureError(Exception):
    """Base class for unrecoverable system failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class StoreError(SystemFailureError):
    """Subscription persistence unavailable."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target


class SchedulerError(SystemFailureError):
    """Scheduler infrastructure failure."""

    def __init__(self, message: str, job_id: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.job_id = job_id
