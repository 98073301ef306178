"""
Error classification for the daily signal-notification pipeline.

Errors fall into three families: bad user input, failures confined to a
single subscription's unit of work, and system failures that end a run.
"""

from .input import ValidationError
from .unit_failures import (
    UnitFailureError,
    DataFetchError,
    ProviderError,
    TransportError,
    UnitCancelledError,
)
from .system_failures import (
    SystemFailureError,
    StoreError,
    SchedulerError,
)

__all__ = [
    # Input Errors
    "ValidationError",
    # Per-unit Failures
    "UnitFailureError",
    "DataFetchError",
    "ProviderError",
    "TransportError",
    "UnitCancelledError",
    # System Failures
    "SystemFailureError",
    "StoreError",
    "SchedulerError",
]
