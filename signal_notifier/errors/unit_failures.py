"""
Per-subscription failure classifications.

These exceptions are confined to one subscription's unit of work. The
scheduler catches them at the unit boundary, records a Failed outcome and
moves on to the next subscription.
"""

from typing import Any, Dict, Optional


class UnitFailureError(Exception):
    """Base class for failures isolated to a single unit of work."""

    stage = "unknown"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class DataFetchError(UnitFailureError):
    """Market data provider unavailable or ticker unknown."""

    stage = "fetch"

    def __init__(self, message: str, ticker: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.ticker = ticker


class ProviderError(UnitFailureError):
    """Indicator signal provider malfunctioned or returned malformed votes."""

    stage = "indicators"

    def __init__(self, message: str, ticker: Optional[str] = None,
                 raw_output: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.ticker = ticker
        self.raw_output = raw_output


class TransportError(UnitFailureError):
    """Mail transport rejected or failed to acknowledge a message."""

    stage = "notify"

    def __init__(self, message: str, retryable: bool = True,
                 recipient: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retryable = retryable
        self.recipient = recipient


class UnitCancelledError(UnitFailureError):
    """Unit of work abandoned because the run is shutting down."""

    stage = "cancelled"
