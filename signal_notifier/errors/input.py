"""
Input validation errors.

Raised for bad user input on the add-subscription path. These are
user-facing and never retried.
"""

from typing import Any, Dict, Optional


class ValidationError(Exception):
    """User input failed validation."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Any = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.value = value
        self.context = context or {}
        self.recoverable = False
