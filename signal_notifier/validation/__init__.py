"""
Input validation for subscription requests.
"""
from .inputs import normalize_email, normalize_strategy, normalize_ticker

__all__ = ["normalize_email", "normalize_strategy", "normalize_ticker"]
