"""
Signal scoring module.

Turns three indicator votes into one of five signal buckets.
"""
from .engine import bucket_for_total, score

__all__ = ["bucket_for_total", "score"]
