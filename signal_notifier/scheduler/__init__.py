"""
Daily scheduling of signal runs.
"""
from .daily import DailyScheduler
from .runner import RunState, SignalRunner

__all__ = ["DailyScheduler", "RunState", "SignalRunner"]
