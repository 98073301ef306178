"""
Signal Notifier - Daily technical-signal email pipeline

Re-evaluates a three-indicator scoring rule for every active subscription
once per day and emails subscribers when the resulting signal is actionable.
"""

__version__ = "0.1.0"
__author__ = "Signal Notifier Team"
