"""
Technical indicator calculations over daily closing prices.

All functions take closes in chronological order (oldest first) and return
None when there is not enough history.
"""

from .momentum import calculate_macd, calculate_rate_of_change
from .moving_average import calculate_ema, calculate_sma, ema_series
from .oscillators import calculate_rsi

__all__ = [
    "calculate_ema",
    "calculate_macd",
    "calculate_rate_of_change",
    "calculate_rsi",
    "calculate_sma",
    "ema_series",
]
