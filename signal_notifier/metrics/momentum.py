"""MACD and rate-of-change momentum calculations"""

from collections.abc import Sequence
from typing import Optional

from .moving_average import ema_series


def calculate_macd(
    closes: Sequence[float],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9
) -> Optional[tuple[float, float]]:
    """
    Calculate MACD line and signal line

    MACD = EMA(fast) - EMA(slow); signal = EMA(signal_period) of MACD

    Args:
        closes: Closing prices in chronological order
        fast_period: Fast EMA period
        slow_period: Slow EMA period
        signal_period: Signal line EMA period

    Returns:
        (macd, signal) tuple or None if insufficient data
    """
    if fast_period >= slow_period:
        raise ValueError("fast_period must be shorter than slow_period")

    slow = ema_series(closes, slow_period)
    fast = ema_series(closes, fast_period)
    if not slow:
        return None

    # Align the fast series to the slow one; both end at the latest close
    fast = fast[len(fast) - len(slow):]
    macd_line = [f - s for f, s in zip(fast, slow)]

    signal = ema_series(macd_line, signal_period)
    if not signal:
        return None

    return macd_line[-1], signal[-1]


def calculate_rate_of_change(closes: Sequence[float], period: int = 10) -> Optional[float]:
    """
    Calculate percentage Rate of Change over `period` sessions

    ROC = 100 * (close - close[n periods ago]) / close[n periods ago]

    Args:
        closes: Closing prices in chronological order
        period: Lookback in sessions

    Returns:
        ROC percentage or None if insufficient data
    """
    if period <= 0 or len(closes) < period + 1:
        return None

    previous = closes[-period - 1]
    if previous <= 0:
        return None

    return 100.0 * (closes[-1] - previous) / previous
