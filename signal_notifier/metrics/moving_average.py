"""Simple and exponential moving averages"""

from collections.abc import Sequence
from typing import Optional


def calculate_sma(closes: Sequence[float], period: int) -> Optional[float]:
    """
    Calculate Simple Moving Average of the last `period` closes

    Args:
        closes: Closing prices in chronological order
        period: Averaging window

    Returns:
        SMA value or None if insufficient data
    """
    if period <= 0 or len(closes) < period:
        return None

    window = closes[-period:]
    return sum(window) / period


def ema_series(closes: Sequence[float], period: int) -> list[float]:
    """
    Calculate the full Exponential Moving Average series

    The series is seeded with the SMA of the first `period` closes, so the
    first value corresponds to closes[period - 1].

    Args:
        closes: Closing prices in chronological order
        period: EMA period

    Returns:
        EMA values, empty if insufficient data
    """
    if period <= 0 or len(closes) < period:
        return []

    alpha = 2.0 / (period + 1)
    ema = sum(closes[:period]) / period
    values = [ema]

    for close in closes[period:]:
        ema = alpha * close + (1 - alpha) * ema
        values.append(ema)

    return values


def calculate_ema(closes: Sequence[float], period: int) -> Optional[float]:
    """
    Calculate the latest Exponential Moving Average value

    Args:
        closes: Closing prices in chronological order
        period: EMA period

    Returns:
        EMA value or None if insufficient data
    """
    values = ema_series(closes, period)
    return values[-1] if values else None
