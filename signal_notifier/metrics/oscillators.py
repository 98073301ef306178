"""RSI (Relative Strength Index) calculation"""

from collections.abc import Sequence
from typing import Optional


def calculate_rsi(closes: Sequence[float], period: int = 14) -> Optional[float]:
    """
    Calculate RSI using Wilder's smoothing

    RSI = 100 - 100 / (1 + avg_gain / avg_loss)

    Args:
        closes: Closing prices in chronological order
        period: RSI period (default 14)

    Returns:
        RSI value in [0, 100] or None if insufficient data
    """
    if period <= 0 or len(closes) < period + 1:
        return None

    changes = [closes[i] - closes[i - 1] for i in range(1, len(closes))]

    # Seed with simple averages over the first period
    avg_gain = sum(max(change, 0.0) for change in changes[:period]) / period
    avg_loss = sum(max(-change, 0.0) for change in changes[:period]) / period

    for change in changes[period:]:
        avg_gain = (avg_gain * (period - 1) + max(change, 0.0)) / period
        avg_loss = (avg_loss * (period - 1) + max(-change, 0.0)) / period

    if avg_loss == 0:
        # Flat series has no direction
        return 50.0 if avg_gain == 0 else 100.0

    relative_strength = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + relative_strength)
