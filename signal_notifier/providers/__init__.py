"""
External data providers consumed by the notification pipeline.
"""
from .base import (
    HISTORY_WINDOW,
    IndicatorSignalProvider,
    MarketDataProvider,
    validate_history,
)
from .indicators import RuleBasedIndicatorProvider
from .market_data import SyntheticMarketDataProvider

__all__ = [
    "HISTORY_WINDOW",
    "IndicatorSignalProvider",
    "MarketDataProvider",
    "RuleBasedIndicatorProvider",
    "SyntheticMarketDataProvider",
    "validate_history",
]
