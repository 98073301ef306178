"""Provider interfaces for market data and indicator votes."""

import math
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Optional

from ..errors import DataFetchError
from ..models.market import PricePoint
from ..models.signals import IndicatorVote

# Trailing trading sessions supplied for each ticker
HISTORY_WINDOW = 252


class MarketDataProvider(ABC):
    """Supplies historical daily closes for a ticker."""

    @abstractmethod
    def get_history(self, ticker: str) -> list[PricePoint]:
        """
        Fetch the trailing closing-price window for a ticker.

        Args:
            ticker: Normalized ticker symbol

        Returns:
            Price points ordered oldest to newest, no duplicate dates

        Raises:
            DataFetchError: If the source is unavailable or the ticker unknown
        """
        pass

    def health_check(self) -> bool:
        """Check if the data source is reachable."""
        return True


class IndicatorSignalProvider(ABC):
    """Chooses three indicators for a ticker/strategy and classifies each."""

    @abstractmethod
    def get_votes(
        self,
        ticker: str,
        trading_strategy: Optional[str],
        history: Sequence[PricePoint]
    ) -> list[IndicatorVote]:
        """
        Produce exactly three directional indicator votes.

        Args:
            ticker: Normalized ticker symbol
            trading_strategy: Subscriber's free-text strategy, if any
            history: Price history from the market data provider

        Returns:
            Three IndicatorVote entries

        Raises:
            ProviderError: If the provider fails or its output is malformed
        """
        pass


def validate_history(
    ticker: str,
    points: Sequence[PricePoint],
    window: int = HISTORY_WINDOW
) -> list[PricePoint]:
    """
    Check a price series against the market data contract and trim it.

    Args:
        ticker: Ticker the series belongs to
        points: Raw price points
        window: Number of trailing sessions to keep

    Returns:
        The last `window` points

    Raises:
        DataFetchError: If the series is empty, unordered, has duplicate
            dates, or contains negative/non-finite closes
    """
    if not points:
        raise DataFetchError(f"No price history returned for {ticker}", ticker=ticker)

    previous: Optional[PricePoint] = None
    for point in points:
        if not math.isfinite(point.close) or point.close < 0:
            raise DataFetchError(
                f"Invalid close {point.close!r} on {point.date} for {ticker}",
                ticker=ticker
            )
        if previous is not None and point.date <= previous.date:
            raise DataFetchError(
                f"Price history for {ticker} is unordered or has duplicate date {point.date}",
                ticker=ticker
            )
        previous = point

    return list(points[-window:])
