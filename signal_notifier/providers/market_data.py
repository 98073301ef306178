"""Synthetic market data provider."""

import random
from collections.abc import Callable
from datetime import date, timedelta
from typing import Optional

import structlog

from ..errors import DataFetchError
from ..models.market import PricePoint
from ..validation.inputs import TICKER_PATTERN
from .base import HISTORY_WINDOW, MarketDataProvider, validate_history

logger = structlog.get_logger(__name__)


class SyntheticMarketDataProvider(MarketDataProvider):
    """
    Deterministic random-walk price history for development and demos.

    The series depends only on the ticker and the as-of date, so repeated
    fetches within a day return identical data. Weekends are skipped.
    """

    def __init__(
        self,
        window: int = HISTORY_WINDOW,
        clock: Optional[Callable[[], date]] = None
    ):
        self.window = window
        self.clock = clock or date.today
        self.logger = logger

    def get_history(self, ticker: str) -> list[PricePoint]:
        """Generate `window` trading sessions ending on the as-of date."""
        if not TICKER_PATTERN.match(ticker):
            raise DataFetchError(f"Unknown ticker: {ticker}", ticker=ticker)

        as_of = self.clock()
        rng = random.Random(f"{ticker}:{as_of.isoformat()}")

        sessions = _trading_sessions(as_of, self.window)
        close = 100.0 + ord(ticker[0]) % 50
        drift = 0.005 * ((ord(ticker[1]) % 5) if len(ticker) > 1 else 0)

        points = []
        for session in sessions:
            change_pct = (rng.random() - 0.49) * 0.05
            close = max(close * (1 + change_pct) + drift, 1.0)
            points.append(PricePoint(date=session, close=round(close, 2)))

        self.logger.debug(
            "Generated synthetic history",
            ticker=ticker,
            sessions=len(points),
            last_close=points[-1].close
        )

        return validate_history(ticker, points, self.window)


def _trading_sessions(as_of: date, count: int) -> list[date]:
    """Return `count` weekdays ending at (or before) `as_of`, oldest first."""
    sessions: list[date] = []
    day = as_of
    while len(sessions) < count:
        if day.weekday() < 5:
            sessions.append(day)
        day -= timedelta(days=1)
    sessions.reverse()
    return sessions
