"""Yahoo Finance market data provider."""

import structlog
import yfinance as yf

from ..errors import DataFetchError
from ..models.market import PricePoint
from .base import HISTORY_WINDOW, MarketDataProvider, validate_history

logger = structlog.get_logger(__name__)


class YFinanceMarketDataProvider(MarketDataProvider):
    """Daily closes from Yahoo Finance via yfinance."""

    def __init__(
        self,
        window: int = HISTORY_WINDOW,
        period: str = "2y",
        timeout_seconds: float = 10.0
    ):
        self.window = window
        self.period = period
        self.timeout_seconds = timeout_seconds
        self.logger = logger

    def get_history(self, ticker: str) -> list[PricePoint]:
        """Fetch the trailing window of daily closes for a ticker."""
        try:
            frame = yf.Ticker(ticker).history(
                period=self.period,
                interval="1d",
                auto_adjust=True,
                timeout=self.timeout_seconds
            )
        except Exception as e:
            self.logger.warning(
                "Yahoo Finance request failed",
                ticker=ticker,
                error=str(e)
            )
            raise DataFetchError(f"Market data unavailable for {ticker}: {e}", ticker=ticker) from e

        if frame is None or frame.empty or "Close" not in frame:
            raise DataFetchError(f"Unknown ticker or no data: {ticker}", ticker=ticker)

        closes = frame["Close"].dropna()
        points = [
            PricePoint(date=timestamp.date(), close=float(close))
            for timestamp, close in closes.items()
        ]

        if len(points) < self.window:
            self.logger.info(
                "Short price history",
                ticker=ticker,
                sessions=len(points),
                window=self.window
            )

        return validate_history(ticker, points, self.window)

    def health_check(self) -> bool:
        try:
            return not yf.Ticker("SPY").history(period="5d", timeout=self.timeout_seconds).empty
        except Exception as e:
            self.logger.warning("Health check failed", error=str(e))
            return False
