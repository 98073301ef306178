"""
Application wiring.

Builds the store, providers, transport, dispatcher, runner and scheduler from
an AppConfig. Constructing the application has no side effects beyond
opening the subscription database; the scheduler starts only on start().
"""

from typing import Optional

import structlog

from .config.defaults import AppConfig, get_default_config
from .delivery.base import MailTransport
from .delivery.dispatcher import NotificationDispatcher
from .delivery.file_transport import FileMailTransport
from .delivery.smtp_transport import SmtpMailTransport
from .persistence.subscription_store import SqliteSubscriptionStore, SubscriptionStore
from .providers.base import IndicatorSignalProvider, MarketDataProvider
from .providers.indicators import RuleBasedIndicatorProvider
from .providers.market_data import SyntheticMarketDataProvider
from .scheduler.daily import DailyScheduler
from .scheduler.runner import SignalRunner
from .subscriptions import SubscriptionService

logger = structlog.get_logger(__name__)


def build_transport(config: AppConfig) -> MailTransport:
    """Create the configured mail transport."""
    if config.delivery.transport == "smtp":
        return SmtpMailTransport("smtp", config.smtp)
    return FileMailTransport("outbox", config.delivery.outbox_path)


def build_market_data(config: AppConfig) -> MarketDataProvider:
    """Create the configured market data provider."""
    params = config.market_data
    if params.provider == "yahoo":
        # yfinance pulls in pandas; only import it when selected
        from .providers.yahoo import YFinanceMarketDataProvider
        return YFinanceMarketDataProvider(window=params.window, timeout_seconds=params.timeout_seconds)
    return SyntheticMarketDataProvider(window=params.window)


class SignalNotifierApp:
    """Container for the fully wired notification pipeline."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        store: Optional[SubscriptionStore] = None,
        market_data: Optional[MarketDataProvider] = None,
        indicators: Optional[IndicatorSignalProvider] = None,
        transport: Optional[MailTransport] = None
    ):
        self.config = config or get_default_config()
        self.logger = logger

        self.store = store or SqliteSubscriptionStore(self.config.store.db_path)
        self.market_data = market_data or build_market_data(self.config)
        self.indicators = indicators or RuleBasedIndicatorProvider()
        self.transport = transport or build_transport(self.config)

        delivery = self.config.delivery
        self.dispatcher = NotificationDispatcher(
            self.transport,
            max_attempts=delivery.max_attempts,
            base_delay_seconds=delivery.base_delay_seconds,
            max_delay_seconds=delivery.max_delay_seconds,
            store=self.store
        )

        scheduler_params = self.config.scheduler
        self.runner = SignalRunner(
            self.store,
            self.market_data,
            self.indicators,
            self.dispatcher,
            max_workers=scheduler_params.max_workers,
            timezone=scheduler_params.timezone
        )
        self.scheduler = DailyScheduler(
            self.runner,
            hour=scheduler_params.hour,
            minute=scheduler_params.minute,
            timezone=scheduler_params.timezone,
            misfire_grace_seconds=scheduler_params.misfire_grace_seconds
        )
        self.subscriptions = SubscriptionService(
            self.store,
            delivery_time=scheduler_params.delivery_time,
            welcome_transport=self.transport if delivery.send_welcome else None
        )

        self.logger.info(
            "Signal notifier initialized",
            transport=self.transport.name,
            market_data=type(self.market_data).__name__,
            delivery_time=scheduler_params.delivery_time,
            timezone=scheduler_params.timezone
        )

    def start(self) -> None:
        self.scheduler.start()

    def stop(self, wait: bool = True, cancel_in_flight: bool = False) -> None:
        self.scheduler.stop(wait=wait, cancel_in_flight=cancel_in_flight)
