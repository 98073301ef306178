"""
Add-subscription interface consumed by the web layer.

Every outcome is a structured SubscriptionResponse; validation and storage
failures never escape as exceptions.
"""

from dataclasses import dataclass
from typing import Any, Optional

import structlog

from .delivery.base import MailTransport
from .delivery.templates import render_welcome_message
from .errors import StoreError, ValidationError
from .persistence.subscription_store import SubscriptionStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SubscriptionResponse:
    """Result returned to the caller of subscribe/unsubscribe."""
    success: bool
    message: str
    subscription_id: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "message": self.message}


class SubscriptionService:
    """Validates, stores and confirms subscriptions."""

    def __init__(
        self,
        store: SubscriptionStore,
        delivery_time: str = "05:00",
        welcome_transport: Optional[MailTransport] = None
    ):
        self.store = store
        self.delivery_time = delivery_time
        self.welcome_transport = welcome_transport
        self.logger = logger

    def subscribe(
        self,
        email: str,
        ticker: str,
        trading_strategy: Optional[str] = None
    ) -> SubscriptionResponse:
        """Subscribe an email address to daily signals for a ticker."""
        try:
            subscription = self.store.add(email, ticker, trading_strategy)

        except ValidationError as e:
            self.logger.info("Subscription rejected", field=e.field, reason=e.message)
            return SubscriptionResponse(success=False, message=e.message)

        except StoreError as e:
            self.logger.error("Subscription could not be stored", error=str(e))
            return SubscriptionResponse(
                success=False,
                message="Your subscription could not be saved. Please try again later."
            )

        self._send_welcome(subscription.email, subscription.ticker, subscription.trading_strategy)

        return SubscriptionResponse(
            success=True,
            message=(
                f"Subscribed! An analysis email for {subscription.ticker} will be sent "
                f"every day at {self.delivery_time}."
            ),
            subscription_id=subscription.id
        )

    def unsubscribe(self, email: str, ticker: str) -> SubscriptionResponse:
        """Remove the subscription for (email, ticker)."""
        if not isinstance(email, str) or not isinstance(ticker, str):
            return SubscriptionResponse(success=False, message="Email and ticker are required.")

        try:
            removed = self.store.remove(email, ticker)
        except StoreError as e:
            self.logger.error("Unsubscribe failed", error=str(e))
            return SubscriptionResponse(
                success=False,
                message="Your request could not be processed. Please try again later."
            )

        if not removed:
            return SubscriptionResponse(
                success=False,
                message=f"No subscription found for {ticker.strip().upper()}."
            )

        return SubscriptionResponse(
            success=True,
            message=f"Unsubscribed from {ticker.strip().upper()} daily signals."
        )

    def _send_welcome(self, email: str, ticker: str, trading_strategy: Optional[str]) -> None:
        """Best-effort confirmation mail; failures are logged only."""
        if self.welcome_transport is None:
            return

        try:
            self.welcome_transport.send(
                render_welcome_message(email, ticker, trading_strategy, self.delivery_time)
            )
        except Exception as e:
            self.logger.warning(
                "Welcome mail failed",
                ticker=ticker,
                error=str(e)
            )
