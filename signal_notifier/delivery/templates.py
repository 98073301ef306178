"""Email templates for signal and welcome messages."""

from datetime import date
from typing import Optional

from ..models.signals import SignalBucket, SignalResult
from ..models.subscription import Subscription
from .base import MailMessage

DISCLAIMER = (
    "This message is generated automatically from technical indicators and "
    "is not investment advice."
)

_BUCKET_HEADLINES = {
    SignalBucket.STRONG_BUY: "All three indicators point up.",
    SignalBucket.BUY: "Indicators lean bullish.",
    SignalBucket.HOLD: "Indicators are mixed.",
    SignalBucket.SELL: "Indicators lean bearish.",
    SignalBucket.STRONG_SELL: "All three indicators point down.",
}


def render_signal_message(
    subscription: Subscription,
    result: SignalResult,
    run_date: date
) -> MailMessage:
    """Render the daily signal email for one subscription."""
    subject = f"[{result.ticker}] {result.bucket.label} signal for {run_date.isoformat()}"

    lines = [
        f"Daily signal for {result.ticker} ({run_date.isoformat()})",
        "",
        f"Signal: {result.bucket.label} (score {result.total_score:+d})",
        _BUCKET_HEADLINES[result.bucket],
        "",
        "Indicators:",
    ]
    for indicator in result.indicators:
        lines.append(f"  - {indicator.name}: {indicator.vote.label}")

    if subscription.trading_strategy:
        lines.extend(["", f"Strategy: {subscription.trading_strategy}"])

    lines.extend(["", DISCLAIMER])

    return MailMessage(to=subscription.email, subject=subject, body="\n".join(lines))


def render_welcome_message(
    email: str,
    ticker: str,
    trading_strategy: Optional[str],
    delivery_time: str
) -> MailMessage:
    """Render the confirmation email sent when someone subscribes."""
    lines = [
        f"You are subscribed to daily signals for {ticker}.",
        "",
        f"An analysis email is sent every day at {delivery_time} whenever the "
        "signal is not Hold.",
    ]
    if trading_strategy:
        lines.append(f"Strategy: {trading_strategy}")
    lines.extend(["", DISCLAIMER])

    return MailMessage(
        to=email,
        subject=f"Subscribed to {ticker} daily signals",
        body="\n".join(lines)
    )
