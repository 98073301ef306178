"""
Subscription input normalization and validation.

Emails are lower-cased and tickers upper-cased before they are used as the
subscription identity key, so "AAPL"/"aapl" and "Me@X.com"/"me@x.com" refer
to the same subscription.
"""

import re
from typing import Any, Optional

from ..errors import ValidationError

# local@domain.tld, no whitespace, one "@", dotted domain with a 2+ char TLD
EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"(?:[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?\.)+"
    r"[A-Za-z]{2,}$"
)

# Exchange symbols: AAPL, BRK.B, 005930.KS, ^GSPC, EURUSD=X
TICKER_PATTERN = re.compile(r"^\^?[A-Z0-9][A-Z0-9.\-=]{0,14}$")

MAX_EMAIL_LENGTH = 254
MAX_STRATEGY_LENGTH = 500


def normalize_email(email: Any) -> str:
    """
    Validate and normalize an email address.

    Raises:
        ValidationError: If the address is not syntactically valid
    """
    if not isinstance(email, str) or not email.strip():
        raise ValidationError("Email address is required.", field="email", value=email)

    normalized = email.strip().lower()
    if len(normalized) > MAX_EMAIL_LENGTH or not EMAIL_PATTERN.match(normalized):
        raise ValidationError(
            f"'{email}' is not a valid email address.",
            field="email",
            value=email
        )

    local_part = normalized.split("@", 1)[0]
    if local_part.startswith(".") or local_part.endswith(".") or ".." in local_part:
        raise ValidationError(
            f"'{email}' is not a valid email address.",
            field="email",
            value=email
        )

    return normalized


def normalize_ticker(ticker: Any) -> str:
    """
    Validate and normalize a ticker symbol.

    Raises:
        ValidationError: If the ticker is empty or malformed
    """
    if not isinstance(ticker, str) or not ticker.strip():
        raise ValidationError("Ticker is required.", field="ticker", value=ticker)

    normalized = ticker.strip().upper()
    if not TICKER_PATTERN.match(normalized):
        raise ValidationError(
            f"'{ticker}' is not a valid ticker symbol.",
            field="ticker",
            value=ticker
        )

    return normalized


def normalize_strategy(strategy: Any) -> Optional[str]:
    """
    Normalize an optional free-text trading strategy.

    Blank strategies are stored as None.

    Raises:
        ValidationError: If the strategy is not text or is too long
    """
    if strategy is None:
        return None

    if not isinstance(strategy, str):
        raise ValidationError(
            "Trading strategy must be text.",
            field="trading_strategy",
            value=strategy
        )

    normalized = " ".join(strategy.split())
    if not normalized:
        return None

    if len(normalized) > MAX_STRATEGY_LENGTH:
        raise ValidationError(
            f"Trading strategy must be at most {MAX_STRATEGY_LENGTH} characters.",
            field="trading_strategy",
            value=strategy
        )

    return normalized
