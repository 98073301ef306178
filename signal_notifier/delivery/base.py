"""Base classes for mail transports."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import structlog


@dataclass(frozen=True)
class MailMessage:
    """A rendered email ready for a transport."""
    to: str
    subject: str
    body: str
    html_body: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "to": self.to,
            "subject": self.subject,
            "body": self.body,
            "html_body": self.html_body,
        }


class MailTransport(ABC):
    """Base class for mail transports."""

    def __init__(self, name: str, config: Any):
        self.name = name
        self.config = config
        self.logger = structlog.get_logger(f"mail.transport.{name}")
        self._sent_count = 0
        self._error_count = 0

    @abstractmethod
    def send(self, message: MailMessage) -> None:
        """
        Hand a message to the mail system.

        Args:
            message: Rendered message

        Raises:
            TransportError: If the message was not accepted. ``retryable``
                tells the dispatcher whether another attempt can help.
        """
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """Check if the transport is usable."""
        pass

    def get_stats(self) -> dict[str, Any]:
        """Get transport statistics."""
        return {
            "name": self.name,
            "sent_count": self._sent_count,
            "error_count": self._error_count,
            "success_rate": (
                self._sent_count / (self._sent_count + self._error_count)
                if (self._sent_count + self._error_count) > 0 else 0.0
            )
        }

    def reset_stats(self):
        """Reset transport statistics."""
        self._sent_count = 0
        self._error_count = 0
