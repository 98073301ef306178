"""SMTP mail transport."""

import smtplib
import socket
import ssl
from email.message import EmailMessage

from ..config.defaults import SmtpParams
from ..errors import TransportError
from .base import MailMessage, MailTransport


class SmtpMailTransport(MailTransport):
    """Send mail through an SMTP relay (plain, STARTTLS or implicit SSL)."""

    def __init__(self, name: str, config: SmtpParams):
        super().__init__(name, config)
        self.config: SmtpParams = config

        if config.security not in ("none", "starttls", "ssl"):
            raise ValueError(f"Unsupported SMTP security mode: {config.security}")

    def send(self, message: MailMessage) -> None:
        """Send a single message."""
        email = self._build_email(message)

        try:
            with self._connect() as server:
                if self.config.username:
                    server.login(self.config.username, self.config.password or "")
                server.send_message(email)

        except smtplib.SMTPRecipientsRefused as e:
            # Bad address; another attempt will not help
            self._error_count += 1
            self.logger.warning(
                "SMTP recipient refused",
                transport=self.name,
                error=str(e)
            )
            raise TransportError(
                f"Recipient refused: {message.to}",
                retryable=False,
                recipient=message.to
            ) from e

        except smtplib.SMTPAuthenticationError as e:
            self._error_count += 1
            self.logger.error(
                "SMTP authentication failed",
                transport=self.name,
                smtp_code=e.smtp_code
            )
            raise TransportError(
                f"SMTP authentication failed: {e.smtp_code}",
                retryable=False,
                recipient=message.to
            ) from e

        except smtplib.SMTPResponseException as e:
            # 4xx replies are transient, 5xx permanent
            self._error_count += 1
            self.logger.warning(
                "SMTP server rejected message",
                transport=self.name,
                smtp_code=e.smtp_code,
                smtp_error=str(e.smtp_error)
            )
            raise TransportError(
                f"SMTP {e.smtp_code}: {e.smtp_error!r}",
                retryable=e.smtp_code < 500,
                recipient=message.to
            ) from e

        except (smtplib.SMTPException, OSError, socket.timeout) as e:
            self._error_count += 1
            self.logger.warning(
                "SMTP connection error",
                transport=self.name,
                host=self.config.host,
                error=str(e)
            )
            raise TransportError(
                f"SMTP connection error: {e}",
                retryable=True,
                recipient=message.to
            ) from e

        self._sent_count += 1
        self.logger.info(
            "Mail sent",
            transport=self.name,
            subject=message.subject
        )

    def _connect(self) -> smtplib.SMTP:
        """Open an authenticated-ready SMTP session."""
        if self.config.security == "ssl":
            return smtplib.SMTP_SSL(
                self.config.host,
                self.config.port,
                timeout=self.config.timeout_seconds,
                context=ssl.create_default_context()
            )

        server = smtplib.SMTP(self.config.host, self.config.port, timeout=self.config.timeout_seconds)
        try:
            server.ehlo()
            if self.config.security == "starttls":
                server.starttls(context=ssl.create_default_context())
                server.ehlo()
        except Exception:
            server.close()
            raise
        return server

    def _build_email(self, message: MailMessage) -> EmailMessage:
        email = EmailMessage()
        email["From"] = self.config.sender
        email["To"] = message.to
        email["Subject"] = message.subject
        email.set_content(message.body)
        if message.html_body:
            email.add_alternative(message.html_body, subtype="html")
        return email

    def health_check(self) -> bool:
        """Check if the SMTP relay answers NOOP."""
        try:
            with self._connect() as server:
                code, _ = server.noop()
                return code == 250
        except Exception as e:
            self.logger.warning(
                "Health check failed",
                transport=self.name,
                error=str(e)
            )
            return False
