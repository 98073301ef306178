"""
Notification delivery: mail transports and the dispatcher.
"""
from .base import MailMessage, MailTransport
from .dispatcher import NotificationDispatcher
from .file_transport import FileMailTransport
from .smtp_transport import SmtpMailTransport

__all__ = [
    "FileMailTransport",
    "MailMessage",
    "MailTransport",
    "NotificationDispatcher",
    "SmtpMailTransport",
]
