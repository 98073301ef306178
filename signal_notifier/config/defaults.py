"""Default configuration parameters for the signal notifier."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SchedulerParams:
    """Daily trigger and fan-out parameters."""
    hour: int = 5                                    # Local wall-clock trigger hour
    minute: int = 0
    timezone: str = "Asia/Seoul"                     # Also defines the calendar-day run window
    max_workers: int = 4                             # Concurrent subscription units per run
    misfire_grace_seconds: int = 3600                # Late triggers within this window still run

    @property
    def delivery_time(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class DeliveryParams:
    """Notification dispatch parameters."""
    transport: str = "file"                          # file, smtp
    max_attempts: int = 3
    base_delay_seconds: float = 1.0                  # Backoff doubles per failed attempt
    max_delay_seconds: float = 30.0
    outbox_path: str = "outbox/mail.jsonl"           # Used by the file transport
    send_welcome: bool = True


@dataclass(frozen=True)
class SmtpParams:
    """SMTP relay parameters."""
    host: str = "localhost"
    port: int = 587
    security: str = "starttls"                       # none, starttls, ssl
    username: Optional[str] = None
    password: Optional[str] = None                   # Prefer SIGNAL_NOTIFIER_SMTP_PASSWORD
    sender: str = "signals@localhost"
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class StoreParams:
    """Subscription store parameters."""
    db_path: str = "subscriptions.db"


@dataclass(frozen=True)
class MarketDataParams:
    """Market data provider parameters."""
    provider: str = "synthetic"                      # synthetic, yahoo
    window: int = 252                                # Trailing trading sessions
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class LoggingParams:
    """Logging output parameters."""
    level: str = "INFO"
    format_json: bool = False
    include_caller: bool = False


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration."""
    scheduler: SchedulerParams
    delivery: DeliveryParams
    smtp: SmtpParams
    store: StoreParams
    market_data: MarketDataParams
    logging: LoggingParams


def get_default_config() -> AppConfig:
    """Get the default configuration instance."""
    return AppConfig(
        scheduler=SchedulerParams(),
        delivery=DeliveryParams(),
        smtp=SmtpParams(),
        store=StoreParams(),
        market_data=MarketDataParams(),
        logging=LoggingParams(),
    )
