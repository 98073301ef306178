"""Configuration loader with 3-tier parameter precedence."""

import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ValidationError
from .defaults import (
    AppConfig,
    DeliveryParams,
    LoggingParams,
    MarketDataParams,
    SchedulerParams,
    SmtpParams,
    StoreParams,
    get_default_config,
)
from .validation import ConfigValidator

CONFIG_PATH_ENV = "SIGNAL_NOTIFIER_CONFIG"
SMTP_PASSWORD_ENV = "SIGNAL_NOTIFIER_SMTP_PASSWORD"


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_path: Optional[Path]
    defaults: AppConfig

    @classmethod
    def create(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader, falling back to $SIGNAL_NOTIFIER_CONFIG."""
        if config_path is None and os.environ.get(CONFIG_PATH_ENV):
            config_path = Path(os.environ[CONFIG_PATH_ENV])

        return cls(
            config_path=Path(config_path) if config_path else None,
            defaults=get_default_config(),
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load settings from the YAML file, if one is configured."""
        if self.config_path is None:
            return {}

        if not self.config_path.exists():
            raise ValidationError(
                f"Config file not found: {self.config_path}",
                field="config_path",
                value=str(self.config_path)
            )

        try:
            with open(self.config_path) as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValidationError(
                f"Config file is not valid YAML: {self.config_path}: {e}",
                field="config_path",
                value=str(self.config_path)
            ) from e

        if not isinstance(file_config, dict):
            raise ValidationError(
                f"Config file must contain a mapping: {self.config_path}",
                field="config_path",
                value=str(self.config_path)
            )

        return file_config

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit overrides (highest priority)
        2. YAML settings file
        3. Defaults (lowest priority)
        """
        config = asdict(self.defaults)
        config = self._deep_merge(config, self.load_file_config())

        if overrides:
            config = self._deep_merge(config, overrides)

        # Secrets come from the environment only when not set explicitly
        smtp = config.get("smtp")
        if isinstance(smtp, dict) and not smtp.get("password") and os.environ.get(SMTP_PASSWORD_ENV):
            smtp["password"] = os.environ[SMTP_PASSWORD_ENV]

        return config

    def load(self, overrides: Optional[dict[str, Any]] = None) -> AppConfig:
        """
        Load, validate and build the application configuration.

        Raises:
            ValidationError: If any setting is invalid
        """
        config = self.merge_config(overrides)

        issues = ConfigValidator.validate_config(config)
        if issues:
            details = "; ".join(f"{issue.field}: {issue.message} (got: {issue.value!r})" for issue in issues)
            raise ValidationError(
                f"Invalid configuration: {details}",
                field=issues[0].field,
                value=issues[0].value,
                context={"issues": issues}
            )

        return AppConfig(
            scheduler=SchedulerParams(**config["scheduler"]),
            delivery=DeliveryParams(**config["delivery"]),
            smtp=SmtpParams(**config["smtp"]),
            store=StoreParams(**config["store"]),
            market_data=MarketDataParams(**config["market_data"]),
            logging=LoggingParams(**config["logging"]),
        )

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[dict[str, Any]] = None
) -> AppConfig:
    """Load the application configuration."""
    return ConfigLoader.create(config_path).load(overrides)
