"""Configuration validation utilities."""

from dataclasses import dataclass, fields
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .defaults import AppConfig, get_default_config

TRANSPORTS = ("file", "smtp")
MARKET_DATA_PROVIDERS = ("synthetic", "yahoo")
SMTP_SECURITY_MODES = ("none", "starttls", "ssl")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ConfigIssue:
    """Represents a configuration validation problem."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration dictionaries before they become dataclasses."""

    @staticmethod
    def validate_sections(config: dict[str, Any]) -> list[ConfigIssue]:
        """Reject unknown sections and unknown keys within known sections."""
        issues = []
        defaults = get_default_config()
        known_sections = {f.name for f in fields(AppConfig)}

        for section, values in config.items():
            if section not in known_sections:
                issues.append(ConfigIssue(field=section, message="Unknown section", value=values))
                continue

            if not isinstance(values, dict):
                issues.append(ConfigIssue(field=section, message="Must be a mapping", value=values))
                continue

            known_keys = {f.name for f in fields(getattr(defaults, section))}
            for key in values:
                if key not in known_keys:
                    issues.append(ConfigIssue(
                        field=f"{section}.{key}",
                        message="Unknown key",
                        value=values[key]
                    ))

        return issues

    @staticmethod
    def validate_scheduler_params(params: dict[str, Any]) -> list[ConfigIssue]:
        """Validate scheduler parameters."""
        issues = []

        if "hour" in params:
            value = params["hour"]
            if not _is_int(value) or not 0 <= value <= 23:
                issues.append(ConfigIssue(
                    field="scheduler.hour",
                    message="Must be an integer between 0 and 23",
                    value=value
                ))

        if "minute" in params:
            value = params["minute"]
            if not _is_int(value) or not 0 <= value <= 59:
                issues.append(ConfigIssue(
                    field="scheduler.minute",
                    message="Must be an integer between 0 and 59",
                    value=value
                ))

        if "timezone" in params:
            value = params["timezone"]
            try:
                ZoneInfo(value)
            except (ZoneInfoNotFoundError, ValueError, TypeError):
                issues.append(ConfigIssue(
                    field="scheduler.timezone",
                    message="Must be an IANA time zone name",
                    value=value
                ))

        if "max_workers" in params:
            value = params["max_workers"]
            if not _is_int(value) or value <= 0:
                issues.append(ConfigIssue(
                    field="scheduler.max_workers",
                    message="Must be a positive integer",
                    value=value
                ))

        if "misfire_grace_seconds" in params:
            value = params["misfire_grace_seconds"]
            if not _is_int(value) or value < 0:
                issues.append(ConfigIssue(
                    field="scheduler.misfire_grace_seconds",
                    message="Must be a non-negative integer",
                    value=value
                ))

        return issues

    @staticmethod
    def validate_delivery_params(params: dict[str, Any]) -> list[ConfigIssue]:
        """Validate delivery parameters."""
        issues = []

        if "transport" in params and params["transport"] not in TRANSPORTS:
            issues.append(ConfigIssue(
                field="delivery.transport",
                message=f"Must be one of {', '.join(TRANSPORTS)}",
                value=params["transport"]
            ))

        if "max_attempts" in params:
            value = params["max_attempts"]
            if not _is_int(value) or value < 1:
                issues.append(ConfigIssue(
                    field="delivery.max_attempts",
                    message="Must be a positive integer",
                    value=value
                ))

        for key in ("base_delay_seconds", "max_delay_seconds"):
            if key in params:
                value = params[key]
                if not _is_number(value) or value < 0:
                    issues.append(ConfigIssue(
                        field=f"delivery.{key}",
                        message="Must be a non-negative number",
                        value=value
                    ))

        return issues

    @staticmethod
    def validate_smtp_params(params: dict[str, Any]) -> list[ConfigIssue]:
        """Validate SMTP parameters."""
        issues = []

        if "port" in params:
            value = params["port"]
            if not _is_int(value) or not 0 < value < 65536:
                issues.append(ConfigIssue(
                    field="smtp.port",
                    message="Must be a valid TCP port",
                    value=value
                ))

        if "security" in params and params["security"] not in SMTP_SECURITY_MODES:
            issues.append(ConfigIssue(
                field="smtp.security",
                message=f"Must be one of {', '.join(SMTP_SECURITY_MODES)}",
                value=params["security"]
            ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not _is_number(value) or value <= 0:
                issues.append(ConfigIssue(
                    field="smtp.timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        return issues

    @staticmethod
    def validate_market_data_params(params: dict[str, Any]) -> list[ConfigIssue]:
        """Validate market data parameters."""
        issues = []

        if "provider" in params and params["provider"] not in MARKET_DATA_PROVIDERS:
            issues.append(ConfigIssue(
                field="market_data.provider",
                message=f"Must be one of {', '.join(MARKET_DATA_PROVIDERS)}",
                value=params["provider"]
            ))

        if "window" in params:
            value = params["window"]
            if not _is_int(value) or value <= 0:
                issues.append(ConfigIssue(
                    field="market_data.window",
                    message="Must be a positive integer",
                    value=value
                ))

        return issues

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ConfigIssue]:
        """Validate complete configuration."""
        issues = ConfigValidator.validate_sections(config)

        if isinstance(config.get("scheduler"), dict):
            issues.extend(ConfigValidator.validate_scheduler_params(config["scheduler"]))

        if isinstance(config.get("delivery"), dict):
            issues.extend(ConfigValidator.validate_delivery_params(config["delivery"]))

        if isinstance(config.get("smtp"), dict):
            issues.extend(ConfigValidator.validate_smtp_params(config["smtp"]))

        if isinstance(config.get("market_data"), dict):
            issues.extend(ConfigValidator.validate_market_data_params(config["market_data"]))

        if isinstance(config.get("logging"), dict):
            level = config["logging"].get("level")
            if level is not None and str(level).upper() not in LOG_LEVELS:
                issues.append(ConfigIssue(
                    field="logging.level",
                    message=f"Must be one of {', '.join(LOG_LEVELS)}",
                    value=level
                ))

        return issues
