"""
posbot Run Configuration

Loads the YAML file that configures a fuel check: SSO credentials, state file,
Slack webhook, classification thresholds and the optional system allow-list.

Example config.yaml:

    client_id: 0123456789abcdef
    client_secret: s3cr3t
    refresh_token: abc...
    statefile: posbot-state.yaml
    danger_days: 3
    warning_days: 7
    systems:
      - Jita
      - Perimeter
    slack:
      webhook_url: https://hooks.slack.com/services/T000/B000/XXXX
      defaults:
        channel: "#pos-fuel"
        username: posbot
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from .constants import (
    DEFAULT_DANGER_DAYS,
    DEFAULT_WARNING_DAYS,
    SMALL_TOWER_FUEL_PER_HOUR,
    TYPE_ID_STRONTIUM,
)
from .logging import get_logger

logger = get_logger(__name__)

NOTIFICATION_STYLES = ("compact", "detailed")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(Exception):
    """Exception raised for a missing, unreadable or invalid run configuration."""

    def __init__(self, message: str, errors: Optional[list[str]] = None) -> None:
        self.message = message
        self.errors = errors or []
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to JSON-serializable dict."""
        result: dict[str, Any] = {"error": "configuration_error", "message": self.message}
        if self.errors:
            result["errors"] = self.errors
        return result


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class FuelThresholds:
    """
    Day counts at or below which a starbase is classified danger or warning.

    danger_days must not exceed warning_days; with equal values no starbase
    is ever classified as warning.
    """

    danger_days: float = DEFAULT_DANGER_DAYS
    warning_days: float = DEFAULT_WARNING_DAYS

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FuelThresholds:
        return cls(
            danger_days=data.get("danger_days", DEFAULT_DANGER_DAYS),
            warning_days=data.get("warning_days", DEFAULT_WARNING_DAYS),
        )

    def validate(self) -> list[str]:
        errors = []
        for name in ("danger_days", "warning_days"):
            value = getattr(self, name)
            if not _is_number(value):
                errors.append(f"{name} must be a number, got {value!r}")
            elif value < 0:
                errors.append(f"{name} must be non-negative")
        if not errors and self.danger_days > self.warning_days:
            errors.append(
                f"danger_days ({self.danger_days}) must not exceed "
                f"warning_days ({self.warning_days})"
            )
        return errors


@dataclass(frozen=True)
class FuelPolicy:
    """How fuel bay contents translate into run time."""

    fuel_per_hour: int = SMALL_TOWER_FUEL_PER_HOUR
    excluded_type_id: int = TYPE_ID_STRONTIUM

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FuelPolicy:
        return cls(
            fuel_per_hour=data.get("fuel_per_hour", SMALL_TOWER_FUEL_PER_HOUR),
            excluded_type_id=data.get("excluded_type_id", TYPE_ID_STRONTIUM),
        )

    def validate(self) -> list[str]:
        errors = []
        if not isinstance(self.fuel_per_hour, int) or isinstance(self.fuel_per_hour, bool):
            errors.append(f"fuel_per_hour must be an integer, got {self.fuel_per_hour!r}")
        elif self.fuel_per_hour <= 0:
            errors.append("fuel_per_hour must be positive")
        if not isinstance(self.excluded_type_id, int) or isinstance(self.excluded_type_id, bool):
            errors.append(f"excluded_type_id must be an integer, got {self.excluded_type_id!r}")
        return errors


@dataclass(frozen=True)
class SSOConfig:
    """EVE SSO application credentials."""

    client_id: str
    client_secret: str
    refresh_token: str

    def __repr__(self) -> str:
        return f"SSOConfig(client_id={self.client_id!r}, client_secret=***, refresh_token=***)"


@dataclass
class SlackConfig:
    """Slack incoming webhook and payload defaults (channel, username, icon)."""

    webhook_url: str
    defaults: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SlackConfig:
        data = data or {}
        return cls(
            webhook_url=data.get("webhook_url") or "",
            defaults=dict(data.get("defaults") or {}),
        )

    def validate(self) -> list[str]:
        errors = []
        if not self.webhook_url:
            errors.append("slack.webhook_url is required")
        elif not self.webhook_url.startswith(("https://", "http://")):
            errors.append("slack.webhook_url must be an http(s) URL")
        return errors


@dataclass
class PosbotConfig:
    """Complete configuration for one fuel check run."""

    sso: SSOConfig
    statefile: Path
    slack: SlackConfig
    thresholds: FuelThresholds = field(default_factory=FuelThresholds)
    policy: FuelPolicy = field(default_factory=FuelPolicy)
    systems: Optional[list[str]] = None
    log_level: Optional[str] = None
    notification_style: str = "compact"
    subject: str = "POS"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PosbotConfig:
        """
        Create from a parsed YAML mapping.

        Raises:
            ConfigurationError: If required keys are missing or values are invalid
        """
        errors = []
        for key in ("client_id", "client_secret", "refresh_token", "statefile"):
            if not data.get(key):
                errors.append(f"{key} is required")

        systems = data.get("systems")
        if systems is not None and (
            not isinstance(systems, list) or not all(isinstance(s, str) for s in systems)
        ):
            errors.append("systems must be a list of system names")

        log_level = data.get("log_level")
        if log_level is not None:
            log_level = str(log_level).upper()
            if log_level not in LOG_LEVELS:
                errors.append(f"log_level must be one of {', '.join(LOG_LEVELS)}")

        config = cls(
            sso=SSOConfig(
                client_id=str(data.get("client_id") or ""),
                client_secret=str(data.get("client_secret") or ""),
                refresh_token=str(data.get("refresh_token") or ""),
            ),
            statefile=Path(str(data.get("statefile") or "")),
            slack=SlackConfig.from_dict(data.get("slack")),
            thresholds=FuelThresholds.from_dict(data),
            policy=FuelPolicy.from_dict(data),
            systems=systems if isinstance(systems, list) else None,
            log_level=log_level,
            notification_style=data.get("notification_style", "compact"),
            subject=data.get("subject", "POS"),
        )

        errors.extend(config.validate())
        if errors:
            raise ConfigurationError("Invalid configuration", errors=errors)
        return config

    def validate(self) -> list[str]:
        """
        Validate the nested sections.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []
        errors.extend(self.thresholds.validate())
        errors.extend(self.policy.validate())
        errors.extend(self.slack.validate())
        if self.notification_style not in NOTIFICATION_STYLES:
            errors.append(
                f"notification_style must be one of {', '.join(NOTIFICATION_STYLES)}"
            )
        return errors


def load_config(path: Path) -> PosbotConfig:
    """
    Load and validate the run configuration.

    Args:
        path: YAML file to read

    Raises:
        ConfigurationError: If the file is missing, is not a YAML mapping, or is invalid
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found: {path}")
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration {path} must be a YAML mapping")

    config = PosbotConfig.from_dict(data)
    logger.debug(
        "Loaded configuration from %s (danger=%s, warning=%s, systems=%s)",
        path,
        config.thresholds.danger_days,
        config.thresholds.warning_days,
        config.systems,
    )
    return config
