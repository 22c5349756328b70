"""
posbot Core

Shared infrastructure: settings, logging, EVE SSO, the ESI client and the
YAML run configuration.
"""

from .auth import AccessToken, AuthError, refresh_access_token, verify_character
from .client import ESIClient, ESIError, ESIResponse
from .formatters import format_eve_time, get_utc_now, get_utc_timestamp
from .run_config import (
    ConfigurationError,
    FuelPolicy,
    FuelThresholds,
    PosbotConfig,
    SlackConfig,
    SSOConfig,
    load_config,
)

__all__ = [
    "AccessToken",
    "AuthError",
    "ConfigurationError",
    "ESIClient",
    "ESIError",
    "ESIResponse",
    "FuelPolicy",
    "FuelThresholds",
    "PosbotConfig",
    "SSOConfig",
    "SlackConfig",
    "format_eve_time",
    "get_utc_now",
    "get_utc_timestamp",
    "load_config",
    "refresh_access_token",
    "verify_character",
]
