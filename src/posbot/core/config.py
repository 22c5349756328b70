"""
posbot Process Settings

Provides validated, type-safe access to environment variables using Pydantic Settings.
These are process-level knobs (logging, retry, config file location). The fuel
check itself is configured from a YAML file, see run_config.py.

Usage:
    from posbot.core.config import get_settings

    settings = get_settings()
    if settings.log_level == "DEBUG":
        ...

Environment Variables:
    POSBOT_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    POSBOT_DEBUG: Legacy debug flag (enables DEBUG level if set)
    POSBOT_LOG_JSON: Output logs as JSON
    POSBOT_NO_RETRY: Disable HTTP retry logic
    POSBOT_CONFIG: Path of the YAML run configuration
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_project_env_file() -> Path | None:
    """
    Find .env file by searching for project root markers.

    Searches upward from this file's location for pyproject.toml,
    then checks for .env in that directory.
    """
    current = Path(__file__).resolve().parent

    for _ in range(10):  # Limit search depth
        if (current / "pyproject.toml").exists():
            env_file = current / ".env"
            if env_file.exists():
                return env_file
            return None
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


_ENV_FILE = _find_project_env_file()


class PosbotSettings(BaseSettings):
    """
    posbot process settings with validation.

    Environment variables are automatically loaded with the POSBOT_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="POSBOT_",
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # =========================================================================
    # Logging Configuration
    # =========================================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Log level for posbot components",
    )

    debug: bool = Field(
        default=False,
        description="Legacy debug flag (enables DEBUG level if set)",
    )

    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format for machine parsing",
    )

    # =========================================================================
    # HTTP
    # =========================================================================

    no_retry: bool = Field(
        default=False,
        description="Disable HTTP retry logic (tenacity)",
    )

    # =========================================================================
    # Run Configuration
    # =========================================================================

    config: Path = Field(
        default=Path("config.yaml"),
        description="YAML run configuration used when none is given on the command line",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str) -> str:
        """Normalize log level to uppercase."""
        if isinstance(v, str):
            return v.upper()
        return v

    @property
    def effective_log_level(self) -> str:
        """
        Get effective log level, respecting legacy POSBOT_DEBUG.

        Priority:
        1. Explicit POSBOT_LOG_LEVEL
        2. POSBOT_DEBUG=1 -> DEBUG
        3. Default: WARNING
        """
        if self.debug and self.log_level == "WARNING":
            return "DEBUG"
        return self.log_level

    @property
    def log_level_int(self) -> int:
        """Get effective log level as logging constant."""
        return getattr(logging, self.effective_log_level)


@lru_cache(maxsize=1)
def get_settings() -> PosbotSettings:
    """
    Get the singleton settings instance.

    The settings are validated at first access.
    """
    return PosbotSettings()


def reset_settings() -> None:
    """
    Reset the settings cache (for testing).

    After calling this, the next get_settings() call will
    reload settings from environment variables.
    """
    get_settings.cache_clear()


def is_json_logging() -> bool:
    """Check if JSON logging is enabled."""
    return get_settings().log_json


def is_retry_disabled() -> bool:
    """Check if retry logic is disabled via environment."""
    return get_settings().no_retry
