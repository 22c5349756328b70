"""
posbot Structured Logging

Provides consistent logging across the posbot package with:
- Environment-based configuration via POSBOT_LOG_LEVEL
- Backward compatibility with POSBOT_DEBUG
- JSON-formatted output option for machine parsing
- Module-specific loggers

Usage:
    from posbot.core.logging import get_logger

    logger = get_logger(__name__)
    logger.debug("Fetching starbase detail")
    logger.info("Fuel check completed", extra={"changed": 2})
    logger.error("Webhook delivery failed", exc_info=True)
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Optional

from .config import get_settings, is_json_logging

# LogRecord attributes that are not user-supplied extras
_RESERVED_ATTRS = frozenset(
    (
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
        "message",
    )
)


def _get_log_level() -> int:
    """
    Determine log level from centralized config.

    Priority:
    1. POSBOT_LOG_LEVEL (explicit level name)
    2. POSBOT_DEBUG (legacy, enables DEBUG)
    3. Default: WARNING
    """
    return get_settings().log_level_int


def _is_json_output() -> bool:
    """Check if JSON output is requested."""
    return is_json_logging()


class PosbotFormatter(logging.Formatter):
    """
    Custom formatter for posbot logs.

    Supports both human-readable and JSON output.
    """

    def __init__(self, json_output: bool = False) -> None:
        super().__init__()
        self.json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).isoformat(timespec="seconds")

        if self.json_output:
            return self._format_json(record, timestamp)
        return self._format_text(record)

    def _format_text(self, record: logging.LogRecord) -> str:
        """Format as human-readable text."""
        module = record.name.split(".")[-1] if "." in record.name else record.name

        msg = f"[POSBOT {record.levelname}] [{module}] {record.getMessage()}"

        if record.exc_info:
            exc_text = "".join(traceback.format_exception(*record.exc_info))
            msg += f"\n{exc_text}"

        return msg

    def _format_json(self, record: logging.LogRecord, timestamp: str) -> str:
        """Format as JSON for machine parsing."""
        log_data: dict[str, Any] = {
            "timestamp": timestamp,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(log_data, default=str)


# Module-level logger cache
_loggers: dict[str, logging.Logger] = {}
_handler: Optional[logging.Handler] = None


def _get_handler() -> logging.Handler:
    """Get or create the shared stderr handler."""
    global _handler
    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(PosbotFormatter(json_output=_is_json_output()))
    return _handler


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for the given module name.

    Args:
        name: Module name (typically __name__)

    Returns:
        Configured logger instance
    """
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    logger.setLevel(_get_log_level())
    logger.addHandler(_get_handler())
    logger.propagate = False

    _loggers[name] = logger
    return logger


def set_log_level(level: int) -> None:
    """
    Dynamically set log level for all posbot loggers.

    Args:
        level: logging.DEBUG, logging.INFO, etc.
    """
    for logger in _loggers.values():
        logger.setLevel(level)


def reset_logging() -> None:
    """
    Reset all posbot loggers to default state.

    Restores propagate=True and level NOTSET on every posbot.* logger and
    detaches the shared handler, so pytest's caplog sees the records.
    Used by test fixtures to prevent cross-test logging pollution.
    """
    global _handler

    manager = logging.Logger.manager
    for name in list(manager.loggerDict.keys()):
        if name == "posbot" or name.startswith("posbot."):
            logger_or_placeholder = manager.loggerDict[name]
            if isinstance(logger_or_placeholder, logging.Logger):
                logger_or_placeholder.propagate = True
                logger_or_placeholder.setLevel(logging.NOTSET)

    for logger in _loggers.values():
        if _handler is not None:
            logger.removeHandler(_handler)

    _handler = None
