"""
Tests for posbot structured logging.
"""

from __future__ import annotations

import json
import logging
import sys

from posbot.core.logging import PosbotFormatter, get_logger, set_log_level


def _record(name: str = "posbot.services.fuel_check", level: int = logging.INFO, **extra):
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=10,
        msg="Checked %d starbases",
        args=(3,),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestPosbotFormatter:
    """Test PosbotFormatter class."""

    def test_text_format_basic(self):
        formatted = PosbotFormatter(json_output=False).format(_record())

        assert formatted == "[POSBOT INFO] [fuel_check] Checked 3 starbases"

    def test_text_format_with_exception(self):
        try:
            raise ValueError("bad fuel bay")
        except ValueError:
            exc_info = sys.exc_info()

        record = _record(level=logging.ERROR)
        record.exc_info = exc_info

        formatted = PosbotFormatter().format(record)

        assert "POSBOT ERROR" in formatted
        assert "ValueError: bad fuel bay" in formatted

    def test_json_format_includes_extras(self):
        formatted = PosbotFormatter(json_output=True).format(_record(changed=2))
        data = json.loads(formatted)

        assert data["level"] == "INFO"
        assert data["logger"] == "posbot.services.fuel_check"
        assert data["message"] == "Checked 3 starbases"
        assert data["changed"] == 2
        assert "timestamp" in data
        assert "pathname" not in data


class TestGetLogger:
    """Test logger creation and level control."""

    def test_logger_is_cached(self):
        assert get_logger("posbot.test.cache") is get_logger("posbot.test.cache")

    def test_logger_does_not_propagate(self):
        logger = get_logger("posbot.test.propagate")
        assert logger.propagate is False
        assert logger.handlers

    def test_set_log_level(self):
        logger = get_logger("posbot.test.level")
        set_log_level(logging.DEBUG)
        assert logger.level == logging.DEBUG
        set_log_level(logging.WARNING)
        assert logger.level == logging.WARNING
