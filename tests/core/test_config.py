"""
Tests for process settings.
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest import mock

from posbot.core.config import (
    PosbotSettings,
    get_settings,
    is_json_logging,
    is_retry_disabled,
    reset_settings,
)


class TestPosbotSettings:
    """Test PosbotSettings class."""

    def test_default_values(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = PosbotSettings()

            assert settings.log_level == "WARNING"
            assert settings.debug is False
            assert settings.log_json is False
            assert settings.no_retry is False
            assert settings.config == Path("config.yaml")

    def test_log_level_case_insensitive(self):
        with mock.patch.dict(os.environ, {"POSBOT_LOG_LEVEL": "debug"}, clear=True):
            settings = PosbotSettings()
            assert settings.log_level == "DEBUG"
            assert settings.effective_log_level == "DEBUG"

    def test_debug_legacy_flag(self):
        with mock.patch.dict(os.environ, {"POSBOT_DEBUG": "1"}, clear=True):
            settings = PosbotSettings()
            assert settings.effective_log_level == "DEBUG"

    def test_debug_does_not_override_explicit_level(self):
        env = {"POSBOT_LOG_LEVEL": "ERROR", "POSBOT_DEBUG": "1"}
        with mock.patch.dict(os.environ, env, clear=True):
            settings = PosbotSettings()
            assert settings.effective_log_level == "ERROR"

    def test_log_level_int(self):
        import logging

        with mock.patch.dict(os.environ, {"POSBOT_LOG_LEVEL": "INFO"}, clear=True):
            assert PosbotSettings().log_level_int == logging.INFO

    def test_config_path_from_env(self):
        with mock.patch.dict(os.environ, {"POSBOT_CONFIG": "/etc/posbot.yaml"}, clear=True):
            assert PosbotSettings().config == Path("/etc/posbot.yaml")


class TestSettingsSingleton:
    """Test the cached accessor."""

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_reset_settings_reloads_env(self):
        with mock.patch.dict(os.environ, {"POSBOT_NO_RETRY": "1"}, clear=True):
            reset_settings()
            assert is_retry_disabled() is True

        with mock.patch.dict(os.environ, {}, clear=True):
            reset_settings()
            assert is_retry_disabled() is False

    def test_is_json_logging(self):
        with mock.patch.dict(os.environ, {"POSBOT_LOG_JSON": "true"}, clear=True):
            reset_settings()
            assert is_json_logging() is True
