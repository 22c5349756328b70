"""
Tests for the YAML run configuration.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from posbot.core.run_config import (
    ConfigurationError,
    FuelPolicy,
    FuelThresholds,
    PosbotConfig,
    SlackConfig,
    load_config,
)


class TestFuelThresholds:
    """Tests for FuelThresholds."""

    def test_defaults(self):
        thresholds = FuelThresholds.from_dict({})
        assert thresholds.danger_days == 3
        assert thresholds.warning_days == 7
        assert thresholds.validate() == []

    def test_equal_thresholds_are_valid(self):
        assert FuelThresholds(danger_days=5, warning_days=5).validate() == []

    def test_inverted_thresholds_rejected(self):
        errors = FuelThresholds(danger_days=8, warning_days=7).validate()
        assert len(errors) == 1
        assert "must not exceed" in errors[0]

    def test_negative_threshold_rejected(self):
        errors = FuelThresholds(danger_days=-1, warning_days=7).validate()
        assert errors == ["danger_days must be non-negative"]

    @pytest.mark.parametrize("value", ["three", None, True, [3]])
    def test_non_numeric_threshold_rejected(self, value):
        errors = FuelThresholds(danger_days=value, warning_days=7).validate()
        assert any("must be a number" in e for e in errors)

    def test_fractional_thresholds(self):
        thresholds = FuelThresholds.from_dict({"danger_days": 1.5, "warning_days": 2.5})
        assert thresholds.validate() == []


class TestFuelPolicy:
    """Tests for FuelPolicy."""

    def test_defaults(self):
        policy = FuelPolicy.from_dict({})
        assert policy.fuel_per_hour == 10
        assert policy.excluded_type_id == 16275

    def test_zero_rate_rejected(self):
        assert FuelPolicy(fuel_per_hour=0).validate() == ["fuel_per_hour must be positive"]

    def test_non_integer_rate_rejected(self):
        errors = FuelPolicy(fuel_per_hour=2.5).validate()
        assert "fuel_per_hour must be an integer" in errors[0]


class TestSlackConfig:
    """Tests for SlackConfig."""

    def test_missing_webhook(self):
        assert SlackConfig.from_dict(None).validate() == ["slack.webhook_url is required"]

    def test_non_http_webhook(self):
        errors = SlackConfig(webhook_url="ftp://example.com").validate()
        assert errors == ["slack.webhook_url must be an http(s) URL"]

    def test_defaults_copied(self):
        config = SlackConfig.from_dict(
            {"webhook_url": "https://hooks.slack.com/x", "defaults": {"channel": "#fuel"}}
        )
        assert config.defaults == {"channel": "#fuel"}


class TestPosbotConfig:
    """Tests for PosbotConfig.from_dict."""

    def test_valid_config(self, config_data):
        config = PosbotConfig.from_dict(config_data)

        assert config.sso.client_id == "test_client_id"
        assert config.thresholds == FuelThresholds(3, 7)
        assert config.policy == FuelPolicy()
        assert config.systems is None
        assert config.notification_style == "compact"
        assert config.subject == "POS"
        assert isinstance(config.statefile, Path)

    def test_sso_repr_hides_secrets(self, config_data):
        config = PosbotConfig.from_dict(config_data)
        assert "test_client_secret" not in repr(config.sso)
        assert "test_refresh_token" not in repr(config.sso)

    @pytest.mark.parametrize("key", ["client_id", "client_secret", "refresh_token", "statefile"])
    def test_missing_required_key(self, config_data, key):
        del config_data[key]

        with pytest.raises(ConfigurationError) as exc_info:
            PosbotConfig.from_dict(config_data)

        assert f"{key} is required" in exc_info.value.errors

    def test_systems_list(self, config_data):
        config_data["systems"] = ["Jita", "Perimeter"]
        assert PosbotConfig.from_dict(config_data).systems == ["Jita", "Perimeter"]

    def test_systems_must_be_list(self, config_data):
        config_data["systems"] = "Jita"
        with pytest.raises(ConfigurationError) as exc_info:
            PosbotConfig.from_dict(config_data)
        assert "systems must be a list of system names" in exc_info.value.errors

    def test_log_level_normalized(self, config_data):
        config_data["log_level"] = "info"
        assert PosbotConfig.from_dict(config_data).log_level == "INFO"

    def test_invalid_log_level(self, config_data):
        config_data["log_level"] = "chatty"
        with pytest.raises(ConfigurationError):
            PosbotConfig.from_dict(config_data)

    def test_invalid_style(self, config_data):
        config_data["notification_style"] = "fancy"
        with pytest.raises(ConfigurationError) as exc_info:
            PosbotConfig.from_dict(config_data)
        assert "notification_style" in exc_info.value.errors[0]

    def test_inverted_thresholds_fail_closed(self, config_data):
        config_data["danger_days"] = 10
        with pytest.raises(ConfigurationError) as exc_info:
            PosbotConfig.from_dict(config_data)
        assert exc_info.value.to_dict()["error"] == "configuration_error"

    def test_collects_all_errors(self, config_data):
        del config_data["client_id"]
        config_data["danger_days"] = "soon"
        del config_data["slack"]

        with pytest.raises(ConfigurationError) as exc_info:
            PosbotConfig.from_dict(config_data)

        assert len(exc_info.value.errors) == 3


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_valid_file(self, config_file):
        config = load_config(config_file)
        assert config.slack.webhook_url.startswith("https://hooks.slack.com/")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("client_id: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="must be a YAML mapping"):
            load_config(path)
