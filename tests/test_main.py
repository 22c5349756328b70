"""
Tests for the posbot command line entry point.
"""

import json
from unittest.mock import patch

import pytest

from posbot.__main__ import build_parser, main, run_check
from posbot.core.auth import AccessToken, AuthError
from posbot.core.client import ESIError
from posbot.core.config import reset_settings
from posbot.services.change_detector import detect_changes
from posbot.services.fuel_check import RunResult
from posbot.services.notifications.formatter import format_notification


@pytest.fixture
def run_result(make_starbase, fixed_datetime):
    starbases = [make_starbase(1, blocks=240, name="Jita IV - Moon 4")]
    changes = detect_changes(starbases, {})
    return RunResult(starbases, changes, format_notification(changes, now=fixed_datetime))


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.config is None
        assert not args.dry_run
        assert args.log_level is None

    def test_log_level_upper_cased(self):
        assert build_parser().parse_args(["--log-level", "debug"]).log_level == "DEBUG"


class TestMain:
    def test_missing_config(self, tmp_path):
        assert main([str(tmp_path / "absent.yaml")]) == 1

    def test_invalid_config(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("client_id: x\n")
        assert main([str(path)]) == 1

    def test_config_from_environment(self, config_file, run_result, monkeypatch):
        monkeypatch.setenv("POSBOT_CONFIG", str(config_file))
        reset_settings()

        with patch("posbot.__main__.run_check", return_value=run_result) as mock_run:
            assert main([]) == 0

        config = mock_run.call_args.args[0]
        assert config.sso.client_id == "test_client_id"

    def test_success(self, config_file, run_result):
        with patch("posbot.__main__.run_check", return_value=run_result) as mock_run:
            assert main([str(config_file)]) == 0

        assert mock_run.call_args.kwargs == {"dry_run": False}

    def test_dry_run_prints_payload(self, config_file, run_result, capsys):
        with patch("posbot.__main__.run_check", return_value=run_result):
            assert main([str(config_file), "--dry-run"]) == 0

        output = json.loads(capsys.readouterr().out)
        assert output["checked_at"].endswith("Z")
        assert output["summary"]["changed"] == 1
        assert output["summary"]["urgent"] is True
        assert output["payload"]["channel"] == "#pos-fuel"
        assert output["payload"]["text"] == "<!channel> :scream: POS fuel state changes:"

    def test_dry_run_nothing_to_send(self, config_file, make_starbase, capsys):
        starbases = [make_starbase(1, blocks=2400)]
        changes = detect_changes(starbases, {1: "good"})
        result = RunResult(starbases, changes, format_notification(changes))

        with patch("posbot.__main__.run_check", return_value=result):
            assert main([str(config_file), "--dry-run"]) == 0

        assert json.loads(capsys.readouterr().out)["payload"] is None

    @pytest.mark.parametrize(
        "error", [AuthError("invalid_grant", status_code=400), ESIError("Forbidden", status_code=403)]
    )
    def test_run_errors_exit_nonzero(self, config_file, error):
        with patch("posbot.__main__.run_check", side_effect=error):
            assert main([str(config_file)]) == 1


class TestRunCheck:
    def test_wires_collaborators(self, posbot_config, run_result):
        token = AccessToken(access_token="access", refresh_token="test_refresh_token")

        with patch("posbot.__main__.refresh_access_token", return_value=token) as mock_refresh, \
                patch("posbot.__main__.verify_character", return_value=90000001), \
                patch("posbot.__main__.StarbaseProvider") as mock_provider, \
                patch("posbot.__main__.FuelCheck") as mock_check:
            mock_check.return_value.run.return_value = run_result

            assert run_check(posbot_config, dry_run=True) is run_result

        mock_refresh.assert_called_once_with(
            "test_client_id", "test_client_secret", "test_refresh_token"
        )
        client = mock_provider.for_character.call_args.args[0]
        assert client.token == "access"
        assert mock_provider.for_character.call_args.args[1] == 90000001
        mock_check.return_value.run.assert_called_once_with(dry_run=True)
