"""
posbot Test Suite - Shared Fixtures and Configuration
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

# =============================================================================
# Singleton Reset
# =============================================================================


@pytest.fixture(autouse=True)
def reset_all_singletons():
    """
    Reset module-level singletons between tests.

    - Settings cache (MUST be first - other modules read from settings)
    - Logging state (restores propagation so caplog sees records)
    """

    def do_reset():
        from posbot.core.config import reset_settings
        from posbot.core.logging import reset_logging

        reset_settings()
        reset_logging()

    do_reset()
    yield
    do_reset()


# =============================================================================
# Time Fixtures
# =============================================================================


@pytest.fixture
def fixed_datetime() -> datetime:
    """Return a fixed datetime for consistent testing (a Thursday)."""
    return datetime(2026, 1, 15, 18, 30, 0, tzinfo=timezone.utc)


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def config_data(tmp_path: Path) -> dict[str, Any]:
    """Return a valid run configuration mapping."""
    return {
        "client_id": "test_client_id",
        "client_secret": "test_client_secret",
        "refresh_token": "test_refresh_token",
        "statefile": str(tmp_path / "state.yaml"),
        "danger_days": 3,
        "warning_days": 7,
        "slack": {
            "webhook_url": "https://hooks.slack.com/services/T000/B000/XXXX",
            "defaults": {"channel": "#pos-fuel", "username": "posbot"},
        },
    }


@pytest.fixture
def posbot_config(config_data: dict[str, Any]):
    """Return a validated PosbotConfig."""
    from posbot.core.run_config import PosbotConfig

    return PosbotConfig.from_dict(config_data)


@pytest.fixture
def config_file(tmp_path: Path, config_data: dict[str, Any]) -> Path:
    """Write the run configuration to a YAML file."""
    import yaml

    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(config_data))
    return path


# =============================================================================
# Starbase Fixtures
# =============================================================================


@pytest.fixture
def make_starbase():
    """
    Factory for Starbase models with default thresholds (3/7 days).

    Usage:
        sb = make_starbase(1, blocks=240)
    """
    from posbot.core.run_config import FuelPolicy, FuelThresholds
    from posbot.models.starbase import Starbase

    def _make(
        starbase_id: int,
        blocks: int = 0,
        name: str | None = None,
        system_id: int = 30000142,
        thresholds: FuelThresholds | None = None,
    ) -> Starbase:
        return Starbase(
            starbase_id=starbase_id,
            system_id=system_id,
            name=name or f"Moon {starbase_id}",
            fuel_blocks=blocks,
            type_id=12235,
            moon_id=40000000 + starbase_id,
            policy=FuelPolicy(),
            thresholds=thresholds or FuelThresholds(),
        )

    return _make


@pytest.fixture
def mock_starbase_list() -> list[dict[str, Any]]:
    """ESI /corporations/{id}/starbases/ response."""
    return [
        {
            "starbase_id": 1000000001,
            "system_id": 30000142,
            "type_id": 12235,
            "moon_id": 40009082,
            "state": "online",
        },
        {
            "starbase_id": 1000000002,
            "system_id": 30000144,
            "type_id": 12235,
            "moon_id": 40009123,
            "state": "online",
        },
    ]


@pytest.fixture
def mock_esi_client():
    """Create a mock ESI client with common methods stubbed."""
    from posbot.core.client import ESIClient

    client = MagicMock(spec=ESIClient)
    client.token = "test_access_token"
    client.base_url = "https://esi.evetech.net/latest"
    client.datasource = "tranquility"
    return client
