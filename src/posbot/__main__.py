#!/usr/bin/env python3
"""
posbot CLI Entry Point

Runs one fuel check. Intended to be invoked periodically by a scheduler.
Run with: python -m posbot [config.yaml] [--dry-run]
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .core.auth import AuthError, refresh_access_token, verify_character
from .core.client import ESIClient, ESIError
from .core.config import get_settings
from .core.formatters import get_utc_timestamp
from .core.logging import get_logger, set_log_level
from .core.run_config import ConfigurationError, PosbotConfig, load_config
from .models.starbase import DataError
from .services.fuel_check import FuelCheck, RunResult
from .services.notifications.slack_client import SinkError, SlackClient
from .services.provider import StarbaseProvider
from .services.state_store import StoreError, YamlStateStore

logger = get_logger("posbot")

# Errors that end a run with a logged message instead of a traceback
RUN_ERRORS = (AuthError, ConfigurationError, DataError, ESIError, SinkError, StoreError)


def output_json(data: dict, indent: int = 2) -> None:
    """Print JSON output to stdout."""
    print(json.dumps(data, indent=indent))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="posbot",
        description="Report changes in the fuel state of corporation starbases to Slack.",
    )
    parser.add_argument(
        "config",
        nargs="?",
        type=Path,
        help="YAML configuration file (default: $POSBOT_CONFIG or config.yaml)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the Slack payload instead of sending it; do not update the state file",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Override the configured log level",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def run_check(config: PosbotConfig, dry_run: bool = False) -> RunResult:
    """
    Authenticate, then run one fuel check with the ESI and Slack collaborators.

    Raises:
        AuthError, ESIError, DataError, StoreError, SinkError
    """
    sso = config.sso
    token = refresh_access_token(sso.client_id, sso.client_secret, sso.refresh_token)
    if token.refresh_token != sso.refresh_token:
        logger.warning("SSO issued a new refresh token; update refresh_token in the configuration")
    character_id = verify_character(token.access_token)

    with ESIClient(token=token.access_token) as client, SlackClient(
        webhook_url=config.slack.webhook_url, defaults=config.slack.defaults
    ) as slack:
        provider = StarbaseProvider.for_character(
            client, character_id, config.policy, config.thresholds
        )
        check = FuelCheck(provider, YamlStateStore(config.statefile), slack, config)
        return check.run(dry_run=dry_run)


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point. Returns the process exit status."""
    args = build_parser().parse_args(argv)
    config_path = args.config or get_settings().config

    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        logger.error("%s", e.message)
        for error in e.errors:
            logger.error("  %s", error)
        return 1

    level = args.log_level or config.log_level
    if level:
        set_log_level(getattr(logging, level))

    try:
        result = run_check(config, dry_run=args.dry_run)
    except RUN_ERRORS as e:
        logger.error("Fuel check failed: %s", e.message)
        return 1

    if args.dry_run:
        output_json(
            {
                "checked_at": get_utc_timestamp(),
                "summary": result.to_dict(),
                "payload": result.notification.to_payload(config.slack.defaults)
                if not result.notification.is_empty
                else None,
            }
        )
    else:
        logger.info("Fuel check complete: %s", result.to_dict())
    return 0


if __name__ == "__main__":
    sys.exit(main())
