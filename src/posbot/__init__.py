"""
posbot - EVE Online starbase fuel monitor

Checks the fuel bays of a corporation's player owned starbases through ESI,
classifies each tower as good, warning or danger, and posts to Slack when a
tower's state has changed since the previous run.

Usage as CLI (e.g. hourly from cron):
    python -m posbot config.yaml
    posbot config.yaml --dry-run

Package structure:
    posbot/
    ├── core/           # Settings, logging, SSO, ESI client, run configuration
    ├── models/         # Starbase and FuelState
    └── services/       # Classifier, provider, state store, fuel check, Slack
"""

__version__ = "1.0.0"

from .core import ConfigurationError, ESIClient, ESIError, PosbotConfig, load_config

__all__ = [
    "__version__",
    "ConfigurationError",
    "ESIClient",
    "ESIError",
    "PosbotConfig",
    "load_config",
]
