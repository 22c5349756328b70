"""
posbot Services.

The fuel check pipeline and its collaborators: the ESI starbase provider, the
persisted state store and Slack notifications.
"""

from __future__ import annotations

__all__ = [
    "FuelCheck",
    "StarbaseProvider",
    "YamlStateStore",
]


def __getattr__(name: str):
    """Lazy import services so importing one does not pull in ESI and Slack clients."""
    if name == "FuelCheck":
        from .fuel_check import FuelCheck

        return FuelCheck
    if name == "StarbaseProvider":
        from .provider import StarbaseProvider

        return StarbaseProvider
    if name == "YamlStateStore":
        from .state_store import YamlStateStore

        return YamlStateStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
