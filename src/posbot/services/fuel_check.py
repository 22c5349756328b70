"""
Fuel Check Orchestration.

One pass of the fuel check:

    fetch -> filter by system -> sort by name, then by fuel left
          -> diff against persisted state -> format -> notify -> persist

The persisted state is committed only after the notification has been
delivered (or there was nothing to send), so a failed delivery is retried
by the next run's diff instead of being silently marked as reported.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Protocol

from ..core.formatters import get_utc_now
from ..core.logging import get_logger
from ..core.run_config import PosbotConfig
from ..models.starbase import Starbase
from .change_detector import ChangeSet, detect_changes
from .notifications.formatter import Notification, format_notification
from .notifications.slack_client import SendResult

logger = get_logger(__name__)


class StarbaseSource(Protocol):
    """Where starbases come from (ESI in production)."""

    def fetch_starbases(self) -> list[Starbase]: ...

    def resolve_system_ids(self, names: list[str]) -> set[int]: ...


class StateStore(Protocol):
    """Persisted starbase_id -> state label mapping."""

    def load(self) -> dict[int, str]: ...

    def transaction(self) -> Any: ...


class MessageSink(Protocol):
    """Where notifications go (a Slack webhook in production)."""

    def send(self, text: str, attachments: list[dict[str, Any]]) -> SendResult: ...


def filter_by_systems(
    starbases: Iterable[Starbase], system_ids: Optional[set[int]]
) -> list[Starbase]:
    """
    Keep only starbases in the allowed systems.

    Args:
        starbases: Starbases to filter
        system_ids: Allowed system IDs; None or empty for no filtering

    Returns:
        Matching starbases in their original order
    """
    if not system_ids:
        return list(starbases)
    return [sb for sb in starbases if sb.system_id in system_ids]


def sort_starbases(starbases: Iterable[Starbase]) -> list[Starbase]:
    """Order by fuel left, soonest to run out first; ties keep name order."""
    by_name = sorted(starbases, key=lambda sb: sb.name)
    return sorted(by_name, key=lambda sb: sb.fuel_hours)


@dataclass
class RunResult:
    """Summary of one fuel check."""

    starbases: list[Starbase]
    changes: ChangeSet
    notification: Notification
    sent: bool = False
    persisted: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "starbases": len(self.starbases),
            "changed": len(self.changes.reportable),
            "urgent": self.notification.urgent,
            "sent": self.sent,
            "persisted": self.persisted,
        }


class FuelCheck:
    """
    Runs the fuel check against a starbase source, state store and sink.

    Usage:
        check = FuelCheck(provider, YamlStateStore(path), slack, config)
        result = check.run()
    """

    def __init__(
        self,
        source: StarbaseSource,
        store: StateStore,
        sink: MessageSink,
        config: PosbotConfig,
        clock: Callable[[], datetime] = get_utc_now,
    ) -> None:
        self.source = source
        self.store = store
        self.sink = sink
        self.config = config
        self.clock = clock

    def collect(self) -> list[Starbase]:
        """
        Fetch, filter and order the starbases to check.

        Raises:
            ESIError: If ESI calls fail
            DataError: If starbase records are malformed
        """
        starbases = self.source.fetch_starbases()

        if self.config.systems:
            system_ids = self.source.resolve_system_ids(self.config.systems)
            if not system_ids:
                logger.warning(
                    "None of the configured systems %s resolved; checking all starbases",
                    self.config.systems,
                )
            before = len(starbases)
            starbases = filter_by_systems(starbases, system_ids)
            logger.info(
                "System filter kept %d of %d starbases", len(starbases), before
            )

        return sort_starbases(starbases)

    def evaluate(
        self, starbases: Sequence[Starbase], previous: Mapping[int, str]
    ) -> tuple[ChangeSet, Notification]:
        """Diff against the previous states and format the result."""
        changes = detect_changes(starbases, previous)
        notification = format_notification(
            changes,
            now=self.clock(),
            subject=self.config.subject,
            style=self.config.notification_style,
        )
        return changes, notification

    def notify(self, notification: Notification) -> bool:
        """
        Deliver a notification unless it is empty.

        Returns:
            True if a message was sent

        Raises:
            SinkError: If delivery failed
        """
        if notification.is_empty:
            logger.info("No fuel state changes to report")
            return False

        result = self.sink.send(
            notification.text, [a.to_dict() for a in notification.attachments]
        )
        if result.is_rate_limited:
            logger.warning(
                "Slack rate limited the notification (retry after %.0fs)",
                result.retry_after or 0,
            )
        result.raise_for_failure()
        logger.info(
            "Reported %d fuel state change(s)%s",
            len(notification.attachments),
            " (urgent)" if notification.urgent else "",
        )
        return True

    def run(self, dry_run: bool = False) -> RunResult:
        """
        Run one fuel check.

        Args:
            dry_run: Evaluate and format only; do not send or persist

        Raises:
            ESIError, DataError: If fetching fails (nothing sent or persisted)
            StoreError: If the state file cannot be read or written
            SinkError: If delivery fails (state is not persisted)
        """
        starbases = self.collect()

        if dry_run:
            changes, notification = self.evaluate(starbases, self.store.load())
            return RunResult(starbases, changes, notification)

        with self.store.transaction() as state:
            changes, notification = self.evaluate(starbases, state)
            sent = self.notify(notification)
            state.update(changes.current_states)

        return RunResult(starbases, changes, notification, sent=sent, persisted=True)
