"""
Slack Message Formatter.

Formats fuel state changes as a Slack message with one attachment per
starbase. Slack renders the "good", "warning" and "danger" attachment
colors natively as green, amber and red, so the state doubles as the color.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ...core.constants import TYPE_RENDER_URL
from ...core.formatters import format_days, format_eve_time, get_utc_now, offline_time
from ...models.starbase import Starbase
from ..change_detector import ChangeSet

# Prefix for a change set with a starbase newly in danger
URGENT_PREFIX = "<!channel> :scream: "


@dataclass
class Attachment:
    """One Slack attachment describing a starbase."""

    title: str
    color: str
    text: str
    fallback: str
    thumb_url: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "title": self.title,
            "color": self.color,
            "text": self.text,
            "fallback": self.fallback,
        }
        if self.thumb_url:
            result["thumb_url"] = self.thumb_url
        return result


@dataclass
class Notification:
    """A formatted change notification."""

    text: str
    attachments: list[Attachment] = field(default_factory=list)
    urgent: bool = False

    @property
    def is_empty(self) -> bool:
        """Nothing to say; the notification must not be sent."""
        return not self.attachments

    def to_payload(self, defaults: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Build the webhook payload.

        Args:
            defaults: Extra top-level fields (channel, username, icon_emoji)
        """
        payload: dict[str, Any] = dict(defaults or {})
        payload["text"] = self.text
        payload["attachments"] = [a.to_dict() for a in self.attachments]
        return payload


def format_compact(starbase: Starbase, now: datetime, subject: str = "POS") -> Attachment:
    """
    One-line attachment: "<name> is <STATE> (<n.n> days)" plus the offline time.
    """
    state = starbase.state.value
    eve_time = format_eve_time(offline_time(starbase.fuel_days, now))
    return Attachment(
        title=f"{starbase.name} is {state.upper()} ({format_days(starbase.fuel_days)})",
        color=state,
        text=f"{subject} will go offline at {eve_time}",
        fallback=f"{starbase.name} fuel state is {state}.",
    )


def format_detailed(starbase: Starbase, now: datetime, subject: str = "POS") -> Attachment:
    """
    Heavier attachment with the old and new state and a tower render.
    """
    state = starbase.state.value
    eve_time = format_eve_time(offline_time(starbase.fuel_days, now))
    thumb_url = TYPE_RENDER_URL.format(type_id=starbase.type_id) if starbase.type_id else None
    return Attachment(
        title=starbase.name,
        color=state,
        text=(
            f"Fuel expires in {format_days(starbase.fuel_days)}.\n"
            f"{subject} will go offline at {eve_time}.\n"
            f"Old state: {starbase.previous_state.value}, new state: {state}"
        ),
        fallback=f"{starbase.name} fuel state is {state}.",
        thumb_url=thumb_url,
    )


FORMATTERS = {
    "compact": format_compact,
    "detailed": format_detailed,
}


def format_notification(
    changes: ChangeSet,
    now: Optional[datetime] = None,
    subject: str = "POS",
    style: str = "compact",
) -> Notification:
    """
    Format a change set as a Slack notification.

    Args:
        changes: Reportable starbases, already in display order
        now: Reference time for offline estimates (default: current UTC time)
        subject: What the towers are called in the lead line and attachment text
        style: "compact" or "detailed"

    Returns:
        Notification; empty when there are no reportable starbases
    """
    if now is None:
        now = get_utc_now()
    formatter = FORMATTERS[style]

    urgent = changes.any_danger
    prefix = URGENT_PREFIX if urgent else ""
    return Notification(
        text=f"{prefix}{subject} fuel state changes:",
        attachments=[formatter(sb, now, subject) for sb in changes.reportable],
        urgent=urgent,
    )
