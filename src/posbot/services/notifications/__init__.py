"""
Slack Notification Module.

Components:
- format_notification: ChangeSet -> Notification (lead line + attachments)
- SlackClient: incoming webhook client with retry logic
- SinkError: raised when delivery fails

Usage:
    from posbot.services.notifications import SlackClient, format_notification

    notification = format_notification(changes)
    if not notification.is_empty:
        with SlackClient(webhook_url) as slack:
            slack.send(notification.text, [a.to_dict() for a in notification.attachments])
"""

from .formatter import Attachment, Notification, format_notification
from .slack_client import SendResult, SinkError, SlackClient

__all__ = [
    "Attachment",
    "Notification",
    "SendResult",
    "SinkError",
    "SlackClient",
    "format_notification",
]
