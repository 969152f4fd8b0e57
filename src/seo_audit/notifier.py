"""Sprint request notifications.

Notifications are composed here and handed off to a delivery mechanism.
The default hands a ``mailto:`` link to the desktop mail client, so nothing
is sent server-side.
"""

import logging
import webbrowser
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional
from urllib.parse import quote

from seo_audit.config import settings

logger = logging.getLogger(__name__)


@dataclass
class SprintNotification:
    """Plain-text notification about a new sprint request."""
    recipient: str
    subject: str
    body: str
    blockers: List[str] = field(default_factory=list)

    def mailto_url(self) -> str:
        return (
            f"mailto:{self.recipient}"
            f"?subject={quote(self.subject, safe='')}"
            f"&body={quote(self.body, safe='')}"
        )


def compose_sprint_notification(
    domain: str,
    email: str,
    phone: str,
    readiness_tier: str,
    blockers: Optional[List[str]] = None,
    recipient: Optional[str] = None,
    sender_name: Optional[str] = None,
) -> SprintNotification:
    """Build the notification for a sprint request.

    Args:
        domain: Website the request is about
        email: Requester email
        phone: Requester phone
        readiness_tier: Directory readiness tier of the latest audit
        blockers: Labels of unmet directory requirements
        recipient: Notification address (defaults to settings.NOTIFY_EMAIL)
        sender_name: Tool name in the footer (defaults to settings.COMPANY_NAME)

    Returns:
        SprintNotification
    """
    blockers = list(blockers or [])
    body = "\n".join([
        "New Sprint Request Received!",
        "",
        f"Website: {domain}",
        f"Client Email: {email}",
        f"Client Phone: {phone}",
        f"Readiness Tier: {readiness_tier}",
        f"Blockers: {', '.join(blockers) or 'None'}",
        "",
        "---",
        f"Sent from {sender_name or settings.COMPANY_NAME} SEO Tool",
    ])
    return SprintNotification(
        recipient=recipient or settings.NOTIFY_EMAIL,
        subject=f"New Sprint Request: {domain}",
        body=body,
        blockers=blockers,
    )


class Notifier(ABC):
    """Delivery mechanism for notifications."""

    @abstractmethod
    def notify(self, notification: SprintNotification) -> bool:
        """Deliver a notification. Returns True if it was handed off."""
        pass


class MailtoNotifier(Notifier):
    """Opens the user's mail client with the notification pre-filled."""

    def __init__(self, opener=None):
        self.opener = opener or webbrowser.open

    def notify(self, notification: SprintNotification) -> bool:
        url = notification.mailto_url()
        opened = bool(self.opener(url))
        if opened:
            logger.info(f"Opened mail client for: {notification.subject}")
        else:
            logger.warning(f"No mail client available; compose manually: {url}")
        return opened


class LoggingNotifier(Notifier):
    """Writes notifications to the log instead of delivering them.

    The most recent ``keep`` notifications stay available on ``sent``.
    """

    def __init__(self, keep: int = 50):
        self.sent: Deque[SprintNotification] = deque(maxlen=keep)

    def notify(self, notification: SprintNotification) -> bool:
        self.sent.append(notification)
        logger.info(
            f"Notification to {notification.recipient}: {notification.subject}\n{notification.body}"
        )
        return True
