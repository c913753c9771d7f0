"""Desktop notifications with graceful degradation.

Delivery order: ``notify-send``, then the configured webhook, then the log.
Every notification is also logged, so nothing is lost when the desktop
session is unavailable (cron, ssh, tests).
"""

import subprocess
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

import requests

from foretell.core.logging import get_logger

logger = get_logger(__name__)

ERROR_SUMMARY = "Error foretelling"


class Urgency(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    CRITICAL = "critical"


class Notifier:
    """Sends notifications for progress and errors.

    Args:
        enabled: Send desktop/webhook notifications at all
        webhook_url: Fallback endpoint receiving a JSON payload
        command: Desktop notification executable
    """

    def __init__(
        self,
        enabled: bool = True,
        webhook_url: Optional[str] = None,
        command: str = "notify-send",
    ):
        self.enabled = enabled
        self.webhook_url = webhook_url
        self.command = command

    @classmethod
    def from_settings(cls, config) -> "Notifier":
        return cls(enabled=config.notifications_enabled, webhook_url=config.webhook_url)

    def notify(
        self,
        summary: str,
        body: str,
        urgency: Urgency = Urgency.LOW,
        replace_id: Optional[int] = None,
    ) -> Optional[int]:
        """Show a notification.

        Returns:
            The desktop notification id (usable as ``replace_id`` to update
            it in place), or None when the desktop path was not used.
        """
        if urgency is Urgency.CRITICAL:
            logger.error("{}: {}", summary, body)
        else:
            logger.info("{}: {}", summary, body)

        if not self.enabled:
            return None

        try:
            return self._notify_desktop(summary, body, urgency, replace_id)
        except (OSError, subprocess.SubprocessError) as exc:
            logger.debug("Desktop notification failed: {}", exc)

        if self.webhook_url:
            self._notify_webhook(summary, body, urgency)
        return None

    def error(self, error) -> None:
        """Report a failure with critical urgency."""
        self.notify(ERROR_SUMMARY, _describe(error), Urgency.CRITICAL)

    def _notify_desktop(
        self,
        summary: str,
        body: str,
        urgency: Urgency,
        replace_id: Optional[int],
    ) -> Optional[int]:
        args = [self.command, summary, body, "-u", urgency.value, "-p"]
        if replace_id is not None:
            args += ["-r", str(replace_id)]
        completed = subprocess.run(
            args, capture_output=True, text=True, timeout=10, check=True
        )
        output = completed.stdout.strip()
        return int(output) if output.isdigit() else None

    def _notify_webhook(self, summary: str, body: str, urgency: Urgency) -> None:
        payload = {
            "title": summary,
            "message": body,
            "urgency": urgency.value,
            "timestamp": datetime.now(timezone.utc)
            .isoformat(timespec="seconds")
            .replace("+00:00", "Z"),
        }
        try:
            requests.post(self.webhook_url, json=payload, timeout=5).raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Notification could not be delivered: {}", exc)


def _describe(error) -> str:
    """Render an exception with its causes, innermost last."""
    if not isinstance(error, BaseException):
        return str(error)
    parts = []
    current: Optional[BaseException] = error
    while current is not None:
        text = str(current) or type(current).__name__
        parts.append(text)
        current = current.__cause__
    return "\n\nCaused by:\n    ".join(parts)


class ProgressNotifier:
    """Reports ``current/total done`` in a single notification, every tenth of the way."""

    def __init__(self, notifier: Notifier, total: int, summary: str = "Downloading"):
        self.notifier = notifier
        self.summary = summary
        self.total = max(total, 1)
        self.current = 0
        self.last_notif = 0
        self.notification_id: Optional[int] = None
        self._notify()

    def progress(self) -> None:
        self.current += 1
        self._notify()

    def _notify(self) -> None:
        if self.current * 10 // self.total < self.last_notif:
            return
        body = f"{self.current}/{self.total} done"
        notification_id = self.notifier.notify(
            self.summary, body, Urgency.LOW, replace_id=self.notification_id
        )
        if notification_id is not None:
            self.notification_id = notification_id
        self.last_notif = self.current * 10 // self.total + 1
