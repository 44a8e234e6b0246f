"""
Fire-and-forget notification channel between the wizard and whatever presents it.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from schemas.wizard import Notification

logger = logging.getLogger(__name__)

Notifier = Callable[[Notification], None]


def log_notifier(notification: Notification) -> None:
    logger.info("notify[%s]: %s", notification.level, notification.message)


class NotificationChannel:
    """Collects notifications for the current result and forwards them to a notifier.

    Delivery failures are logged and never reach the caller.
    """

    def __init__(self, notifier: Optional[Notifier] = None):
        self._notifier = notifier or log_notifier
        self._pending: list[Notification] = []

    def emit(self, level: str, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self._pending.append(notification)
        try:
            self._notifier(notification)
        except Exception:
            logger.exception("Notifier failed to deliver %r", notification.message)
        return notification

    def success(self, message: str) -> Notification:
        return self.emit("success", message)

    def error(self, message: str) -> Notification:
        return self.emit("error", message)

    def drain(self) -> list[Notification]:
        pending, self._pending = self._pending, []
        return pending
