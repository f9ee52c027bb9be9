"""Outcome notifications for the user interface.

The orchestration layer reports outcomes through a :class:`NotificationSink`.
What the UI does with them (toasts, banners) is outside this package.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Literal

logger = logging.getLogger(__name__)

NotificationLevel = Literal["success", "error", "info"]

_LOG_LEVELS = {
    "success": logging.INFO,
    "info": logging.INFO,
    "error": logging.ERROR,
}


@dataclass(frozen=True)
class Notification:
    message: str
    level: NotificationLevel
    timestamp: float = field(default_factory=time.time)


class NotificationSink(ABC):
    """Receiver of user-facing outcome messages."""

    @abstractmethod
    def notify(self, message: str, level: NotificationLevel) -> None:
        pass


class LoggingNotificationSink(NotificationSink):
    """Writes notifications to the application log."""

    def notify(self, message: str, level: NotificationLevel) -> None:
        logger.log(_LOG_LEVELS[level], f"[{level}] {message}")


class BufferedNotificationSink(LoggingNotificationSink):
    """Keeps the most recent notifications until the UI drains them.

    Args:
        capacity: Maximum number of pending notifications; older ones are
            discarded first.
    """

    def __init__(self, capacity: int = 50) -> None:
        self._pending: deque[Notification] = deque(maxlen=capacity)

    def notify(self, message: str, level: NotificationLevel) -> None:
        super().notify(message, level)
        self._pending.append(Notification(message=message, level=level))

    def drain(self) -> list[Notification]:
        drained = list(self._pending)
        self._pending.clear()
        return drained
