"""
Notification surface.

The core emits discrete ``(kind, message)`` notifications; a display layer
subscribes and renders them. Notifications that share a ``key`` replace
each other (all transaction notifications use ``TX_KEY``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)

TX_KEY = "tx"


class NotificationKind(Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    message: str
    key: Optional[str] = None


NotificationListener = Callable[[Notification], None]


class Notifier:
    def __init__(self) -> None:
        self._listeners: list[NotificationListener] = []

    def subscribe(self, listener: NotificationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, notification: Notification) -> None:
        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception as exc:
                logger.error("Error in notification listener: %s", exc)

    def info(self, message: str, key: Optional[str] = None) -> None:
        self.emit(Notification(NotificationKind.INFO, message, key))

    def success(self, message: str, key: Optional[str] = None) -> None:
        self.emit(Notification(NotificationKind.SUCCESS, message, key))

    def error(self, message: str, key: Optional[str] = None) -> None:
        self.emit(Notification(NotificationKind.ERROR, message, key))
