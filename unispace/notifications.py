"""Notifier collaborators.

The lifecycle services call ``notify`` after a booking changes status. How
the message reaches the user is up to the implementation.
"""

import logging
import threading
from dataclasses import dataclass
from typing import List, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    user_id: int
    booking_id: int
    status: str
    message: str


class Notifier(Protocol):
    def notify(self, user_id: int, booking_id: int, new_status: str, message: str) -> None:
        ...


class LoggingNotifier:
    def notify(self, user_id: int, booking_id: int, new_status: str, message: str) -> None:
        logger.info(f"Notify user {user_id} about booking {booking_id} [{new_status}]: {message}")


class RecordingNotifier:
    """Keeps every notification in memory, newest last."""

    def __init__(self):
        self._lock = threading.Lock()
        self.sent: List[Notification] = []

    def notify(self, user_id: int, booking_id: int, new_status: str, message: str) -> None:
        with self._lock:
            self.sent.append(Notification(user_id, booking_id, new_status, message))

    def for_user(self, user_id: int) -> List[Notification]:
        with self._lock:
            return [n for n in self.sent if n.user_id == user_id]


default_notifier = LoggingNotifier()
