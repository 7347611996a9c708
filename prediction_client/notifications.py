"""Operator notification sinks.

The host application wires one notifier at startup and hands it to the
uploader; nothing in this package reaches for a global instance.
"""

import logging
import threading
from typing import List, Protocol, Tuple

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Receives human-readable progress and failure messages."""

    def notify(self, is_success: bool, message: str) -> None:
        ...


class LoggingNotifier:
    """Notifier that writes messages to the log."""

    def notify(self, is_success: bool, message: str) -> None:
        if is_success:
            logger.info(message)
        else:
            logger.warning(message)


class RecordingNotifier:
    """Notifier that keeps every message in memory."""

    def __init__(self):
        self._lock = threading.Lock()
        self.messages: List[Tuple[bool, str]] = []

    def notify(self, is_success: bool, message: str) -> None:
        with self._lock:
            self.messages.append((is_success, message))

    def matching(self, fragment: str) -> List[str]:
        """Return recorded messages containing ``fragment``."""
        with self._lock:
            return [message for _, message in self.messages if fragment in message]
