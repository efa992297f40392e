# src/taskflow/notify/console.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ConsoleNotifier:
    """Prints reminders to the terminal. 'Permission' is just a settings switch."""

    def __init__(self, *, enabled: bool = True, write: Callable[[str], None] = print) -> None:
        self._enabled = enabled
        self._write = write

    def request_permission(self) -> bool:
        return self._enabled

    def notify(self, title: str, body: str) -> None:
        self._write(f"[{_ts_local()}] \a[{title}] {body}")


class NullNotifier:
    """Notifications switched off: permission is always refused."""

    def request_permission(self) -> bool:
        return False

    def notify(self, title: str, body: str) -> None:
        logger.debug("NullNotifier dropped %r", title)
