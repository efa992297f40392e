# src/taskflow/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The session depends on Protocols instead of concrete implementations.
This keeps backends/auth/notifiers swappable and makes testing easier.
"""

from collections.abc import AsyncIterator, Callable
from typing import Any, Protocol

TaskFields = dict[str, Any]
# Document-shaped fields: {"title", "description", "dueDate", "priority", "completed"}.

UserListener = Callable[[str | None], None]


class Cancellable(Protocol):
    def cancel(self) -> Any: ...


class TaskBackend(Protocol):
    """
    Persistence collaborator.

    subscribe() yields full snapshots (never diffs): the current list first,
    then a fresh list after every change. Stop by closing/cancelling the consumer.
    """

    def subscribe(self, user_id: str) -> AsyncIterator[list[Any]]: ...
    async def create(self, user_id: str, fields: TaskFields) -> str: ...
    async def update(self, user_id: str, task_id: str, fields: TaskFields) -> None: ...
    async def delete(self, user_id: str, task_id: str) -> None: ...
    def close(self) -> None: ...


class AuthProvider(Protocol):
    def current_user(self) -> str | None: ...

    def on_change(self, callback: UserListener) -> Callable[[], None]:
        """Register a listener; it fires once right away. Returns an unsubscribe callable."""
        ...


class Notifier(Protocol):
    """Fire-and-forget delivery; no confirmation is expected."""

    def request_permission(self) -> bool: ...
    def notify(self, title: str, body: str) -> None: ...


class Clock(Protocol):
    def now(self) -> float: ...
    def every(self, interval_seconds: float, callback: Callable[[], None]) -> Cancellable: ...
