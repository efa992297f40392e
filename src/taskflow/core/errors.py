# src/taskflow/core/errors.py

"""
Error taxonomy.

None of these are fatal: callers log them, show a short notice and keep going.
Nothing in the core retries; retrying is the backend's business.
"""

from __future__ import annotations


class TaskflowError(Exception):
    """Base exception for taskflow errors."""


class ValidationError(TaskflowError):
    """Input rejected before it reached the backend (e.g. a blank title)."""


class SyncError(TaskflowError):
    """Backend read/write failure. Local state keeps the last known snapshot."""

    def __init__(self, message: str, *, op: str | None = None) -> None:
        self.message = message
        self.op = op
        super().__init__(message)


class PermissionDenied(TaskflowError):
    """Notification permission refused; reminders degrade to in-app notices."""


def friendly_error_message(error: BaseException) -> str:
    """One line suitable for the console / a toast."""
    if isinstance(error, ValidationError):
        return f"Invalid input: {error}"

    if isinstance(error, SyncError):
        where = f" ({error.op})" if error.op else ""
        return f"Sync failed{where}: {error.message}. Showing the last known list."

    if isinstance(error, PermissionDenied):
        return "Notifications are blocked; reminders will show up here instead."

    return "Something went wrong. Check the log for details."
