# src/taskflow/tasks/reminders.py

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from ..core.errors import PermissionDenied
from ..core.ports import Notifier
from .task_models import DueClass, ReminderEvent, Task
from .views import DEFAULT_DUE_SOON_MINUTES, classify

logger = logging.getLogger(__name__)

Toast = Callable[[str], None]


def check_reminders(
    tasks: Iterable[Task],
    now: float,
    notified: set[str],
    *,
    threshold_minutes: float = DEFAULT_DUE_SOON_MINUTES,
) -> list[ReminderEvent]:
    """
    Emit one event per task that just became due-soon and was not reminded yet.

    `notified` is updated in place. Ids are only ever added, so a task is
    reminded at most once per process, at the first check where it qualifies.
    """
    events: list[ReminderEvent] = []
    for task in tasks:
        if task.completed or task.due_at is None or task.id in notified:
            continue
        if classify(task, now, threshold_minutes=threshold_minutes) != DueClass.DUE_SOON:
            continue
        notified.add(task.id)
        events.append(ReminderEvent(task_id=task.id, title=task.title, due_at=task.due_at))
    return events


def format_reminder(event: ReminderEvent) -> tuple[str, str]:
    due = datetime.fromtimestamp(event.due_at).astimezone().strftime("%H:%M")
    return "Task due soon", f"{event.title} (due at {due})"


class ReminderEngine:
    """
    Owns the notified-set and delivers reminder events.

    Delivery is fire-and-forget: failures are logged and never retried, and the
    task stays in the notified-set either way.
    """

    def __init__(
        self,
        notifier: Notifier,
        *,
        threshold_minutes: float = DEFAULT_DUE_SOON_MINUTES,
        toast: Toast | None = None,
    ) -> None:
        self._notifier = notifier
        self._toast = toast
        self.threshold_minutes = float(threshold_minutes)
        self.notified: set[str] = set()
        self.permission_granted = False

    def request_permission(self) -> bool:
        try:
            granted = bool(self._notifier.request_permission())
        except PermissionDenied:
            granted = False
        except Exception:
            logger.exception("Notification permission request failed")
            granted = False

        self.permission_granted = granted
        if not granted:
            logger.info("Notification permission not granted; using in-app notices only")
        return granted

    def check(self, tasks: Iterable[Task], now: float) -> list[ReminderEvent]:
        events = check_reminders(tasks, now, self.notified, threshold_minutes=self.threshold_minutes)
        for event in events:
            self._deliver(event)
        return events

    def _deliver(self, event: ReminderEvent) -> None:
        title, body = format_reminder(event)
        logger.info("Reminder task_id=%s due_at=%s", event.task_id, event.due_at)

        if self.permission_granted:
            try:
                self._notifier.notify(title, body)
                return
            except PermissionDenied:
                logger.info("Notifier refused delivery; falling back to in-app notices")
                self.permission_granted = False
            except Exception:
                logger.exception("Reminder delivery failed task_id=%s", event.task_id)
                return

        self._show_toast(f"{title}: {body}")

    def _show_toast(self, text: str) -> None:
        if self._toast is None:
            return
        try:
            self._toast(text)
        except Exception:
            logger.debug("Toast callback failed.", exc_info=True)
