# src/taskflow/tasks/views.py

from __future__ import annotations

"""
Derived views over a task snapshot.

Everything here is a pure function of (tasks, now). The session recomputes
views on every snapshot and on every timer tick, since "now" moves on its own.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, tzinfo

from .task_models import DueClass, Tab, Task, TaskStats, TaskView

DEFAULT_DUE_SOON_MINUTES = 15


def classify(task: Task, now: float, *, threshold_minutes: float = DEFAULT_DUE_SOON_MINUTES) -> DueClass:
    if task.due_at is None:
        return DueClass.NONE

    if not task.completed:
        if task.due_at < now:
            return DueClass.OVERDUE
        if task.due_at - now <= threshold_minutes * 60:
            return DueClass.DUE_SOON

    return DueClass.SCHEDULED


def _display_key(task: Task) -> tuple[bool, bool, float]:
    has_due = task.due_at is not None
    return (task.completed, not has_due, task.due_at if has_due else 0.0)


def sort_for_display(tasks: Iterable[Task]) -> list[Task]:
    """
    Incomplete before completed, dated before undated, then by due date.

    sorted() is stable, so remaining ties keep snapshot order.
    """
    return sorted(tasks, key=_display_key)


def _local_date(ts: float, tz: tzinfo | None):
    if tz is None:
        return datetime.fromtimestamp(ts).astimezone().date()
    return datetime.fromtimestamp(ts, tz).date()


def filter_by_tab(
    tasks: Iterable[Task],
    tab: Tab | str,
    now: float,
    *,
    tz: tzinfo | None = None,
    threshold_minutes: float = DEFAULT_DUE_SOON_MINUTES,
) -> list[Task]:
    tab = Tab(tab)

    if tab == Tab.ALL:
        return list(tasks)

    if tab == Tab.TODAY:
        today = _local_date(now, tz)
        return [t for t in tasks if t.due_at is not None and _local_date(t.due_at, tz) == today]

    if tab == Tab.UPCOMING:
        return [t for t in tasks if t.due_at is not None and t.due_at > now]

    return [
        t
        for t in tasks
        if not t.completed
        and classify(t, now, threshold_minutes=threshold_minutes) == DueClass.OVERDUE
    ]


def compute_stats(tasks: Iterable[Task]) -> TaskStats:
    pending = 0
    done = 0
    for t in tasks:
        if t.completed:
            done += 1
        else:
            pending += 1
    return TaskStats(pending=pending, done=done)


def build_view(
    tasks: Sequence[Task],
    tab: Tab | str,
    now: float,
    *,
    tz: tzinfo | None = None,
    threshold_minutes: float = DEFAULT_DUE_SOON_MINUTES,
) -> TaskView:
    """Sort first (base order for every tab), then filter. Stats cover the whole list."""
    ordered = sort_for_display(tasks)
    visible = filter_by_tab(ordered, tab, now, tz=tz, threshold_minutes=threshold_minutes)
    return TaskView(tab=Tab(tab), tasks=visible, stats=compute_stats(tasks))
