# src/taskflow/cli/render.py

from __future__ import annotations

from datetime import datetime

from ..tasks.task_models import DueClass, Priority, Tab, Task, TaskView
from ..tasks.views import classify

SHORT_ID = 8

_BADGES = {
    DueClass.OVERDUE: "OVERDUE",
    DueClass.DUE_SOON: "due soon",
    DueClass.SCHEDULED: "",
    DueClass.NONE: "",
}

_PRIORITY_MARK = {Priority.LOW: " ", Priority.MEDIUM: "!", Priority.HIGH: "‼"}


def format_due(ts: float, now: float) -> str:
    due = datetime.fromtimestamp(ts).astimezone()
    today = datetime.fromtimestamp(now).astimezone().date()
    if due.date() == today:
        return due.strftime("today %H:%M")
    return due.strftime("%Y-%m-%d %H:%M")


def format_task_line(task: Task, now: float, *, threshold_minutes: float = 15) -> str:
    check = "x" if task.completed else " "
    mark = _PRIORITY_MARK.get(task.priority, " ")
    parts = [f"[{check}] {task.id[:SHORT_ID]} {mark} {task.title}"]

    if task.due_at is not None:
        parts.append(f"(due {format_due(task.due_at, now)})")
        badge = _BADGES[classify(task, now, threshold_minutes=threshold_minutes)]
        if badge:
            parts.append(f"<{badge}>")

    if task.description:
        parts.append(f"- {task.description}")
    return " ".join(parts)


def format_view(view: TaskView, now: float, *, threshold_minutes: float = 15) -> str:
    header = f"Tasks [{view.tab.value}] - {view.stats.pending} pending, {view.stats.done} done"
    if not view.tasks:
        empty = "No tasks yet." if view.tab == Tab.ALL else "Nothing here."
        return f"{header}\n  {empty}"
    lines = [header]
    lines.extend(
        f"  {format_task_line(t, now, threshold_minutes=threshold_minutes)}" for t in view.tasks
    )
    return "\n".join(lines)
