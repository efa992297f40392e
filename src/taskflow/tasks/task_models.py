# src/taskflow/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_doc(cls, raw: str | None) -> Priority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.MEDIUM


class DueClass(StrEnum):
    """Due-date bucket of a task relative to "now"."""

    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    SCHEDULED = "scheduled"
    NONE = "none"


class Tab(StrEnum):
    ALL = "all"
    TODAY = "today"
    UPCOMING = "upcoming"
    OVERDUE = "overdue"


@dataclass(slots=True, frozen=True)
class Task:
    id: str
    title: str
    created_at: float

    description: str = ""
    due_at: float | None = None
    priority: Priority = Priority.MEDIUM
    completed: bool = False


@dataclass(slots=True, frozen=True)
class TaskStats:
    pending: int
    done: int


@dataclass(slots=True, frozen=True)
class TaskView:
    """What the UI renders: ordered + filtered tasks and counters over the whole list."""

    tab: Tab
    tasks: list[Task]
    stats: TaskStats


@dataclass(slots=True, frozen=True)
class ReminderEvent:
    task_id: str
    title: str
    due_at: float


# Document keys a client may write; createdAt is set by the backend.
MUTABLE_DOC_FIELDS = frozenset({"title", "description", "dueDate", "priority", "completed"})


def task_from_doc(task_id: str, doc: dict[str, Any]) -> Task:
    due_raw = doc.get("dueDate")
    return Task(
        id=str(task_id),
        title=str(doc.get("title") or ""),
        description=str(doc.get("description") or ""),
        due_at=float(due_raw) if due_raw is not None else None,
        priority=Priority.from_doc(doc.get("priority")),
        completed=bool(doc.get("completed", False)),
        created_at=float(doc.get("createdAt") or 0.0),
    )

