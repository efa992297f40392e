# src/taskflow/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Iterable

from .task_models import Task

logger = logging.getLogger(__name__)


class TaskStore:
    """
    In-memory mirror of the backend's latest snapshot for one user.

    The backend is authoritative: snapshots replace the contents wholesale.
    Insertion order is snapshot order, which is the tie-break order for views.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self.user_id: str | None = None

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def get(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def replace(self, snapshot: Iterable[Task], *, user_id: str | None = None) -> None:
        fresh: dict[str, Task] = {}
        for task in snapshot:
            if task.id in fresh:
                logger.warning("Duplicate task id in snapshot: %s (keeping last)", task.id)
            fresh[task.id] = task
        self._tasks = fresh
        if user_id is not None:
            self.user_id = user_id
        logger.debug("Snapshot applied user=%s total=%s", self.user_id, len(fresh))

    def upsert(self, task: Task) -> None:
        self._tasks[task.id] = task

    def remove(self, task_id: str) -> bool:
        return self._tasks.pop(task_id, None) is not None

    def clear(self, *, user_id: str | None = None) -> None:
        self._tasks = {}
        self.user_id = user_id

    def find(self, prefix: str) -> Task | None:
        """
        Resolve a (possibly shortened) id as typed in the console.

        Returns None when nothing or more than one task matches.
        """
        prefix = (prefix or "").strip()
        if not prefix:
            return None
        exact = self._tasks.get(prefix)
        if exact is not None:
            return exact
        matches = [t for tid, t in self._tasks.items() if tid.startswith(prefix)]
        return matches[0] if len(matches) == 1 else None
