# src/taskflow/storage/sqlite_backend.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from collections.abc import AsyncIterator, Iterator
from pathlib import Path
from typing import Any

from ..core.errors import SyncError
from ..tasks.task_models import Priority, Task
from .documents import new_task_id, normalize_fields
from .hub import SnapshotHub

logger = logging.getLogger(__name__)

# document field -> column
_COLUMNS = {
    "title": "title",
    "description": "description",
    "dueDate": "due_at",
    "priority": "priority",
    "completed": "completed",
}


class SQLiteBackend:
    """
    Document-collection variant: one row per task, scoped by user_id.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._hub = SnapshotHub(self.list_tasks)
        with self._translate("schema"):
            self._ensure_schema()
        logger.info("SQLiteBackend ready db=%s", self._db_path)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    @staticmethod
    @contextlib.contextmanager
    def _translate(op: str) -> Iterator[None]:
        try:
            yield
        except sqlite3.Error as e:
            raise SyncError(str(e) or e.__class__.__name__, op=op) from e

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    due_at REAL,
                    priority TEXT NOT NULL DEFAULT 'medium',
                    completed INTEGER NOT NULL DEFAULT 0,
                    created_at REAL NOT NULL
                )
                """
            )

            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("SQLiteBackend migration: added column %s", name)

            # Older databases only had (id, user_id, title, completed, created_at).
            add_col("description", "TEXT NOT NULL DEFAULT ''")
            add_col("due_at", "REAL")
            add_col("priority", "TEXT NOT NULL DEFAULT 'medium'")
            add_col("completed", "INTEGER NOT NULL DEFAULT 0")
            add_col("created_at", "REAL NOT NULL DEFAULT 0")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_user ON tasks(user_id, created_at)")
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=str(row["id"]),
            title=str(row["title"] or ""),
            description=str(row["description"] or ""),
            due_at=float(row["due_at"]) if row["due_at"] is not None else None,
            priority=Priority.from_doc(row["priority"]),
            completed=bool(row["completed"]),
            created_at=float(row["created_at"] or 0.0),
        )

    # ---- public API ----

    def list_tasks(self, user_id: str) -> list[Task]:
        with self._translate("read"):
            conn = self._get_conn()
            try:
                cur = conn.execute(
                    """
                    SELECT *
                    FROM tasks
                    WHERE user_id = ?
                    ORDER BY created_at ASC, rowid ASC
                    """,
                    (user_id,),
                )
                return [self._row_to_task(r) for r in cur.fetchall()]
            finally:
                conn.close()

    def subscribe(self, user_id: str) -> AsyncIterator[list[Task]]:
        return self._hub.stream(user_id)

    async def create(self, user_id: str, fields: dict[str, Any]) -> str:
        doc = normalize_fields(fields, creating=True)
        task_id = new_task_id()

        with self._translate("create"):
            conn = self._get_conn()
            try:
                conn.execute(
                    """
                    INSERT INTO tasks(id, user_id, title, description, due_at, priority, completed, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        task_id,
                        user_id,
                        doc["title"],
                        doc["description"],
                        doc["dueDate"],
                        doc["priority"],
                        int(doc["completed"]),
                        time.time(),
                    ),
                )
                conn.commit()
            finally:
                conn.close()

        logger.debug("Task added id=%s user=%s due=%s", task_id, user_id, doc["dueDate"])
        self._hub.publish(user_id)
        return task_id

    async def update(self, user_id: str, task_id: str, fields: dict[str, Any]) -> None:
        patch = normalize_fields(fields, creating=False)
        if not patch:
            return

        sets: list[str] = []
        params: list[Any] = []
        for key, value in patch.items():
            sets.append(f"{_COLUMNS[key]} = ?")
            params.append(int(value) if key == "completed" else value)
        params.extend([task_id, user_id])

        sql = f"UPDATE tasks SET {', '.join(sets)} WHERE id = ? AND user_id = ?"

        with self._translate("update"):
            conn = self._get_conn()
            try:
                cur = conn.execute(sql, params)
                conn.commit()
                updated = cur.rowcount
            finally:
                conn.close()

        if updated != 1:
            raise SyncError(f"task {task_id} not found", op="update")
        self._hub.publish(user_id)

    async def delete(self, user_id: str, task_id: str) -> None:
        with self._translate("delete"):
            conn = self._get_conn()
            try:
                cur = conn.execute(
                    "DELETE FROM tasks WHERE id = ? AND user_id = ?", (task_id, user_id)
                )
                conn.commit()
                deleted = cur.rowcount
            finally:
                conn.close()

        if not deleted:
            logger.debug("Delete of missing task id=%s user=%s ignored", task_id, user_id)
            return
        self._hub.publish(user_id)
