# src/taskflow/storage/json_backend.py

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

from ..core.errors import SyncError
from ..tasks.task_models import Task, task_from_doc
from .documents import new_task_id, normalize_fields
from .files import read_json_object, write_json_atomic
from .hub import SnapshotHub

logger = logging.getLogger(__name__)

Blob = dict[str, dict[str, dict[str, Any]]]


class JsonFileBackend:
    """
    Local key-value variant: one JSON blob holding every user's tasks.

    Layout: {user_id: {task_id: document}}. Writes go to a temp file and are
    swapped in with os.replace, so a crash never leaves a half-written blob.
    """

    def __init__(self, path: str | Path = "tasks.json") -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._hub = SnapshotHub(self.list_tasks)
        logger.info("JsonFileBackend ready path=%s", self._path)

    def close(self) -> None:
        return

    # ---- blob io ----

    def _read_all(self) -> Blob:
        try:
            return read_json_object(self._path, missing_ok=True) or {}
        except (OSError, ValueError) as e:
            raise SyncError(f"cannot read {self._path.name}", op="read") from e

    def _write_all(self, data: Blob) -> None:
        try:
            write_json_atomic(self._path, data, indent=2)
        except OSError as e:
            raise SyncError(f"cannot write {self._path.name}", op="write") from e

    # ---- public API ----

    def list_tasks(self, user_id: str) -> list[Task]:
        docs = self._read_all().get(user_id) or {}
        if not isinstance(docs, dict):
            return []
        return [task_from_doc(tid, doc) for tid, doc in docs.items() if isinstance(doc, dict)]

    def subscribe(self, user_id: str) -> AsyncIterator[list[Task]]:
        return self._hub.stream(user_id)

    async def create(self, user_id: str, fields: dict[str, Any]) -> str:
        doc = normalize_fields(fields, creating=True)
        doc["createdAt"] = time.time()

        data = self._read_all()
        task_id = new_task_id()
        data.setdefault(user_id, {})[task_id] = doc
        self._write_all(data)

        logger.debug("Task added id=%s user=%s due=%s", task_id, user_id, doc["dueDate"])
        self._hub.publish(user_id)
        return task_id

    async def update(self, user_id: str, task_id: str, fields: dict[str, Any]) -> None:
        patch = normalize_fields(fields, creating=False)
        if not patch:
            return

        data = self._read_all()
        doc = (data.get(user_id) or {}).get(task_id)
        if doc is None:
            raise SyncError(f"task {task_id} not found", op="update")
        doc.update(patch)
        self._write_all(data)

        self._hub.publish(user_id)

    async def delete(self, user_id: str, task_id: str) -> None:
        data = self._read_all()
        docs = data.get(user_id) or {}
        if docs.pop(task_id, None) is None:
            logger.debug("Delete of missing task id=%s user=%s ignored", task_id, user_id)
            return
        self._write_all(data)

        self._hub.publish(user_id)
