# tests/test_backends.py

from __future__ import annotations

import asyncio
import json
import os
import sqlite3
from pathlib import Path

import pytest

from taskflow.core.errors import SyncError, ValidationError
from taskflow.storage.files import read_json_object, write_json_atomic
from taskflow.storage.json_backend import JsonFileBackend
from taskflow.storage.sqlite_backend import SQLiteBackend
from taskflow.tasks.task_models import Priority


@pytest.fixture(params=["json", "sqlite"])
def store_backend(request, tmp_path: Path):
    if request.param == "json":
        return JsonFileBackend(tmp_path / "tasks.json")
    return SQLiteBackend(tmp_path / "tasks.sqlite3")


@pytest.mark.asyncio
async def test_create_applies_defaults_and_keeps_order(store_backend) -> None:
    first = await store_backend.create("u1", {"title": "  Buy milk  "})
    second = await store_backend.create(
        "u1", {"title": "Call mom", "dueDate": 1_800_000_000, "priority": "HIGH", "description": "sunday"}
    )

    tasks = store_backend.list_tasks("u1")
    assert [t.id for t in tasks] == [first, second]

    milk, call = tasks
    assert milk.title == "Buy milk"
    assert milk.description == ""
    assert milk.due_at is None
    assert milk.priority == Priority.MEDIUM
    assert milk.completed is False
    assert milk.created_at > 0

    assert call.due_at == 1_800_000_000.0
    assert call.priority == Priority.HIGH
    assert call.description == "sunday"


@pytest.mark.asyncio
async def test_create_rejects_blank_title_and_unknown_fields(store_backend) -> None:
    with pytest.raises(ValidationError):
        await store_backend.create("u1", {"title": "   "})
    with pytest.raises(ValidationError):
        await store_backend.create("u1", {"title": "x", "createdAt": 1})
    assert store_backend.list_tasks("u1") == []


@pytest.mark.asyncio
@pytest.mark.parametrize("due", [float("nan"), float("inf"), "-inf", "nan"])
async def test_non_finite_due_date_is_rejected(store_backend, due) -> None:
    with pytest.raises(ValidationError):
        await store_backend.create("u1", {"title": "never", "dueDate": due})
    assert store_backend.list_tasks("u1") == []

    tid = await store_backend.create("u1", {"title": "kept", "dueDate": 100})
    with pytest.raises(ValidationError):
        await store_backend.update("u1", tid, {"dueDate": due})
    assert store_backend.list_tasks("u1")[0].due_at == 100.0


@pytest.mark.asyncio
async def test_update_and_delete(store_backend) -> None:
    tid = await store_backend.create("u1", {"title": "a"})

    await store_backend.update("u1", tid, {"completed": True})
    assert store_backend.list_tasks("u1")[0].completed is True

    with pytest.raises(SyncError):
        await store_backend.update("u1", "missing", {"completed": True})
    with pytest.raises(ValidationError):
        await store_backend.update("u1", tid, {"createdAt": 5})

    # another user's task is not reachable
    with pytest.raises(SyncError):
        await store_backend.update("u2", tid, {"completed": False})
    await store_backend.delete("u2", tid)
    assert len(store_backend.list_tasks("u1")) == 1

    await store_backend.delete("u1", tid)
    await store_backend.delete("u1", tid)  # missing: no-op
    assert store_backend.list_tasks("u1") == []


@pytest.mark.asyncio
async def test_users_are_isolated(store_backend) -> None:
    await store_backend.create("u1", {"title": "mine"})
    await store_backend.create("u2", {"title": "theirs"})

    assert [t.title for t in store_backend.list_tasks("u1")] == ["mine"]
    assert [t.title for t in store_backend.list_tasks("u2")] == ["theirs"]
    assert store_backend.list_tasks("nobody") == []


@pytest.mark.asyncio
async def test_subscribe_yields_current_then_fresh_snapshots(store_backend) -> None:
    await store_backend.create("u1", {"title": "existing"})

    stream = store_backend.subscribe("u1")
    first = await anext(stream)
    assert [t.title for t in first] == ["existing"]

    await store_backend.create("u1", {"title": "new"})
    await store_backend.create("u2", {"title": "other user"})
    second = await asyncio.wait_for(anext(stream), timeout=1.0)
    assert [t.title for t in second] == ["existing", "new"]

    assert store_backend._hub.subscriber_count("u1") == 1
    await stream.aclose()
    assert store_backend._hub.subscriber_count() == 0


@pytest.mark.asyncio
async def test_subscribe_coalesces_bursts(store_backend) -> None:
    stream = store_backend.subscribe("u1")
    assert await anext(stream) == []

    for i in range(3):
        await store_backend.create("u1", {"title": f"t{i}"})

    snapshot = await asyncio.wait_for(anext(stream), timeout=1.0)
    assert len(snapshot) == 3

    pending = asyncio.ensure_future(anext(stream))
    await asyncio.sleep(0.01)
    assert not pending.done()
    pending.cancel()
    with pytest.raises(asyncio.CancelledError):
        await pending
    await stream.aclose()


@pytest.mark.asyncio
async def test_json_blob_layout(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    backend = JsonFileBackend(path)
    tid = await backend.create("u1", {"title": "a", "dueDate": 10})

    data = json.loads(path.read_text("utf-8"))
    assert set(data) == {"u1"}
    doc = data["u1"][tid]
    assert set(doc) == {"title", "description", "dueDate", "priority", "completed", "createdAt"}
    assert doc["dueDate"] == 10.0
    assert doc["priority"] == "medium"


def test_json_corrupt_blob_raises_sync_error(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    path.write_text("{not json", "utf-8")
    backend = JsonFileBackend(path)
    with pytest.raises(SyncError):
        backend.list_tasks("u1")


def test_sqlite_migrates_old_schema(tmp_path: Path) -> None:
    db = tmp_path / "old.sqlite3"
    conn = sqlite3.connect(db)
    conn.execute(
        "CREATE TABLE tasks (id TEXT PRIMARY KEY, user_id TEXT NOT NULL, title TEXT NOT NULL, "
        "completed INTEGER NOT NULL DEFAULT 0, created_at REAL NOT NULL)"
    )
    conn.execute("INSERT INTO tasks VALUES ('t1', 'u1', 'legacy', 1, 5.0)")
    conn.commit()
    conn.close()

    backend = SQLiteBackend(db)
    (task,) = backend.list_tasks("u1")
    assert task.title == "legacy"
    assert task.completed is True
    assert task.priority == Priority.MEDIUM
    assert task.due_at is None
    assert task.description == ""
    assert backend.list_tasks("u2") == []


def test_json_files_are_private_and_replaced_whole(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "blob.json"
    write_json_atomic(target, {"a": 1})
    write_json_atomic(target, {"b": 2}, indent=2)

    assert read_json_object(target) == {"b": 2}
    assert list(target.parent.iterdir()) == [target]
    if os.name == "posix":
        assert target.stat().st_mode & 0o777 == 0o600

    assert read_json_object(tmp_path / "absent.json", missing_ok=True) is None
    (tmp_path / "list.json").write_text("[1]", "utf-8")
    with pytest.raises(ValueError):
        read_json_object(tmp_path / "list.json")
