# tests/fakes.py

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from typing import Any

from taskflow.core.errors import SyncError
from taskflow.core.ports import Notifier
from taskflow.storage.hub import SnapshotHub
from taskflow.tasks.task_models import Task, task_from_doc

BASE_TS = 1_790_000_000.0


async def settle(rounds: int = 10) -> None:
    """Let queued callbacks / subscription tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@dataclass(slots=True)
class FakeTimer:
    interval: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeClock:
    """
    Deterministic Clock: time only moves on advance(), which also fires the
    callbacks of every active timer once (one tick).
    """

    def __init__(self, now: float = BASE_TS) -> None:
        self.current = now
        self.timers: list[FakeTimer] = []

    def now(self) -> float:
        return self.current

    def every(self, interval_seconds: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(interval_seconds, callback)
        self.timers.append(timer)
        return timer

    def active_timers(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        self.current += seconds
        for timer in self.active_timers():
            timer.callback()


@dataclass(slots=True)
class SentNotification:
    title: str
    body: str


@dataclass(slots=True)
class FakeNotifier(Notifier):
    """
    Fake Notifier used by reminder/session tests.
    """

    granted: bool = True
    fail_with: Exception | None = None
    sent: list[SentNotification] = field(default_factory=list)

    def request_permission(self) -> bool:
        return self.granted

    def notify(self, title: str, body: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(SentNotification(title=title, body=body))


class FakeBackend:
    """
    In-memory TaskBackend.

    Records every write in `calls`; `fail_writes` makes writes raise SyncError.
    Snapshots are fanned out through the real SnapshotHub.
    """

    def __init__(self, clock: FakeClock | None = None) -> None:
        self.clock = clock or FakeClock()
        self.docs: dict[str, dict[str, dict[str, Any]]] = {}
        self.calls: list[tuple[str, str, Any]] = []
        self.fail_writes = False
        self.fail_loads = 0
        self.fail_subscribes = 0
        self.subscribe_count = 0
        self.hub = SnapshotHub(self.snapshot)
        self._seq = 0

    def snapshot(self, user_id: str) -> list[Task]:
        if self.fail_loads > 0:
            self.fail_loads -= 1
            raise SyncError("database is locked", op="read")
        return [task_from_doc(tid, doc) for tid, doc in self.docs.get(user_id, {}).items()]

    def seed(self, user_id: str, task_id: str, **doc: Any) -> None:
        doc.setdefault("createdAt", self.clock.now())
        self.docs.setdefault(user_id, {})[task_id] = doc
        self.hub.publish(user_id)

    def subscribe(self, user_id: str) -> AsyncIterator[list[Task]]:
        self.subscribe_count += 1
        if self.fail_subscribes > 0:
            self.fail_subscribes -= 1
            return self._detached_stream()
        return self.hub.stream(user_id)

    async def _detached_stream(self) -> AsyncIterator[list[Task]]:
        raise SyncError("listener detached", op="subscribe")
        yield []  # makes this an async generator

    async def create(self, user_id: str, fields: dict[str, Any]) -> str:
        self.calls.append(("create", user_id, dict(fields)))
        if self.fail_writes:
            raise SyncError("backend offline", op="create")
        self._seq += 1
        task_id = f"task{self._seq:03d}"
        self.docs.setdefault(user_id, {})[task_id] = {**fields, "createdAt": self.clock.now()}
        self.hub.publish(user_id)
        return task_id

    async def update(self, user_id: str, task_id: str, fields: dict[str, Any]) -> None:
        self.calls.append(("update", user_id, (task_id, dict(fields))))
        if self.fail_writes:
            raise SyncError("backend offline", op="update")
        doc = self.docs.get(user_id, {}).get(task_id)
        if doc is None:
            raise SyncError(f"task {task_id} not found", op="update")
        doc.update(fields)
        self.hub.publish(user_id)

    async def delete(self, user_id: str, task_id: str) -> None:
        self.calls.append(("delete", user_id, task_id))
        if self.fail_writes:
            raise SyncError("backend offline", op="delete")
        if self.docs.get(user_id, {}).pop(task_id, None) is not None:
            self.hub.publish(user_id)

    def close(self) -> None:
        return
