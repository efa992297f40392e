# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskflow.auth.anonymous import AnonymousAuth
from taskflow.core.session import TaskSession
from taskflow.core.state import AppState

from .fakes import FakeBackend, FakeClock, FakeNotifier


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskflow-test",
        backend="json",
        data_dir=tmp_path,
        tasks_json_path=tmp_path / "tasks.json",
        tasks_db_path=tmp_path / "tasks.sqlite3",
        session_path=tmp_path / "session.json",
        due_soon_minutes=15.0,
        reminder_interval_seconds=60.0,
        notifier="console",
        auto_sign_in=False,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def backend(clock: FakeClock) -> FakeBackend:
    return FakeBackend(clock)


@pytest.fixture()
def auth() -> AnonymousAuth:
    return AnonymousAuth()


@pytest.fixture()
def toasts() -> list[str]:
    return []


@pytest.fixture()
def session(
    backend: FakeBackend,
    auth: AnonymousAuth,
    notifier: FakeNotifier,
    clock: FakeClock,
    toasts: list[str],
) -> TaskSession:
    """
    TaskSession wired with deterministic fakes (not started).

    start() needs a running loop, so async tests call it themselves.
    """
    return TaskSession(
        backend=backend,
        auth=auth,
        notifier=notifier,
        clock=clock,
        due_soon_minutes=15,
        reminder_interval_seconds=60,
        toast=toasts.append,
    )


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    session: TaskSession,
    auth: AnonymousAuth,
    backend: FakeBackend,
    notifier: FakeNotifier,
) -> AppState:
    return AppState(settings=settings, session=session, auth=auth, backend=backend, notifier=notifier)
