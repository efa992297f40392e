# src/taskflow/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete backend/auth/notifier/clock into a TaskSession.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..auth.anonymous import AnonymousAuth
from ..config import get_settings
from ..core.clock import SystemClock
from ..core.ports import Notifier, TaskBackend
from ..core.session import TaskSession
from ..core.state import AppState
from ..notify.console import ConsoleNotifier, NullNotifier
from ..storage.json_backend import JsonFileBackend
from ..storage.sqlite_backend import SQLiteBackend

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_json_path.parent.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.session_path.parent.mkdir(parents=True, exist_ok=True)


def create_backend(settings) -> TaskBackend:
    if settings.backend == "sqlite":
        return SQLiteBackend(settings.tasks_db_path)
    return JsonFileBackend(settings.tasks_json_path)


async def create_notifier(settings, *, write: Callable[[str], None] = print) -> Notifier:
    kind = getattr(settings, "notifier", "console")

    if kind == "matrix":
        # nio is only needed for this path.
        from ..notify.matrix import MatrixNotifier, create_matrix_client

        client = await create_matrix_client(settings)
        if client is None:
            logger.warning("Matrix notifier unavailable; falling back to console notifications")
            return ConsoleNotifier(write=write)
        return MatrixNotifier(client, settings.matrix_room_id)

    if kind == "none":
        return NullNotifier()

    return ConsoleNotifier(write=write)


async def create_initial_state(
    *,
    settings=None,
    toast: Callable[[str], None] | None = None,
    write: Callable[[str], None] = print,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings(). Must run inside the event loop.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    backend = create_backend(settings)
    auth = AnonymousAuth(settings.session_path)
    notifier = await create_notifier(settings, write=write)

    session = TaskSession(
        backend=backend,
        auth=auth,
        notifier=notifier,
        clock=SystemClock(),
        due_soon_minutes=settings.due_soon_minutes,
        reminder_interval_seconds=settings.reminder_interval_seconds,
        toast=toast,
    )
    session.start()

    if getattr(settings, "auto_sign_in", True):
        auth.sign_in_anonymously()

    return AppState(settings=settings, session=session, auth=auth, backend=backend, notifier=notifier)


async def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        await state.session.close()
    except Exception:
        logger.exception("Session close failed.")

    try:
        state.backend.close()
    except Exception:
        logger.debug("Backend close failed.", exc_info=True)

    aclose = getattr(state.notifier, "aclose", None)
    if aclose is not None:
        try:
            await aclose()
        except Exception:
            logger.debug("Notifier close failed.", exc_info=True)
