# src/taskflow/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime

from ..cli.commands import add_from_input
from ..cli.commands import registry as command_registry
from ..core.errors import TaskflowError, friendly_error_message
from ..core.state import AppState
from ..tasks.task_models import TaskStats, TaskView

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def print_notice(text: str) -> None:
    """In-app toast: sync problems and reminders without notification permission."""
    _print_ts(f"[notice] {text}")


def _read_stdin(loop: asyncio.AbstractEventLoop, lines: asyncio.Queue[str | None]) -> None:
    """
    Blocking stdin reader on a daemon thread.

    Lines are handed to the event loop; None means EOF. All session state is
    touched on the loop thread only.
    """
    while True:
        try:
            line: str | None = input(">>> ")
        except EOFError:
            line = None
        try:
            loop.call_soon_threadsafe(lines.put_nowait, line)
        except RuntimeError:
            # Loop already closed (shutdown in progress).
            return
        if line is None:
            return


class _CountersPrinter:
    """Print a short status line whenever the pending/done counters change."""

    def __init__(self) -> None:
        self._last: TaskStats | None = None

    def __call__(self, view: TaskView) -> None:
        if view.stats == self._last:
            return
        self._last = view.stats
        _print_ts(f"[sync] {view.stats.pending} pending, {view.stats.done} done")


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (backend=%s).", state.settings.backend)
    _print_ts("[CONSOLE] Type a task to add it. Use /help for commands. Use /exit to quit.\n")

    loop = asyncio.get_running_loop()
    lines: asyncio.Queue[str | None] = asyncio.Queue()
    threading.Thread(target=_read_stdin, args=(loop, lines), name="taskflow-stdin", daemon=True).start()

    remove_listener = state.session.add_listener(_CountersPrinter())

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    try:
        while True:
            raw = await lines.get()
            if raw is None:
                logger.info("Console EOF received, exiting.")
                break

            user_input = raw.strip()
            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            try:
                reply = await command_registry.handle(state, user_input, emit=emit)
                if reply is None:
                    # Plain text works like the input box: it becomes a new task.
                    reply = await add_from_input(state, user_input)
            except TaskflowError as e:
                reply = friendly_error_message(e)
            except Exception:
                logger.exception("Command handler crashed.")
                reply = "Internal error while handling a command."

            _print_ts(reply)
    finally:
        remove_listener()
        logger.info("Console connector finished.")
