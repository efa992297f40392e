# src/taskflow/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState (session + collaborators), then runs the
console REPL until /exit, EOF or a signal. Without the console, the app keeps
running for reminders only.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal

from ..cli.bootstrap import create_initial_state, shutdown_state
from ..config import get_settings
from ..connectors.console_connector import print_notice, run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(settings) -> None:
    state = await create_initial_state(settings=settings, toast=print_notice)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        # Not supported on every platform (e.g. Windows event loops).
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(signum, stop.set)

    try:
        if settings.console_enabled:
            console = asyncio.create_task(run_console_loop(state), name="taskflow-console")
            stopper = asyncio.create_task(stop.wait(), name="taskflow-stop")
            _, pending = await asyncio.wait({console, stopper}, return_when=asyncio.FIRST_COMPLETED)
            for t in pending:
                t.cancel()
            for t in pending:
                with contextlib.suppress(asyncio.CancelledError):
                    await t
        else:
            logger.info("Console disabled. Running reminders only. Press Ctrl+C to stop.")
            await stop.wait()
    finally:
        await shutdown_state(state)


def main() -> None:
    settings = get_settings()

    log_file = setup_logging(log_dir=settings.data_dir, console_level=getattr(settings, "log_level", "INFO"))

    logger.info("Starting %s (log file: %s)...", settings.app_name, log_file)
    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        pass
    logger.info("Bye.")


if __name__ == "__main__":
    main()
