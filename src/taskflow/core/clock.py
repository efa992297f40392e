# src/taskflow/core/clock.py

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


async def _run_every(interval_seconds: float, callback: Callable[[], None]) -> None:
    """
    Simple polling loop: sleep, call, repeat.

    Callback errors are logged and do not stop the loop.
    To stop it, cancel the task.
    """
    sleep_s = max(0.5, float(interval_seconds))
    while True:
        await asyncio.sleep(sleep_s)
        try:
            callback()
        except Exception:
            logger.exception("Periodic callback failed")


class SystemClock:
    """Wall clock + asyncio timers. Must be used from inside a running event loop."""

    def now(self) -> float:
        return time.time()

    def every(self, interval_seconds: float, callback: Callable[[], None]) -> asyncio.Task[None]:
        return asyncio.get_running_loop().create_task(
            _run_every(interval_seconds, callback), name="taskflow-tick"
        )
