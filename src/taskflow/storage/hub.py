# src/taskflow/storage/hub.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable

from ..core.errors import SyncError
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)


class SnapshotHub:
    """
    Per-user snapshot fan-out shared by the storage backends.

    Every subscriber gets the current list right away, then one fresh list
    after each publish() for its user. Bursts of writes are coalesced into a
    single snapshot. A failed load, the first one included, is logged and
    skipped; the subscriber keeps its last good snapshot and stays subscribed.
    """

    def __init__(self, load: Callable[[str], list[Task]]) -> None:
        self._load = load
        self._queues: dict[str, set[asyncio.Queue[None]]] = {}

    def subscriber_count(self, user_id: str | None = None) -> int:
        if user_id is not None:
            return len(self._queues.get(user_id, ()))
        return sum(len(q) for q in self._queues.values())

    def publish(self, user_id: str) -> None:
        for queue in list(self._queues.get(user_id, ())):
            queue.put_nowait(None)

    async def stream(self, user_id: str) -> AsyncIterator[list[Task]]:
        queue: asyncio.Queue[None] = asyncio.Queue()
        self._queues.setdefault(user_id, set()).add(queue)
        logger.debug("Subscriber added user=%s total=%s", user_id, self.subscriber_count(user_id))
        try:
            first_load = True
            while True:
                if not first_load:
                    await queue.get()
                    while not queue.empty():
                        queue.get_nowait()
                first_load = False
                try:
                    snapshot = self._load(user_id)
                except SyncError:
                    logger.warning("Snapshot load failed user=%s; waiting for next change", user_id, exc_info=True)
                    continue
                yield snapshot
        finally:
            subs = self._queues.get(user_id)
            if subs is not None:
                subs.discard(queue)
                if not subs:
                    self._queues.pop(user_id, None)
            logger.debug("Subscriber removed user=%s", user_id)
