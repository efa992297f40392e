# src/taskflow/core/session.py

from __future__ import annotations

"""
Task session: the explicit context object the UI talks to.

It owns the in-memory store and the reminder state, and is handed its
collaborators (backend, auth, notifier, clock) instead of importing them.

Lifecycle per signed-in user:
- one snapshot subscription (an asyncio task consuming backend.subscribe()),
- one periodic tick (clock.every()) that re-checks reminders as time passes.
Both are released before a new user is wired in and on close().
"""

import asyncio
import contextlib
import logging
from collections.abc import Callable
from datetime import tzinfo

from ..tasks.reminders import ReminderEngine
from ..tasks.task_models import Priority, ReminderEvent, Tab, Task, TaskView
from ..tasks.task_store import TaskStore
from ..tasks.views import DEFAULT_DUE_SOON_MINUTES, build_view
from .errors import SyncError, ValidationError, friendly_error_message
from .ports import AuthProvider, Cancellable, Clock, Notifier, TaskBackend

logger = logging.getLogger(__name__)

Toast = Callable[[str], None]
ViewListener = Callable[[TaskView], None]


class TaskSession:
    def __init__(
        self,
        *,
        backend: TaskBackend,
        auth: AuthProvider,
        notifier: Notifier,
        clock: Clock,
        due_soon_minutes: float = DEFAULT_DUE_SOON_MINUTES,
        reminder_interval_seconds: float = 60.0,
        toast: Toast | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        self._backend = backend
        self._auth = auth
        self._clock = clock
        self._toast = toast
        self._tz = tz
        self._interval = float(reminder_interval_seconds)

        self.store = TaskStore()
        self.reminders = ReminderEngine(notifier, threshold_minutes=due_soon_minutes, toast=toast)
        self.tab = Tab.ALL

        self._user_id: str | None = None
        self._subscription: asyncio.Task[None] | None = None
        self._timer: Cancellable | None = None
        self._auth_unsubscribe: Callable[[], None] | None = None
        self._listeners: list[ViewListener] = []

    # ---- lifecycle ----

    @property
    def user_id(self) -> str | None:
        return self._user_id

    def start(self) -> None:
        """Ask for notification permission and follow the auth state. Call from the event loop."""
        self.reminders.request_permission()
        if self._auth_unsubscribe is None:
            self._auth_unsubscribe = self._auth.on_change(self._on_user_changed)

    async def close(self) -> None:
        if self._auth_unsubscribe is not None:
            self._auth_unsubscribe()
            self._auth_unsubscribe = None

        released = (self._subscription, self._timer)
        self._teardown()
        for handle in released:
            if isinstance(handle, asyncio.Future):
                with contextlib.suppress(asyncio.CancelledError):
                    await handle
        logger.debug("Session closed user=%s", self._user_id)

    def add_listener(self, listener: ViewListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return remove

    def _teardown(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def _subscribed(self) -> bool:
        return self._subscription is not None and not self._subscription.done()

    def _subscribe(self, user_id: str) -> None:
        loop = asyncio.get_running_loop()
        self._subscription = loop.create_task(self._consume(user_id), name=f"taskflow-sync-{user_id}")

    def _on_user_changed(self, user_id: str | None) -> None:
        if user_id == self._user_id and (user_id is None or self._subscribed()):
            return

        logger.info("User changed %s -> %s", self._user_id, user_id)
        self._teardown()
        self.store.clear(user_id=user_id)
        self._user_id = user_id

        if user_id is None:
            self._emit_view()
            return

        self._subscribe(user_id)
        self._timer = self._clock.every(self._interval, self._on_tick)

    async def _consume(self, user_id: str) -> None:
        try:
            async for snapshot in self._backend.subscribe(user_id):
                self._apply_snapshot(user_id, snapshot)
        except SyncError as e:
            logger.warning("Snapshot subscription failed user=%s: %s", user_id, e)
            self._notice(friendly_error_message(e))
        except Exception as e:
            logger.exception("Snapshot subscription crashed user=%s", user_id)
            self._notice(friendly_error_message(e))

    def _apply_snapshot(self, user_id: str, snapshot: list[Task]) -> None:
        if user_id != self._user_id:
            return
        self.store.replace(snapshot, user_id=user_id)
        self.check_reminders()
        self._emit_view()

    def _on_tick(self) -> None:
        if self._user_id is not None and self._subscription is not None and self._subscription.done():
            logger.info("Snapshot subscription ended; resubscribing user=%s", self._user_id)
            self._subscribe(self._user_id)
        self.check_reminders()
        self._emit_view()

    # ---- derived views ----

    def now(self) -> float:
        return self._clock.now()

    def check_reminders(self) -> list[ReminderEvent]:
        return self.reminders.check(self.store.tasks(), self._clock.now())

    def view(self, tab: Tab | str | None = None, now: float | None = None) -> TaskView:
        return build_view(
            self.store.tasks(),
            self.tab if tab is None else tab,
            self._clock.now() if now is None else now,
            tz=self._tz,
            threshold_minutes=self.reminders.threshold_minutes,
        )

    def _emit_view(self) -> None:
        if not self._listeners:
            return
        view = self.view()
        for listener in list(self._listeners):
            try:
                listener(view)
            except Exception:
                logger.exception("View listener failed")

    # ---- actions ----

    async def add_task(
        self,
        title: str,
        *,
        description: str = "",
        due_at: float | None = None,
        priority: Priority | str = Priority.MEDIUM,
    ) -> str | None:
        """
        Create a task through the backend and return its id.

        The new task shows up in the store with the next snapshot, not before.
        Returns None when nobody is signed in or the backend write failed.
        """
        title = (title or "").strip()
        if not title:
            raise ValidationError("title must not be empty")
        try:
            priority = Priority(str(priority).strip().lower())
        except ValueError as e:
            raise ValidationError(f"unknown priority: {priority}") from e

        user_id = self._require_user()
        if user_id is None:
            return None

        fields = {
            "title": title,
            "description": (description or "").strip(),
            "dueDate": due_at,
            "priority": priority.value,
            "completed": False,
        }
        try:
            task_id = await self._backend.create(user_id, fields)
        except SyncError as e:
            self._sync_failed(e)
            return None
        logger.info("Task created id=%s user=%s", task_id, user_id)
        return task_id

    async def toggle_task(self, task_id: str) -> bool:
        user_id = self._require_user()
        if user_id is None:
            return False
        task = self.store.get(task_id)
        if task is None:
            raise ValidationError(f"no such task: {task_id}")
        try:
            await self._backend.update(user_id, task_id, {"completed": not task.completed})
        except SyncError as e:
            self._sync_failed(e)
            return False
        return True

    async def delete_task(self, task_id: str) -> bool:
        user_id = self._require_user()
        if user_id is None:
            return False
        try:
            await self._backend.delete(user_id, task_id)
        except SyncError as e:
            self._sync_failed(e)
            return False
        logger.info("Task deleted id=%s user=%s", task_id, user_id)
        return True

    # ---- helpers ----

    def _require_user(self) -> str | None:
        if self._user_id is None:
            logger.warning("Action ignored: not signed in")
            self._notice("Not signed in.")
        return self._user_id

    def _sync_failed(self, error: SyncError) -> None:
        logger.warning("Backend write failed op=%s: %s", error.op, error.message)
        self._notice(friendly_error_message(error))

    def _notice(self, text: str) -> None:
        if self._toast is None:
            return
        try:
            self._toast(text)
        except Exception:
            logger.debug("Toast callback failed.", exc_info=True)
