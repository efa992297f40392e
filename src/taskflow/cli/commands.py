# src/taskflow/cli/commands.py

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta

from ..core.errors import TaskflowError, ValidationError, friendly_error_message
from ..core.state import AppState
from ..tasks.task_models import Priority, Tab
from .render import SHORT_ID, format_view

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]

logger = logging.getLogger(__name__)

_RELATIVE_DUE = re.compile(r"^\+(\d+)([mhd])$")
_CLOCK_DUE = re.compile(r"^(\d{1,2}):(\d{2})$")
_UNITS = {"m": "minutes", "h": "hours", "d": "days"}
_PRIORITY_ALIASES = {"l": Priority.LOW, "m": Priority.MEDIUM, "h": Priority.HIGH}


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, /list, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return await handler(state, args, emit)
        except TaskflowError as e:
            logger.debug("Command /%s rejected: %s", name, e)
            return friendly_error_message(e)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument parsing ----


def parse_due(raw: str, now: float) -> float:
    """
    Parse a due date as typed after '@'.

    Accepted: "+30m" / "+2h" / "+1d" (relative), "HH:MM" (today, local time),
    or any ISO 8601 date/datetime (naive values are local time).
    """
    raw = raw.strip()
    base = datetime.fromtimestamp(now).astimezone()

    m = _RELATIVE_DUE.match(raw)
    if m:
        delta = timedelta(**{_UNITS[m.group(2)]: int(m.group(1))})
        return (base + delta).timestamp()

    m = _CLOCK_DUE.match(raw)
    if m:
        hour, minute = int(m.group(1)), int(m.group(2))
        if hour > 23 or minute > 59:
            raise ValidationError(f"bad time: {raw}")
        return base.replace(hour=hour, minute=minute, second=0, microsecond=0).timestamp()

    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as e:
        raise ValidationError(f"bad due date: {raw} (try +30m, 18:00 or 2026-10-20T09:00)") from e
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed.timestamp()


def parse_priority(raw: str) -> Priority:
    key = raw.strip().lower()
    if key in _PRIORITY_ALIASES:
        return _PRIORITY_ALIASES[key]
    try:
        return Priority(key)
    except ValueError as e:
        raise ValidationError(f"bad priority: {raw} (low, medium or high)") from e


def parse_add_args(
    args: list[str], now: float
) -> tuple[str, str, float | None, Priority]:
    """
    Split "/add" arguments into (title, description, due_at, priority).

    Syntax: <title words> [@due] [!priority] [-- description words]
    """
    if "--" in args:
        cut = args.index("--")
        head, description = args[:cut], " ".join(args[cut + 1 :])
    else:
        head, description = args, ""

    title_words: list[str] = []
    due_at: float | None = None
    priority = Priority.MEDIUM

    for word in head:
        if word.startswith("@") and len(word) > 1:
            due_at = parse_due(word[1:], now)
        elif word.startswith("!") and len(word) > 1:
            priority = parse_priority(word[1:])
        else:
            title_words.append(word)

    return " ".join(title_words), description, due_at, priority


def _resolve(state: AppState, args: list[str], usage: str):
    if not args:
        raise ValidationError(f"usage: {usage}")
    task = state.session.store.find(args[0])
    if task is None:
        raise ValidationError(f"no single task matches id '{args[0]}'")
    return task


# ---- handlers ----


async def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


async def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    title, description, due_at, priority = parse_add_args(args, state.session.now())
    return await add_from_input(state, title, description=description, due_at=due_at, priority=priority)


async def add_from_input(
    state: AppState,
    title: str,
    *,
    description: str = "",
    due_at: float | None = None,
    priority: Priority = Priority.MEDIUM,
) -> str:
    task_id = await state.session.add_task(
        title, description=description, due_at=due_at, priority=priority
    )
    if task_id is None:
        return "Task was not saved."
    return f"Added {task_id[:SHORT_ID]}: {title.strip()}"


async def cmd_list(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    session = state.session
    if args:
        try:
            session.tab = Tab(args[0].lower())
        except ValueError as e:
            tabs = ", ".join(t.value for t in Tab)
            raise ValidationError(f"unknown tab '{args[0]}' ({tabs})") from e
    now = session.now()
    return format_view(session.view(now=now), now, threshold_minutes=session.reminders.threshold_minutes)


async def cmd_done(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    task = _resolve(state, args, "/done <id>")
    if not await state.session.toggle_task(task.id):
        return "Task was not updated."
    return f"{'Reopened' if task.completed else 'Completed'}: {task.title}"


async def cmd_rm(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    task = _resolve(state, args, "/rm <id>")
    if not await state.session.delete_task(task.id):
        return "Task was not deleted."
    return f"Deleted: {task.title}"


async def cmd_stats(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    stats = state.session.view().stats
    return f"{stats.pending} pending, {stats.done} done"


async def cmd_whoami(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    user_id = state.auth.current_user()
    if user_id is None:
        return "Not signed in. Use /login."
    return f"Signed in anonymously as {user_id} ({state.settings.backend} backend)."


async def cmd_login(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return f"Signed in as {state.auth.sign_in_anonymously()}."


async def cmd_logout(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if state.auth.current_user() is None:
        return "Already signed out."
    state.auth.sign_out()
    return "Signed out. Anonymous tasks of that session are no longer reachable."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add <title> [@+30m|@18:00|@2026-10-20T09:00] [!low|!high] [-- notes].",
    aliases=["a"],
)
registry.register(
    "list", cmd_list, help_text="List tasks: /list [all|today|upcoming|overdue].", aliases=["ls", "l"]
)
registry.register("done", cmd_done, help_text="Toggle completion: /done <id>.", aliases=["x"])
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <id>.", aliases=["del"])
registry.register("stats", cmd_stats, help_text="Show pending/done counters.")
registry.register("whoami", cmd_whoami, help_text="Show the signed-in anonymous user.")
registry.register("login", cmd_login, help_text="Sign in anonymously.")
registry.register("logout", cmd_logout, help_text="Sign out (tasks are kept per anonymous user).")
