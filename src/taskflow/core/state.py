# src/taskflow/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..auth.anonymous import AnonymousAuth
from .ports import Notifier, TaskBackend
from .session import TaskSession


@dataclass
class AppState:
    # Settings are kept on the state for easy access from commands/connectors.
    settings: Any

    session: TaskSession
    auth: AnonymousAuth
    backend: TaskBackend
    notifier: Notifier
