# src/taskflow/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKFLOW"

BACKENDS = ("json", "sqlite")
NOTIFIERS = ("console", "matrix", "none")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_choice(name: str, default: str, choices: tuple[str, ...]) -> str:
    raw = _env(name, default).strip().lower()
    return raw if raw in choices else default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Storage ----
    backend: str
    data_dir: Path
    tasks_json_path: Path
    tasks_db_path: Path
    session_path: Path

    # ---- Reminders ----
    due_soon_minutes: float
    reminder_interval_seconds: float
    notifier: str

    # ---- Matrix (reminder delivery) ----
    matrix_homeserver: str
    matrix_user_id: str
    matrix_password: str
    matrix_room_id: str
    matrix_store_path: Path

    # ---- Console ----
    console_enabled: bool
    auto_sign_in: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskflow") or "taskflow"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        backend = _env_choice(_k("BACKEND"), "json", BACKENDS)
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskflow"))
        tasks_json_path = _env_path(_k("TASKS_JSON_PATH"), data_dir / "tasks.json")
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")
        session_path = _env_path(_k("SESSION_PATH"), data_dir / "session.json")

        due_soon_minutes = max(0.0, _env_float(_k("DUE_SOON_MINUTES"), 15.0))
        reminder_interval_seconds = max(1.0, _env_float(_k("REMINDER_INTERVAL_SECONDS"), 60.0))
        notifier = _env_choice(_k("NOTIFIER"), "console", NOTIFIERS)

        matrix_homeserver = _env(_k("MATRIX_HOMESERVER")).strip()
        matrix_user_id = _env(_k("MATRIX_USER_ID")).strip()
        matrix_password = _env(_k("MATRIX_PASSWORD")).strip()
        matrix_room_id = _env(_k("MATRIX_ROOM_ID")).strip()
        matrix_store_path = _env_path(_k("MATRIX_STORE_PATH"), data_dir / "matrix")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)
        auto_sign_in = _env_bool(_k("AUTO_SIGN_IN"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            backend=backend,
            data_dir=data_dir,
            tasks_json_path=tasks_json_path,
            tasks_db_path=tasks_db_path,
            session_path=session_path,
            due_soon_minutes=due_soon_minutes,
            reminder_interval_seconds=reminder_interval_seconds,
            notifier=notifier,
            matrix_homeserver=matrix_homeserver,
            matrix_user_id=matrix_user_id,
            matrix_password=matrix_password,
            matrix_room_id=matrix_room_id,
            matrix_store_path=matrix_store_path,
            console_enabled=console_enabled,
            auto_sign_in=auto_sign_in,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
