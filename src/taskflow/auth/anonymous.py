# src/taskflow/auth/anonymous.py

from __future__ import annotations

import contextlib
import logging
import uuid
from collections.abc import Callable
from pathlib import Path

from ..core.ports import UserListener
from ..storage.files import read_json_object, write_json_atomic

logger = logging.getLogger(__name__)


def _load_uid(path: Path) -> str | None:
    try:
        data = read_json_object(path, missing_ok=True)
    except (OSError, ValueError):
        logger.warning("Ignoring unreadable session file %s", path, exc_info=True)
        return None
    uid = (data or {}).get("uid")
    return uid if isinstance(uid, str) and uid.strip() else None


class AnonymousAuth:
    """
    Anonymous sign-in: the principal is a random uid.

    With a session_path the uid survives restarts (the same tasks show up
    again); sign_out() forgets it, and the next sign-in mints a new one.
    """

    def __init__(self, session_path: str | Path | None = None) -> None:
        self._session_path = Path(session_path) if session_path else None
        self._uid: str | None = None
        self._listeners: list[UserListener] = []

    def current_user(self) -> str | None:
        return self._uid

    def on_change(self, callback: UserListener) -> Callable[[], None]:
        self._listeners.append(callback)
        callback(self._uid)

        def unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(callback)

        return unsubscribe

    def sign_in_anonymously(self) -> str:
        if self._uid is not None:
            return self._uid

        uid = _load_uid(self._session_path) if self._session_path else None
        if uid is None:
            uid = uuid.uuid4().hex
            if self._session_path is not None:
                try:
                    write_json_atomic(self._session_path, {"uid": uid})
                except OSError:
                    logger.warning("Failed to persist session to %s", self._session_path, exc_info=True)
            logger.info("Signed in anonymously as new user %s", uid)
        else:
            logger.info("Signed in anonymously as %s (restored)", uid)

        self._set_user(uid)
        return uid

    def sign_out(self) -> None:
        if self._uid is None:
            return
        if self._session_path is not None:
            with contextlib.suppress(FileNotFoundError):
                self._session_path.unlink()
        logger.info("Signed out %s", self._uid)
        self._set_user(None)

    def _set_user(self, uid: str | None) -> None:
        self._uid = uid
        for listener in list(self._listeners):
            try:
                listener(uid)
            except Exception:
                logger.exception("Auth listener failed")
