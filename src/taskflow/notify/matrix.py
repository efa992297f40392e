# src/taskflow/notify/matrix.py

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from nio import AsyncClient, LoginResponse, RoomSendResponse

from ..storage.files import read_json_object, write_json_atomic

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class MatrixAccount:
    """Where reminders are sent from and to."""

    homeserver: str
    user_id: str
    password: str
    room_id: str
    store_dir: Path
    device_name: str

    @property
    def credentials_file(self) -> Path:
        return self.store_dir / "credentials.json"

    @classmethod
    def from_settings(cls, settings) -> MatrixAccount:
        def text(name: str) -> str:
            return (getattr(settings, name, "") or "").strip()

        return cls(
            homeserver=text("matrix_homeserver"),
            user_id=text("matrix_user_id"),
            password=text("matrix_password"),
            room_id=text("matrix_room_id"),
            store_dir=Path(getattr(settings, "matrix_store_path", None) or ".local/taskflow/matrix"),
            device_name=f"{getattr(settings, 'app_name', 'taskflow')} reminders",
        )

    def missing(self) -> list[str]:
        names = {
            "TASKFLOW_MATRIX_HOMESERVER": self.homeserver,
            "TASKFLOW_MATRIX_USER_ID": self.user_id,
            "TASKFLOW_MATRIX_ROOM_ID": self.room_id,
        }
        return [k for k, v in names.items() if not v]


def _restore_token(client: AsyncClient, account: MatrixAccount) -> bool:
    try:
        saved = read_json_object(account.credentials_file, missing_ok=True)
    except (OSError, ValueError):
        logger.warning("Unreadable Matrix credentials at %s", account.credentials_file, exc_info=True)
        return False
    if not saved or not saved.get("access_token") or not saved.get("device_id"):
        return False

    client.access_token = str(saved["access_token"])
    client.device_id = str(saved["device_id"])
    client.user_id = str(saved.get("user_id") or account.user_id)
    return True


async def _password_login(client: AsyncClient, account: MatrixAccount) -> bool:
    if not account.password:
        logger.error("No stored Matrix token and TASKFLOW_MATRIX_PASSWORD is empty")
        return False

    resp = await client.login(password=account.password, device_name=account.device_name)
    if not isinstance(resp, LoginResponse):
        logger.error("Matrix login failed: %r", resp)
        return False

    try:
        write_json_atomic(
            account.credentials_file,
            {"access_token": resp.access_token, "user_id": resp.user_id, "device_id": resp.device_id},
        )
    except OSError:
        logger.warning("Could not store Matrix token in %s", account.credentials_file, exc_info=True)
    return True


async def create_matrix_client(settings) -> AsyncClient | None:
    """
    Return a Matrix client that can post into the reminder room, or None.

    A stored token is reused when present; otherwise one password login is
    done and its token kept in the (gitignored) data dir.
    """
    account = MatrixAccount.from_settings(settings)
    missing = account.missing()
    if missing:
        logger.error("Matrix notifier is not configured, missing: %s", ", ".join(missing))
        return None

    client = AsyncClient(account.homeserver, account.user_id)
    if _restore_token(client, account):
        logger.info("Matrix token restored for %s", client.user_id)
        return client

    if await _password_login(client, account):
        logger.info("Matrix login ok for %s (device %s)", client.user_id, client.device_id)
        return client

    await client.close()
    return None


class MatrixNotifier:
    """
    Delivers reminders as plain text messages into one Matrix room.

    notify() only schedules the send on the running loop; failures are logged.
    """

    def __init__(self, client: AsyncClient | None, room_id: str | None) -> None:
        self._client = client
        self._room_id = (room_id or "").strip() or None
        self._pending: set[asyncio.Task[None]] = set()

    def _ready(self) -> bool:
        return self._client is not None and self._room_id is not None

    def request_permission(self) -> bool:
        if not self._ready():
            logger.warning("Matrix notifier has no client or room; reminders stay in-app")
            return False
        return True

    def notify(self, title: str, body: str) -> None:
        if not self._ready():
            return
        task = asyncio.get_running_loop().create_task(self._send(f"{title}: {body}"))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, text: str) -> None:
        if self._client is None or self._room_id is None:
            return
        try:
            resp = await self._client.room_send(
                room_id=self._room_id,
                message_type="m.room.message",
                content={"msgtype": "m.text", "body": text},
                ignore_unverified_devices=True,
            )
        except Exception:
            logger.exception("Matrix send failed room=%s", self._room_id)
            return
        if not isinstance(resp, RoomSendResponse):
            logger.warning("Matrix send rejected room=%s: %r", self._room_id, resp)

    async def aclose(self, timeout: float = 5.0) -> None:
        if self._pending:
            await asyncio.wait(set(self._pending), timeout=timeout)
        if self._client is not None:
            await self._client.close()
