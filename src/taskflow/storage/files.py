# src/taskflow/storage/files.py

"""
Small JSON file helpers shared by the backends, the session file and the
Matrix credentials file.

Files written here may hold credentials or private task data, so they are
chmod'ed to 0600 where the filesystem allows it.
"""

from __future__ import annotations

import contextlib
import json
import os
from pathlib import Path
from typing import Any


def read_json_object(path: Path, *, missing_ok: bool = False) -> dict[str, Any] | None:
    """
    Read a JSON object from `path`.

    Returns None for a missing file when missing_ok is set. Raises OSError on
    I/O problems and ValueError when the content is not a JSON object.
    """
    try:
        raw = path.read_text("utf-8")
    except FileNotFoundError:
        if missing_ok:
            return None
        raise
    val = json.loads(raw or "{}")
    if not isinstance(val, dict):
        raise ValueError(f"{path.name}: expected a JSON object")
    return val


def write_json_atomic(path: Path, data: dict[str, Any], *, indent: int | None = None) -> None:
    """Write via a sibling temp file and os.replace; a reader never sees half a file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False, indent=indent), "utf-8")
    os.replace(tmp, path)
    with contextlib.suppress(OSError):
        os.chmod(path, 0o600)
