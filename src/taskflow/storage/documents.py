# src/taskflow/storage/documents.py

from __future__ import annotations

import math
import uuid
from typing import Any

from ..core.errors import ValidationError
from ..tasks.task_models import MUTABLE_DOC_FIELDS, Priority


def new_task_id() -> str:
    return uuid.uuid4().hex


def normalize_fields(fields: dict[str, Any], *, creating: bool) -> dict[str, Any]:
    """
    Validate and coerce document fields coming from the session.

    createdAt and the id are owned by the backend and can never be written.
    On create, a non-blank title is required.
    """
    unknown = set(fields) - MUTABLE_DOC_FIELDS
    if unknown:
        raise ValidationError(f"unsupported fields: {', '.join(sorted(unknown))}")

    out: dict[str, Any] = {}

    if "title" in fields or creating:
        title = str(fields.get("title") or "").strip()
        if not title:
            raise ValidationError("title is required")
        out["title"] = title

    if "description" in fields:
        out["description"] = str(fields["description"] or "").strip()

    if "dueDate" in fields:
        raw = fields["dueDate"]
        try:
            due = float(raw) if raw is not None else None
        except (TypeError, ValueError) as e:
            raise ValidationError(f"bad dueDate: {raw!r}") from e
        if due is not None and not math.isfinite(due):
            raise ValidationError(f"bad dueDate: {raw!r}")
        out["dueDate"] = due

    if "priority" in fields:
        try:
            out["priority"] = Priority(str(fields["priority"]).strip().lower()).value
        except ValueError as e:
            raise ValidationError(f"bad priority: {fields['priority']!r}") from e

    if "completed" in fields:
        out["completed"] = bool(fields["completed"])

    if creating:
        out.setdefault("description", "")
        out.setdefault("dueDate", None)
        out.setdefault("priority", Priority.MEDIUM.value)
        out.setdefault("completed", False)

    return out
