# src/desire_tracker/tasks/task_codec.py

"""
JSON wire format for the task collection.

The whole collection is stored as one UTF-8 JSON array under a single key:

    [{"id": "...", "text": "...", "done": false, "createdAt": 1730000000000,
      "category": "short", "checklist": [{"text": "...", "done": false, "source": "user"}],
      "memo": ""}]

There is no version field. A schema change gets a new storage key instead of a
migration; data under an old key is simply left behind.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from .task_models import Category, Step, StepSource, Task

logger = logging.getLogger(__name__)


class TaskDecodeError(ValueError):
    """Payload is not a JSON array at all."""


def step_to_dict(step: Step) -> dict[str, Any]:
    return {"text": step.text, "done": step.done, "source": step.source.value}


def task_to_dict(task: Task) -> dict[str, Any]:
    created = task.created_at
    return {
        "id": task.id,
        "text": task.text,
        "done": task.done,
        "createdAt": int(created) if float(created).is_integer() else created,
        "category": task.category.value,
        "checklist": [step_to_dict(s) for s in task.checklist],
        "memo": task.memo,
    }


def encode_tasks(tasks: Iterable[Task]) -> bytes:
    return json.dumps([task_to_dict(t) for t in tasks], ensure_ascii=False).encode("utf-8")


def _step_from_dict(raw: Any) -> Step | None:
    if not isinstance(raw, dict):
        return None
    text = raw.get("text")
    if not isinstance(text, str) or not text.strip():
        return None
    return Step(
        text=text,
        done=bool(raw.get("done", False)),
        source=StepSource.from_db(raw.get("source")),
    )


def task_from_dict(raw: Any) -> Task | None:
    """Best-effort conversion of one stored record. Returns None for junk."""
    if not isinstance(raw, dict):
        return None

    task_id = raw.get("id")
    if isinstance(task_id, int) and not isinstance(task_id, bool):
        task_id = str(task_id)
    if not isinstance(task_id, str) or not task_id:
        return None

    text = raw.get("text")
    if not isinstance(text, str) or not text.strip():
        return None

    try:
        created_at = float(raw.get("createdAt") or 0.0)
    except (TypeError, ValueError):
        created_at = 0.0

    steps_raw = raw.get("checklist")
    checklist: list[Step] = []
    if isinstance(steps_raw, list):
        for s in steps_raw:
            step = _step_from_dict(s)
            if step is not None:
                checklist.append(step)

    memo = raw.get("memo")

    return Task(
        id=task_id,
        text=text,
        created_at=created_at,
        done=bool(raw.get("done", False)),
        category=Category.from_db(raw.get("category")),
        checklist=tuple(checklist),
        memo=memo if isinstance(memo, str) else "",
    )


def decode_tasks(payload: bytes | str) -> list[Task]:
    """
    Decode a stored collection.

    Raises TaskDecodeError when the payload is not a JSON array.
    Individual malformed records (and duplicate ids) are skipped.
    """
    try:
        data = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise TaskDecodeError(f"invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise TaskDecodeError(f"expected a JSON array, got {type(data).__name__}")

    out: list[Task] = []
    seen: set[str] = set()
    skipped = 0
    for item in data:
        task = task_from_dict(item)
        if task is None or task.id in seen:
            skipped += 1
            continue
        seen.add(task.id)
        out.append(task)

    if skipped:
        logger.warning("Skipped %d malformed or duplicate task records.", skipped)
    return out
