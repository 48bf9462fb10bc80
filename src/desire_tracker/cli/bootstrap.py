# src/desire_tracker/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the storage backend, task store and debounced writer into AppState,
- restores the persisted collection (one-shot).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..storage.debounced_writer import DebouncedWriter, restore_store
from ..storage.kv_store import open_kv_store
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    if settings.storage_backend == "file":
        settings.kv_dir.mkdir(parents=True, exist_ok=True)
    else:
        settings.kv_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    kv = open_kv_store(settings)
    key = str(getattr(settings, "storage_key", "TASKS_V2"))

    store = TaskStore()
    loaded = restore_store(store, kv, key)

    # Attach after restore: loading must not schedule a write of what we just read.
    writer = DebouncedWriter(kv, key=key, delay_seconds=settings.save_debounce_seconds)
    writer.attach(store)

    logger.info(
        "State ready backend=%s key=%s loaded=%d debounce_ms=%s",
        settings.storage_backend,
        key,
        loaded,
        settings.save_debounce_ms,
    )

    return AppState(
        settings=settings,
        store=store,
        kv=kv,
        writer=writer,
        assist_enabled=bool(getattr(settings, "assist_enabled", True)),
    )
