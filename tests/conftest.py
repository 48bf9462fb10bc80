# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from desire_tracker.core.state import AppState
from desire_tracker.storage.debounced_writer import DebouncedWriter
from desire_tracker.tasks.task_store import TaskStore

from .fakes import Counter, ManualTimerFactory, RecordingKeyValueStore

# 2024-05-01 15:07:00 local-ish; only used for ordering/formatting.
BASE_TS_MS = 1_714_543_620_000.0


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="test",
        log_level="DEBUG",
        data_dir=tmp_path,
        storage_backend="sqlite",
        storage_key="TASKS_V2",
        save_debounce_ms=200,
        save_debounce_seconds=0.2,
        kv_db_path=tmp_path / "storage.sqlite3",
        kv_dir=tmp_path / "kv",
        assist_enabled=True,
    )


@pytest.fixture()
def store() -> TaskStore:
    ids = Counter()
    ticks = iter(range(10_000))
    return TaskStore(id_factory=ids.next_id, clock=lambda: BASE_TS_MS + next(ticks) * 1000)


@pytest.fixture()
def kv() -> RecordingKeyValueStore:
    return RecordingKeyValueStore()


@pytest.fixture()
def timers() -> ManualTimerFactory:
    return ManualTimerFactory()


@pytest.fixture()
def writer(kv: RecordingKeyValueStore, timers: ManualTimerFactory) -> DebouncedWriter:
    return DebouncedWriter(kv, timer_factory=timers)


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    store: TaskStore,
    kv: RecordingKeyValueStore,
    writer: DebouncedWriter,
) -> AppState:
    """AppState wired with the in-memory kv store and a hand-driven timer."""
    writer.attach(store)
    return AppState(settings=settings, store=store, kv=kv, writer=writer)
