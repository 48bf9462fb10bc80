# src/desire_tracker/storage/debounced_writer.py

"""
Debounced persistence for the task collection.

A burst of mutations produces a single write: every new snapshot cancels the
pending timer and starts a fresh one. When the timer finally fires, the latest
snapshot is serialized and written under one fixed key.

Key invariants:
- at most one timer is pending at any time,
- a write failure is logged and swallowed (the next mutation retries),
- writes are serialized, and an older snapshot never lands after a newer one,
- close() drops the pending write; only flushed state is durable.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence

from ..core.ports import KeyValueStore, TimerFactory, TimerHandle
from ..tasks.task_codec import TaskDecodeError, decode_tasks, encode_tasks
from ..tasks.task_models import Task
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)

STORAGE_KEY = "TASKS_V2"
DEFAULT_DELAY_SECONDS = 0.2


class DebouncedWriter:
    def __init__(
        self,
        kv: KeyValueStore,
        *,
        key: str = STORAGE_KEY,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        timer_factory: TimerFactory = threading.Timer,
    ) -> None:
        self._kv = kv
        self._key = key
        self._delay = float(delay_seconds)
        self._timer_factory = timer_factory

        # Guards _timer/_pending/_generation: the timer callback runs on its own thread.
        self._lock = threading.Lock()
        # Serializes kv writes so an older snapshot can never land after a newer one.
        self._write_lock = threading.Lock()
        self._timer: TimerHandle | None = None
        self._pending: Sequence[Task] | None = None
        self._generation = 0
        self._written_generation = 0
        self._closed = False

    @property
    def key(self) -> str:
        return self._key

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def attach(self, store: TaskStore):
        """Persist every effective mutation of store. Returns the unsubscribe callable."""
        return store.subscribe(self.schedule)

    def schedule(self, tasks: Sequence[Task]) -> None:
        with self._lock:
            if self._closed:
                logger.debug("Writer closed; dropping snapshot.")
                return
            self._generation += 1
            generation = self._generation
            if self._delay <= 0:
                immediate = True
            else:
                immediate = False
                if self._timer is not None:
                    self._timer.cancel()
                self._pending = tasks
                timer = self._timer_factory(self._delay, lambda: self._on_timer(generation))
                timer.daemon = True
                self._timer = timer
                timer.start()

        if immediate:
            self._persist(tasks, generation)

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            # A superseded timer that fired before cancel() took effect.
            if generation != self._generation:
                return
            tasks = self._pending
            self._pending = None
            self._timer = None
        if tasks is not None:
            self._persist(tasks, generation)

    def _persist(self, tasks: Sequence[Task], generation: int) -> bool:
        with self._write_lock:
            if generation <= self._written_generation:
                logger.debug("Skipping stale snapshot gen=%d (written gen=%d)", generation, self._written_generation)
                return False
            self._written_generation = generation
            return self._write(tasks)

    def _write(self, tasks: Sequence[Task]) -> bool:
        try:
            payload = encode_tasks(tasks)
            ok = self._kv.set(self._key, payload)
        except Exception:
            logger.exception("Failed to persist %d tasks under key=%s", len(tasks), self._key)
            return False
        if ok is False:
            logger.warning("Storage rejected write of %d tasks under key=%s", len(tasks), self._key)
            return False
        logger.debug("Persisted %d tasks (%d bytes) key=%s", len(tasks), len(payload), self._key)
        return True

    def flush(self) -> bool:
        """Write the pending snapshot now. Returns False if nothing was written."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            tasks = self._pending
            generation = self._generation
            self._pending = None
            self._timer = None
        if tasks is None:
            return False
        return self._persist(tasks, generation)

    def cancel(self) -> None:
        """Drop the pending write, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                logger.debug("Pending write canceled key=%s", self._key)
            self._timer = None
            self._pending = None

    def close(self) -> None:
        self.cancel()
        with self._lock:
            self._closed = True


def load_tasks(kv: KeyValueStore, key: str = STORAGE_KEY) -> list[Task]:
    """One-shot startup read. Any failure yields an empty list."""
    try:
        raw = kv.get(key)
    except Exception:
        logger.exception("Failed to read key=%s", key)
        return []
    if not raw:
        return []
    try:
        tasks = decode_tasks(raw)
    except TaskDecodeError as e:
        logger.warning("Ignoring stored tasks under key=%s: %s", key, e)
        return []
    logger.info("Loaded %d tasks from key=%s", len(tasks), key)
    return tasks


def restore_store(store: TaskStore, kv: KeyValueStore, key: str = STORAGE_KEY) -> int:
    """Fill store from storage when there is something to load. Returns the count."""
    tasks = load_tasks(kv, key)
    if tasks:
        store.replace_all(tasks)
    return len(tasks)
