# tests/test_debounced_writer.py

from __future__ import annotations

import threading
import time

from desire_tracker.storage.debounced_writer import (
    STORAGE_KEY,
    DebouncedWriter,
    load_tasks,
    restore_store,
)
from desire_tracker.storage.kv_store import MemoryKeyValueStore
from desire_tracker.tasks.task_codec import decode_tasks, encode_tasks
from desire_tracker.tasks.task_store import TaskStore

from .fakes import BlockingKeyValueStore, FailingKeyValueStore, ManualTimerFactory, RecordingKeyValueStore


def test_burst_of_mutations_writes_once_with_final_state(
    store: TaskStore, kv: RecordingKeyValueStore, timers: ManualTimerFactory, writer: DebouncedWriter
) -> None:
    writer.attach(store)

    t = store.add("a")
    assert t is not None
    store.add("b")
    store.add_step(t.id, "s")
    store.toggle_done(t.id)

    assert kv.writes == []
    assert len(timers.live) == 1
    assert writer.pending is True

    timers.fire_all()

    assert len(kv.writes) == 1
    key, payload = kv.writes[0]
    assert key == STORAGE_KEY
    assert tuple(decode_tasks(payload)) == store.tasks
    assert writer.pending is False


def test_each_schedule_restarts_the_single_timer(
    store: TaskStore, timers: ManualTimerFactory, writer: DebouncedWriter
) -> None:
    writer.attach(store)

    for i in range(5):
        store.add(f"t{i}")

    assert len(timers.timers) == 5
    assert all(t.cancelled for t in timers.timers[:-1])
    assert timers.timers[-1].interval == 0.2
    assert timers.timers[-1].daemon is True


def test_superseded_timer_does_not_write(
    store: TaskStore, kv: RecordingKeyValueStore, timers: ManualTimerFactory, writer: DebouncedWriter
) -> None:
    writer.attach(store)
    store.add("a")
    stale = timers.timers[0]
    store.add("b")

    # Simulate the race where the old timer thread already started running.
    stale.function()
    assert kv.writes == []

    timers.timers[-1].fire()
    assert len(kv.writes) == 1
    assert [t.text for t in decode_tasks(kv.writes[0][1])] == ["b", "a"]


def test_no_op_mutations_schedule_nothing(
    store: TaskStore, timers: ManualTimerFactory, writer: DebouncedWriter
) -> None:
    writer.attach(store)

    store.add("   ")
    store.remove("missing")
    store.toggle_done("missing")

    assert timers.timers == []


def test_immediate_mode_writes_every_mutation(store: TaskStore, kv: RecordingKeyValueStore) -> None:
    DebouncedWriter(kv, delay_seconds=0).attach(store)

    store.add("a")
    store.add("b")

    assert len(kv.writes) == 2


def test_cancel_and_close_drop_pending_write(
    store: TaskStore, kv: RecordingKeyValueStore, timers: ManualTimerFactory, writer: DebouncedWriter
) -> None:
    writer.attach(store)
    store.add("a")

    writer.close()
    timers.fire_all()
    store.add("b")

    assert kv.writes == []
    assert writer.pending is False

    # Immediate mode honours close() too.
    immediate = DebouncedWriter(kv, delay_seconds=0)
    immediate.attach(store)
    store.add("c")
    assert len(kv.writes) == 1

    immediate.close()
    store.add("d")
    assert len(kv.writes) == 1


def test_flush_writes_pending_now(
    store: TaskStore, kv: RecordingKeyValueStore, timers: ManualTimerFactory, writer: DebouncedWriter
) -> None:
    writer.attach(store)
    store.add("a")

    assert writer.flush() is True
    assert len(kv.writes) == 1

    timers.fire_all()
    assert len(kv.writes) == 1
    assert writer.flush() is False


def test_slow_timer_write_cannot_overwrite_newer_flush(store: TaskStore, timers: ManualTimerFactory) -> None:
    kv = BlockingKeyValueStore()
    writer = DebouncedWriter(kv, timer_factory=timers)
    writer.attach(store)
    store.add("a")

    timer_thread = threading.Thread(target=timers.timers[0].fire)
    timer_thread.start()
    assert kv.entered.wait(timeout=5.0)

    store.add("b")
    flush_thread = threading.Thread(target=writer.flush)
    flush_thread.start()
    # The flush waits for the in-flight write instead of racing it.
    flush_thread.join(timeout=0.1)
    assert flush_thread.is_alive()

    kv.release.set()
    timer_thread.join(timeout=5.0)
    flush_thread.join(timeout=5.0)

    assert len(kv.writes) == 2
    assert [t.text for t in decode_tasks(kv.data[STORAGE_KEY])] == [t.text for t in store] == ["b", "a"]


def test_write_failure_is_swallowed_and_retried_on_next_mutation(
    store: TaskStore, timers: ManualTimerFactory
) -> None:
    failing = FailingKeyValueStore(raise_on_set=True)
    writer = DebouncedWriter(failing, timer_factory=timers)
    writer.attach(store)

    t = store.add("a")
    timers.fire_all()
    assert failing.attempts == 1
    assert store.get(t.id) is not None

    store.add("b")
    timers.fire_all()
    assert failing.attempts == 2
    assert len(store) == 2


def test_rejected_write_returns_false_on_flush(store: TaskStore, timers: ManualTimerFactory) -> None:
    writer = DebouncedWriter(FailingKeyValueStore(raise_on_set=False), timer_factory=timers)
    writer.attach(store)
    store.add("a")

    assert writer.flush() is False


def test_real_timer_coalesces_burst(store: TaskStore, kv: RecordingKeyValueStore) -> None:
    writer = DebouncedWriter(kv, delay_seconds=0.05)
    writer.attach(store)

    for i in range(10):
        store.add(f"t{i}")

    deadline = time.monotonic() + 2.0
    while not kv.writes and time.monotonic() < deadline:
        time.sleep(0.01)
    time.sleep(0.1)

    assert len(kv.writes) == 1
    assert len(decode_tasks(kv.writes[0][1])) == 10
    writer.close()


def test_load_missing_key_or_garbage_is_empty() -> None:
    assert load_tasks(MemoryKeyValueStore()) == []
    assert load_tasks(MemoryKeyValueStore({STORAGE_KEY: b"{oops"})) == []
    assert load_tasks(MemoryKeyValueStore({STORAGE_KEY: b'{"a": 1}'})) == []
    assert load_tasks(FailingKeyValueStore(get_value=None)) == []


def test_restore_store_replaces_only_when_non_empty(store: TaskStore) -> None:
    source = TaskStore()
    source.add("saved")
    kv = MemoryKeyValueStore({STORAGE_KEY: encode_tasks(source.tasks)})

    assert restore_store(store, kv) == 1
    assert store.tasks == source.tasks

    empty_kv = MemoryKeyValueStore({STORAGE_KEY: b"[]"})
    assert restore_store(store, empty_kv) == 0
    assert store.tasks == source.tasks
