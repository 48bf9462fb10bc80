# src/desire_tracker/tasks/task_store.py

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable, Iterable, Iterator
from dataclasses import replace

from .task_models import DONE_VIEW, Category, Step, StepSource, Task

logger = logging.getLogger(__name__)

TasksSnapshot = tuple[Task, ...]
TasksListener = Callable[[TasksSnapshot], None]


def _new_id() -> str:
    return uuid.uuid4().hex


def _now_ms() -> float:
    return float(int(time.time() * 1000))


class TaskStore:
    """
    In-memory task collection.

    Every mutation builds a new tuple from the current one and swaps it in with a
    single assignment, so an operation is either fully applied or not at all.
    Unknown ids, out-of-range step indices and blank text are silent no-ops.

    Listeners (e.g. the debounced writer) are called with the new snapshot after
    each mutation that actually changed the collection.

    Thread-safety:
    - none; the single UI event stream is the only mutator
    """

    def __init__(
        self,
        tasks: Iterable[Task] = (),
        *,
        id_factory: Callable[[], str] = _new_id,
        clock: Callable[[], float] = _now_ms,
    ) -> None:
        self._tasks: TasksSnapshot = tuple(tasks)
        self._id_factory = id_factory
        self._clock = clock
        self._listeners: list[TasksListener] = []

    # ---- low-level helpers ----

    def _commit(self, new_tasks: TasksSnapshot) -> bool:
        if new_tasks == self._tasks:
            return False
        self._tasks = new_tasks
        for listener in list(self._listeners):
            try:
                listener(new_tasks)
            except Exception:
                logger.exception("Task listener failed: %r", listener)
        return True

    def _update_task(self, task_id: str, fn: Callable[[Task], Task | None]) -> bool:
        """Apply fn to the matching task; fn returning None means no change."""
        out: list[Task] = []
        changed = False
        for t in self._tasks:
            if t.id == task_id and not changed:
                new_t = fn(t)
                if new_t is not None and new_t != t:
                    out.append(new_t)
                    changed = True
                    continue
            out.append(t)
        if not changed:
            return False
        return self._commit(tuple(out))

    def _unique_id(self) -> str:
        taken = {t.id for t in self._tasks}
        task_id = self._id_factory()
        while task_id in taken:
            logger.debug("Id collision on %s, regenerating.", task_id)
            task_id = self._id_factory()
        return task_id

    # ---- listeners ----

    def subscribe(self, listener: TasksListener) -> Callable[[], None]:
        """Register a change listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ---- read API ----

    @property
    def tasks(self) -> TasksSnapshot:
        return self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks)

    def get(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def filtered(self, view: str) -> list[Task]:
        """
        Tasks visible under a tab.

        - "done": every completed task, whatever its category
        - a category: active (not done) tasks of that category
        - anything else: nothing
        """
        if view == DONE_VIEW:
            return [t for t in self._tasks if t.done]
        category = Category.parse(view)
        if category is None:
            return []
        return [t for t in self._tasks if not t.done and t.category == category]

    def counts(self) -> dict[str, int]:
        out = {c.value: 0 for c in Category}
        out[DONE_VIEW] = 0
        for t in self._tasks:
            if t.done:
                out[DONE_VIEW] += 1
            else:
                out[t.category.value] += 1
        return out

    # ---- mutations ----

    def replace_all(self, tasks: Iterable[Task]) -> None:
        """Install a loaded collection. Listeners are not notified."""
        self._tasks = tuple(tasks)
        logger.debug("TaskStore replaced collection total=%d", len(self._tasks))

    def add(self, text: str) -> Task | None:
        text = (text or "").strip()
        if not text:
            return None

        task = Task(
            id=self._unique_id(),
            text=text,
            created_at=self._clock(),
            category=Category.default(),
        )
        self._commit((task, *self._tasks))
        logger.debug("Task added id=%s", task.id)
        return task

    def remove(self, task_id: str) -> None:
        remaining = tuple(t for t in self._tasks if t.id != task_id)
        if self._commit(remaining):
            logger.debug("Task removed id=%s", task_id)

    def toggle_done(self, task_id: str) -> bool:
        """
        Flip the done flag.

        Returns True only when the task has just been completed (False -> True),
        so the caller can decide whether to jump to the "done" tab.
        """
        completed = False

        def _flip(t: Task) -> Task:
            nonlocal completed
            completed = not t.done
            return replace(t, done=not t.done)

        if not self._update_task(task_id, _flip):
            return False
        return completed

    def set_category(self, task_id: str, category: Category | str) -> None:
        cat = Category.parse(category)
        if cat is None:
            logger.debug("Ignoring invalid category %r for task %s", category, task_id)
            return
        self._update_task(task_id, lambda t: replace(t, category=cat, done=False))

    def add_step(self, task_id: str, text: str, *, source: StepSource = StepSource.USER) -> None:
        text = (text or "").strip()
        if not text:
            return
        step = Step(text=text, source=source)
        self._update_task(task_id, lambda t: replace(t, checklist=(*t.checklist, step)))

    def add_steps(self, task_id: str, texts: Iterable[str], *, source: StepSource = StepSource.USER) -> int:
        """Append several steps in one mutation. Returns how many were appended."""
        steps = tuple(Step(text=s.strip(), source=source) for s in texts if s and s.strip())
        if not steps:
            return 0
        if not self._update_task(task_id, lambda t: replace(t, checklist=(*t.checklist, *steps))):
            return 0
        return len(steps)

    def toggle_step(self, task_id: str, index: int) -> None:
        def _flip(t: Task) -> Task | None:
            if not 0 <= index < len(t.checklist):
                return None
            steps = list(t.checklist)
            steps[index] = replace(steps[index], done=not steps[index].done)
            return replace(t, checklist=tuple(steps))

        self._update_task(task_id, _flip)

    def remove_step(self, task_id: str, index: int) -> None:
        def _drop(t: Task) -> Task | None:
            if not 0 <= index < len(t.checklist):
                return None
            return replace(t, checklist=t.checklist[:index] + t.checklist[index + 1 :])

        self._update_task(task_id, _drop)

    def set_memo(self, task_id: str, text: str) -> None:
        self._update_task(task_id, lambda t: replace(t, memo=text))
