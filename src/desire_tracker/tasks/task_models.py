# src/desire_tracker/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

# Pseudo-category for the "completed" tab. Never stored on a task.
DONE_VIEW = "done"


class Category(StrEnum):
    """
    Fixed set of categories for active tasks.

    Notes:
    - "done" is NOT a category: completed tasks keep their category and are
      selected by the done flag instead (see DONE_VIEW).
    """

    SHORT = "short"
    INFO = "info"
    LONG = "long"

    @classmethod
    def default(cls) -> Category:
        return cls.SHORT

    @classmethod
    def parse(cls, raw: object) -> Category | None:
        """Return the matching category or None (never raises)."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None

    @classmethod
    def from_db(cls, raw: object) -> Category:
        return cls.parse(raw) or cls.default()


class StepSource(StrEnum):
    USER = "user"
    AI = "ai"  # appended by the checklist template helper

    @classmethod
    def from_db(cls, raw: object) -> StepSource:
        if isinstance(raw, str):
            try:
                return cls(raw)
            except ValueError:
                pass
        return cls.USER


@dataclass(frozen=True, slots=True)
class Step:
    text: str
    done: bool = False
    source: StepSource = StepSource.USER


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    text: str
    created_at: float  # epoch milliseconds

    done: bool = False
    category: Category = Category.SHORT
    checklist: tuple[Step, ...] = ()
    memo: str = ""

    @property
    def step_progress(self) -> tuple[int, int]:
        """(done, total) over the checklist."""
        return sum(1 for s in self.checklist if s.done), len(self.checklist)


def is_valid_view(view: str) -> bool:
    return view == DONE_VIEW or Category.parse(view) is not None
