# src/desire_tracker/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..storage.debounced_writer import DebouncedWriter
from ..tasks.task_models import Category
from ..tasks.task_store import TaskStore
from .ports import KeyValueStore


@dataclass
class AppState:
    """
    Everything a front-end needs, owned by the composition root.

    `view` is UI state (the selected tab), not part of the persisted data.
    """

    settings: object

    store: TaskStore
    kv: KeyValueStore
    writer: DebouncedWriter

    assist_enabled: bool = True
    view: str = Category.SHORT.value
