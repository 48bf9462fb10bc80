# src/desire_tracker/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage backends swappable and makes testing easier.
"""

from collections.abc import Callable
from typing import Any, Protocol


class KeyValueStore(Protocol):
    """
    Persistence adapter: opaque bytes under string keys.

    set() reports failure by returning False; callers treat both False and an
    exception as "not written".
    """

    def get(self, key: str) -> bytes | None: ...
    def set(self, key: str, value: bytes) -> bool: ...


class TimerHandle(Protocol):
    """The subset of threading.Timer the debounced writer relies on."""

    daemon: bool

    def start(self) -> None: ...
    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], Any]], TimerHandle]
