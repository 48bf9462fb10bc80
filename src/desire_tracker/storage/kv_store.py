# src/desire_tracker/storage/kv_store.py

from __future__ import annotations

import contextlib
import logging
import os
import re
import sqlite3
import time
from pathlib import Path

from ..core.ports import KeyValueStore

logger = logging.getLogger(__name__)


class MemoryKeyValueStore:
    """Dict-backed store (tests, ephemeral runs)."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._data: dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> bool:
        self._data[key] = bytes(value)
        return True


_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class FileKeyValueStore:
    """
    One file per key under root_dir.

    Writes go to a temp file first and are moved into place with os.replace,
    so a crash mid-write never leaves a truncated value behind.
    """

    def __init__(self, root_dir: str | Path) -> None:
        self._root = Path(root_dir)
        self._root.mkdir(parents=True, exist_ok=True)
        logger.info("FileKeyValueStore ready dir=%s", self._root)

    def _path(self, key: str) -> Path:
        if not key:
            raise ValueError("key is required")
        return self._root / f"{_SAFE_KEY.sub('_', key)}.json"

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def set(self, key: str, value: bytes) -> bool:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        try:
            tmp.write_bytes(value)
            os.replace(tmp, path)
        except OSError:
            logger.exception("Failed to write key=%s to %s", key, path)
            with contextlib.suppress(OSError):
                tmp.unlink()
            return False
        with contextlib.suppress(OSError):
            # Best-effort: personal notes, keep the file private on disk.
            os.chmod(path, 0o600)
        return True


class SQLiteKeyValueStore:
    """
    SQLite key-value store.

    Single table kv(key, value, updated_at). Schema is created if missing.

    Thread-safety:
    - each method opens its own SQLite connection (the debounced writer calls
      set() from its timer thread)
    """

    def __init__(self, db_path: str | Path = "desire_tracker.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("SQLiteKeyValueStore ready db=%s", self._db_path)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def get(self, key: str) -> bytes | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            if row is None:
                return None
            value = row[0]
            return value.encode("utf-8") if isinstance(value, str) else bytes(value)
        finally:
            conn.close()

    def set(self, key: str, value: bytes) -> bool:
        try:
            conn = self._get_conn()
        except sqlite3.Error:
            logger.exception("Failed to open %s", self._db_path)
            return False
        try:
            conn.execute(
                """
                INSERT INTO kv(key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, sqlite3.Binary(value), time.time()),
            )
            conn.commit()
            return True
        except sqlite3.Error:
            logger.exception("Failed to write key=%s to %s", key, self._db_path)
            return False
        finally:
            conn.close()


def open_kv_store(settings) -> KeyValueStore:
    """Build the backend selected by settings.storage_backend."""
    backend = str(getattr(settings, "storage_backend", "sqlite") or "sqlite").strip().lower()
    if backend == "memory":
        return MemoryKeyValueStore()
    if backend == "file":
        return FileKeyValueStore(settings.kv_dir)
    if backend != "sqlite":
        logger.warning("Unknown storage backend %r, using sqlite.", backend)
    return SQLiteKeyValueStore(settings.kv_db_path)
