# src/desire_tracker/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing required at import time; every value has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "DESIRE"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# Real environment wins over .env.
load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Storage ----
    storage_backend: str  # sqlite | file | memory
    storage_key: str
    save_debounce_ms: int  # 0 => write on every mutation

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    kv_db_path: Path
    kv_dir: Path

    # ---- Features ----
    assist_enabled: bool

    @property
    def save_debounce_seconds(self) -> float:
        return max(0, self.save_debounce_ms) / 1000.0

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "원하는-일 처리기") or "원하는-일 처리기"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        storage_backend = _env(_k("STORAGE_BACKEND"), "sqlite").strip().lower() or "sqlite"
        storage_key = _env(_k("STORAGE_KEY"), "TASKS_V2").strip() or "TASKS_V2"
        save_debounce_ms = _env_int(_k("SAVE_DEBOUNCE_MS"), 200)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/desire_tracker"))
        kv_db_path = _env_path(_k("KV_DB_PATH"), data_dir / "storage.sqlite3")
        kv_dir = _env_path(_k("KV_DIR"), data_dir / "kv")

        assist_enabled = _env_bool(_k("ASSIST_ENABLED"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            storage_backend=storage_backend,
            storage_key=storage_key,
            save_debounce_ms=save_debounce_ms,
            data_dir=data_dir,
            kv_db_path=kv_db_path,
            kv_dir=kv_dir,
            assist_enabled=assist_enabled,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
