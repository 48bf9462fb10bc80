# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "DESIRE_APP_NAME": "App display name (default: 원하는-일 처리기).",
    "DESIRE_LOG_LEVEL": "Level for the log file (default: INFO).",
    # Storage
    "DESIRE_STORAGE_BACKEND": "Key-value backend: sqlite | file | memory (default: sqlite).",
    "DESIRE_STORAGE_KEY": "Key the whole task list is stored under (default: TASKS_V2).",
    "DESIRE_SAVE_DEBOUNCE_MS": "Quiet period before a write, in ms; 0 writes on every change (default: 200).",
    # Paths (gitignored)
    "DESIRE_DATA_DIR": "Local data directory (default: .local/desire_tracker).",
    "DESIRE_KV_DB_PATH": "SQLite backend path (default: <data_dir>/storage.sqlite3).",
    "DESIRE_KV_DIR": "File backend directory (default: <data_dir>/kv).",
    # Features
    "DESIRE_ASSIST_ENABLED": "Enable /assist checklist templates (true/false, default: true).",
}
