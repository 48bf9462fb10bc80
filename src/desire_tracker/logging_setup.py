# src/desire_tracker/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path


class _ConsoleNoiseFilter(logging.Filter):
    """Keep stderr readable next to the task list.

    The storage loggers report every debounced write, so on the console they
    only show problems. Records from outside the app (captured warnings
    included) need ERROR.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("desire_tracker.storage."):
            return record.levelno >= logging.WARNING
        if record.name.startswith("desire_tracker."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/desire_tracker",
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> None:
    """Send filtered records to stderr and everything to <log_dir>/desire_tracker.log.

    Replaces any handlers already on the root logger.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "desire_tracker.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    # warnings.warn(...) arrives as "py.warnings" and is filtered like third-party noise.
    logging.captureWarnings(True)
