# src/scratchpad/logging_setup.py

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE_NAME = "scratchpad.log"
LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Minimum console level per logger prefix (longest prefix wins).
# Anything not listed here and not ours is shown at ERROR+ only.
CONSOLE_THRESHOLDS: dict[str, int] = {
    "scratchpad.": logging.NOTSET,
    # Background backup timer: warnings only.
    "scratchpad.backup.": logging.WARNING,
    "py.warnings": logging.ERROR,
}


class _ConsoleNoiseFilter(logging.Filter):
    """Keep the interactive console readable while the file log keeps everything."""

    def __init__(self, thresholds: dict[str, int] | None = None, default: int = logging.ERROR) -> None:
        super().__init__()
        items = (thresholds or CONSOLE_THRESHOLDS).items()
        self._thresholds = sorted(items, key=lambda kv: len(kv[0]), reverse=True)
        self._default = default

    def filter(self, record: logging.LogRecord) -> bool:
        for prefix, level in self._thresholds:
            if record.name == prefix.rstrip(".") or record.name.startswith(prefix):
                return record.levelno >= level
        return record.levelno >= self._default


def level_from_name(name: str | None, default: int = logging.INFO) -> int:
    """"debug" / "INFO" / "warning" -> logging level; unknown names -> default."""
    level = logging.getLevelName(str(name or "").strip().upper())
    return level if isinstance(level, int) else default


def setup_logging(
    *,
    log_dir: str | Path = ".local/scratchpad",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> Path:
    """
    Console handler (filtered) + size-rotated file handler with full logs.

    Call this ONCE, very early (before first logger.info). Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = RotatingFileHandler(
        str(log_file), maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)

    # Per-request lines from the Gist client.
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return log_file
