# src/scratchpad/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (the GitHub token is optional until /sync).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "SCRATCHPAD"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


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


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
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
    console_enabled: bool

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    kv_db_path: Path
    backup_dir: Path

    # ---- Backups ----
    backup_enabled: bool
    backup_interval_minutes: int
    backup_retention: int
    snapshot_version: str

    # ---- Remote sync (GitHub Gist) ----
    github_token: str | None
    github_api_url: str
    gist_filename: str
    gist_description: str
    gist_public: bool
    sync_timeout_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "scratchpad")
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/scratchpad"))
        kv_db_path = _env_path(_k("KV_DB_PATH"), data_dir / "state.sqlite3")
        backup_dir = _env_path(_k("BACKUP_DIR"), data_dir / "backups")

        backup_enabled = _env_bool(_k("BACKUP_ENABLED"), False)
        backup_interval_minutes = max(1, _env_int(_k("BACKUP_INTERVAL_MINUTES"), 30))
        backup_retention = max(1, _env_int(_k("BACKUP_RETENTION"), 10))
        snapshot_version = _env(_k("SNAPSHOT_VERSION"), "1.0")

        # Accept the conventional GITHUB_TOKEN as a fallback.
        github_token = _first_env(_k("GITHUB_TOKEN"), "GITHUB_TOKEN", default=None)
        github_api_url = _env(_k("GITHUB_API_URL"), "https://api.github.com").rstrip("/")
        gist_filename = _env(_k("GIST_FILENAME"), "scratchpad-sync.json")
        gist_description = _env(_k("GIST_DESCRIPTION"), "Scratchpad notes and tasks")
        gist_public = _env_bool(_k("GIST_PUBLIC"), False)
        sync_timeout_seconds = max(1.0, _env_float(_k("SYNC_TIMEOUT_SECONDS"), 30.0))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            data_dir=data_dir,
            kv_db_path=kv_db_path,
            backup_dir=backup_dir,
            backup_enabled=backup_enabled,
            backup_interval_minutes=backup_interval_minutes,
            backup_retention=backup_retention,
            snapshot_version=snapshot_version,
            github_token=github_token,
            github_api_url=github_api_url,
            gist_filename=gist_filename,
            gist_description=gist_description,
            gist_public=gist_public,
            sync_timeout_seconds=sync_timeout_seconds,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
