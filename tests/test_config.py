# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from scratchpad.config import Settings

_VARS = [
    "SCRATCHPAD_DATA_DIR",
    "SCRATCHPAD_KV_DB_PATH",
    "SCRATCHPAD_BACKUP_DIR",
    "SCRATCHPAD_BACKUP_ENABLED",
    "SCRATCHPAD_BACKUP_INTERVAL_MINUTES",
    "SCRATCHPAD_BACKUP_RETENTION",
    "SCRATCHPAD_GITHUB_TOKEN",
    "GITHUB_TOKEN",
    "SCRATCHPAD_SYNC_TIMEOUT_SECONDS",
    "SCRATCHPAD_GITHUB_API_URL",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_derive_from_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("SCRATCHPAD_DATA_DIR", str(tmp_path))

    s = Settings.from_env()

    assert s.data_dir == tmp_path
    assert s.kv_db_path == tmp_path / "state.sqlite3"
    assert s.backup_dir == tmp_path / "backups"
    assert s.backup_enabled is False
    assert s.backup_interval_minutes == 30
    assert s.backup_retention == 10
    assert s.github_token is None
    assert s.sync_timeout_seconds == 30.0


def test_values_are_clamped_and_parsed(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SCRATCHPAD_BACKUP_ENABLED", "yes")
    monkeypatch.setenv("SCRATCHPAD_BACKUP_INTERVAL_MINUTES", "0")
    monkeypatch.setenv("SCRATCHPAD_BACKUP_RETENTION", "not-a-number")
    monkeypatch.setenv("SCRATCHPAD_SYNC_TIMEOUT_SECONDS", "0.1")
    monkeypatch.setenv("SCRATCHPAD_GITHUB_API_URL", "https://ghe.local/api/v3/")

    s = Settings.from_env()

    assert s.backup_enabled is True
    assert s.backup_interval_minutes == 1
    assert s.backup_retention == 10
    assert s.sync_timeout_seconds == 1.0
    assert s.github_api_url == "https://ghe.local/api/v3"


def test_github_token_fallback(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "generic")
    assert Settings.from_env().github_token == "generic"

    monkeypatch.setenv("SCRATCHPAD_GITHUB_TOKEN", "specific")
    assert Settings.from_env().github_token == "specific"
