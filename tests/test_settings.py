from __future__ import annotations

import pytest

from settings import BackupOptions, ConfigError, Settings, get_settings


def _kwargs(**overrides):
    base = {"port": 3000, "path": "./db", "tables": ["main"], "auth": "s"}
    base.update(overrides)
    return base


@pytest.mark.parametrize(
    "overrides",
    [
        {"port": None},
        {"port": "3000"},
        {"port": True},
        {"path": None},
        {"path": 12},
        {"tables": []},
        {"tables": "main"},
        {"tables": ["main", 3]},
        {"tables": ["main", "main"]},
        {"auth": None},
    ],
)
def test_invalid_settings_fail_fast(overrides, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ConfigError):
        Settings(**_kwargs(**overrides))
    # nothing was created on disk
    assert list(tmp_path.iterdir()) == []


def test_valid_settings_defaults():
    s = Settings(**_kwargs(tables=("main", "test")))
    assert s.tables == ["main", "test"]
    assert s.backup is None
    assert s.serialize_writes is False
    assert s.truthy_existence is True


def test_backup_options_validation():
    assert BackupOptions().interval_ms == 3_600_000
    with pytest.raises(ConfigError):
        BackupOptions(interval_ms=0)


def test_get_settings_from_env(monkeypatch):
    monkeypatch.setenv("EVEDB_PORT", "4000")
    monkeypatch.setenv("EVEDB_PATH", "/tmp/evedb")
    monkeypatch.setenv("EVEDB_TABLES", "main, users")
    monkeypatch.setenv("EVEDB_AUTH", "abc")
    monkeypatch.setenv("EVEDB_BACKUP_INTERVAL", "1000")
    monkeypatch.setenv("EVEDB_BACKUP_REPORT", "false")
    monkeypatch.setenv("EVEDB_SERIALIZE_WRITES", "1")

    s = get_settings()
    assert s.port == 4000
    assert s.tables == ["main", "users"]
    assert s.auth == "abc"
    assert s.backup == BackupOptions(interval_ms=1000, report=False)
    assert s.serialize_writes is True


def test_get_settings_rejects_bad_port(monkeypatch):
    monkeypatch.setenv("EVEDB_PORT", "not-a-port")
    with pytest.raises(ConfigError):
        get_settings()
