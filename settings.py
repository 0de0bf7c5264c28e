from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

DEFAULT_BACKUP_INTERVAL_MS = 60 * 60_000  # one hour


class ConfigError(ValueError):
    """Malformed server configuration. Fatal at startup."""


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _is_int(value: Any) -> bool:
    # bool is subclass of int in Python
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class BackupOptions:
    interval_ms: int = DEFAULT_BACKUP_INTERVAL_MS
    report: bool = True

    def __post_init__(self) -> None:
        if not _is_int(self.interval_ms) or self.interval_ms < 1:
            raise ConfigError("Backup interval must be a positive number of milliseconds")


@dataclass(frozen=True)
class Settings:
    """
    Server configuration. Validated on construction, before anything touches disk.
    """

    port: int
    path: str
    tables: list[str]
    auth: str

    # None disables the recurring backup task.
    backup: BackupOptions | None = None

    # Per-table lock around load/mutate/persist. Off by default: concurrent
    # writers to one table are last-writer-wins on the whole document.
    serialize_writes: bool = False

    # 0 / false / "" / null stored at a key path count as "absent".
    truthy_existence: bool = True

    host: str = field(default="127.0.0.1")

    def __post_init__(self) -> None:
        if not _is_int(self.port):
            raise ConfigError("You must provide an Port to listen")
        if not isinstance(self.path, str) or not self.path:
            raise ConfigError("You must provide an Path to build the database")
        if (
            not isinstance(self.tables, (list, tuple))
            or len(self.tables) < 1
            or any(not isinstance(t, str) or not t for t in self.tables)
        ):
            raise ConfigError("You must provide an Array of strings for tables")
        if len(set(self.tables)) != len(self.tables):
            raise ConfigError("Table names must be unique")
        if not isinstance(self.auth, str):
            raise ConfigError("You must provide an auth secret")
        # Normalize to a list so a tuple from callers still compares equal.
        object.__setattr__(self, "tables", list(self.tables))


def _env_int(name: str) -> Any:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        # Left as-is so Settings reports the problem.
        return raw


def get_settings() -> Settings:
    tables_raw = os.getenv("EVEDB_TABLES", "main")
    tables = [t.strip() for t in tables_raw.split(",") if t.strip()]

    backup: BackupOptions | None = None
    interval = _env_int("EVEDB_BACKUP_INTERVAL")
    if interval is not None:
        backup = BackupOptions(
            interval_ms=interval,
            report=_env_bool("EVEDB_BACKUP_REPORT", True),
        )

    return Settings(
        port=_env_int("EVEDB_PORT") if os.getenv("EVEDB_PORT") else 3000,
        path=os.getenv("EVEDB_PATH", "./database"),
        tables=tables,
        # NOTE: default is insecure; set EVEDB_AUTH in production
        auth=os.getenv("EVEDB_AUTH", "dev-only-secret"),
        backup=backup,
        serialize_writes=_env_bool("EVEDB_SERIALIZE_WRITES", False),
        truthy_existence=_env_bool("EVEDB_TRUTHY_EXISTENCE", True),
        host=os.getenv("EVEDB_HOST", "127.0.0.1"),
    )
