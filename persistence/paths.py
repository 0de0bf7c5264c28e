from __future__ import annotations

from pathlib import Path

TABLES_DIR = "tables"
BACKUPS_DIR = "backups"


def database_root(path: str) -> Path:
    # Relative paths resolve against the working directory, like the server's cwd.
    return Path(path).expanduser().resolve()


def table_key(table: str) -> str:
    return f"{TABLES_DIR}/{table}.json"


def backup_key(backup_id: str) -> str:
    return f"{BACKUPS_DIR}/{backup_id}"


def snapshot_key(backup_id: str, table: str) -> str:
    return f"{BACKUPS_DIR}/{backup_id}/{table}.json"


def table_name(filename: str) -> str:
    return filename[: -len(".json")] if filename.endswith(".json") else filename
