from __future__ import annotations

from .backups import BackupManager, BackupScheduler
from .database import Database, open_database
from .disk_store import DiskJsonStorage
from .interfaces import DocumentStorage
from .memory_store import InMemoryStorage
from .repositories import (
    AsyncBackupManager,
    AsyncBackupRepository,
    AsyncTableRepository,
    AsyncTableStore,
)
from .tables import DeleteResult, TableStore

__all__ = [
    "BackupManager",
    "BackupScheduler",
    "Database",
    "open_database",
    "DocumentStorage",
    "DiskJsonStorage",
    "InMemoryStorage",
    "TableStore",
    "DeleteResult",
    "AsyncTableRepository",
    "AsyncTableStore",
    "AsyncBackupRepository",
    "AsyncBackupManager",
]
