from __future__ import annotations

import logging
from dataclasses import dataclass

from settings import Settings

from .backups import BackupManager, BackupScheduler
from .disk_store import DiskJsonStorage
from .interfaces import DocumentStorage
from .paths import BACKUPS_DIR, TABLES_DIR, database_root
from .repositories import AsyncBackupManager, AsyncTableStore
from .tables import TableStore

logger = logging.getLogger(__name__)


@dataclass
class Database:
    settings: Settings
    storage: DocumentStorage
    tables: TableStore
    backups: BackupManager
    scheduler: BackupScheduler | None

    @property
    def async_tables(self) -> AsyncTableStore:
        return AsyncTableStore(self.tables)

    @property
    def async_backups(self) -> AsyncBackupManager:
        return AsyncBackupManager(self.backups)


def open_database(settings: Settings, storage: DocumentStorage | None = None) -> Database:
    """
    Wire storage, table store and backup manager, and create missing tables.

    Without an explicit storage the database lives on disk under `settings.path`.
    """
    if storage is None:
        disk = DiskJsonStorage(database_root(settings.path))
        disk.ensure_dir(TABLES_DIR)
        disk.ensure_dir(BACKUPS_DIR)
        storage = disk

    tables = TableStore(
        storage,
        settings.tables,
        serialize_writes=settings.serialize_writes,
        truthy_existence=settings.truthy_existence,
    )
    tables.ensure_tables()
    backups = BackupManager(storage, tables)

    scheduler = None
    if settings.backup is not None:
        scheduler = BackupScheduler(backups, settings.backup.interval_ms, report=settings.backup.report)

    logger.info("Database opened: tables=%s", ", ".join(settings.tables))
    return Database(settings=settings, storage=storage, tables=tables, backups=backups, scheduler=scheduler)
