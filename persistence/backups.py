from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable

from .errors import BackupNotFound, EveDBError
from .interfaces import DocumentStorage
from .paths import BACKUPS_DIR, backup_key, snapshot_key, table_name
from .tables import TableStore

logger = logging.getLogger(__name__)


class BackupManager:
    """
    Whole-database snapshots under backups/<id>/<table>.json.

    Ids are the creation time in milliseconds. Backups are never modified
    after creation, only deleted. Nothing here is coordinated with the
    backup scheduler: a restore or delete can run while a create is in flight.
    """

    def __init__(
        self,
        storage: DocumentStorage,
        tables: TableStore,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._tables = tables
        self._clock = clock

    def _new_id(self) -> str:
        base = str(int(self._clock() * 1000))
        backup_id = base
        n = 0
        # Two creates within the same millisecond get a counter suffix.
        while self._storage.exists(backup_key(backup_id)):
            n += 1
            backup_id = f"{base}-{n}"
        return backup_id

    def create(self) -> str:
        # Read every table before writing anything, so a bad table leaves no partial backup.
        docs = {table: self._tables.get_table(table) for table in self._tables.tables}
        backup_id = self._new_id()
        written: list[str] = []
        try:
            for table, doc in docs.items():
                key = snapshot_key(backup_id, table)
                self._storage.store(key, doc)
                written.append(key)
        except OSError:
            for key in written:
                self._storage.remove(key)
            if self._storage.exists(backup_key(backup_id)):
                self._storage.remove(backup_key(backup_id))
            raise
        logger.info("Backup %s created (%d tables)", backup_id, len(self._tables.tables))
        return backup_id

    def list(self) -> list[str]:
        return [
            name
            for name in self._storage.list(BACKUPS_DIR)
            if not name.startswith(".") and self._storage.is_dir(backup_key(name))
        ]

    def exists(self, backup_id: str) -> bool:
        # Membership in the listing, so ids like "../tables" never resolve.
        return backup_id in self.list()

    def tables_in(self, backup_id: str) -> list[str]:
        self._require(backup_id)
        return [table_name(n) for n in self._storage.list(backup_key(backup_id)) if n.endswith(".json")]

    def _require(self, backup_id: str, table: str | None = None) -> None:
        if not self.exists(backup_id):
            raise BackupNotFound(backup_id)
        if table is not None and table not in self.tables_in(backup_id):
            raise BackupNotFound(backup_id, table)

    def get(self, backup_id: str, table: str | None = None) -> Any:
        self._require(backup_id, table)
        if table is not None:
            return self._storage.load(snapshot_key(backup_id, table))
        return {t: self._storage.load(snapshot_key(backup_id, t)) for t in self.tables_in(backup_id)}

    def get_all(self) -> dict[str, dict[str, Any]]:
        return {backup_id: self.get(backup_id) for backup_id in self.list()}

    def restore(self, backup_id: str, table: str | None = None) -> bool:
        """
        Copy snapshot(s) over the live table(s).

        Returns False (and logs) if reading or writing fails part way.
        """
        self._require(backup_id, table)
        targets = [table] if table is not None else self.tables_in(backup_id)
        try:
            for t in targets:
                if not self._tables.table_exists(t):
                    logger.warning("Backup %s holds unconfigured table %s; skipped", backup_id, t)
                    continue
                self._tables.replace_table(t, self._storage.load(snapshot_key(backup_id, t)))
        except (OSError, EveDBError) as e:
            logger.error("Restore Backup Error: %s/%s: %r", backup_id, table or "*", e)
            return False
        logger.info("Backup %s restored (%s)", backup_id, table or "all tables")
        return True

    def delete(self, backup_id: str, table: str | None = None) -> bool:
        """
        Remove one snapshot file, or the whole backup directory.

        I/O failures are logged and reported as False, never raised.
        """
        self._require(backup_id)
        if table is not None and table not in self.tables_in(backup_id):
            logger.error("Delete Backup Error: %s/%s: no such snapshot", backup_id, table)
            return False
        try:
            if table is not None:
                self._storage.remove(snapshot_key(backup_id, table))
            else:
                for name in self._storage.list(backup_key(backup_id)):
                    self._storage.remove(f"{backup_key(backup_id)}/{name}")
                self._storage.remove(backup_key(backup_id))
        except OSError as e:
            logger.error("Delete Backup Error: %s/%s: %r", backup_id, table or "*", e)
            return False
        logger.info("Backup %s deleted (%s)", backup_id, table or "all tables")
        return True

    def delete_all(self) -> list[str]:
        ids = self.list()
        for backup_id in ids:
            self.delete(backup_id)
        return ids


class BackupScheduler:
    """
    Runs BackupManager.create every `interval_ms`, forever.

    Fixed sleep between runs (no drift correction) and no exclusion against
    restore/delete requests handled at the same time.
    """

    def __init__(self, manager: BackupManager, interval_ms: int, *, report: bool = True) -> None:
        self._manager = manager
        self._interval = interval_ms / 1000
        self._report = report
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> str | None:
        try:
            backup_id = await asyncio.to_thread(self._manager.create)
        except (OSError, EveDBError) as e:
            if self._report:
                logger.error("Scheduled backup failed: %r", e)
            else:
                logger.debug("Scheduled backup failed: %r", e)
            return None
        if self._report:
            logger.info("Scheduled backup created: %s", backup_id)
        return backup_id

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.run_once()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
