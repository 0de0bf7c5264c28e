from __future__ import annotations

import asyncio
from typing import Any, Protocol

from .backups import BackupManager
from .tables import DeleteResult, TableStore


class AsyncTableRepository(Protocol):
    def table_exists(self, name: str) -> bool: ...

    async def get_table(self, name: str) -> dict[str, Any]: ...
    async def get_all(self) -> dict[str, dict[str, Any]]: ...
    async def get_path(self, name: str, path: str) -> Any: ...
    async def set_path(self, name: str, path: str, value: Any) -> dict[str, Any]: ...
    async def delete_path(self, name: str, path: str) -> DeleteResult: ...
    async def delete_table(self, name: str) -> dict[str, Any]: ...


class AsyncBackupRepository(Protocol):
    async def create(self) -> str: ...
    async def list(self) -> list[str]: ...
    async def get(self, backup_id: str, table: str | None = None) -> Any: ...
    async def get_all(self) -> dict[str, dict[str, Any]]: ...
    async def restore(self, backup_id: str, table: str | None = None) -> bool: ...
    async def delete(self, backup_id: str, table: str | None = None) -> bool: ...
    async def delete_all(self) -> list[str]: ...


class AsyncTableStore(AsyncTableRepository):
    """
    Async wrapper around TableStore.
    Uses asyncio.to_thread to avoid blocking the event loop on file I/O.
    """

    def __init__(self, store: TableStore) -> None:
        self._store = store

    @property
    def tables(self) -> list[str]:
        return self._store.tables

    def table_exists(self, name: str) -> bool:
        return self._store.table_exists(name)

    async def get_table(self, name: str) -> dict[str, Any]:
        return await asyncio.to_thread(self._store.get_table, name)

    async def get_all(self) -> dict[str, dict[str, Any]]:
        return await asyncio.to_thread(self._store.get_all)

    async def get_path(self, name: str, path: str) -> Any:
        return await asyncio.to_thread(self._store.get_path, name, path)

    async def set_path(self, name: str, path: str, value: Any) -> dict[str, Any]:
        return await asyncio.to_thread(self._store.set_path, name, path, value)

    async def delete_path(self, name: str, path: str) -> DeleteResult:
        return await asyncio.to_thread(self._store.delete_path, name, path)

    async def delete_table(self, name: str) -> dict[str, Any]:
        return await asyncio.to_thread(self._store.delete_table, name)


class AsyncBackupManager(AsyncBackupRepository):
    def __init__(self, manager: BackupManager) -> None:
        self._manager = manager

    async def create(self) -> str:
        return await asyncio.to_thread(self._manager.create)

    async def list(self) -> list[str]:
        return await asyncio.to_thread(self._manager.list)

    async def get(self, backup_id: str, table: str | None = None) -> Any:
        return await asyncio.to_thread(self._manager.get, backup_id, table)

    async def get_all(self) -> dict[str, dict[str, Any]]:
        return await asyncio.to_thread(self._manager.get_all)

    async def restore(self, backup_id: str, table: str | None = None) -> bool:
        return await asyncio.to_thread(self._manager.restore, backup_id, table)

    async def delete(self, backup_id: str, table: str | None = None) -> bool:
        return await asyncio.to_thread(self._manager.delete, backup_id, table)

    async def delete_all(self) -> list[str]:
        return await asyncio.to_thread(self._manager.delete_all)
