from __future__ import annotations

import logging
from typing import Any, Iterable, NamedTuple

from . import keypath
from .errors import PathNotFound, ReadError, TableNotFound
from .interfaces import DocumentStorage
from .locks import KeyLockRegistry, optional_lock
from .paths import table_key

logger = logging.getLogger(__name__)


class DeleteResult(NamedTuple):
    document: dict[str, Any]
    removed: bool


class TableStore:
    """
    One JSON object per configured table, persisted whole.

    Every read loads the full file and every write rewrites it. Unless
    `serialize_writes` is set there is no lock around load/mutate/persist,
    so two writers to the same table can interleave and the later
    whole-document write drops the earlier change.
    """

    def __init__(
        self,
        storage: DocumentStorage,
        tables: Iterable[str],
        *,
        serialize_writes: bool = False,
        truthy_existence: bool = True,
    ) -> None:
        self._storage = storage
        self._tables = list(tables)
        self._locks = KeyLockRegistry() if serialize_writes else None
        self.truthy_existence = truthy_existence

    @property
    def tables(self) -> list[str]:
        return list(self._tables)

    @property
    def storage(self) -> DocumentStorage:
        return self._storage

    def table_exists(self, name: str) -> bool:
        return name in self._tables

    def ensure_tables(self) -> list[str]:
        """Create `{}` for every configured table without a file. Returns the created names."""
        created = []
        for name in self._tables:
            if not self._storage.exists(table_key(name)):
                self._storage.store(table_key(name), {})
                created.append(name)
        if created:
            logger.info("Created empty tables: %s", ", ".join(created))
        return created

    def _require(self, name: str) -> str:
        if not self.table_exists(name):
            raise TableNotFound(name)
        return table_key(name)

    def _load(self, key: str) -> dict[str, Any]:
        doc = self._storage.load(key)
        if not isinstance(doc, dict):
            raise ReadError(key, "document is not a JSON object")
        return doc

    def get_table(self, name: str) -> dict[str, Any]:
        return self._load(self._require(name))

    def get_all(self) -> dict[str, dict[str, Any]]:
        return {name: self.get_table(name) for name in self._tables}

    def get_path(self, name: str, path: str) -> Any:
        value = keypath.get(self.get_table(name), path)
        if not keypath.value_present(value, self.truthy_existence):
            raise PathNotFound(name, path)
        return value

    def set_path(self, name: str, path: str, value: Any) -> dict[str, Any]:
        key = self._require(name)
        keypath.split_path(path)
        with optional_lock(self._locks, key):
            doc = self._load(key)
            keypath.set(doc, path, value)
            self._storage.store(key, doc)
        logger.debug("SET %s.%s", name, path)
        return doc

    def delete_path(self, name: str, path: str) -> DeleteResult:
        key = self._require(name)
        keypath.split_path(path)
        with optional_lock(self._locks, key):
            doc = self._load(key)
            removed = keypath.remove(doc, path)
            self._storage.store(key, doc)
        logger.debug("DELETE %s.%s removed=%s", name, path, removed)
        return DeleteResult(doc, removed)

    def delete_table(self, name: str) -> dict[str, Any]:
        key = self._require(name)
        with optional_lock(self._locks, key):
            self._storage.store(key, {})
        logger.info("Table %s reset", name)
        return {}

    def replace_table(self, name: str, doc: dict[str, Any]) -> None:
        """Overwrite a table with a whole document (used by backup restore)."""
        key = self._require(name)
        with optional_lock(self._locks, key):
            self._storage.store(key, doc)
