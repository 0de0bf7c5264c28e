from __future__ import annotations

import json
import threading
import time

import pytest

from persistence.errors import InvalidKeyPath, PathNotFound, ReadError, TableNotFound
from persistence.memory_store import InMemoryStorage
from persistence.tables import TableStore


def _store(storage=None, **kwargs) -> TableStore:
    store = TableStore(storage or InMemoryStorage(), ["main", "test"], **kwargs)
    store.ensure_tables()
    return store


def test_fresh_tables_are_empty():
    store = _store()
    assert store.get_table("main") == {}
    assert store.get_all() == {"main": {}, "test": {}}


def test_ensure_tables_keeps_existing_documents():
    storage = InMemoryStorage({"tables/main.json": {"keep": 1}})
    store = TableStore(storage, ["main", "test"])
    assert store.ensure_tables() == ["test"]
    assert store.get_table("main") == {"keep": 1}


def test_set_get_delete_scenario():
    store = _store()
    assert store.set_path("main", "a.b", 5) == {"a": {"b": 5}}
    assert store.get_path("main", "a.b") == 5

    result = store.delete_path("main", "a")
    assert result.removed is True
    assert result.document == {}
    assert store.get_table("main") == {}
    with pytest.raises(PathNotFound):
        store.get_path("main", "a.b")


@pytest.mark.parametrize("value", [1, "text", [1, 2], {"x": [None]}, 2.5, True])
def test_set_then_get_returns_value(value):
    store = _store()
    store.set_path("test", "k.v", value)
    assert store.get_path("test", "k.v") == value


def test_delete_missing_path_reports_not_removed():
    store = _store()
    result = store.delete_path("main", "nothing.here")
    assert result.removed is False
    assert result.document == {}


@pytest.mark.parametrize("falsy", [0, False, "", None])
def test_falsy_values_read_as_absent(falsy):
    store = _store()
    store.set_path("main", "k", falsy)
    with pytest.raises(PathNotFound):
        store.get_path("main", "k")


def test_strict_existence_finds_falsy_values():
    store = _store(truthy_existence=False)
    store.set_path("main", "k", 0)
    assert store.get_path("main", "k") == 0


def test_delete_table_resets_document():
    store = _store()
    store.set_path("main", "a", 1)
    assert store.delete_table("main") == {}
    assert store.get_table("main") == {}


def test_unknown_table_and_bad_path():
    store = _store()
    assert store.table_exists("main") is True
    assert store.table_exists("ghost") is False
    with pytest.raises(TableNotFound):
        store.get_table("ghost")
    with pytest.raises(TableNotFound):
        store.set_path("ghost", "a", 1)
    with pytest.raises(InvalidKeyPath):
        store.set_path("main", "", 1)


def test_corrupt_or_missing_file_is_read_error():
    storage = InMemoryStorage()
    store = _store(storage)
    storage.store_raw("tables/main.json", "{not json")
    with pytest.raises(ReadError):
        store.get_table("main")

    storage.store("tables/test.json", [1, 2])
    with pytest.raises(ReadError):
        store.get_table("test")

    storage.remove("tables/test.json")
    with pytest.raises(ReadError):
        store.get_table("test")


def test_disk_layout(disk_database, settings):
    from pathlib import Path

    disk_database.tables.set_path("main", "a.b", 5)
    root = Path(settings.path)
    assert json.loads((root / "tables" / "main.json").read_text()) == {"a": {"b": 5}}
    assert json.loads((root / "tables" / "test.json").read_text()) == {}
    assert (root / "backups").is_dir()


class _InterleavingStorage(InMemoryStorage):
    """Holds every loader until all writers have read the same document."""

    def __init__(self, parties: int) -> None:
        super().__init__()
        self.barrier = threading.Barrier(parties, timeout=5)
        self.armed = False

    def load(self, key):
        doc = super().load(key)
        if self.armed:
            self.barrier.wait()
        return doc


class _SlowStorage(InMemoryStorage):
    def load(self, key):
        doc = super().load(key)
        time.sleep(0.05)
        return doc


def _concurrent_sets(store: TableStore) -> None:
    threads = [
        threading.Thread(target=store.set_path, args=("main", "a", 1)),
        threading.Thread(target=store.set_path, args=("main", "b", 2)),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()


def test_concurrent_writers_lose_an_update():
    storage = _InterleavingStorage(parties=2)
    store = _store(storage)
    storage.armed = True

    _concurrent_sets(store)

    storage.armed = False
    final = store.get_table("main")
    # Both writers loaded {} and the later whole-document write wins.
    assert final in ({"a": 1}, {"b": 2})


def test_serialized_writers_keep_both_updates():
    store = _store(_SlowStorage(), serialize_writes=True)

    _concurrent_sets(store)

    assert store.get_table("main") == {"a": 1, "b": 2}
