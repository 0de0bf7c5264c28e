from __future__ import annotations

import json
import threading
from typing import Any

from .errors import ReadError
from .interfaces import DocumentStorage


class InMemoryStorage(DocumentStorage):
    """
    Dict-backed storage with the same semantics as DiskJsonStorage.

    Documents are kept serialized, so a loaded document is always a fresh
    copy, like reading a file. Directories are tracked explicitly so an
    emptied backup directory still exists until it is removed.
    """

    def __init__(self, files: dict[str, Any] | None = None) -> None:
        self._guard = threading.Lock()
        self._files: dict[str, str] = {}
        self._dirs: set[str] = set()
        for key, doc in (files or {}).items():
            self.store(key, doc)

    def load(self, key: str) -> Any:
        with self._guard:
            raw = self._files.get(key)
        if raw is None:
            raise ReadError(key, "file not found")
        try:
            return json.loads(raw)
        except ValueError as e:
            raise ReadError(key, str(e)) from e

    def store(self, key: str, doc: Any) -> None:
        raw = json.dumps(doc)
        parts = key.split("/")
        with self._guard:
            for i in range(1, len(parts)):
                self._dirs.add("/".join(parts[:i]))
            self._files[key] = raw

    def store_raw(self, key: str, raw: str) -> None:
        """Write unparsed text, e.g. to simulate a corrupted file."""
        with self._guard:
            parts = key.split("/")
            for i in range(1, len(parts)):
                self._dirs.add("/".join(parts[:i]))
            self._files[key] = raw

    def list(self, prefix: str) -> list[str]:
        head = prefix.rstrip("/") + "/"
        names = set()
        with self._guard:
            for key in list(self._files) + list(self._dirs):
                if key.startswith(head):
                    names.add(key[len(head):].split("/", 1)[0])
        return sorted(names)

    def remove(self, key: str) -> None:
        with self._guard:
            if key in self._files:
                del self._files[key]
                return
            if key in self._dirs:
                head = key + "/"
                if any(k.startswith(head) for k in list(self._files) + list(self._dirs)):
                    raise OSError(f"Directory not empty: {key}")
                self._dirs.discard(key)
                return
        raise FileNotFoundError(key)

    def exists(self, key: str) -> bool:
        with self._guard:
            return key in self._files or key in self._dirs

    def is_dir(self, key: str) -> bool:
        with self._guard:
            return key in self._dirs
