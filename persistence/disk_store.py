from __future__ import annotations

from pathlib import Path
from typing import Any

from json_store import atomic_write_json, read_json

from .errors import InvalidInput, ReadError
from .interfaces import DocumentStorage


class DiskJsonStorage(DocumentStorage):
    """
    Stores JSON documents as files under a root directory.

    - Keys map to paths relative to the root.
    - Every store rewrites the whole file (atomically).
    - No locking: callers that need it take a lock themselves.
    """

    def __init__(self, root: Path):
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, key: str) -> Path:
        path = self._root.joinpath(*key.split("/"))
        # Keys are built from request input; reject any that resolve outside the root.
        if not path.resolve().is_relative_to(self._root.resolve()):
            raise InvalidInput(f"Invalid key: {key}")
        return path

    def load(self, key: str) -> Any:
        path = self.path_for(key)
        try:
            return read_json(path)
        except FileNotFoundError as e:
            raise ReadError(key, "file not found") from e
        except (OSError, ValueError) as e:
            raise ReadError(key, str(e)) from e

    def store(self, key: str, doc: Any) -> None:
        atomic_write_json(self.path_for(key), doc)

    def list(self, prefix: str) -> list[str]:
        path = self.path_for(prefix)
        if not path.is_dir():
            return []
        # Skip in-flight temp files from atomic writes.
        return sorted(p.name for p in path.iterdir() if not p.name.endswith(".tmp"))

    def remove(self, key: str) -> None:
        path = self.path_for(key)
        if path.is_dir():
            path.rmdir()
        else:
            path.unlink()

    def exists(self, key: str) -> bool:
        return self.path_for(key).exists()

    def is_dir(self, key: str) -> bool:
        return self.path_for(key).is_dir()

    def ensure_dir(self, key: str) -> Path:
        path = self.path_for(key)
        path.mkdir(parents=True, exist_ok=True)
        return path
