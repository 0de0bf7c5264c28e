from __future__ import annotations

from typing import Any, Protocol


class DocumentStorage(Protocol):
    """
    Minimal storage interface: JSON documents under slash-separated keys,
    e.g. "tables/main.json" or "backups/1700000000000/main.json".

    A key with children (e.g. "backups/1700000000000") behaves like a directory.
    """

    def load(self, key: str) -> Any:
        """Load and return the document at `key`. Raises ReadError if missing or invalid."""
        ...

    def store(self, key: str, doc: Any) -> None:
        """Persist the full document, creating parent directories."""
        ...

    def list(self, prefix: str) -> list[str]:
        """Names of the immediate children of `prefix`, sorted. Empty if absent."""
        ...

    def remove(self, key: str) -> None:
        """Remove a document or an empty directory. Raises OSError on failure."""
        ...

    def exists(self, key: str) -> bool:
        ...

    def is_dir(self, key: str) -> bool:
        """True if `key` has (or had) children rather than being a document."""
        ...
