from __future__ import annotations

import contextlib
import threading
from typing import Iterator


class KeyLockRegistry:
    """
    Provides a stable lock per storage key (one per table) to avoid global contention.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock


@contextlib.contextmanager
def optional_lock(registry: KeyLockRegistry | None, key: str) -> Iterator[None]:
    if registry is None:
        yield
        return
    with registry.lock_for(key):
        yield
