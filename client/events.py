from __future__ import annotations

import logging
from typing import Any, Callable, Literal, get_args

logger = logging.getLogger(__name__)

EventName = Literal[
    "getAll",
    "getTables",
    "getBackups",
    "backupCreate",
    "backupGet",
    "backupRestore",
    "backupDelete",
    "get",
    "getTable",
    "set",
    "delete",
    "push",
    "remove",
    "shift",
    "pop",
    "unshift",
    "add",
    "sub",
    "multi",
    "divide",
    "error",
]

EVENT_NAMES: frozenset[str] = frozenset(get_args(EventName))

Callback = Callable[[Any], Any]


class EventRegistry:
    """
    Explicit callback registration per event name.

    Callbacks run synchronously, in registration order, right after the
    operation that produced the payload completes.
    """

    def __init__(self) -> None:
        self._callbacks: dict[str, list[Callback]] = {}

    def on(self, event: EventName, callback: Callback | None = None) -> Any:
        """Register `callback` for `event`. Without a callback, returns a decorator."""
        if event not in EVENT_NAMES:
            raise ValueError(f"Unknown event: {event!r}")
        if callback is None:
            def decorator(fn: Callback) -> Callback:
                self.on(event, fn)
                return fn

            return decorator
        self._callbacks.setdefault(event, []).append(callback)
        return callback

    def off(self, event: EventName, callback: Callback) -> None:
        callbacks = self._callbacks.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def listeners(self, event: EventName) -> list[Callback]:
        return list(self._callbacks.get(event, []))

    def emit(self, event: EventName, payload: Any) -> None:
        callbacks = self._callbacks.get(event)
        if not callbacks:
            if event == "error":
                logger.debug("Unhandled client error: %s", payload)
            return
        for callback in list(callbacks):
            callback(payload)
