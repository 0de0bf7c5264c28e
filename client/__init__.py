from __future__ import annotations

from .database_client import DatabaseClient, normalize_url
from .events import EVENT_NAMES, EventName, EventRegistry
from .types import ErrorEvent, GetResult, MutationResult, TableResult

__all__ = [
    "DatabaseClient",
    "normalize_url",
    "EventRegistry",
    "EventName",
    "EVENT_NAMES",
    "ErrorEvent",
    "GetResult",
    "MutationResult",
    "TableResult",
]
