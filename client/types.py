from __future__ import annotations

from typing import Any, NotRequired, TypedDict


class ErrorEvent(TypedDict):
    code: int
    message: str


class GetAllResult(TypedDict):
    code: int
    url: str
    data: Any


class TablesResult(TypedDict):
    code: int
    url: str
    tables: list[str]
    data: dict[str, Any]


class BackupsResult(TypedDict):
    code: int
    url: str
    backups: list[str]
    data: dict[str, Any]


class GetResult(TypedDict):
    table: str
    id: str
    value: Any
    success: bool
    code: NotRequired[int]


class TableResult(TypedDict):
    table: str | None
    data: Any
    success: bool


class MutationResult(TypedDict):
    """Outcome of a compound mutator: the value before and after."""

    table: str
    id: str
    old: Any
    new: Any
    success: bool
