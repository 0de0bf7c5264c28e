"""
Dot-delimited key paths into nested JSON documents.

JSON values are the plain Python types `json` produces: dict, list, str,
int, float, bool and None. The resolver walks them explicitly; dicts are
indexed by segment, lists by integer segment.
"""

from __future__ import annotations

import math
from typing import Any

from .errors import InvalidKeyPath


class _Missing:
    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def split_path(path: Any) -> list[str]:
    if not isinstance(path, str) or not path:
        raise InvalidKeyPath(path)
    segments = path.split(".")
    if any(s == "" for s in segments):
        raise InvalidKeyPath(path)
    return segments


def _list_index(segment: str) -> int | None:
    if segment.isascii() and segment.isdigit():
        return int(segment)
    return None


def _child(container: Any, segment: str) -> Any:
    if isinstance(container, dict):
        return container.get(segment, MISSING)
    if isinstance(container, list):
        idx = _list_index(segment)
        if idx is None or idx >= len(container):
            return MISSING
        return container[idx]
    return MISSING


def get(doc: Any, path: str) -> Any:
    """Return the value at `path`, or MISSING."""
    node = doc
    for segment in split_path(path):
        node = _child(node, segment)
        if node is MISSING:
            return MISSING
    return node


def _assign(container: dict | list, segment: str, value: Any) -> None:
    if isinstance(container, list):
        idx = _list_index(segment)
        if idx is not None:
            if idx >= len(container):
                container.extend([None] * (idx + 1 - len(container)))
            container[idx] = value
            return
        raise InvalidKeyPath(segment)
    container[segment] = value


def set(doc: dict, path: str, value: Any) -> None:
    """
    Set `value` at `path`, mutating `doc`.

    Missing intermediates, and intermediates holding a scalar, become new
    objects. List intermediates are indexed by integer segment and padded
    with None past their end.
    """
    segments = split_path(path)
    node: dict | list = doc
    for segment in segments[:-1]:
        nxt = _child(node, segment)
        if not isinstance(nxt, (dict, list)):
            nxt = {}
            _assign(node, segment, nxt)
        node = nxt
    _assign(node, segments[-1], value)


def remove(doc: dict, path: str) -> bool:
    """
    Remove the value at `path`. Returns True if something was removed.

    Intermediate containers left empty by the removal are kept.
    """
    segments = split_path(path)
    parent = get(doc, ".".join(segments[:-1])) if len(segments) > 1 else doc
    last = segments[-1]
    if isinstance(parent, dict):
        if last not in parent:
            return False
        del parent[last]
        return True
    if isinstance(parent, list):
        idx = _list_index(last)
        if idx is None or idx >= len(parent):
            return False
        del parent[idx]
        return True
    return False


def is_truthy(value: Any) -> bool:
    """JavaScript truthiness over JSON values: [] and {} are truthy."""
    if value is None or value is MISSING or value is False:
        return False
    if isinstance(value, bool):
        return True
    if isinstance(value, (int, float)):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        return value != ""
    return True


def value_present(value: Any, truthy_existence: bool = True) -> bool:
    """
    Existence check used by the table store and the client.

    With truthy_existence a stored 0, false, "" or null reads as absent,
    same as a missing path.
    """
    if value is MISSING:
        return False
    if truthy_existence:
        return is_truthy(value)
    return True
