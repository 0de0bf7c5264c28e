from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import Any


def read_json(path: Path) -> Any:
    """
    Read JSON from disk.

    Raises FileNotFoundError for missing files and ValueError for empty files
    or invalid JSON (json.JSONDecodeError is a ValueError).
    """
    raw = path.read_text(encoding="utf-8")
    if not raw.strip():
        raise ValueError(f"{path} is empty")
    return json.loads(raw)


def atomic_write_json(path: Path, payload: Any, *, indent: int | None = None, sort_keys: bool = False) -> None:
    """
    Atomically write JSON to disk by writing to a temp file then replacing.

    The whole document is rewritten on every call.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=indent, sort_keys=sort_keys)
    tmp_path.replace(path)
