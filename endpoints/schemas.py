from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class SetPathBody(BaseModel):
    id: str
    value: Any


class DeletePathBody(BaseModel):
    id: str | None = None


class BackupMethodBody(BaseModel):
    method: str | None = None
    table: str | None = None


class ErrorBody(BaseModel):
    code: int
    message: str
