from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from persistence.repositories import AsyncTableStore

from .deps import get_tables, require_auth
from .schemas import DeletePathBody, SetPathBody

router = APIRouter(prefix="/table", tags=["tables"], dependencies=[Depends(require_auth)])


@router.get("/")
async def list_tables(tables: AsyncTableStore = Depends(get_tables)) -> dict[str, Any]:
    return {"code": 200, "data": await tables.get_all()}


@router.get("/{table}")
async def get_table(
    table: str,
    id: str | None = None,
    tables: AsyncTableStore = Depends(get_tables),
) -> Any:
    if not id:
        return await tables.get_table(table)
    value = await tables.get_path(table, id)
    return {"table": table, "id": id, "value": value}


@router.post("/{table}")
async def set_path(
    table: str,
    body: SetPathBody,
    tables: AsyncTableStore = Depends(get_tables),
) -> dict[str, Any]:
    data = await tables.set_path(table, body.id, body.value)
    return {"table": table, "data": data}


@router.delete("/{table}")
async def delete_path(
    table: str,
    body: DeletePathBody | None = Body(default=None),
    tables: AsyncTableStore = Depends(get_tables),
) -> dict[str, Any]:
    if body is None or not body.id:
        data = await tables.delete_table(table)
        return {"table": table, "data": data, "success": True}
    result = await tables.delete_path(table, body.id)
    return {"table": table, "data": result.document, "success": result.removed}
