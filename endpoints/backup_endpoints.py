from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends

from persistence.errors import InvalidInput
from persistence.repositories import AsyncBackupManager

from .deps import get_backups, require_auth
from .schemas import BackupMethodBody

router = APIRouter(prefix="/backup", tags=["backups"], dependencies=[Depends(require_auth)])
logger = logging.getLogger(__name__)


@router.get("/")
async def list_backups(backups: AsyncBackupManager = Depends(get_backups)) -> dict[str, Any]:
    return {"code": 200, "data": await backups.get_all()}


@router.post("/")
async def create_backup(
    body: BackupMethodBody | None = Body(default=None),
    backups: AsyncBackupManager = Depends(get_backups),
) -> dict[str, Any]:
    if body is None or body.method != "create":
        raise InvalidInput("Invalid method")
    backup_id = await backups.create()
    return {
        "code": 200,
        "message": "Backup was created successfully",
        "id": backup_id,
        "success": True,
    }


@router.delete("/")
async def delete_all_backups(backups: AsyncBackupManager = Depends(get_backups)) -> dict[str, Any]:
    ids = await backups.delete_all()
    logger.info("Deleted %d backups", len(ids))
    return {
        "code": 200,
        "message": "All backups was deleted successfully",
        "id": ids,
        "success": True,
    }


@router.get("/{backup_id}")
async def get_backup(
    backup_id: str,
    table: str | None = None,
    backups: AsyncBackupManager = Depends(get_backups),
) -> dict[str, Any]:
    if table:
        data = await backups.get(backup_id, table)
        return {"code": 200, "id": backup_id, "table": table, "data": data}
    return {"code": 200, "id": backup_id, "tables": await backups.get(backup_id)}


@router.post("/{backup_id}")
async def restore_backup(
    backup_id: str,
    body: BackupMethodBody | None = Body(default=None),
    backups: AsyncBackupManager = Depends(get_backups),
) -> dict[str, Any]:
    method = body.method if body is not None else None
    if method == "create":
        raise InvalidInput("Invalid usage")
    if method != "restore":
        raise InvalidInput("Invalid method")

    table = body.table or None
    ok = await backups.restore(backup_id, table)
    payload: dict[str, Any] = {
        "code": 200,
        "message": "Restore from backup was successfully" if ok else "Restore from backup failed",
    }
    if table:
        payload["table"] = table
    payload["success"] = ok
    return payload


@router.delete("/{backup_id}")
async def delete_backup(
    backup_id: str,
    table: str | None = None,
    backups: AsyncBackupManager = Depends(get_backups),
) -> dict[str, Any]:
    ok = await backups.delete(backup_id, table or None)
    if table:
        message = f'Table "{table}" was deleted successfully from backup: "{backup_id}"'
        if not ok:
            message = f'Table "{table}" could not be deleted from backup: "{backup_id}"'
        return {"code": 200, "message": message, "id": backup_id, "table": table, "success": ok}
    message = f'Backup "{backup_id}" was deleted successfully' if ok else f'Backup "{backup_id}" could not be deleted'
    return {"code": 200, "message": message, "id": backup_id, "success": ok}
