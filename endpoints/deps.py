from __future__ import annotations

import hmac
import logging

from fastapi import Header, Request

from persistence.database import Database
from persistence.errors import AuthError
from persistence.repositories import AsyncBackupManager, AsyncTableStore

logger = logging.getLogger(__name__)

AUTH_HEADER = "auth"


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_tables(request: Request) -> AsyncTableStore:
    return get_database(request).async_tables


def get_backups(request: Request) -> AsyncBackupManager:
    return get_database(request).async_backups


async def require_auth(request: Request, auth: str | None = Header(default=None, alias=AUTH_HEADER)) -> None:
    expected = get_database(request).settings.auth
    if auth is None or not hmac.compare_digest(auth.encode("utf-8"), expected.encode("utf-8")):
        logger.info("Rejected %s %s: bad or missing auth header", request.method, request.url.path)
        raise AuthError()
