from __future__ import annotations

import contextlib
import logging
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from dotenv import load_dotenv

from endpoints.schemas import ErrorBody
from persistence.database import Database, open_database
from persistence.errors import EveDBError
from persistence.interfaces import DocumentStorage
from settings import Settings, get_settings

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database
    scheduler = database.scheduler
    if scheduler is not None:
        scheduler.start()
        logger.info("Backup task running every %d ms", database.settings.backup.interval_ms)
    try:
        yield
    finally:
        if scheduler is not None:
            await scheduler.stop()


def _error(code: int, message: str) -> JSONResponse:
    return JSONResponse(ErrorBody(code=code, message=message).model_dump(), status_code=code)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(EveDBError)
    async def handle_evedb_error(request: Request, exc: EveDBError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        fields = ", ".join(".".join(str(p) for p in e.get("loc", ())) for e in errors)
        return _error(400, f"Invalid request: {fields}" if fields else "Invalid request")


def create_app(settings: Settings | None = None, *, storage: DocumentStorage | None = None) -> FastAPI:
    if settings is None:
        load_dotenv("local.env")
        settings = get_settings()

    from endpoints.backup_endpoints import router as backup_router
    from endpoints.deps import get_database, require_auth
    from endpoints.table_endpoints import router as table_router

    app = FastAPI(lifespan=lifespan)
    app.state.database = open_database(settings, storage)

    register_exception_handlers(app)

    @app.get("/", dependencies=[Depends(require_auth)])
    async def overview(database: Database = Depends(get_database)) -> dict[str, Any]:
        return {
            "code": 200,
            "tables": await database.async_tables.get_all(),
            "backups": await database.async_backups.get_all(),
        }

    app.include_router(table_router)
    app.include_router(backup_router)

    return app


def main() -> None:
    import uvicorn

    load_dotenv("local.env")
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    settings = get_settings()
    app = create_app(settings)
    logger.info("Listening port: %d", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
