"""Telescope status snapshot service (FastAPI application package)."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from .api import api_router
from .core.config import Settings, settings as default_settings
from .core.errors import NotFound, StorageError, UnknownFilter, ValidationError
from .core.logging_config import log_context, setup_logging
from .core.metrics import start_metrics_server
from .db.session import Database
from .services.renderer import SkyRenderer, SubprocessSkyRenderer
from .services.status import StatusService
from .services.store import SnapshotStore

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    renderer: SkyRenderer | None = None,
) -> FastAPI:
    settings = settings or default_settings
    setup_logging()

    database = Database.from_settings(settings)
    store = SnapshotStore(database)
    service = StatusService(
        store,
        renderer or SubprocessSkyRenderer.from_settings(settings),
        settings,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        database.init_db()
        start_metrics_server(settings)
        logger.info("Status service ready", extra={"database": database.engine.url.render_as_string()})
        yield
        database.dispose()

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.status_service = service
    app.include_router(api_router, prefix=settings.api_prefix)
    _register_error_handlers(app)

    @app.middleware("http")
    async def _bind_request(request: Request, call_next):
        with log_context(request=f"{request.method} {request.url.path}"):
            return await call_next(request)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        """Provide a friendly landing response for the bare hostname."""

        return {
            "message": (
                f"{settings.app_name} is online. Try GET "
                f"{settings.api_prefix}/status for the latest snapshot."
            )
        }

    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFound)
    async def _not_found(request: Request, exc: NotFound) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"error": "not_found", "id": exc.snapshot_id, "detail": str(exc)},
        )

    @app.exception_handler(ValidationError)
    async def _invalid(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"error": "validation_error", "detail": jsonable_encoder(exc.errors)},
        )

    @app.exception_handler(StorageError)
    async def _storage(request: Request, exc: StorageError) -> JSONResponse:
        return JSONResponse(
            status_code=503,
            content={"error": "storage_error", "stage": exc.stage, "message": exc.message},
        )

    @app.exception_handler(UnknownFilter)
    async def _unknown_filter(request: Request, exc: UnknownFilter) -> JSONResponse:
        logger.error("Snapshot carries an unknown filter code", extra={"value": repr(exc.value)})
        return JSONResponse(
            status_code=422,
            content={"error": "unknown_filter", "value": jsonable_encoder(exc.value)},
        )


__all__ = ["create_app"]
