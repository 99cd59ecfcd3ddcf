"""FastAPI application entrypoint."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.config import Settings, get_settings
from app.errors import ApiError, internal_error
from app.repositories.base import RecordStore
from app.repositories.memory import InMemoryStore
from app.repositories.sql import SqlStore, build_engine
from app.routes import submissions_router, users_router
from app.schemas.error import ErrorResponse, ValidationErrorItem

logger = logging.getLogger(__name__)


def _build_store(settings: Settings) -> RecordStore:
    if settings.database_url:
        return SqlStore(build_engine(settings.database_url))
    return InMemoryStore()


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    store = app.state.store
    if isinstance(store, SqlStore):
        store.create_tables()
        logger.info("app.startup store=sql tables=verified")
    yield


def _validation_payload(exc: RequestValidationError) -> ErrorResponse:
    errors = [
        ValidationErrorItem(
            loc=[str(part) if not isinstance(part, int) else part for part in error.get("loc", ())],
            msg=str(error.get("msg", "")),
            type=str(error.get("type", "")),
        ).model_dump()
        for error in exc.errors()
    ]
    return ErrorResponse(code="VALIDATION_ERROR", message="Invalid request payload", details={"errors": errors})


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Volunteer Hours API", version="1.0.0", lifespan=_lifespan)
    app.state.store = _build_store(settings)
    app.state.object_storage = None

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        payload = _validation_payload(exc)
        return JSONResponse(status_code=422, content=payload.model_dump(mode="json"))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "app.unhandled_error method=%s path=%s error=%s",
            request.method,
            request.url.path,
            type(exc).__name__,
        )
        payload = internal_error().payload
        return JSONResponse(status_code=500, content=payload.model_dump(mode="json", exclude_none=True))

    app.include_router(users_router, prefix=settings.api_prefix)
    app.include_router(submissions_router, prefix=settings.api_prefix)

    return app


app = create_app()
