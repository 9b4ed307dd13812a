"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.posts import router as posts_router
from backend.app.core.errors import (
    PostValidationError,
    Violation,
    normalize_unknown_error,
    normalize_validation_error,
)
from backend.app.core.logging import Event, log_event, setup_logging
from backend.app.core.settings import settings
from backend.app.db.engine import init_db
from backend.app.db.migrations import run_migrations

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    log_event(logger, "info", Event.APP_START)
    log_event(logger, "info", Event.CONFIG_LOADED, **settings.safe_dump())
    init_db()
    run_migrations()
    log_event(logger, "info", Event.APP_READY)
    yield
    log_event(logger, "info", Event.APP_STOP)


app = FastAPI(
    title="Post API",
    version="0.1.0",
    description="Validated creation of Post resources.",
    lifespan=lifespan,
)


def _error_field(err: dict) -> str:
    # json_invalid locations end in a character offset, not a field name
    if err.get("type") == "json_invalid":
        return "body"
    return ".".join(str(part) for part in err.get("loc", ())[1:]) or "body"


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    _request: Request, exc: RequestValidationError,
) -> JSONResponse:
    """Render undecodable bodies in the same envelope as field violations."""
    violations = [
        Violation(
            field=_error_field(err),
            rule=str(err.get("type", "invalid")),
            message=str(err.get("msg", "Invalid request")),
        )
        for err in exc.errors()
    ]
    error = normalize_validation_error(PostValidationError(violations))
    return JSONResponse(status_code=error.http_status, content=error.to_envelope())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log details, answer with the failure envelope."""
    error = normalize_unknown_error(exc, operation=f"{request.method} {request.url.path}")
    return JSONResponse(status_code=error.http_status, content=error.to_envelope())


app.include_router(health_router, tags=["health"])
app.include_router(posts_router, tags=["posts"])
