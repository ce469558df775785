"""Application factory for the collection box."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core import CollectionBoxError, ErrorKind, Settings, get_logger, setup_logging
from .middleware import (
    INTERNAL_ERROR_MESSAGE,
    recovery_middleware,
    request_logging_middleware,
    timeout_middleware,
)
from .responses import UTF8JSONResponse, error_response
from .routes import ROUTERS
from .state import CollectionBoxState, close_state, initialize_state

logger = get_logger(__name__)

_STATUS_BY_KIND = {
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.NOT_FOUND: 404,
}


async def collection_box_error_handler(request: Request, exc: CollectionBoxError):
    status_code = _STATUS_BY_KIND.get(exc.kind, 500)
    if status_code < 500:
        return error_response(status_code, str(exc))

    logger.error(
        "Request failed",
        error=str(exc),
        kind=exc.kind.name,
        partial_count=len(exc.partial),
    )
    return error_response(500, INTERNAL_ERROR_MESSAGE)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        details.append(f"{location}: {message}" if location else message)
    return error_response(400, "invalid request body: " + "; ".join(details))


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


def create_app(
    settings: Optional[Settings] = None,
    state: Optional[CollectionBoxState] = None,
) -> FastAPI:
    """Create a configured FastAPI application instance.

    When ``state`` is given the caller owns it (and has already configured
    logging); otherwise the lifespan builds the state from ``settings`` and
    closes it on shutdown.
    """
    resolved_settings = state.settings if state else (settings or Settings())
    if state is None:
        setup_logging(resolved_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting collection box...")
        owned = state is None
        app_state = state if state is not None else await initialize_state(resolved_settings)
        app.state.collection_box = app_state
        logger.info(
            "Collection box started",
            origins=len(app_state.catalog),
            database_url=resolved_settings.database_url,
        )

        try:
            yield
        finally:
            logger.info("Shutting down collection box...")
            if owned:
                await close_state(app_state)
            logger.info("Collection box shutdown complete")

    app = FastAPI(
        title="Collection Box",
        description="Extracts URLs from pasted text, labels them by origin and stores them",
        version="1.0.0",
        lifespan=lifespan,
        default_response_class=UTF8JSONResponse,
    )

    app.add_exception_handler(CollectionBoxError, collection_box_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    # Registered innermost first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=3600,
    )
    app.middleware("http")(
        timeout_middleware(
            resolved_settings.read_timeout_seconds,
            resolved_settings.write_timeout_seconds,
        )
    )
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(recovery_middleware)

    for router in ROUTERS:
        app.include_router(router)

    return app


__all__ = ["create_app"]
