"""HTTP middleware: recovery, request logging and timeouts.

Registered by ``create_app`` so that, outermost first, the chain reads
recovery -> request logger -> timeouts -> CORS -> routes.
"""

import asyncio
import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request, Response

from .core.logging import bind_request_context, clear_request_context, get_logger
from .metrics import observe_request
from .responses import error_response

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
INTERNAL_ERROR_MESSAGE = "Internal server error"

CallNext = Callable[[Request], Awaitable[Response]]


async def recovery_middleware(request: Request, call_next: CallNext) -> Response:
    """Turn any exception escaping the handlers into a 500 response."""
    try:
        return await call_next(request)
    except Exception as exc:
        request_id = getattr(request.state, "request_id", None)
        logger.error(
            "Recovered from unhandled exception",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            error=str(exc),
            exc_info=True,
        )
        response = error_response(500, INTERNAL_ERROR_MESSAGE)
        if request_id:
            response.headers[REQUEST_ID_HEADER] = request_id
        return response


async def request_logging_middleware(request: Request, call_next: CallNext) -> Response:
    """Assign a request id, bind it to the log context and log the outcome."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    request.state.request_id = request_id
    remote_addr = request.client.host if request.client else None

    clear_request_context()
    bind_request_context(
        request_id=request_id,
        http_method=request.method,
        http_path=request.url.path,
        remote_addr=remote_addr,
    )

    start_time = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        observe_request(request.method, request.url.path, 500, start_time)
        raise
    finally:
        clear_request_context()

    duration = observe_request(request.method, request.url.path, response.status_code, start_time)
    response.headers[REQUEST_ID_HEADER] = request_id

    if response.status_code >= 500:
        log = logger.error
    elif response.status_code >= 400:
        log = logger.warning
    else:
        log = logger.info
    log(
        "Request processed",
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        bytes=int(response.headers.get("content-length", 0) or 0),
        duration_ms=round(duration * 1000, 3),
        remote_addr=remote_addr,
    )
    return response


def timeout_middleware(read_timeout: float, write_timeout: float):
    """Bound body reads by ``read_timeout`` and handlers by ``write_timeout``."""

    async def _timeout_middleware(request: Request, call_next: CallNext) -> Response:
        try:
            await asyncio.wait_for(request.body(), timeout=read_timeout)
        except asyncio.TimeoutError:
            logger.warning("Request body read timed out", timeout=read_timeout)
            return error_response(503, "request body read timed out")

        try:
            return await asyncio.wait_for(call_next(request), timeout=write_timeout)
        except asyncio.TimeoutError:
            logger.warning("Request handling timed out", timeout=write_timeout)
            return error_response(504, "request timed out")

    return _timeout_middleware


__all__ = [
    "REQUEST_ID_HEADER",
    "INTERNAL_ERROR_MESSAGE",
    "recovery_middleware",
    "request_logging_middleware",
    "timeout_middleware",
]
