"""
FastAPI middleware: per-request log context and last-resort error responses.
"""

import time
import uuid
from typing import Callable

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from ..models.api_models import ErrorResponse

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def setup_logging_middleware(app: FastAPI) -> None:
    """
    Bind a request id for every log event emitted while handling the request.

    A client-supplied ``X-Request-ID`` is reused, otherwise one is generated;
    it is echoed on the response. Pipeline runs log under the same id.
    """

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.time()
        try:
            response = await call_next(request)
        finally:
            elapsed_ms = round((time.time() - start_time) * 1000, 2)

        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time_ms=elapsed_ms,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def setup_error_handling_middleware(app: FastAPI) -> None:
    """
    Turn unhandled exceptions into an ErrorResponse body with status 500.

    Registered before the logging middleware so the request id is bound when
    the error is logged.
    """

    @app.middleware("http")
    async def handle_errors(request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(
                "unhandled_exception",
                method=request.method,
                path=request.url.path,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            body = ErrorResponse(
                error="InternalError",
                detail=str(e) if app.debug else "An unexpected error occurred",
                request_id=getattr(request.state, "request_id", None),
            )
            return JSONResponse(status_code=500, content=body.model_dump())
