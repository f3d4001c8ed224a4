"""HTTP middleware and the shared JSON error envelope.

Every error leaving the API, whether a domain error, an HTTP error or
an unhandled exception, has the shape produced by ``error_response``.
"""

import time
from typing import Any, Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


def error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: dict[str, Any] | list[Any] | None = None,
) -> JSONResponse:
    """Build the error envelope for a request.

    Args:
        request: Request being answered; supplies the correlation id.
        status_code: HTTP status.
        error_code: Machine-readable code, e.g. ``NOT_FOUND``.
        message: Human-readable message.
        details: Extra context for the client.

    Returns:
        JSON response with ``error_code``, ``message``, ``details`` and
        ``request_id``.
    """
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details if details is not None else {},
            "request_id": getattr(request.state, "request_id", None),
        },
    )


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Correlates logs of one request.

    Reuses the caller's ``X-Request-ID`` or mints one, binds it to the
    structlog context while the request runs and echoes it back.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        request.state.request_id = request_id

        started = time.perf_counter()
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            try:
                response = await call_next(request)
                status_code = response.status_code
            finally:
                logger.info(
                    "Request handled",
                    method=request.method,
                    path=request.url.path,
                    status_code=status_code,
                    elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
                )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Turns exceptions escaping the routes into INTERNAL_ERROR envelopes."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Request failed", method=request.method, path=request.url.path)
            return error_response(
                request,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "INTERNAL_ERROR",
                "An internal error occurred",
            )


def setup_middleware(app: FastAPI) -> None:
    """Install the request middleware.

    The last middleware added runs first, so the request context wraps
    error handling and failed requests are still correlated.
    """
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(RequestContextMiddleware)
