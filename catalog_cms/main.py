"""Catalog CMS application entry point.

Builds the FastAPI app: logging, middleware, routers and the handlers
that turn errors into the shared JSON envelope.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog_cms.api import (
    approval_tasks_router,
    categories_router,
    collections_router,
    currencies_router,
    health_router,
    sales_channels_router,
)
from catalog_cms.api.middleware import error_response, setup_middleware
from catalog_cms.domain.exceptions import DomainError
from catalog_cms.infrastructure.config import settings
from catalog_cms.infrastructure.logging_config import configure_logging
from catalog_cms.infrastructure.sync_client import reset_sync_client

logger = structlog.get_logger()

# Domain error codes with a status other than 400
DOMAIN_ERROR_STATUS = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "DUPLICATE_SLUG": status.HTTP_409_CONFLICT,
}


def _log_sync_configuration() -> None:
    secret = settings.sync_secret
    if secret:
        logger.info("Medusa sync secret detected", secret_length=len(secret))
    else:
        logger.warning("Medusa sync secret missing; approved entities will not sync")

    if settings.medusa_sync_disabled:
        logger.warning("Medusa sync disabled via MEDUSA_SYNC_DISABLED")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging on startup and release the sync client on shutdown."""
    configure_logging()
    logger.info(
        "Catalog CMS starting",
        version=settings.api_version,
        environment=settings.environment,
        storage_backend=settings.storage_backend,
    )
    _log_sync_configuration()

    yield

    await reset_sync_client()
    logger.info("Catalog CMS stopped")


app = FastAPI(
    title="Catalog CMS",
    description="Catalog content management with approval workflow and Medusa sync",
    version=settings.api_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
setup_middleware(app)

app.include_router(health_router, tags=["Health"])
for router in (
    collections_router,
    categories_router,
    approval_tasks_router,
    currencies_router,
    sales_channels_router,
):
    app.include_router(router)


# ============================================================================
# Exception Handlers
# ============================================================================


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = DOMAIN_ERROR_STATUS.get(exc.error_code, status.HTTP_400_BAD_REQUEST)
    logger.info(
        "Request rejected",
        path=request.url.path,
        error_code=exc.error_code,
        status_code=status_code,
    )
    return error_response(request, status_code, exc.error_code, exc.message, exc.details)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        return error_response(
            request,
            exc.status_code,
            detail.get("error_code", "ERROR"),
            detail.get("message", str(detail)),
            detail.get("details"),
        )
    return error_response(request, exc.status_code, "ERROR", str(detail))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception", path=request.url.path, method=request.method)
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An internal error occurred",
    )
