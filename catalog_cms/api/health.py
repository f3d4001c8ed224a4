"""Liveness and readiness endpoints."""

from fastapi import APIRouter
from pydantic import BaseModel

from catalog_cms.infrastructure.config import settings

router = APIRouter()

SERVICE_NAME = "catalog-cms"


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness with the sync configuration the service started with."""

    status: str
    storage_backend: str
    sync_configured: bool
    sync_disabled: bool


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", service=SERVICE_NAME, version=settings.api_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """Report readiness.

    A missing sync secret does not make the service unready; syncs
    record the error on the entity instead.
    """
    return ReadinessResponse(
        status="ready",
        storage_backend=settings.storage_backend,
        sync_configured=bool(settings.sync_secret),
        sync_disabled=settings.medusa_sync_disabled,
    )
