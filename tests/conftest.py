"""Shared fixtures for catalog CMS tests."""

from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from catalog_cms.application.catalog_service import (
    CatalogService,
    WorkflowEngine,
    build_workflow_engine,
    get_catalog_service,
)
from catalog_cms.catalog.store import InMemoryCatalogStore
from catalog_cms.infrastructure.sync_client import MedusaSyncClient, SyncResponse
from catalog_cms.main import app


@pytest.fixture
def store() -> InMemoryCatalogStore:
    """Create an empty in-memory catalog store."""
    return InMemoryCatalogStore()


@pytest.fixture
def sync_client() -> MagicMock:
    """Create a mock Medusa sync client that accepts every push."""
    client = MagicMock(spec=MedusaSyncClient)
    client.sync_categories = AsyncMock(return_value=SyncResponse(ok=True, status=200))
    client.sync_collections = AsyncMock(return_value=SyncResponse(ok=True, status=200))
    client.close = AsyncMock()
    return client


@pytest.fixture
def engine(store: InMemoryCatalogStore, sync_client: MagicMock) -> WorkflowEngine:
    """Assemble the workflow engine with sync enabled."""
    return build_workflow_engine(store, sync_client, sync_disabled=False)


@pytest.fixture
def service(engine: WorkflowEngine) -> CatalogService:
    """Create a catalog service over the test engine."""
    return CatalogService(engine)


@pytest.fixture
def client(service: CatalogService) -> Iterator[TestClient]:
    """Create an API test client backed by the test service."""
    app.dependency_overrides[get_catalog_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
