"""Application layer module.

Contains application services (use cases) that orchestrate
the workflow engine and storage.
"""

from catalog_cms.application.catalog_service import (
    CatalogService,
    build_workflow_engine,
    get_catalog_service,
)

__all__ = [
    "CatalogService",
    "build_workflow_engine",
    "get_catalog_service",
]
