"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from catalog_cms.api.approval_tasks import router as approval_tasks_router
from catalog_cms.api.categories import router as categories_router
from catalog_cms.api.collections import router as collections_router
from catalog_cms.api.health import router as health_router
from catalog_cms.api.reference_data import currencies_router, sales_channels_router

__all__ = [
    "approval_tasks_router",
    "categories_router",
    "collections_router",
    "currencies_router",
    "health_router",
    "sales_channels_router",
]
