"""Catalog application service.

Wires the workflow engine (write pipeline, lifecycle hooks, approval
callbacks, sync services) over a catalog store and exposes the CRUD
use cases driven by the REST API.
"""

from dataclasses import dataclass, field
from typing import Any

import structlog

from catalog_cms.catalog.store import CatalogStore, get_catalog_store, reset_catalog_store
from catalog_cms.domain.entities import ApprovalTask, Category, Collection, ResourceKind
from catalog_cms.domain.exceptions import EntityNotFoundError
from catalog_cms.infrastructure.sync_client import MedusaSyncClient, get_sync_client
from catalog_cms.workflow.approval import (
    CATEGORY,
    COLLECTION,
    ApprovalTaskFactory,
    EntityApprovalCallback,
)
from catalog_cms.workflow.lifecycle import ApprovalTaskLifecycle, CatalogEntityLifecycle
from catalog_cms.workflow.pipeline import WriteOrigin, WritePipeline
from catalog_cms.workflow.sync_service import (
    CategorySyncService,
    CollectionSyncService,
    EntitySyncService,
    SyncResult,
)

logger = structlog.get_logger()


# ============================================================================
# Workflow Engine Wiring
# ============================================================================


@dataclass
class WorkflowEngine:
    """Assembled workflow collaborators sharing one store."""

    store: CatalogStore
    pipeline: WritePipeline
    factory: ApprovalTaskFactory
    sync_services: dict[ResourceKind, EntitySyncService] = field(default_factory=dict)


def build_workflow_engine(
    store: CatalogStore,
    client: MedusaSyncClient,
    sync_disabled: bool | None = None,
) -> WorkflowEngine:
    """Assemble the workflow engine.

    Args:
        store: Catalog store.
        client: Medusa sync client.
        sync_disabled: Sync kill switch (defaults to settings).

    Returns:
        WorkflowEngine with hooks registered on its pipeline.
    """
    pipeline = WritePipeline(store)
    factory = ApprovalTaskFactory(pipeline)

    sync_services: dict[ResourceKind, EntitySyncService] = {
        ResourceKind.CATEGORY: CategorySyncService(store, pipeline, client, sync_disabled),
        ResourceKind.COLLECTION: CollectionSyncService(store, pipeline, client, sync_disabled),
    }

    callbacks = {}
    for descriptor in (CATEGORY, COLLECTION):
        pipeline.register(
            descriptor.kind, CatalogEntityLifecycle(descriptor, store, factory)
        )
        callbacks[descriptor.entity_type] = EntityApprovalCallback(
            descriptor, pipeline, sync_services[descriptor.kind]
        )

    pipeline.register(ResourceKind.APPROVAL_TASK, ApprovalTaskLifecycle(store, callbacks))

    return WorkflowEngine(
        store=store,
        pipeline=pipeline,
        factory=factory,
        sync_services=sync_services,
    )


# ============================================================================
# Catalog Service
# ============================================================================


class CatalogService:
    """Use cases for catalog records and approval tasks.

    All writes issued here are user writes; the workflow engine issues
    its own system writes internally.
    """

    def __init__(self, engine: WorkflowEngine) -> None:
        """Initialize service.

        Args:
            engine: Assembled workflow engine.
        """
        self.engine = engine
        self.store = engine.store
        self.pipeline = engine.pipeline

    async def create(self, kind: ResourceKind, data: dict[str, Any]) -> Any:
        """Create a record through the write pipeline."""
        entity = await self.pipeline.create(kind, data, origin=WriteOrigin.USER)
        logger.info("Record created", kind=kind.value, entity_id=entity.id)
        return entity

    async def update(self, kind: ResourceKind, entity_id: int, data: dict[str, Any]) -> Any:
        """Update a record through the write pipeline.

        Raises:
            EntityNotFoundError: If the record does not exist.
        """
        entity = await self.pipeline.update(kind, entity_id, data, origin=WriteOrigin.USER)
        if entity is None:
            raise EntityNotFoundError(kind.value, entity_id)
        logger.info("Record updated", kind=kind.value, entity_id=entity_id)
        return entity

    async def get(self, kind: ResourceKind, entity_id: int) -> Any:
        """Get a record.

        Raises:
            EntityNotFoundError: If the record does not exist.
        """
        entity = await self.store.get(kind, entity_id)
        if entity is None:
            raise EntityNotFoundError(kind.value, entity_id)
        return entity

    async def list_records(self, kind: ResourceKind) -> list[Any]:
        """List all records of a kind."""
        return await self.store.list_all(kind)

    async def list_child_categories(self, category_id: int) -> list[Category]:
        """Direct children of a category."""
        return await self.store.find_child_categories(category_id)

    async def list_collections_for_category(self, category_id: int) -> list[Collection]:
        """Collections containing a category, by sort rank then name."""
        return await self.store.find_collections_for_category(category_id)

    async def delete(self, kind: ResourceKind, entity_id: int) -> None:
        """Delete a record.

        Approval tasks pointing at a deleted entity keep their snapshots
        and lose only the back-reference.

        Raises:
            EntityNotFoundError: If the record does not exist.
        """
        if not await self.store.delete(kind, entity_id):
            raise EntityNotFoundError(kind.value, entity_id)
        logger.info("Record deleted", kind=kind.value, entity_id=entity_id)

    async def sync(self, kind: ResourceKind, entity_id: int) -> SyncResult:
        """Re-run sync for an entity.

        Raises:
            EntityNotFoundError: If the entity does not exist.
        """
        entity = await self.get(kind, entity_id)
        return await self.engine.sync_services[kind].sync(entity)

    async def list_approval_tasks(
        self,
        workflow_status: str | None = None,
        entity_type: str | None = None,
        priority: str | None = None,
        category_id: int | None = None,
        collection_id: int | None = None,
    ) -> list[ApprovalTask]:
        """List approval tasks, newest first.

        Args:
            workflow_status: Filter by decision status.
            entity_type: Filter by entity type.
            priority: Filter by priority.
            category_id: Filter by linked category.
            collection_id: Filter by linked collection.

        Returns:
            Matching approval tasks.
        """
        tasks = await self.store.list_all(ResourceKind.APPROVAL_TASK)

        if workflow_status:
            tasks = [t for t in tasks if t.workflow_status == workflow_status]
        if entity_type:
            tasks = [t for t in tasks if t.entity_type == entity_type]
        if priority:
            tasks = [t for t in tasks if t.priority == priority]
        if category_id is not None:
            tasks = [t for t in tasks if t.category_id == category_id]
        if collection_id is not None:
            tasks = [t for t in tasks if t.collection_id == collection_id]

        tasks.sort(key=lambda t: t.id, reverse=True)
        return tasks


# Global service instance
_catalog_service: CatalogService | None = None


def get_catalog_service() -> CatalogService:
    """Get the catalog service singleton."""
    global _catalog_service
    if _catalog_service is None:
        engine = build_workflow_engine(get_catalog_store(), get_sync_client())
        _catalog_service = CatalogService(engine)
    return _catalog_service


def reset_catalog_service() -> None:
    """Reset catalog service and its store (for testing)."""
    global _catalog_service
    reset_catalog_store()
    _catalog_service = None
