"""Entity sync services.

Push approved catalog entities to Medusa and record the outcome on the
entity's ``sync_status``/``sync_error``. Gates are checked in a fixed
order: existence, slug, kill switch, approval.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import structlog

from catalog_cms.catalog.store import CatalogStore
from catalog_cms.domain.entities import Category, Collection, ResourceKind
from catalog_cms.domain.state_machines import SyncStatus, Visibility, WorkflowStatus
from catalog_cms.infrastructure.config import settings
from catalog_cms.infrastructure.sync_client import MedusaSyncClient, SyncResponse
from catalog_cms.workflow.pipeline import WriteOrigin, WritePipeline
from catalog_cms.workflow.value_per_point import normalize_value_per_points

logger = structlog.get_logger()


@dataclass
class SyncResult:
    """Outcome of a sync attempt."""

    ok: bool
    status: str | None = None
    reason: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, dropping unset fields."""
        result: dict[str, Any] = {"ok": self.ok}
        for name in ("status", "reason", "error"):
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        return result


def _rank(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


class EntitySyncService(ABC):
    """Base sync service for one catalog entity type."""

    kind: ResourceKind

    def __init__(
        self,
        store: CatalogStore,
        pipeline: WritePipeline,
        client: MedusaSyncClient,
        sync_disabled: bool | None = None,
    ) -> None:
        """Initialize sync service.

        Args:
            store: Catalog store to load entities from.
            pipeline: Write pipeline for status updates.
            client: Medusa sync client.
            sync_disabled: Kill switch (defaults to settings).
        """
        self.store = store
        self.pipeline = pipeline
        self.client = client
        self.sync_disabled = (
            settings.medusa_sync_disabled if sync_disabled is None else sync_disabled
        )

    async def sync_by_id(self, entity_id: int) -> SyncResult:
        """Load an entity and sync it."""
        entity = await self.store.get(self.kind, entity_id)
        return await self.sync(entity)

    async def sync(self, entity: Any) -> SyncResult:
        """Sync a loaded entity.

        Args:
            entity: Entity with value-per-points populated, or None.

        Returns:
            SyncResult describing what happened.
        """
        if entity is None:
            return SyncResult(ok=False, reason="entity_not_found")

        if not entity.slug:
            await self._update_sync_state(entity.id, SyncStatus.ERROR, "Missing slug")
            return SyncResult(ok=False, reason="missing_slug")

        if not settings.is_production:
            logger.debug(
                "Sync invoked",
                entity_type=self.kind.value,
                entity_id=entity.id,
                slug=entity.slug,
                workflow_status=entity.workflow_status,
                sync_status=entity.sync_status,
            )

        if self.sync_disabled:
            logger.warning("Sync disabled via MEDUSA_SYNC_DISABLED flag")
            await self._update_sync_state(entity.id, SyncStatus.NOT_SYNCED, "Sync disabled")
            return SyncResult(ok=False, reason="sync_disabled")

        if entity.workflow_status != WorkflowStatus.APPROVED.value:
            if entity.sync_status != SyncStatus.NOT_SYNCED.value:
                await self._update_sync_state(entity.id, SyncStatus.NOT_SYNCED, None)
            if not settings.is_production:
                logger.debug(
                    "Skipping sync of unapproved entity",
                    entity_type=self.kind.value,
                    slug=entity.slug,
                    workflow_status=entity.workflow_status,
                )
            return SyncResult(ok=False, reason="not_approved")

        await self._update_sync_state(entity.id, SyncStatus.PENDING, None)

        payload = await self.build_payload(entity)
        response = await self.push([payload])

        if response.ok:
            await self._update_sync_state(entity.id, SyncStatus.SYNCED, None)
            logger.info("Entity synced", entity_type=self.kind.value, slug=entity.slug)
            return SyncResult(ok=True, status=SyncStatus.SYNCED.value)

        message = response.error or f"Failed to sync {self.kind.value}"
        await self._update_sync_state(entity.id, SyncStatus.ERROR, message)
        logger.error(
            "Entity sync failed",
            entity_type=self.kind.value,
            slug=entity.slug,
            error=message,
        )
        return SyncResult(ok=False, error=message)

    async def _update_sync_state(
        self, entity_id: int, status: SyncStatus, error: str | None
    ) -> None:
        await self.pipeline.update(
            self.kind,
            entity_id,
            {"sync_status": status.value, "sync_error": error},
            origin=WriteOrigin.SYSTEM,
        )

    @abstractmethod
    async def build_payload(self, entity: Any) -> dict[str, Any]:
        """Build the Medusa payload item for an entity."""

    @abstractmethod
    async def push(self, items: list[dict[str, Any]]) -> SyncResponse:
        """Send payload items to Medusa."""


class CollectionSyncService(EntitySyncService):
    """Syncs collections to Medusa."""

    kind = ResourceKind.COLLECTION

    async def build_payload(self, entity: Collection) -> dict[str, Any]:
        return {
            "title": entity.name,
            "slug": entity.slug,
            "order": _rank(entity.sort_rank),
            "visibility": entity.visibility or Visibility.PUBLIC.value,
            "strapi_id": entity.id,
            "strapi_slug": entity.slug,
            "value_per_points": normalize_value_per_points(entity.value_per_points),
        }

    async def push(self, items: list[dict[str, Any]]) -> SyncResponse:
        return await self.client.sync_collections(items)


class CategorySyncService(EntitySyncService):
    """Syncs categories to Medusa.

    The payload carries the slug of the category's primary collection,
    the first one containing it by sort rank then name.
    """

    kind = ResourceKind.CATEGORY

    async def _primary_collection_slug(self, category_id: int) -> str | None:
        collections = await self.store.find_collections_for_category(category_id)
        if not collections:
            return None
        return collections[0].slug or None

    async def build_payload(self, entity: Category) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": entity.name,
            "slug": entity.slug,
            "description": entity.description or "",
            "rank": _rank(entity.sort_rank),
            "is_active": True,
            "is_internal": entity.visibility == Visibility.PRIVATE.value,
        }

        collection_slug = await self._primary_collection_slug(entity.id)
        if collection_slug:
            payload["collection_slug"] = collection_slug

        payload.update(
            {
                "strapi_id": entity.id,
                "strapi_slug": entity.slug,
                "value_per_points": normalize_value_per_points(entity.value_per_points),
            }
        )
        return payload

    async def push(self, items: list[dict[str, Any]]) -> SyncResponse:
        return await self.client.sync_categories(items)
