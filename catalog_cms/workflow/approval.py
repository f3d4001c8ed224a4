"""Approval task factory and approval callbacks.

Both are written once and parametrized per entity type by an
``EntityDescriptor`` (diff fields, serializer, back-reference field).
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog

from catalog_cms.domain.entities import ApprovalTask, ResourceKind
from catalog_cms.domain.state_machines import (
    ApprovalTaskStatus,
    SyncStatus,
    TaskPriority,
    WorkflowStatus,
)
from catalog_cms.workflow.diff import compute_diff, has_meaningful_changes
from catalog_cms.workflow.pipeline import WriteOrigin, WritePipeline
from catalog_cms.workflow.snapshots import (
    CATEGORY_DIFF_FIELDS,
    COLLECTION_DIFF_FIELDS,
    serialize_category,
    serialize_collection,
)

if TYPE_CHECKING:
    from catalog_cms.workflow.sync_service import EntitySyncService

logger = structlog.get_logger()


# ============================================================================
# Entity Descriptors
# ============================================================================


@dataclass(frozen=True)
class EntityDescriptor:
    """Per-type parameters of the approval workflow.

    Attributes:
        kind: Store resource kind of the entity.
        diff_fields: Fields compared by structural equality.
        serialize: Snapshot serializer.
        back_reference: Approval task field pointing at the entity.
        set_fields: Relation fields compared as sets.
    """

    kind: ResourceKind
    diff_fields: tuple[str, ...]
    serialize: Callable[[Any], dict[str, Any] | None]
    back_reference: str
    set_fields: tuple[str, ...] = ()

    @property
    def entity_type(self) -> str:
        return self.kind.value

    @property
    def label(self) -> str:
        return self.kind.label


CATEGORY = EntityDescriptor(
    kind=ResourceKind.CATEGORY,
    diff_fields=CATEGORY_DIFF_FIELDS,
    serialize=serialize_category,
    back_reference="category_id",
)

COLLECTION = EntityDescriptor(
    kind=ResourceKind.COLLECTION,
    diff_fields=COLLECTION_DIFF_FIELDS,
    serialize=serialize_collection,
    back_reference="collection_id",
    set_fields=("categories",),
)

DESCRIPTORS: dict[str, EntityDescriptor] = {
    CATEGORY.entity_type: CATEGORY,
    COLLECTION.entity_type: COLLECTION,
}


# ============================================================================
# Approval Task Factory
# ============================================================================


def build_approval_task_payload(
    descriptor: EntityDescriptor,
    entity: Any,
    previous_state: dict[str, Any] | None,
    current_state: dict[str, Any],
    diff: dict[str, Any],
    now: datetime | None = None,
) -> dict[str, Any]:
    """Build the field values of a new approval task.

    Args:
        descriptor: Entity type descriptor.
        entity: Live entity the task reviews.
        previous_state: Snapshot before the write, None for a creation.
        current_state: Snapshot after the write.
        diff: Meaningful diff between the snapshots.
        now: Submission time, defaults to the current UTC time.

    Returns:
        Approval task fields ready for the write pipeline.
    """
    is_new = previous_state is None
    action = "Creation" if is_new else "Update"
    verb = "created" if is_new else "updated"
    display_name = current_state.get("name") or entity.slug
    submitted_at = (now or datetime.now(timezone.utc)).isoformat()

    return {
        "title": f"{action} request: {display_name}",
        "workflow_status": ApprovalTaskStatus.PENDING.value,
        "priority": TaskPriority.MEDIUM.value,
        "entity_type": descriptor.entity_type,
        "entity_id": str(entity.id),
        "entity_preview": entity.slug,
        "summary": f'{descriptor.label} "{display_name}" was {verb} and awaits approval.',
        "context_snapshot": {
            "previous": previous_state,
            "current": current_state,
            "submitted_at": submitted_at,
        },
        "metadata": {
            f"{descriptor.entity_type}_slug": entity.slug,
            f"{descriptor.entity_type}_id": entity.id,
            "submitted_at": submitted_at,
        },
        "state_before": previous_state,
        "state_after": current_state,
        "diff": diff,
        descriptor.back_reference: entity.id,
        "decision_at": None,
    }


class ApprovalTaskFactory:
    """Opens approval tasks for meaningful entity changes."""

    def __init__(self, pipeline: WritePipeline) -> None:
        self.pipeline = pipeline

    async def create(
        self,
        descriptor: EntityDescriptor,
        entity: Any,
        previous: Any = None,
    ) -> ApprovalTask | None:
        """Create an approval task if the entity changed meaningfully.

        Args:
            descriptor: Entity type descriptor.
            entity: Entity as it is after the write.
            previous: Entity as it was before the write, None on creation.

        Returns:
            The created task, or None when the diff is empty.
        """
        if entity is None:
            return None

        current_state = descriptor.serialize(entity)
        previous_state = descriptor.serialize(previous) if previous is not None else None
        diff = compute_diff(
            previous_state,
            current_state,
            descriptor.diff_fields,
            descriptor.set_fields,
        )

        if not has_meaningful_changes(diff):
            logger.debug(
                "No meaningful changes, skipping approval task",
                entity_type=descriptor.entity_type,
                entity_id=entity.id,
            )
            return None

        payload = build_approval_task_payload(
            descriptor, entity, previous_state, current_state, diff
        )
        task = await self.pipeline.create(
            ResourceKind.APPROVAL_TASK, payload, origin=WriteOrigin.SYSTEM
        )

        logger.info(
            "Approval task created",
            task_id=task.id,
            entity_type=descriptor.entity_type,
            entity_id=entity.id,
            changed_fields=sorted(diff),
        )
        return task


# ============================================================================
# Approval Callback
# ============================================================================


class EntityApprovalCallback:
    """Applies an approval decision to the entity a task points at."""

    def __init__(
        self,
        descriptor: EntityDescriptor,
        pipeline: WritePipeline,
        sync_service: "EntitySyncService",
    ) -> None:
        self.descriptor = descriptor
        self.pipeline = pipeline
        self.sync_service = sync_service

    async def approve(self, task: ApprovalTask) -> None:
        """Mark the linked entity approved and push it downstream.

        Does nothing when the task has no live back-reference.
        """
        entity = getattr(task, self.descriptor.entity_type, None)
        if entity is None or entity.id is None:
            logger.warning(
                "Approved task has no linked entity",
                task_id=task.id,
                entity_type=self.descriptor.entity_type,
            )
            return

        await self.pipeline.update(
            self.descriptor.kind,
            entity.id,
            {
                "workflow_status": WorkflowStatus.APPROVED.value,
                "sync_status": SyncStatus.PENDING.value,
                "sync_error": None,
            },
            origin=WriteOrigin.SYSTEM,
        )

        logger.info(
            "Entity approved",
            task_id=task.id,
            entity_type=self.descriptor.entity_type,
            entity_id=entity.id,
        )

        await self.sync_service.sync_by_id(entity.id)
