"""Lifecycle hooks for workflow-gated records.

``CatalogEntityLifecycle`` keeps categories and collections in review
after every user write and opens approval tasks for the changes.
``ApprovalTaskLifecycle`` stamps decisions and dispatches approvals.
"""

from datetime import datetime, timezone
from typing import Any

import structlog

from catalog_cms.catalog.store import CatalogStore
from catalog_cms.domain.entities import ResourceKind
from catalog_cms.domain.state_machines import (
    DECISION_STATUSES,
    ApprovalTaskStatus,
    SyncStatus,
    TaskPriority,
    WorkflowStatus,
    is_approval_edge,
)
from catalog_cms.workflow.approval import (
    ApprovalTaskFactory,
    EntityApprovalCallback,
    EntityDescriptor,
)
from catalog_cms.workflow.pipeline import MutationContext

logger = structlog.get_logger()


def _demote(data: dict[str, Any]) -> None:
    data["workflow_status"] = WorkflowStatus.READY_FOR_REVIEW.value
    data["sync_status"] = SyncStatus.NOT_SYNCED.value
    data["sync_error"] = None


class CatalogEntityLifecycle:
    """Hooks for one catalog entity type (category or collection)."""

    def __init__(
        self,
        descriptor: EntityDescriptor,
        store: CatalogStore,
        factory: ApprovalTaskFactory,
    ) -> None:
        self.descriptor = descriptor
        self.store = store
        self.factory = factory

    async def before_create(self, context: MutationContext) -> None:
        _demote(context.data)
        context.previous = None

    async def after_create(self, context: MutationContext) -> None:
        await self._open_task(context)

    async def before_update(self, context: MutationContext) -> None:
        if context.is_system:
            context.skip_approval_task = True
        else:
            _demote(context.data)

        context.previous = await self.store.get(self.descriptor.kind, context.entity_id)

    async def after_update(self, context: MutationContext) -> None:
        await self._open_task(context)

    async def _open_task(self, context: MutationContext) -> None:
        if context.skip_approval_task or context.is_system:
            return

        entity_id = context.result.id if context.result is not None else context.entity_id

        try:
            current = await self.store.get(self.descriptor.kind, entity_id)
            await self.factory.create(self.descriptor, current, context.previous)
        except Exception:
            logger.exception(
                "Failed to create approval task",
                entity_type=self.descriptor.entity_type,
                entity_id=entity_id,
            )


class ApprovalTaskLifecycle:
    """Hooks for approval tasks.

    Dispatches the entity-type callback when a task moves into
    APPROVED. Callback failures are logged and never fail the task
    write itself.
    """

    def __init__(
        self,
        store: CatalogStore,
        callbacks: dict[str, EntityApprovalCallback],
    ) -> None:
        self.store = store
        self.callbacks = callbacks

    async def before_create(self, context: MutationContext) -> None:
        data = context.data
        if not data.get("workflow_status"):
            data["workflow_status"] = ApprovalTaskStatus.PENDING.value
        if not data.get("priority"):
            data["priority"] = TaskPriority.MEDIUM.value
        data.setdefault("decision_at", None)

    async def after_create(self, context: MutationContext) -> None:
        return None

    async def before_update(self, context: MutationContext) -> None:
        context.previous = await self.store.get(ResourceKind.APPROVAL_TASK, context.entity_id)

        data = context.data
        if data.get("workflow_status") in DECISION_STATUSES and not data.get("decision_at"):
            data["decision_at"] = datetime.now(timezone.utc)

    async def after_update(self, context: MutationContext) -> None:
        task = await self.store.get(ResourceKind.APPROVAL_TASK, context.result.id)
        if task is None:
            return

        previous_status = context.previous.workflow_status if context.previous else None
        if not is_approval_edge(previous_status, task.workflow_status):
            return

        callback = self.callbacks.get(task.entity_type)
        if callback is None:
            logger.warning(
                "No approval callback for entity type",
                task_id=task.id,
                entity_type=task.entity_type,
            )
            return

        try:
            await callback.approve(task)
        except Exception:
            logger.exception(
                "Failed to process approved task",
                task_id=task.id,
                entity_type=task.entity_type,
                entity_id=task.entity_id,
            )
