"""Approval task API endpoints.

Provides endpoints for reviewing catalog changes:
- GET /approval-tasks - list tasks (filterable)
- POST /approval-tasks - open a task by hand
- GET /approval-tasks/{id} - task details with diff and snapshots
- PUT /approval-tasks/{id} - record a decision or edit priority/notes

Approving a task marks the linked entity approved and pushes it to
Medusa.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from catalog_cms.api.converters import approval_task_to_response
from catalog_cms.api.schemas import (
    ApprovalTaskCreateRequest,
    ApprovalTaskListResponse,
    ApprovalTaskResponse,
    ApprovalTaskUpdateRequest,
    EntityType,
    ErrorResponse,
)
from catalog_cms.application.catalog_service import CatalogService, get_catalog_service
from catalog_cms.domain.entities import ResourceKind
from catalog_cms.domain.state_machines import ApprovalTaskStatus, TaskPriority

router = APIRouter(prefix="/approval-tasks", tags=["Approval Tasks"])


@router.get(
    "",
    response_model=ApprovalTaskListResponse,
    summary="List approval tasks",
    description="List approval tasks, newest first, with optional filtering.",
)
async def list_approval_tasks(
    service: Annotated[CatalogService, Depends(get_catalog_service)],
    workflow_status: ApprovalTaskStatus | None = Query(
        default=None, description="Filter by decision status"
    ),
    entity_type: EntityType | None = Query(default=None, description="Filter by entity type"),
    priority: TaskPriority | None = Query(default=None, description="Filter by priority"),
    category_id: int | None = Query(default=None, description="Filter by linked category"),
    collection_id: int | None = Query(default=None, description="Filter by linked collection"),
) -> ApprovalTaskListResponse:
    tasks = await service.list_approval_tasks(
        workflow_status=workflow_status.value if workflow_status else None,
        entity_type=entity_type.value if entity_type else None,
        priority=priority.value if priority else None,
        category_id=category_id,
        collection_id=collection_id,
    )
    return ApprovalTaskListResponse(
        items=[approval_task_to_response(t) for t in tasks],
        total=len(tasks),
    )


@router.post(
    "",
    response_model=ApprovalTaskResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Create approval task",
)
async def create_approval_task(
    request: ApprovalTaskCreateRequest,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> ApprovalTaskResponse:
    task = await service.create(ResourceKind.APPROVAL_TASK, request.model_dump())
    return approval_task_to_response(task)


@router.get(
    "/{task_id}",
    response_model=ApprovalTaskResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get approval task",
)
async def get_approval_task(
    task_id: int,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> ApprovalTaskResponse:
    task = await service.get(ResourceKind.APPROVAL_TASK, task_id)
    return approval_task_to_response(task)


@router.put(
    "/{task_id}",
    response_model=ApprovalTaskResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Update approval task",
)
async def update_approval_task(
    task_id: int,
    request: ApprovalTaskUpdateRequest,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> ApprovalTaskResponse:
    """Record a decision on an approval task.

    Moving the task to approved or rejected stamps ``decision_at``
    unless given. Moving it to approved also approves and syncs the
    linked entity; sync failures are recorded on the entity, not
    returned here.

    Args:
        task_id: Approval task ID.
        request: Fields to change.
        service: Catalog service.

    Returns:
        Updated approval task.
    """
    task = await service.update(
        ResourceKind.APPROVAL_TASK,
        task_id,
        request.model_dump(exclude_unset=True),
    )
    return approval_task_to_response(task)
