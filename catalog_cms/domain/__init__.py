"""Domain layer - entities, state machines and domain exceptions."""

from catalog_cms.domain.entities import (
    ApprovalTask,
    Category,
    Collection,
    Currency,
    ResourceKind,
    SalesChannel,
    ValuePerPoint,
)
from catalog_cms.domain.exceptions import (
    DomainError,
    DuplicateSlugError,
    EntityNotFoundError,
    InvalidReferenceError,
    MissingFieldError,
    UnknownFieldError,
)
from catalog_cms.domain.state_machines import (
    ApprovalTaskStatus,
    SyncStatus,
    TaskPriority,
    Visibility,
    WorkflowStatus,
)

__all__ = [
    # Entities
    "ApprovalTask",
    "Category",
    "Collection",
    "Currency",
    "ResourceKind",
    "SalesChannel",
    "ValuePerPoint",
    # Exceptions
    "DomainError",
    "DuplicateSlugError",
    "EntityNotFoundError",
    "InvalidReferenceError",
    "MissingFieldError",
    "UnknownFieldError",
    # State Machines
    "ApprovalTaskStatus",
    "SyncStatus",
    "TaskPriority",
    "Visibility",
    "WorkflowStatus",
]
