"""State machines for workflow-gated catalog entities.

Catalog entities carry two independent status fields: the approval
workflow status and the outbound sync status. Approval tasks carry
their own decision status.
"""

from enum import Enum


# ============================================================================
# Entity Workflow State Machine
# ============================================================================


class WorkflowStatus(str, Enum):
    """Approval workflow states of a catalog entity.

    State diagram:
        (any user write) ──────────► READY_FOR_REVIEW
                                       │        │
                              approve  │        │ reject
                                       ▼        ▼
                                   APPROVED   REJECTED
                                       │        │
                                       └───┬────┘
                                           │ user edit
                                           ▼
                                    READY_FOR_REVIEW

    PENDING is accepted for legacy rows that predate the workflow.
    """

    PENDING = "pending"
    READY_FOR_REVIEW = "ready_for_review"
    APPROVED = "approved"
    REJECTED = "rejected"


# ============================================================================
# Sync State Machine
# ============================================================================


class SyncStatus(str, Enum):
    """Outbound propagation state of a catalog entity.

    State diagram:
        NOT_SYNCED ──approve──► PENDING ──ok──► SYNCED
            ▲                     │
            │                     └──fail──► ERROR
            │                                  │
            └──────── user edit ◄──────────────┘
    """

    NOT_SYNCED = "not_synced"
    PENDING = "pending"
    SYNCED = "synced"
    ERROR = "error"


# ============================================================================
# Approval Task State Machine
# ============================================================================


class ApprovalTaskStatus(str, Enum):
    """Decision states of an approval task.

    State diagram:
        PENDING ──approve──► APPROVED
           │
           └────reject───► REJECTED
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Statuses that record a human decision and stamp decision_at
DECISION_STATUSES = frozenset({ApprovalTaskStatus.APPROVED.value, ApprovalTaskStatus.REJECTED.value})


def is_approval_edge(previous: str | None, current: str | None) -> bool:
    """Check if a task status change is a transition into APPROVED.

    Re-saving an already approved task is not an edge.

    Args:
        previous: Status before the write (None if unknown).
        current: Status after the write.

    Returns:
        True only when the status moved into APPROVED.
    """
    return (
        previous != ApprovalTaskStatus.APPROVED.value
        and current == ApprovalTaskStatus.APPROVED.value
    )


class TaskPriority(str, Enum):
    """Approval task priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Visibility(str, Enum):
    """Storefront visibility of a catalog entity."""

    PUBLIC = "public"
    PRIVATE = "private"
