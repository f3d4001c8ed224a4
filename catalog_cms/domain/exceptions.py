"""Domain exceptions.

All domain-level errors raised by the catalog store and application
services. Workflow failures (approval task creation, sync) are never
raised to the writer; they are logged or recorded on the entity.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    error_code = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EntityNotFoundError(DomainError):
    """Raised when a requested record does not exist."""

    error_code = "NOT_FOUND"

    def __init__(self, kind: str, entity_id: Any) -> None:
        super().__init__(
            f"{kind} {entity_id} not found",
            details={"kind": kind, "entity_id": entity_id},
        )


class DuplicateSlugError(DomainError):
    """Raised when a slug is already used by another entity of the same kind."""

    error_code = "DUPLICATE_SLUG"

    def __init__(self, kind: str, slug: str) -> None:
        super().__init__(
            f"{kind} slug '{slug}' is already in use",
            details={"kind": kind, "slug": slug},
        )


class UnknownFieldError(DomainError):
    """Raised when a write carries fields the record does not have."""

    error_code = "UNKNOWN_FIELD"

    def __init__(self, kind: str, fields: list[str]) -> None:
        super().__init__(
            f"Unknown {kind} fields: {', '.join(sorted(fields))}",
            details={"kind": kind, "fields": sorted(fields)},
        )


class MissingFieldError(DomainError):
    """Raised when a create is missing required fields."""

    error_code = "MISSING_FIELD"

    def __init__(self, kind: str, fields: list[str]) -> None:
        super().__init__(
            f"Missing required {kind} fields: {', '.join(sorted(fields))}",
            details={"kind": kind, "fields": sorted(fields)},
        )


class InvalidReferenceError(DomainError):
    """Raised when a relation points at a record that does not exist."""

    error_code = "INVALID_REFERENCE"

    def __init__(self, kind: str, field: str, reference_id: Any) -> None:
        super().__init__(
            f"{kind}.{field} references missing record {reference_id}",
            details={"kind": kind, "field": field, "reference_id": reference_id},
        )


class CyclicReferenceError(InvalidReferenceError):
    """Raised when a parent reference would make a record its own ancestor."""

    error_code = "CYCLIC_REFERENCE"

    def __init__(self, kind: str, field: str, reference_id: Any) -> None:
        DomainError.__init__(
            self,
            f"{kind}.{field} {reference_id} would create a cycle",
            details={"kind": kind, "field": field, "reference_id": reference_id},
        )
