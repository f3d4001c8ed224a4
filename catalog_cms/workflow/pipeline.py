"""Write pipeline.

Every mutation runs as a fixed stage sequence:

    before hook ──► store write ──► after hook

A ``MutationContext`` is created at the start of the mutation and passed
by reference through all stages, so state captured before the write
(e.g. the previous snapshot) is available after it. The ``WriteOrigin``
tells hooks whether the write came from a user or from the workflow
machinery itself.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

import structlog

from catalog_cms.catalog.store import CatalogStore
from catalog_cms.domain.entities import ResourceKind

logger = structlog.get_logger()


class WriteOrigin(str, Enum):
    """Who issued a write."""

    USER = "user"
    SYSTEM = "system"


class MutationAction(str, Enum):
    """Kind of write being performed."""

    CREATE = "create"
    UPDATE = "update"


@dataclass
class MutationContext:
    """State threaded through one mutation's stages.

    Attributes:
        kind: Resource kind being written.
        action: Create or update.
        data: Field values to persist; before hooks may rewrite them.
        origin: User or system write.
        entity_id: Target id for updates.
        previous: Record as it was before the write (None on create).
        skip_approval_task: Set by before hooks to suppress task creation.
        result: Record returned by the store write.
    """

    kind: ResourceKind
    action: MutationAction
    data: dict[str, Any]
    origin: WriteOrigin = WriteOrigin.USER
    entity_id: int | None = None
    previous: Any = None
    skip_approval_task: bool = False
    result: Any = None

    @property
    def is_system(self) -> bool:
        """Check if the write was issued by the workflow machinery."""
        return self.origin is WriteOrigin.SYSTEM


class LifecycleHooks(Protocol):
    """Hooks run around writes of one resource kind."""

    async def before_create(self, context: MutationContext) -> None: ...

    async def after_create(self, context: MutationContext) -> None: ...

    async def before_update(self, context: MutationContext) -> None: ...

    async def after_update(self, context: MutationContext) -> None: ...


class WritePipeline:
    """Runs writes through the registered lifecycle hooks.

    Kinds without hooks are written straight to the store.
    """

    def __init__(self, store: CatalogStore) -> None:
        """Initialize pipeline.

        Args:
            store: Catalog store receiving the writes.
        """
        self.store = store
        self._hooks: dict[ResourceKind, LifecycleHooks] = {}

    def register(self, kind: ResourceKind, hooks: LifecycleHooks) -> None:
        """Register lifecycle hooks for a resource kind."""
        self._hooks[kind] = hooks

    async def create(
        self,
        kind: ResourceKind,
        data: dict[str, Any],
        origin: WriteOrigin = WriteOrigin.USER,
    ) -> Any:
        """Create a record.

        Args:
            kind: Resource kind.
            data: Field values.
            origin: Who issued the write.

        Returns:
            The created record.
        """
        context = MutationContext(
            kind=kind,
            action=MutationAction.CREATE,
            data=dict(data),
            origin=origin,
        )
        hooks = self._hooks.get(kind)

        if hooks is not None:
            await hooks.before_create(context)

        context.result = await self.store.insert(kind, context.data)

        if hooks is not None:
            await hooks.after_create(context)

        return context.result

    async def update(
        self,
        kind: ResourceKind,
        entity_id: int,
        data: dict[str, Any],
        origin: WriteOrigin = WriteOrigin.USER,
    ) -> Any | None:
        """Update a record.

        Args:
            kind: Resource kind.
            entity_id: Record id.
            data: Field values to change.
            origin: Who issued the write.

        Returns:
            The updated record, or None if it does not exist.
        """
        context = MutationContext(
            kind=kind,
            action=MutationAction.UPDATE,
            data=dict(data),
            origin=origin,
            entity_id=entity_id,
        )
        hooks = self._hooks.get(kind)

        if hooks is not None:
            await hooks.before_update(context)

        context.result = await self.store.update(kind, entity_id, context.data)
        if context.result is None:
            logger.debug("Update target missing", kind=kind.value, entity_id=entity_id)
            return None

        if hooks is not None:
            await hooks.after_update(context)

        return context.result
