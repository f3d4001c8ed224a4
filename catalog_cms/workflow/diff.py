"""Snapshot diff engine.

Compares two snapshots field by field. Lists must already be in
canonical order (see ``normalize_value_per_points``) because plain
fields compare order-sensitively. Set-valued relations are compared
as sets keyed by slug, falling back to the stringified id.
"""

from collections.abc import Iterable
from typing import Any


def _relation_key(item: dict[str, Any]) -> str:
    return item.get("slug") or str(item.get("id"))


def _set_difference(
    previous: list[dict[str, Any]] | None,
    current: list[dict[str, Any]] | None,
) -> dict[str, list[dict[str, Any]]] | None:
    before = {_relation_key(item): item for item in previous or []}
    after = {_relation_key(item): item for item in current or []}

    added = [item for key, item in after.items() if key not in before]
    removed = [item for key, item in before.items() if key not in after]

    if not added and not removed:
        return None
    return {"added": added, "removed": removed}


def compute_diff(
    previous: dict[str, Any] | None,
    current: dict[str, Any] | None,
    fields: Iterable[str],
    set_fields: Iterable[str] = (),
) -> dict[str, Any]:
    """Compute a structured diff between two snapshots.

    Args:
        previous: Snapshot before the write, None for a creation.
        current: Snapshot after the write.
        fields: Fields compared by structural equality.
        set_fields: Relation fields compared as sets.

    Returns:
        Mapping of changed field to ``{"from", "to"}``, or to
        ``{"added", "removed"}`` for set fields. Empty when nothing
        observable changed.
    """
    diff: dict[str, Any] = {}
    previous = previous or {}
    current = current or {}

    for field in fields:
        before = previous.get(field)
        after = current.get(field)
        if before != after:
            diff[field] = {"from": before, "to": after}

    for field in set_fields:
        change = _set_difference(previous.get(field), current.get(field))
        if change is not None:
            diff[field] = change

    return diff


def has_meaningful_changes(diff: dict[str, Any]) -> bool:
    """A diff is meaningful iff it is non-empty."""
    return len(diff) > 0
