"""Pure change detection between a stored record and a partial update.

Nothing here touches the database: every function maps
``(stored values, candidate payload)`` to a description of what would have to
be written.  ``ConditionalUpdater`` in ``kolhub.changes.updater`` turns that
description into gateway calls.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from kolhub.changes.fields import EntityUpdateSpec, FieldSpec, ReferenceSpec
from kolhub.domain.types import is_integer


@dataclass(frozen=True)
class FieldDiff:
    """Scalar changes: the minimal set of columns whose value differs."""

    updates: dict[str, Any] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return bool(self.updates)


@dataclass(frozen=True)
class RelationConnect:
    """Point a foreign-key relation at a different target row."""

    relation: str
    target_id: int


@dataclass(frozen=True)
class CollectionDiff:
    """Outcome of comparing a set-valued relation.

    ``ids`` is the candidate list exactly as supplied (order and duplicates
    kept); it is only meaningful when ``changed`` is ``True``.
    """

    changed: bool
    ids: tuple[int, ...] = ()


UNCHANGED_COLLECTION = CollectionDiff(changed=False)


@dataclass(frozen=True)
class UpdatePlan:
    """Everything a conditional update needs to write, or nothing."""

    fields: FieldDiff = field(default_factory=FieldDiff)
    connects: tuple[RelationConnect, ...] = ()
    collection: CollectionDiff = UNCHANGED_COLLECTION

    @property
    def scalar_changed(self) -> bool:
        """Whether the entity row itself needs an ``update`` statement."""
        return self.fields.changed or bool(self.connects)

    @property
    def collection_changed(self) -> bool:
        return self.collection.changed

    @property
    def is_noop(self) -> bool:
        return not self.scalar_changed and not self.collection_changed


def diff_fields(
    stored: Mapping[str, Any],
    candidate: Mapping[str, Any],
    fields: Sequence[FieldSpec],
) -> FieldDiff:
    """Compute the minimal update set for allow-listed scalar fields.

    A field absent from *candidate* is "not supplied" and is skipped
    entirely; an explicit ``None`` is a value like any other.  Keys not on
    the allow-list are ignored.

    Args:
        stored: The persisted record.
        candidate: The partial update payload.
        fields: The entity's allow-list.

    Returns:
        A ``FieldDiff`` holding only the fields whose value differs, each
        already normalized for writing.
    """
    updates: dict[str, Any] = {}
    for spec in fields:
        if spec.name not in candidate:
            continue
        value = candidate[spec.name]
        if spec.comparator(stored.get(spec.name), value):
            continue
        updates[spec.name] = spec.normalize(value)
    return FieldDiff(updates=updates)


def diff_reference(stored_id: Any, candidate: Any, spec: ReferenceSpec) -> RelationConnect | None:
    """Compare a foreign-key reference by identity.

    Only an integer candidate is considered; anything else (absent, ``None``,
    text) means "no change requested".

    Returns:
        A ``RelationConnect`` when the referenced id differs, else ``None``.
    """
    if not is_integer(candidate) or candidate == stored_id:
        return None
    return RelationConnect(relation=spec.relation, target_id=candidate)


def diff_collection(stored_ids: Sequence[int], candidate: Any) -> CollectionDiff:
    """Detect a change in a set-valued relation by sort-and-compare.

    The candidate counts as supplied only when it is a non-empty list.  Both
    sides are sorted ascending and compared by length and then position.
    Candidate duplicates are not removed first, so ``[1, 1, 2]`` against a
    stored ``[1, 2]`` reports a change.

    Args:
        stored_ids: Ids currently associated with the parent.
        candidate: The raw candidate value (e.g. ``payload.get("kol_ids")``).

    Returns:
        A ``CollectionDiff``.
    """
    if not isinstance(candidate, list) or not candidate:
        return UNCHANGED_COLLECTION

    existing = sorted(stored_ids)
    incoming = sorted(candidate)
    if len(existing) != len(incoming) or any(a != b for a, b in zip(existing, incoming)):
        return CollectionDiff(changed=True, ids=tuple(candidate))
    return UNCHANGED_COLLECTION


def plan_update(
    spec: EntityUpdateSpec,
    stored: Mapping[str, Any],
    candidate: Mapping[str, Any],
    stored_related_ids: Sequence[int] = (),
) -> UpdatePlan:
    """Build the full update plan for one entity.

    Args:
        spec: The entity's update declaration.
        stored: The persisted record.
        candidate: The partial update payload.
        stored_related_ids: Current ids of ``spec.collection``, if any.

    Returns:
        An ``UpdatePlan``; ``plan.is_noop`` means nothing has to be written.
    """
    connects = tuple(
        connect
        for ref in spec.references
        if (connect := diff_reference(stored.get(ref.name), candidate.get(ref.name), ref))
        is not None
    )
    collection = UNCHANGED_COLLECTION
    if spec.collection is not None:
        collection = diff_collection(stored_related_ids, candidate.get(spec.collection.name))

    return UpdatePlan(
        fields=diff_fields(stored, candidate, spec.fields),
        connects=connects,
        collection=collection,
    )
