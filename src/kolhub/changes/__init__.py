"""Change detection and conditional (diff-before-write) updates."""

from kolhub.changes.diff import (
    CollectionDiff,
    FieldDiff,
    RelationConnect,
    UpdatePlan,
    diff_collection,
    diff_fields,
    diff_reference,
    plan_update,
)
from kolhub.changes.fields import (
    CAMPAIGN_UPDATE,
    KOL_TYPE_UPDATE,
    KOL_UPDATE,
    REPORT_UPDATE,
    CollectionSpec,
    EntityUpdateSpec,
    FieldSpec,
    ReferenceSpec,
    normalize_instant,
    same_instant,
    same_value,
)
from kolhub.changes.updater import ConditionalUpdater, UpdateOutcome, UpdateResult

__all__ = [
    "CAMPAIGN_UPDATE",
    "KOL_TYPE_UPDATE",
    "KOL_UPDATE",
    "REPORT_UPDATE",
    "CollectionDiff",
    "CollectionSpec",
    "ConditionalUpdater",
    "EntityUpdateSpec",
    "FieldDiff",
    "FieldSpec",
    "ReferenceSpec",
    "RelationConnect",
    "UpdateOutcome",
    "UpdatePlan",
    "UpdateResult",
    "diff_collection",
    "diff_fields",
    "diff_reference",
    "normalize_instant",
    "plan_update",
    "same_instant",
    "same_value",
]
