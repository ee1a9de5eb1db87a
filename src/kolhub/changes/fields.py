"""Statically declared update allow-lists.

Each updatable entity declares the exact fields a conditional update may
touch, as ``FieldSpec(name, comparator, normalize)`` entries.  Every name is
checked against the entity's ``TypedDict`` row shape when this module is
imported, so a typo fails at startup instead of silently never matching.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any

from kolhub.domain.records import (
    CampaignKolRecord,
    CampaignRecord,
    KolRecord,
    KolTypeRecord,
    ReportRecord,
)

Comparator = Callable[[Any, Any], bool]
Normalizer = Callable[[Any], Any]


def _identity(value: Any) -> Any:
    return value


def same_value(stored: Any, candidate: Any) -> bool:
    """Value equality that does not treat booleans as numbers."""
    if isinstance(stored, bool) != isinstance(candidate, bool):
        return False
    return bool(stored == candidate)


def normalize_instant(value: Any) -> str:
    """Render a date/timestamp as an ISO-8601 UTC string with milliseconds.

    Accepts ``datetime``, ``date`` or ISO-8601 text (a trailing ``Z`` is
    allowed).  Naive values are taken to be UTC.  The output matches the
    format stored for campaign dates, e.g. ``2025-01-31T00:00:00.000Z``.

    Raises:
        ValueError: If *value* cannot be read as a date.
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        moment = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Not a date: {value!r}")

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def same_instant(stored: Any, candidate: Any) -> bool:
    """Compare two dates by the instant they denote, not their text."""
    try:
        return normalize_instant(stored) == normalize_instant(candidate)
    except ValueError:
        return same_value(stored, candidate)


@dataclass(frozen=True)
class FieldSpec:
    """One updatable field.

    Attributes:
        name: Column name, also the key read from the candidate payload.
        comparator: Returns ``True`` when stored and candidate are equal.
        normalize: Converts the candidate into the value written on change.
    """

    name: str
    comparator: Comparator = same_value
    normalize: Normalizer = _identity


@dataclass(frozen=True)
class ReferenceSpec:
    """A foreign-key field written as a relation connect.

    Attributes:
        name: Candidate key and stored column holding the referenced id.
        relation: Relation name understood by the gateway.
    """

    name: str
    relation: str


@dataclass(frozen=True)
class CollectionSpec:
    """A set-valued relation stored in an association table.

    Attributes:
        name: Candidate key carrying the list of related ids.
        table: Association table.
        parent_column: Column pointing at the updated entity.
        child_column: Column holding the related id.
    """

    name: str
    table: str
    parent_column: str
    child_column: str


@dataclass(frozen=True)
class EntityUpdateSpec:
    """Everything a conditional update may touch on one table."""

    entity: str
    table: str
    fields: tuple[FieldSpec, ...]
    references: tuple[ReferenceSpec, ...] = ()
    collection: CollectionSpec | None = None
    record_type: type | None = field(default=None, compare=False)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.fields)


def _checked(spec: EntityUpdateSpec, collection_type: type | None = None) -> EntityUpdateSpec:
    declared = set(getattr(spec.record_type, "__annotations__", {}))
    names = [f.name for f in spec.fields] + [r.name for r in spec.references]
    unknown = [n for n in names if n not in declared]
    if unknown:
        raise TypeError(f"{spec.entity}: allow-list names not on record: {', '.join(unknown)}")
    if spec.collection is not None and collection_type is not None:
        link_columns = set(collection_type.__annotations__)
        for column in (spec.collection.parent_column, spec.collection.child_column):
            if column not in link_columns:
                raise TypeError(f"{spec.entity}: {column!r} not on association record")
    return spec


def _instant(name: str) -> FieldSpec:
    return FieldSpec(name, comparator=same_instant, normalize=normalize_instant)


CAMPAIGN_UPDATE = _checked(
    EntityUpdateSpec(
        entity="campaign",
        table="campaigns",
        fields=(
            FieldSpec("name"),
            FieldSpec("target_niche"),
            FieldSpec("target_engagement"),
            FieldSpec("target_reach"),
            FieldSpec("target_gender"),
            FieldSpec("target_gender_min"),
            FieldSpec("target_age_range"),
            _instant("start_date"),
            _instant("end_date"),
        ),
        references=(ReferenceSpec("kol_type_id", "kol_type"),),
        collection=CollectionSpec("kol_ids", "campaign_kol", "campaign_id", "kol_id"),
        record_type=CampaignRecord,
    ),
    collection_type=CampaignKolRecord,
)

REPORT_UPDATE = _checked(
    EntityUpdateSpec(
        entity="report",
        table="kol_reports",
        fields=(
            FieldSpec("like_count"),
            FieldSpec("comment_count"),
            FieldSpec("share_count"),
            FieldSpec("save_count"),
            FieldSpec("engagement"),
            FieldSpec("reach"),
            FieldSpec("er"),
            FieldSpec("cpe"),
        ),
        record_type=ReportRecord,
    )
)

KOL_UPDATE = _checked(
    EntityUpdateSpec(
        entity="kol",
        table="kols",
        fields=(
            FieldSpec("name"),
            FieldSpec("niche"),
            FieldSpec("followers"),
            FieldSpec("engagement_rate"),
            FieldSpec("reach"),
            FieldSpec("rate_card"),
            FieldSpec("audience_male"),
            FieldSpec("audience_female"),
            FieldSpec("audience_age_range"),
        ),
        record_type=KolRecord,
    )
)

KOL_TYPE_UPDATE = _checked(
    EntityUpdateSpec(
        entity="kol_type",
        table="kol_types",
        fields=(
            FieldSpec("name"),
            FieldSpec("min_followers"),
            FieldSpec("max_followers"),
        ),
        record_type=KolTypeRecord,
    )
)
