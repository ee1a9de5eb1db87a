"""Write side of the conditional update: turn an ``UpdatePlan`` into statements.

A no-op plan issues no statements at all.  Otherwise the row update (minimal
columns plus relation connects) and the association replace
(delete-all-then-insert-all) run inside one gateway transaction, so a failure
in either leaves the stored record untouched and surfaces as one error.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import structlog

from kolhub.changes.diff import UpdatePlan, plan_update
from kolhub.changes.fields import EntityUpdateSpec
from kolhub.observability.metrics import CONDITIONAL_UPDATES
from kolhub.persistence.gateway import Gateway, Where

logger = structlog.get_logger()


class UpdateOutcome(StrEnum):
    """Result of a conditional update."""

    NO_CHANGES = "no_changes"
    UPDATED = "updated"


@dataclass(frozen=True)
class UpdateResult:
    """What ``ConditionalUpdater.update`` did.

    Attributes:
        outcome: Whether anything was written.
        plan: The plan that was computed (and applied, unless a no-op).
        record: The stored row after the update (unchanged on a no-op).
    """

    outcome: UpdateOutcome
    plan: UpdatePlan
    record: Mapping[str, Any]

    @property
    def changed(self) -> bool:
        return self.outcome is UpdateOutcome.UPDATED


class ConditionalUpdater:
    """Diff-before-write updates over an injected gateway."""

    def __init__(self, gateway: Gateway) -> None:
        self._gateway = gateway

    def related_ids(self, spec: EntityUpdateSpec, key: int) -> list[int]:
        """Ids currently linked to row *key* through ``spec.collection``."""
        if spec.collection is None:
            return []
        link = spec.collection
        rows = self._gateway.find_many(
            link.table,
            Where(equals={link.parent_column: key}),
            columns=[link.child_column],
        )
        return [row[link.child_column] for row in rows]

    def update(
        self,
        spec: EntityUpdateSpec,
        stored: Mapping[str, Any],
        candidate: Mapping[str, Any],
    ) -> UpdateResult:
        """Diff *candidate* against *stored* and write only what changed.

        Args:
            spec: The entity's update declaration.
            stored: The persisted record (must carry ``id``).
            candidate: The partial update payload.

        Returns:
            An ``UpdateResult``.

        Raises:
            GatewayError: If any write fails; nothing is persisted then.
        """
        key = stored["id"]
        plan = plan_update(spec, stored, candidate, self.related_ids(spec, key))
        record = self.apply(spec, key, plan) or stored
        outcome = UpdateOutcome.NO_CHANGES if plan.is_noop else UpdateOutcome.UPDATED
        CONDITIONAL_UPDATES.labels(entity=spec.entity, outcome=outcome.value).inc()
        return UpdateResult(outcome=outcome, plan=plan, record=record)

    def apply(self, spec: EntityUpdateSpec, key: int, plan: UpdatePlan) -> dict[str, Any] | None:
        """Issue the statements described by *plan*.

        Returns:
            The updated row when the row itself was written, else ``None``.
        """
        if plan.is_noop:
            logger.debug("No changes detected", entity=spec.entity, id=key)
            return None

        record: dict[str, Any] | None = None
        with self._gateway.transaction():
            if plan.scalar_changed:
                record = self._gateway.update(
                    spec.table,
                    key,
                    plan.fields.updates,
                    connect={c.relation: c.target_id for c in plan.connects},
                )

            if plan.collection_changed and spec.collection is not None:
                link = spec.collection
                removed = self._gateway.delete_many(
                    link.table, Where(equals={link.parent_column: key})
                )
                inserted = self._gateway.create_many(
                    link.table,
                    [
                        {link.parent_column: key, link.child_column: child_id}
                        for child_id in plan.collection.ids
                    ],
                    skip_duplicates=True,
                )
                logger.info(
                    "Association set replaced",
                    entity=spec.entity,
                    id=key,
                    removed=removed,
                    inserted=inserted,
                )

        logger.info(
            "Conditional update applied",
            entity=spec.entity,
            id=key,
            fields=sorted(plan.fields.updates),
            connects=[c.relation for c in plan.connects],
            collection_changed=plan.collection_changed,
        )
        return record
