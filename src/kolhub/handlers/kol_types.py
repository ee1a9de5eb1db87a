"""KOL type (follower tier) resource handler."""

from __future__ import annotations

from typing import Any

import structlog

from kolhub.changes import KOL_TYPE_UPDATE, ConditionalUpdater
from kolhub.handlers.envelope import Envelope, failure, gateway_failures, parse_id, success
from kolhub.pagination import offset_for, paginate
from kolhub.persistence.gateway import Gateway, Where
from kolhub.validation import validate_kol_type

logger = structlog.get_logger()

TIER_FIELDS: tuple[str, ...] = ("name", "min_followers", "max_followers")


class KolTypeHandler:
    """KOL type operations over an injected gateway."""

    def __init__(self, gateway: Gateway) -> None:
        self._gateway = gateway
        self._updater = ConditionalUpdater(gateway)

    @gateway_failures("An error occurred while creating KOL Type.")
    def create(self, body: Any) -> Envelope:
        if not isinstance(body, dict):
            return failure(400, "Request body must be a JSON object.")

        if not body.get("name") or body.get("min_followers") is None:
            return failure(400, "name, min_followers is required")

        if self._gateway.find_first("kol_types", Where(equals={"name": body["name"]})):
            return failure(400, "name KOL Type already used.")

        validation = validate_kol_type(body)
        if not validation.valid:
            return failure(400, validation.message or "Invalid KOL type.")

        kol_type = self._gateway.create(
            "kol_types",
            {
                "name": body["name"],
                "min_followers": body["min_followers"],
                "max_followers": body.get("max_followers"),
            },
        )
        logger.info("KOL type created", kol_type_id=kol_type["id"], name=kol_type["name"])
        return success("KOL type successfully created.", 201, data=kol_type)

    @gateway_failures("Failed to fetch KOL Types.")
    def list_page(self, page: int = 1, limit: int = 10, search: str = "") -> Envelope:
        limit = max(limit, 1)
        where = Where(search=search, search_columns=("name",))
        total = self._gateway.count("kol_types", where)
        kol_types = self._gateway.find_many(
            "kol_types",
            where,
            skip=offset_for(page, limit),
            take=limit,
            order_by=[("id", "asc")],
        )
        if not kol_types:
            return success("No KOL Types found.")
        return success(
            "KOL Types fetched successfully.",
            data=kol_types,
            pagination=paginate(page, limit, total),
        )

    @gateway_failures("Failed to update KOL type.")
    def update(self, body: Any) -> Envelope:
        """Update a tier, validating its bounds against the stored values.

        An empty ``name`` is treated as not supplied.  The follower bounds are
        checked with the stored ``min_followers``/``max_followers`` standing
        in for whichever bound the payload leaves out.
        """
        if not isinstance(body, dict):
            return failure(400, "Request body must be a JSON object.")

        candidate = dict(body)
        if not candidate.get("name"):
            candidate.pop("name", None)
        if not any(name in candidate for name in TIER_FIELDS):
            return failure(400, "No fields to update were provided.")

        kol_type_id = parse_id(candidate.get("id"))
        if kol_type_id is None:
            return failure(400, "KOL Type ID is required.")
        candidate["id"] = kol_type_id

        stored = self._gateway.find_unique("kol_types", kol_type_id)
        if stored is None:
            return failure(404, "KOL Type not found")

        if "name" in candidate:
            conflict = self._gateway.find_first(
                "kol_types",
                Where(equals={"name": candidate["name"]}, not_equals={"id": kol_type_id}),
            )
            if conflict is not None:
                return failure(400, "Name is already used by another KOL type.")

        validation = validate_kol_type(
            candidate,
            existing_min_followers=stored["min_followers"],
            existing_max_followers=stored["max_followers"],
        )
        if not validation.valid:
            return failure(400, validation.message or "Invalid KOL type.")

        result = self._updater.update(KOL_TYPE_UPDATE, stored, candidate)
        if not result.changed:
            return success("No changes made.", data=stored)
        return success("KOL type updated successfully.", data=result.record)

    @gateway_failures("Failed to delete KOL Type.")
    def delete(self, raw_id: Any) -> Envelope:
        kol_type_id = parse_id(raw_id)
        if kol_type_id is None:
            return failure(400, "KOL Type ID is required.")

        if self._gateway.find_unique("kol_types", kol_type_id) is None:
            return failure(404, "KOL Type not found.")

        self._gateway.delete("kol_types", kol_type_id)
        logger.info("KOL type deleted", kol_type_id=kol_type_id)
        return success("KOL Type successfully deleted.")
