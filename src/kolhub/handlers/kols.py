"""KOL profile resource handler."""

from __future__ import annotations

from typing import Any

import structlog

from kolhub.changes import KOL_UPDATE, ConditionalUpdater
from kolhub.domain.errors import GatewayError
from kolhub.domain.types import NICHE_VALUES, is_integer
from kolhub.handlers.envelope import Envelope, failure, gateway_failures, parse_id, success
from kolhub.pagination import offset_for, paginate
from kolhub.persistence.gateway import Gateway, Where
from kolhub.validation import KOL_REQUIRED_FIELDS, validate_kol

logger = structlog.get_logger()


class KolHandler:
    """KOL operations over an injected gateway."""

    def __init__(self, gateway: Gateway) -> None:
        self._gateway = gateway
        self._updater = ConditionalUpdater(gateway)

    @gateway_failures("An error occurred on the server.")
    def create(self, body: Any) -> Envelope:
        """Create one KOL or a batch of KOLs.

        *body* may be a single object or a list of objects.  Each item is
        validated and inserted on its own, so one bad item never blocks the
        rest; ``results`` carries one entry per item, in order.

        Returns:
            201 when every item was created, 207 when at least one failed.
        """
        items = body if isinstance(body, list) else [body]
        if not items:
            return failure(400, "Request body must not be empty.")

        results = [self._create_one(position, item) for position, item in enumerate(items, 1)]
        created = sum(1 for r in results if r["success"])
        logger.info("KOL batch processed", submitted=len(results), created=created)

        if created == len(results):
            return success("KOL data created successfully.", 201, results=results)
        return Envelope(
            success=False,
            message="Some KOL data could not be created.",
            status_code=207,
            results=results,
        )

    def _create_one(self, position: int, item: Any) -> dict[str, Any]:
        prefix = f"Item {position}:"
        if not isinstance(item, dict):
            return {"success": False, "message": f"{prefix} Each item must be a JSON object."}

        missing = next((f for f in KOL_REQUIRED_FIELDS if item.get(f) is None), None)
        if missing is not None:
            return {"success": False, "message": f"{prefix} Field '{missing}' is required."}

        validation = validate_kol(item)
        if not validation.valid:
            return {"success": False, "message": f"{prefix} {validation.message}"}

        fields = {name: item[name] for name in KOL_REQUIRED_FIELDS}
        if is_integer(item.get("id")):
            fields["id"] = item["id"]

        try:
            kol = self._gateway.create("kols", fields)
        except GatewayError as exc:
            return {
                "success": False,
                "message": f"{prefix} Failed to create KOL data. {exc}",
            }
        return {
            "success": True,
            "message": f"{prefix} KOL data created successfully.",
            "data": kol,
        }

    @gateway_failures("An error occurred while fetching KOLs.")
    def list_page(
        self,
        page: int = 1,
        limit: int = 10,
        search: str = "",
        niche: str | None = None,
    ) -> Envelope:
        """Page of KOLs ordered by id; an unknown *niche* filter is ignored."""
        limit = max(limit, 1)
        equals = {"niche": niche} if niche in NICHE_VALUES else {}
        where = Where(equals=equals, search=search, search_columns=("name",))

        total = self._gateway.count("kols", where)
        kols = self._gateway.find_many(
            "kols",
            where,
            skip=offset_for(page, limit),
            take=limit,
            order_by=[("id", "asc")],
        )
        if not kols:
            return success("No KOL data found.")
        return success(
            "KOL data fetched successfully.",
            data=kols,
            pagination=paginate(page, limit, total),
        )

    @gateway_failures("An error occurred on the server.")
    def update(self, body: Any) -> Envelope:
        """Validate the merged record, then apply only the changed fields."""
        if not isinstance(body, dict):
            return failure(400, "Request body must be a JSON object.")

        kol_id = parse_id(body.get("id"))
        if kol_id is None:
            return failure(400, "KOL ID is required.")

        stored = self._gateway.find_unique("kols", kol_id)
        if stored is None:
            return failure(404, "KOL data not found.")

        validation = validate_kol({**stored, **body, "id": kol_id}, require_id=True)
        if not validation.valid:
            return failure(400, validation.message or "Invalid KOL data.")

        result = self._updater.update(KOL_UPDATE, stored, body)
        if not result.changed:
            return success("No changes made.")
        return success("KOL updated successfully.", data=result.record)

    @gateway_failures("Failed to delete KOL data.")
    def delete(self, raw_id: Any) -> Envelope:
        kol_id = parse_id(raw_id)
        if kol_id is None:
            return failure(400, "KOL ID is required.")

        if self._gateway.find_unique("kols", kol_id) is None:
            return failure(404, "KOL data not found.")

        self._gateway.delete("kols", kol_id)
        logger.info("KOL deleted", kol_id=kol_id)
        return success("KOL data successfully deleted.")
