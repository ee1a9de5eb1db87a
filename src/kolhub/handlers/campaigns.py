"""Campaign resource handler: create, list, conditional update, delete."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from kolhub.changes import CAMPAIGN_UPDATE, ConditionalUpdater, normalize_instant
from kolhub.domain.models import Principal
from kolhub.domain.types import AGE_RANGE_VALUES, NICHE_VALUES, is_integer, is_number
from kolhub.handlers.envelope import Envelope, failure, gateway_failures, parse_id, success
from kolhub.pagination import offset_for, paginate
from kolhub.persistence.gateway import Gateway, Where

logger = structlog.get_logger()

CAMPAIGN_REQUIRED_FIELDS: tuple[str, ...] = (
    "name",
    "kol_type_id",
    "target_niche",
    "target_engagement",
    "target_reach",
    "target_gender",
    "target_gender_min",
    "target_age_range",
    "start_date",
    "end_date",
    "kol_ids",
)

DATE_FIELDS: tuple[str, ...] = ("start_date", "end_date")
NUMERIC_TARGET_FIELDS: tuple[str, ...] = ("target_engagement", "target_reach", "target_gender_min")

KOL_IDS_NOT_LIST = "kol_ids must be a non-empty array."
KOL_IDS_NOT_INTEGERS = "kol_ids must contain only integer ids."


def _check_targets(payload: Mapping[str, Any]) -> str | None:
    """Return an error message for bad enum, number or date values present in *payload*."""
    if "target_niche" in payload and payload["target_niche"] not in NICHE_VALUES:
        return f"target_niche must be one of: {', '.join(NICHE_VALUES)}"
    if "target_age_range" in payload and payload["target_age_range"] not in AGE_RANGE_VALUES:
        return f"target_age_range must be one of: {', '.join(AGE_RANGE_VALUES)}"
    for name in NUMERIC_TARGET_FIELDS:
        if name in payload and not is_number(payload[name]):
            return f"{name} must be a number."
    for name in DATE_FIELDS:
        if name not in payload:
            continue
        try:
            normalize_instant(payload[name])
        except ValueError:
            return f"{name} must be a valid date."
    return None


class CampaignHandler:
    """Campaign operations over an injected gateway."""

    def __init__(self, gateway: Gateway) -> None:
        self._gateway = gateway
        self._updater = ConditionalUpdater(gateway)

    @gateway_failures("An error occurred while creating the campaign.")
    def create(self, body: Any, principal: Principal) -> Envelope:
        """Create a campaign owned by *principal* together with its KOL links.

        The campaign row and every ``campaign_kol`` pair are written in one
        transaction.
        """
        if not isinstance(body, dict):
            return failure(400, "Request body must be a JSON object.")

        missing = next((f for f in CAMPAIGN_REQUIRED_FIELDS if body.get(f) is None), None)
        if missing is not None:
            return failure(400, f"Field '{missing}' is required.")

        kol_ids = body["kol_ids"]
        if not isinstance(kol_ids, list) or not kol_ids:
            return failure(400, KOL_IDS_NOT_LIST)
        if not all(is_integer(kol_id) for kol_id in kol_ids):
            return failure(400, KOL_IDS_NOT_INTEGERS)
        if not is_integer(body["kol_type_id"]):
            return failure(400, "kol_type_id must be an integer id.")

        problem = _check_targets(body)
        if problem is not None:
            return failure(400, problem)

        fields = {
            name: body[name]
            for name in CAMPAIGN_REQUIRED_FIELDS
            if name not in ("kol_ids", *DATE_FIELDS)
        }
        fields.update({name: normalize_instant(body[name]) for name in DATE_FIELDS})
        fields["user_id"] = principal.id

        with self._gateway.transaction():
            campaign = self._gateway.create("campaigns", fields)
            linked = self._gateway.create_many(
                "campaign_kol",
                [{"campaign_id": campaign["id"], "kol_id": kol_id} for kol_id in kol_ids],
                skip_duplicates=True,
            )

        logger.info(
            "Campaign created",
            campaign_id=campaign["id"],
            owner_id=principal.id,
            kols_linked=linked,
        )
        return success("Campaign created successfully.", 201, data={"id": campaign["id"]})

    @gateway_failures("Failed to fetch campaigns")
    def list_page(self, page: int = 1, limit: int = 10, search: str = "") -> Envelope:
        """Newest-first page of campaigns, each with its linked ``kols``."""
        limit = max(limit, 1)
        where = Where(search=search, search_columns=("name",))
        total = self._gateway.count("campaigns", where)
        campaigns = self._gateway.find_many(
            "campaigns",
            where,
            skip=offset_for(page, limit),
            take=limit,
            order_by=[("created_at", "desc"), ("id", "desc")],
        )

        kols_by_campaign = self._linked_kols([c["id"] for c in campaigns])
        data = [{**c, "kols": kols_by_campaign.get(c["id"], [])} for c in campaigns]
        return success(
            "Campaigns fetched successfully.",
            data=data,
            pagination=paginate(page, limit, total),
        )

    @gateway_failures("An error occurred while updating the campaign.")
    def update(self, body: Any) -> Envelope:
        """Apply a partial update through the conditional-update engine."""
        if not isinstance(body, dict):
            return failure(400, "Request body must be a JSON object.")

        campaign_id = parse_id(body.get("id"))
        if campaign_id is None:
            return failure(400, "Campaign id is required.")

        kol_ids = body.get("kol_ids")
        if isinstance(kol_ids, list) and not all(is_integer(kol_id) for kol_id in kol_ids):
            return failure(400, KOL_IDS_NOT_INTEGERS)

        problem = _check_targets(body)
        if problem is not None:
            return failure(400, problem)

        stored = self._gateway.find_unique("campaigns", campaign_id)
        if stored is None:
            return failure(404, "Campaign not found.")

        result = self._updater.update(CAMPAIGN_UPDATE, stored, body)
        if not result.changed:
            return success("No changes made.")
        return success("Campaign updated successfully.")

    @gateway_failures("Failed to delete campaign.")
    def delete(self, raw_id: Any) -> Envelope:
        campaign_id = parse_id(raw_id)
        if campaign_id is None:
            return failure(400, "Valid Campaign ID is required.")

        if self._gateway.find_unique("campaigns", campaign_id) is None:
            return failure(404, "Campaign not found.")

        self._gateway.delete("campaigns", campaign_id)
        logger.info("Campaign deleted", campaign_id=campaign_id)
        return success("Campaign successfully deleted.")

    def _linked_kols(self, campaign_ids: list[int]) -> dict[int, list[dict[str, Any]]]:
        """Map each campaign id to ``[{id, name}, ...]`` of its linked KOLs."""
        if not campaign_ids:
            return {}
        links = self._gateway.find_many(
            "campaign_kol",
            Where(within={"campaign_id": campaign_ids}),
            order_by=[("id", "asc")],
        )
        kol_ids = sorted({link["kol_id"] for link in links})
        kols = {
            kol["id"]: kol
            for kol in self._gateway.find_many(
                "kols", Where(within={"id": kol_ids}), columns=["id", "name"]
            )
        }

        grouped: dict[int, list[dict[str, Any]]] = {}
        for link in links:
            kol = kols.get(link["kol_id"])
            if kol is not None:
                grouped.setdefault(link["campaign_id"], []).append(kol)
        return grouped
