"""KOL engagement report resource handler.

Reports are created in batches.  Every item is checked on its own and
problems are reported per index, so a batch with some bad rows still inserts
the good ones and answers 207.
"""

from __future__ import annotations

from typing import Any

import structlog

from kolhub.changes import REPORT_UPDATE, ConditionalUpdater
from kolhub.domain.types import is_integer, is_number
from kolhub.handlers.envelope import Envelope, failure, gateway_failures, parse_id, success
from kolhub.observability.metrics import REPORTS_INSERTED
from kolhub.persistence.gateway import Gateway, Where

logger = structlog.get_logger()

REPORT_METRIC_FIELDS: tuple[str, ...] = (
    "like_count",
    "comment_count",
    "share_count",
    "save_count",
    "engagement",
    "reach",
    "er",
    "cpe",
)

REPORT_FIELDS: tuple[str, ...] = ("campaign_id", "kol_id", *REPORT_METRIC_FIELDS)

INVALID_REPORT = (
    "Invalid or missing fields. Required: " + ", ".join(REPORT_FIELDS) + "."
)


def _is_valid_report(item: Any) -> bool:
    return (
        isinstance(item, dict)
        and is_integer(item.get("campaign_id"))
        and is_integer(item.get("kol_id"))
        and all(is_number(item.get(name)) for name in REPORT_METRIC_FIELDS)
    )


class ReportHandler:
    """Report operations over an injected gateway."""

    def __init__(self, gateway: Gateway) -> None:
        self._gateway = gateway
        self._updater = ConditionalUpdater(gateway)

    @gateway_failures("Failed to create reports.")
    def create_batch(self, body: Any) -> Envelope:
        """Insert a list of reports, skipping and reporting the bad ones.

        An item is rejected (with its index in *body*) when a field is
        missing or not numeric, when its campaign or KOL does not exist, when
        a report for its ``(campaign_id, kol_id)`` pair is already stored, or
        when an earlier item in the same request uses that pair.

        Returns:
            201 with ``insertedCount`` when every item was inserted, else 207
            with the per-index ``errors``.
        """
        if not isinstance(body, list):
            return failure(400, "Request body must be an array of reports.")

        errors: list[dict[str, Any]] = []
        candidates: list[tuple[int, dict[str, Any]]] = []
        for index, item in enumerate(body):
            if _is_valid_report(item):
                candidates.append((index, item))
            else:
                errors.append({"index": index, "message": INVALID_REPORT})

        campaign_ids = self._existing_ids("campaigns", {i["campaign_id"] for _, i in candidates})
        kol_ids = self._existing_ids("kols", {i["kol_id"] for _, i in candidates})
        stored_pairs = self._stored_pairs(candidates)

        seen: set[tuple[int, int]] = set()
        rows: list[dict[str, Any]] = []
        for index, item in candidates:
            pair = (item["campaign_id"], item["kol_id"])
            pair_text = f"campaign_id={pair[0]} and kol_id={pair[1]}"
            if pair[0] not in campaign_ids:
                errors.append({"index": index, "message": f"Campaign {pair[0]} not found."})
            elif pair[1] not in kol_ids:
                errors.append({"index": index, "message": f"KOL {pair[1]} not found."})
            elif pair in stored_pairs:
                errors.append(
                    {"index": index, "message": f"Report for {pair_text} already exists."}
                )
            elif pair in seen:
                errors.append(
                    {"index": index, "message": f"Duplicate report for {pair_text} in request."}
                )
            else:
                seen.add(pair)
                rows.append({name: item[name] for name in REPORT_FIELDS})

        inserted = 0
        if rows:
            inserted = self._gateway.create_many("kol_reports", rows, skip_duplicates=True)
        REPORTS_INSERTED.inc(inserted)
        errors.sort(key=lambda e: e["index"])
        logger.info(
            "Report batch processed",
            submitted=len(body),
            inserted=inserted,
            rejected=len(errors),
        )

        if not errors:
            return success(
                "Reports created successfully.", 201, errors=errors, inserted_count=inserted
            )
        return Envelope(
            success=False,
            message="Some reports could not be created.",
            status_code=207,
            errors=errors,
            inserted_count=inserted,
        )

    @gateway_failures("Failed to fetch reports.")
    def list_for_campaign(self, raw_campaign_id: Any) -> Envelope:
        """Every report of one campaign, each with its ``kol: {id, name}``."""
        campaign_id = parse_id(raw_campaign_id)
        if campaign_id is None:
            return failure(400, "Campaign ID is required.")

        if self._gateway.find_unique("campaigns", campaign_id) is None:
            return failure(404, "Campaign not found.")

        reports = self._gateway.find_many(
            "kol_reports", Where(equals={"campaign_id": campaign_id}), order_by=[("id", "asc")]
        )
        kols = {
            kol["id"]: kol
            for kol in self._gateway.find_many(
                "kols",
                Where(within={"id": sorted({r["kol_id"] for r in reports})}),
                columns=["id", "name"],
            )
        }
        data = [{**report, "kol": kols.get(report["kol_id"])} for report in reports]
        return success("Reports fetched successfully.", data=data)

    @gateway_failures("An error occurred while updating the report.")
    def update(self, raw_id: Any, body: Any) -> Envelope:
        report_id = parse_id(raw_id)
        if report_id is None:
            return failure(400, "Report ID is required.")
        if not isinstance(body, dict):
            return failure(400, "Request body must be a JSON object.")

        for name in REPORT_METRIC_FIELDS:
            if name in body and not is_number(body[name]):
                return failure(400, f"{name} must be a number.")

        stored = self._gateway.find_unique("kol_reports", report_id)
        if stored is None:
            return failure(404, "Report not found.")

        result = self._updater.update(REPORT_UPDATE, stored, body)
        if not result.changed:
            return success("No changes made.")
        return success("Report updated successfully.")

    @gateway_failures("Failed to delete report.")
    def delete(self, raw_id: Any) -> Envelope:
        report_id = parse_id(raw_id)
        if report_id is None:
            return failure(400, "Report ID is required.")

        if self._gateway.find_unique("kol_reports", report_id) is None:
            return failure(404, "Report not found.")

        self._gateway.delete("kol_reports", report_id)
        logger.info("Report deleted", report_id=report_id)
        return success("Report deleted successfully.")

    def _existing_ids(self, table: str, ids: set[int]) -> set[int]:
        if not ids:
            return set()
        rows = self._gateway.find_many(table, Where(within={"id": sorted(ids)}), columns=["id"])
        return {row["id"] for row in rows}

    def _stored_pairs(self, candidates: list[tuple[int, dict[str, Any]]]) -> set[tuple[int, int]]:
        if not candidates:
            return set()
        rows = self._gateway.find_many(
            "kol_reports",
            Where(
                any_of=tuple(
                    {"campaign_id": item["campaign_id"], "kol_id": item["kol_id"]}
                    for _, item in candidates
                )
            ),
            columns=["campaign_id", "kol_id"],
        )
        return {(row["campaign_id"], row["kol_id"]) for row in rows}
