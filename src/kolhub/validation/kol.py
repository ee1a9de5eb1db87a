"""Field validation for KOL profile payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from kolhub.domain.models import ValidationResult
from kolhub.domain.types import AGE_RANGE_VALUES, NICHE_VALUES, is_integer, is_number

KOL_REQUIRED_FIELDS: tuple[str, ...] = (
    "name",
    "niche",
    "followers",
    "engagement_rate",
    "reach",
    "rate_card",
    "audience_male",
    "audience_female",
    "audience_age_range",
)

KOL_NUMERIC_FIELDS: tuple[str, ...] = (
    "followers",
    "engagement_rate",
    "reach",
    "rate_card",
    "audience_male",
    "audience_female",
)


def validate_kol(data: Mapping[str, Any], *, require_id: bool = False) -> ValidationResult:
    """Validate a complete KOL record.

    Checks, in order: presence of every required field (``None`` counts as
    missing), ``id`` type when present, ``name`` type, ``niche`` membership,
    numeric metrics, then ``audience_age_range`` membership.  The first
    failure wins.

    Args:
        data: The KOL payload (for updates, the stored record merged with the
            candidate changes).
        require_id: Treat ``id`` as a required field.

    Returns:
        A ``ValidationResult``.
    """
    required = ("id", *KOL_REQUIRED_FIELDS) if require_id else KOL_REQUIRED_FIELDS
    for name in required:
        if data.get(name) is None:
            return ValidationResult.fail(f"{name} is required.")

    if data.get("id") is not None and not is_integer(data["id"]):
        return ValidationResult.fail("id must be a number.")

    if not isinstance(data["name"], str):
        return ValidationResult.fail("name must be a string.")

    if data["niche"] not in NICHE_VALUES:
        return ValidationResult.fail(f"niche must be one of: {', '.join(NICHE_VALUES)}")

    for name in KOL_NUMERIC_FIELDS:
        if not is_number(data[name]):
            return ValidationResult.fail(f"{name} must be a number.")

    if data["audience_age_range"] not in AGE_RANGE_VALUES:
        return ValidationResult.fail(
            f"audience_age_range must be one of: {', '.join(AGE_RANGE_VALUES)}"
        )

    return ValidationResult.ok()
