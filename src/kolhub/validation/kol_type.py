"""Field validation for KOL type (follower tier) payloads.

Only keys present in the payload are checked, so the same validator serves
creates and partial updates.  The ``max_followers > min_followers`` invariant
is checked against whichever bound is authoritative: the one in the payload,
or the stored value passed in by the caller.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from kolhub.domain.models import ValidationResult
from kolhub.domain.types import is_integer, is_number

MAX_NOT_GREATER = "max_followers must be greater than min_followers."


def validate_kol_type(
    data: Mapping[str, Any],
    existing_min_followers: float | None = None,
    existing_max_followers: float | None = None,
) -> ValidationResult:
    """Validate a (possibly partial) KOL type payload.

    Args:
        data: The candidate payload.
        existing_min_followers: Stored ``min_followers``, used when the
            payload does not carry its own.
        existing_max_followers: Stored ``max_followers``, used when the
            payload changes ``min_followers`` without touching the maximum.

    Returns:
        A ``ValidationResult``.
    """
    if "id" in data and not is_integer(data["id"]):
        return ValidationResult.fail("id must be a number.")

    if "name" in data and not isinstance(data["name"], str):
        return ValidationResult.fail("name must be a string.")

    if "min_followers" in data and not is_number(data["min_followers"]):
        return ValidationResult.fail("min_followers must be a number.")

    if "max_followers" in data:
        maximum = data["max_followers"]
        if maximum is not None and not is_number(maximum):
            return ValidationResult.fail("max_followers must be a number or null.")
        minimum = data["min_followers"] if "min_followers" in data else existing_min_followers
        if maximum is not None and is_number(minimum) and maximum <= minimum:
            return ValidationResult.fail(MAX_NOT_GREATER)
    elif "min_followers" in data and is_number(existing_max_followers):
        if existing_max_followers <= data["min_followers"]:
            return ValidationResult.fail(MAX_NOT_GREATER)

    return ValidationResult.ok()
