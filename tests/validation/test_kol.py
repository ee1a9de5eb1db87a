"""Tests for KOL payload validation."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from kolhub.validation import KOL_NUMERIC_FIELDS, validate_kol


class TestValidateKol:
    def test_complete_payload_is_valid(self, kol_payload: Callable[..., dict[str, Any]]) -> None:
        result = validate_kol(kol_payload())
        assert result.valid
        assert result.message is None

    def test_id_is_required_only_when_asked(
        self, kol_payload: Callable[..., dict[str, Any]]
    ) -> None:
        assert validate_kol(kol_payload()).valid
        result = validate_kol(kol_payload(), require_id=True)
        assert not result.valid
        assert result.message == "id is required."

    def test_missing_field_reported_first(
        self, kol_payload: Callable[..., dict[str, Any]]
    ) -> None:
        payload = kol_payload(niche="NOPE")
        del payload["reach"]
        assert validate_kol(payload).message == "reach is required."

    def test_null_counts_as_missing(self, kol_payload: Callable[..., dict[str, Any]]) -> None:
        assert validate_kol(kol_payload(name=None)).message == "name is required."

    def test_non_integer_id(self, kol_payload: Callable[..., dict[str, Any]]) -> None:
        assert validate_kol(kol_payload(id="7")).message == "id must be a number."

    def test_name_must_be_string(self, kol_payload: Callable[..., dict[str, Any]]) -> None:
        assert validate_kol(kol_payload(name=42)).message == "name must be a string."

    def test_niche_membership(self, kol_payload: Callable[..., dict[str, Any]]) -> None:
        result = validate_kol(kol_payload(niche="GAMING"))
        assert result.message is not None
        assert result.message.startswith("niche must be one of: FASHION, BEAUTY, TECH")

    @pytest.mark.parametrize("field", KOL_NUMERIC_FIELDS)
    def test_numeric_fields_reject_text(
        self, field: str, kol_payload: Callable[..., dict[str, Any]]
    ) -> None:
        assert validate_kol(kol_payload(**{field: "12"})).message == f"{field} must be a number."

    def test_booleans_are_not_numbers(self, kol_payload: Callable[..., dict[str, Any]]) -> None:
        assert validate_kol(kol_payload(followers=True)).message == "followers must be a number."

    def test_age_range_membership(self, kol_payload: Callable[..., dict[str, Any]]) -> None:
        result = validate_kol(kol_payload(audience_age_range="AGE_99"))
        assert result.message is not None
        assert result.message.startswith("audience_age_range must be one of: AGE_13_17")
