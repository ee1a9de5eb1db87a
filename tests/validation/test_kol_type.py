"""Tests for KOL type (tier) payload validation."""

from __future__ import annotations

from kolhub.validation import MAX_NOT_GREATER, validate_kol_type


class TestValidateKolType:
    def test_valid_full_payload(self) -> None:
        payload = {"name": "Micro", "min_followers": 10000, "max_followers": 100000}
        assert validate_kol_type(payload).valid

    def test_open_ended_tier(self) -> None:
        payload = {"name": "Mega", "min_followers": 1000000, "max_followers": None}
        assert validate_kol_type(payload).valid

    def test_only_present_keys_are_checked(self) -> None:
        assert validate_kol_type({}).valid
        assert validate_kol_type({"name": "Nano"}).valid

    def test_type_checks(self) -> None:
        assert validate_kol_type({"id": "1"}).message == "id must be a number."
        assert validate_kol_type({"name": 5}).message == "name must be a string."
        assert (
            validate_kol_type({"min_followers": "5"}).message == "min_followers must be a number."
        )
        assert (
            validate_kol_type({"max_followers": "5"}).message
            == "max_followers must be a number or null."
        )

    def test_max_must_exceed_min_in_payload(self) -> None:
        result = validate_kol_type({"min_followers": 5000, "max_followers": 5000})
        assert not result.valid
        assert result.message == MAX_NOT_GREATER

    def test_max_checked_against_stored_min(self) -> None:
        """Stored {min 1000, max 5000}; a patch of max 500 must be refused."""
        result = validate_kol_type({"id": 1, "max_followers": 500}, existing_min_followers=1000)
        assert result.message == "max_followers must be greater than min_followers."

    def test_payload_min_takes_precedence_over_stored(self) -> None:
        result = validate_kol_type(
            {"min_followers": 100, "max_followers": 500}, existing_min_followers=1000
        )
        assert result.valid

    def test_min_raised_above_stored_max(self) -> None:
        result = validate_kol_type(
            {"min_followers": 6000}, existing_min_followers=1000, existing_max_followers=5000
        )
        assert result.message == MAX_NOT_GREATER

    def test_min_with_open_ended_stored_max(self) -> None:
        result = validate_kol_type(
            {"min_followers": 6000}, existing_min_followers=1000, existing_max_followers=None
        )
        assert result.valid
