"""Tests for pure change detection: scalar, reference, and collection diffs."""

from __future__ import annotations

from kolhub.changes import (
    CAMPAIGN_UPDATE,
    KOL_TYPE_UPDATE,
    REPORT_UPDATE,
    RelationConnect,
    diff_collection,
    diff_fields,
    diff_reference,
    plan_update,
)
from kolhub.changes.fields import ReferenceSpec

STORED_CAMPAIGN = {
    "id": 7,
    "user_id": 1,
    "name": "Ramadan Glow",
    "kol_type_id": 2,
    "target_niche": "BEAUTY",
    "target_engagement": 3.0,
    "target_reach": 100000,
    "target_gender": "FEMALE",
    "target_gender_min": 60.0,
    "target_age_range": "AGE_18_24",
    "start_date": "2025-01-01T00:00:00.000Z",
    "end_date": "2025-01-31T00:00:00.000Z",
    "created_at": "2024-12-01T08:00:00.000Z",
}

STORED_REPORT = {
    "id": 3,
    "campaign_id": 7,
    "kol_id": 1,
    "like_count": 100,
    "comment_count": 10,
    "share_count": 5,
    "save_count": 2,
    "engagement": 117.0,
    "reach": 4000,
    "er": 2.9,
    "cpe": 1500.0,
}


class TestDiffFields:
    """Scalar allow-list diffing."""

    def test_absent_field_is_not_compared(self) -> None:
        diff = diff_fields(STORED_CAMPAIGN, {}, CAMPAIGN_UPDATE.fields)
        assert not diff.changed
        assert diff.updates == {}

    def test_only_differing_fields_are_in_update_set(self) -> None:
        diff = diff_fields(
            STORED_CAMPAIGN,
            {"name": "Ramadan Glow", "target_reach": 150000},
            CAMPAIGN_UPDATE.fields,
        )
        assert diff.changed
        assert diff.updates == {"target_reach": 150000}

    def test_keys_outside_allow_list_are_ignored(self) -> None:
        diff = diff_fields(
            STORED_CAMPAIGN,
            {"user_id": 99, "created_at": "2020-01-01", "bogus": 1},
            CAMPAIGN_UPDATE.fields,
        )
        assert not diff.changed

    def test_explicit_null_is_a_supplied_value(self) -> None:
        stored = {"id": 1, "name": "Nano", "min_followers": 1000, "max_followers": 10000}
        diff = diff_fields(stored, {"max_followers": None}, KOL_TYPE_UPDATE.fields)
        assert diff.updates == {"max_followers": None}

    def test_same_instant_in_different_format_is_unchanged(self) -> None:
        diff = diff_fields(
            STORED_CAMPAIGN,
            {"start_date": "2025-01-01", "end_date": "2025-01-31T07:00:00+07:00"},
            CAMPAIGN_UPDATE.fields,
        )
        assert not diff.changed

    def test_changed_date_is_written_normalized(self) -> None:
        diff = diff_fields(STORED_CAMPAIGN, {"end_date": "2025-02-15"}, CAMPAIGN_UPDATE.fields)
        assert diff.updates == {"end_date": "2025-02-15T00:00:00.000Z"}

    def test_boolean_is_not_equal_to_number(self) -> None:
        diff = diff_fields({"id": 1, "like_count": 1}, {"like_count": True}, REPORT_UPDATE.fields)
        assert diff.updates == {"like_count": True}

    def test_int_and_float_with_same_value_are_equal(self) -> None:
        diff = diff_fields(STORED_REPORT, {"engagement": 117}, REPORT_UPDATE.fields)
        assert not diff.changed


class TestDiffReference:
    """Foreign-key references compared by id."""

    spec = ReferenceSpec("kol_type_id", "kol_type")

    def test_different_id_yields_connect(self) -> None:
        assert diff_reference(2, 5, self.spec) == RelationConnect("kol_type", 5)

    def test_same_id_yields_nothing(self) -> None:
        assert diff_reference(2, 2, self.spec) is None

    def test_non_integer_candidate_is_ignored(self) -> None:
        assert diff_reference(2, "5", self.spec) is None
        assert diff_reference(2, None, self.spec) is None
        assert diff_reference(2, 5.0, self.spec) is None
        assert diff_reference(2, True, self.spec) is None


class TestDiffCollection:
    """Set-valued relation diffing by sort-and-compare."""

    def test_reordered_ids_are_unchanged(self) -> None:
        assert not diff_collection([3, 1, 2], [1, 2, 3]).changed

    def test_added_id_is_a_change(self) -> None:
        diff = diff_collection([1, 2], [1, 2, 3])
        assert diff.changed
        assert diff.ids == (1, 2, 3)

    def test_removed_id_is_a_change(self) -> None:
        assert diff_collection([1, 2, 3], [1, 3]).changed

    def test_swapped_id_is_a_change(self) -> None:
        assert diff_collection([1, 2], [1, 4]).changed

    def test_candidate_order_is_kept(self) -> None:
        assert diff_collection([1], [9, 4, 6]).ids == (9, 4, 6)

    def test_missing_or_empty_candidate_means_no_change(self) -> None:
        assert not diff_collection([1, 2], None).changed
        assert not diff_collection([1, 2], []).changed
        assert not diff_collection([1, 2], "1,2").changed

    def test_duplicates_are_not_removed_before_comparing(self) -> None:
        diff = diff_collection([1, 2], [1, 1, 2])
        assert diff.changed
        assert diff.ids == (1, 1, 2)


class TestPlanUpdate:
    """Full update plans."""

    def test_identical_payload_is_a_noop(self) -> None:
        candidate = {k: v for k, v in STORED_CAMPAIGN.items() if k != "created_at"}
        candidate["kol_ids"] = [2, 1]
        plan = plan_update(CAMPAIGN_UPDATE, STORED_CAMPAIGN, candidate, [1, 2])
        assert plan.is_noop

    def test_reference_change_alone_needs_row_update(self) -> None:
        plan = plan_update(CAMPAIGN_UPDATE, STORED_CAMPAIGN, {"kol_type_id": 4}, [1])
        assert plan.scalar_changed
        assert not plan.fields.changed
        assert plan.connects == (RelationConnect("kol_type", 4),)
        assert not plan.collection_changed

    def test_collection_change_alone_needs_no_row_update(self) -> None:
        plan = plan_update(CAMPAIGN_UPDATE, STORED_CAMPAIGN, {"kol_ids": [1, 2]}, [1])
        assert not plan.scalar_changed
        assert plan.collection_changed

    def test_report_plan_has_no_relations(self) -> None:
        plan = plan_update(REPORT_UPDATE, STORED_REPORT, {"like_count": 100, "campaign_id": 8})
        assert plan.is_noop
        assert plan.connects == ()
