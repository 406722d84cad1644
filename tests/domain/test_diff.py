"""
Tests for the change-set differ (console_kernel/domain/diff.py).

Covers field ordering, housekeeping exclusion, absent-as-null, deep
equality, and the legacy array-order sensitivity.
"""

from decimal import Decimal

from console_kernel.domain.diff import HOUSEKEEPING_KEYS, ChangeEntry, diff


class TestDiffBasics:
    def test_identical_snapshots_produce_no_changes(self):
        record = {"name": "Zone A", "rate": 2.5, "tags": ["a", "b"]}
        assert diff(record, dict(record)) == []

    def test_changed_scalar_reported_with_old_and_new(self):
        changes = diff({"rate": 2.5}, {"rate": 3.0})
        assert changes == [ChangeEntry("rate", 2.5, 3.0)]

    def test_added_field_has_null_old_value(self):
        changes = diff({"name": "A"}, {"name": "A", "color": "red"})
        assert changes == [ChangeEntry("color", None, "red")]

    def test_removed_field_has_null_new_value(self):
        changes = diff({"name": "A", "color": "red"}, {"name": "A"})
        assert changes == [ChangeEntry("color", "red", None)]

    def test_none_snapshot_treated_as_empty(self):
        assert diff(None, {"name": "A"}) == [ChangeEntry("name", None, "A")]
        assert diff({"name": "A"}, None) == [ChangeEntry("name", "A", None)]
        assert diff(None, None) == []

    def test_order_follows_old_then_new_only_keys(self):
        old = {"b": 1, "a": 1}
        new = {"c": 2, "a": 2, "b": 2}
        assert [c.field for c in diff(old, new)] == ["b", "a", "c"]


class TestHousekeepingExclusion:
    def test_default_housekeeping_keys(self):
        assert HOUSEKEEPING_KEYS == {"id", "lastModifiedBy", "lastModifiedAt"}

    def test_housekeeping_changes_are_ignored(self):
        old = {"id": "1", "lastModifiedBy": "a@x", "lastModifiedAt": "t1", "name": "A"}
        new = {"id": "2", "lastModifiedBy": "b@x", "lastModifiedAt": "t2", "name": "A"}
        assert diff(old, new) == []

    def test_custom_housekeeping_keys(self):
        changes = diff(
            {"name": "A", "secret": 1},
            {"name": "B", "secret": 2},
            housekeeping_keys={"secret"},
        )
        assert [c.field for c in changes] == ["name"]


class TestDeepEquality:
    def test_nested_dict_key_order_does_not_matter(self):
        old = {"limits": {"min": 1, "max": 5}}
        new = {"limits": {"max": 5, "min": 1}}
        assert diff(old, new) == []

    def test_nested_value_change_reports_whole_field(self):
        old = {"limits": {"min": 1, "max": 5}}
        new = {"limits": {"min": 1, "max": 6}}
        changes = diff(old, new)
        assert changes == [ChangeEntry("limits", {"min": 1, "max": 5}, {"min": 1, "max": 6})]

    def test_int_and_string_are_different(self):
        assert diff({"rate": 1}, {"rate": "1"}) != []

    def test_bool_and_int_are_different(self):
        assert diff({"active": True}, {"active": 1}) != []


class TestArrayOrder:
    def test_reordered_array_is_a_change_by_default(self):
        changes = diff({"zones": ["a", "b"]}, {"zones": ["b", "a"]})
        assert changes == [ChangeEntry("zones", ["a", "b"], ["b", "a"])]

    def test_unordered_field_ignores_reordering(self):
        changes = diff(
            {"zones": ["a", "b"]},
            {"zones": ["b", "a"]},
            unordered_fields={"zones"},
        )
        assert changes == []

    def test_unordered_field_still_sees_membership_change(self):
        changes = diff(
            {"zones": ["a", "b"]},
            {"zones": ["a", "c"]},
            unordered_fields={"zones"},
        )
        assert [c.field for c in changes] == ["zones"]

    def test_unordered_field_counts_duplicates(self):
        changes = diff(
            {"zones": ["a", "a", "b"]},
            {"zones": ["a", "b", "b"]},
            unordered_fields={"zones"},
        )
        assert len(changes) == 1


class TestChangeEntryDocument:
    def test_document_shape_is_camel_case(self):
        entry = ChangeEntry("rate", Decimal("2.50"), None)
        assert entry.to_document() == {
            "field": "rate",
            "oldValue": "2.50",
            "newValue": None,
        }

    def test_from_document_reads_missing_values_as_none(self):
        entry = ChangeEntry.from_document({"field": "name", "newValue": "B"})
        assert entry == ChangeEntry("name", None, "B")
