"""
Tests for AuditSelector (console_kernel/selectors/audit_selector.py).

The audit log viewer filters by date range, user, entity type, action,
tenant and a free-text search, and sorts by any displayed column.
"""

from datetime import date, datetime, timezone

import pytest

from console_kernel.domain.audit import AuditAction, AuditEntityType
from console_kernel.selectors.audit_selector import AuditFilter, AuditUser


@pytest.fixture
def populated(auditor, alice, bob, admin, deterministic_clock):
    """Five entries over three days."""
    deterministic_clock.set_time(datetime(2026, 1, 10, 8, 0, tzinfo=timezone.utc))
    auditor.record_login(alice)
    deterministic_clock.set_time(datetime(2026, 1, 10, 23, 59, tzinfo=timezone.utc))
    auditor.record_create(
        alice, AuditEntityType.PRICING, "p1", entity_name="AC 22kW", tenant_id="default-tenant"
    )
    deterministic_clock.set_time(datetime(2026, 1, 11, 12, 0, tzinfo=timezone.utc))
    auditor.record_create(
        bob, AuditEntityType.ZONE, "z1", entity_name="Harbour Zone", tenant_id="retail-banking"
    )
    deterministic_clock.set_time(datetime(2026, 1, 12, 9, 0, tzinfo=timezone.utc))
    auditor.record_create(
        admin, AuditEntityType.ZONE, "z2", entity_name="Airport", tenant_id="default-tenant"
    )
    deterministic_clock.set_time(datetime(2026, 1, 12, 10, 0, tzinfo=timezone.utc))
    auditor.record_logout(alice)
    return auditor


class TestFiltering:
    def test_no_filter_returns_everything_newest_first(self, populated, audit_selector):
        entries = audit_selector.query()
        assert [e.action for e in entries] == [
            AuditAction.LOGOUT,
            AuditAction.CREATE,
            AuditAction.CREATE,
            AuditAction.CREATE,
            AuditAction.LOGIN,
        ]

    def test_date_to_includes_the_whole_day(self, populated, audit_selector):
        entries = audit_selector.query(AuditFilter(date_to=date(2026, 1, 10)))
        assert len(entries) == 2

    def test_date_range(self, populated, audit_selector):
        entries = audit_selector.query(
            AuditFilter(date_from=date(2026, 1, 11), date_to=date(2026, 1, 11))
        )
        assert [e.entity_id for e in entries] == ["z1"]

    def test_user_filter(self, populated, audit_selector):
        entries = audit_selector.query(AuditFilter(user_id="alice@x"))
        assert {e.actor.user_id for e in entries} == {"alice@x"}
        assert len(entries) == 3

    def test_entity_type_and_action(self, populated, audit_selector):
        entries = audit_selector.query(
            AuditFilter(entity_type=AuditEntityType.ZONE, action=AuditAction.CREATE)
        )
        assert {e.entity_id for e in entries} == {"z1", "z2"}

    def test_tenant_filter(self, populated, audit_selector):
        entries = audit_selector.query(AuditFilter(tenant_id="retail-banking"))
        assert [e.entity_id for e in entries] == ["z1"]

    def test_search_is_case_insensitive_over_name_and_user(self, populated, audit_selector):
        assert [e.entity_id for e in audit_selector.query(AuditFilter(search_term="harbour"))] == [
            "z1"
        ]
        by_user = audit_selector.query(AuditFilter(search_term="ADA"))
        assert [e.entity_id for e in by_user] == ["z2"]


class TestSorting:
    def test_ascending_timestamp(self, populated, audit_selector):
        entries = audit_selector.query(AuditFilter(sort_direction="asc"))
        assert entries[0].action is AuditAction.LOGIN
        assert entries[-1].action is AuditAction.LOGOUT

    def test_text_sort_is_case_insensitive(self, populated, audit_selector):
        entries = audit_selector.query(AuditFilter(sort_field="entityName", sort_direction="asc"))
        assert [e.entity_name for e in entries] == [
            "AC 22kW",
            "Airport",
            "alice@x",
            "alice@x",
            "Harbour Zone",
        ]

    @pytest.mark.parametrize("direction", ["asc", "desc"])
    def test_entries_missing_sort_value_go_last(self, auditor, audit_selector, alice, direction):
        auditor.record_update(alice, AuditEntityType.ZONE, "unnamed", changes=[])
        auditor.record_create(alice, AuditEntityType.ZONE, "z1", entity_name="Zone A")
        auditor.record_create(alice, AuditEntityType.ZONE, "z2", entity_name="Zone B")
        entries = audit_selector.query(
            AuditFilter(sort_field="entityName", sort_direction=direction)
        )
        assert entries[-1].entity_id == "unnamed"

    def test_invalid_sort_field_rejected(self):
        with pytest.raises(ValueError):
            AuditFilter(sort_field="payload")

    def test_invalid_sort_direction_rejected(self):
        with pytest.raises(ValueError):
            AuditFilter(sort_direction="sideways")


class TestDistinctUsers:
    def test_users_sorted_by_name(self, populated, audit_selector):
        assert audit_selector.distinct_users() == [
            AuditUser("admin@x", "Ada Admin"),
            AuditUser("alice@x", "Alice"),
            AuditUser("bob@x", "Bob"),
        ]

    def test_empty_trail(self, audit_selector):
        assert audit_selector.query() == []
        assert audit_selector.distinct_users() == []
