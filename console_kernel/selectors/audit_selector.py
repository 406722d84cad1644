"""
Module: console_kernel.selectors.audit_selector
Responsibility: Read-only filtering and sorting of audit entries for the
    audit log viewer.
Architecture position: Kernel > Selectors.

Filter semantics:
    - ``date_from`` / ``date_to`` are whole days in UTC; ``date_to`` is
      inclusive of the entire day.
    - ``search_term`` matches case-insensitively against entity name,
      user name and user email.
    - Sorting puts entries missing the sort field last in either
      direction.  Ties keep store order, newest first when descending.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from console_kernel.domain.audit import AUDIT_LOG_PATH, AuditAction, AuditEntityType, AuditEntry
from console_kernel.selectors.base import BaseSelector

SORT_FIELDS = frozenset({
    "timestamp",
    "userName",
    "userEmail",
    "action",
    "entityType",
    "entityName",
})


@dataclass(frozen=True)
class AuditFilter:
    date_from: date | None = None
    date_to: date | None = None
    user_id: str | None = None
    entity_type: AuditEntityType | None = None
    action: AuditAction | None = None
    search_term: str | None = None
    tenant_id: str | None = None
    sort_field: str = "timestamp"
    sort_direction: str = "desc"

    def __post_init__(self) -> None:
        if self.sort_field not in SORT_FIELDS:
            raise ValueError(f"Unsupported sort field: {self.sort_field}")
        if self.sort_direction not in ("asc", "desc"):
            raise ValueError(f"Unsupported sort direction: {self.sort_direction}")


@dataclass(frozen=True)
class AuditUser:
    user_id: str
    user_name: str


def _parse_timestamp(value: str) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def _sort_value(entry: AuditEntry, field: str) -> Any:
    if field == "timestamp":
        return _parse_timestamp(entry.timestamp)
    value = {
        "userName": entry.actor.user_name,
        "userEmail": entry.actor.user_email,
        "action": entry.action.value,
        "entityType": entry.entity_type.value,
        "entityName": entry.entity_name,
    }[field]
    return value.casefold() if value else None


class AuditSelector(BaseSelector):
    """Queries over the ``auditLogs`` collection."""

    def __init__(self, store, path: str = AUDIT_LOG_PATH):
        super().__init__(store)
        self.path = path

    def all_entries(self) -> list[AuditEntry]:
        """Every entry in store order (oldest first)."""
        data = self.store.get(self.path) or {}
        return [AuditEntry.from_document(key, doc) for key, doc in data.items()]

    def _matches(self, entry: AuditEntry, criteria: AuditFilter) -> bool:
        if criteria.date_from is not None or criteria.date_to is not None:
            ts = _parse_timestamp(entry.timestamp)
            if ts is None:
                return False
            if criteria.date_from is not None and ts < _day_start(criteria.date_from):
                return False
            if criteria.date_to is not None and ts >= _day_start(criteria.date_to + timedelta(days=1)):
                return False
        if criteria.user_id and entry.actor.user_id != criteria.user_id:
            return False
        if criteria.entity_type is not None and entry.entity_type is not AuditEntityType(criteria.entity_type):
            return False
        if criteria.action is not None and entry.action is not AuditAction(criteria.action):
            return False
        if criteria.tenant_id is not None and entry.tenant_id != criteria.tenant_id:
            return False
        if criteria.search_term:
            term = criteria.search_term.casefold()
            haystacks = (entry.entity_name, entry.actor.user_name, entry.actor.user_email)
            if not any(h and term in h.casefold() for h in haystacks):
                return False
        return True

    def query(self, criteria: AuditFilter | None = None) -> list[AuditEntry]:
        """Filtered and sorted entries."""
        criteria = criteria or AuditFilter()
        matched = [
            (index, entry)
            for index, entry in enumerate(self.all_entries())
            if self._matches(entry, criteria)
        ]

        present = []
        missing = []
        for index, entry in matched:
            value = _sort_value(entry, criteria.sort_field)
            if value is None:
                missing.append(entry)
            else:
                present.append((value, index, entry))

        present.sort(key=lambda item: (item[0], item[1]), reverse=criteria.sort_direction == "desc")
        return [entry for _, _, entry in present] + missing

    def distinct_users(self) -> list[AuditUser]:
        """Users appearing in the trail, sorted by name."""
        seen: dict[str, str] = {}
        for entry in self.all_entries():
            seen.setdefault(entry.actor.user_id, entry.actor.user_name)
        return sorted(
            (AuditUser(user_id=uid, user_name=name) for uid, name in seen.items()),
            key=lambda u: (u.user_name.casefold(), u.user_id),
        )
