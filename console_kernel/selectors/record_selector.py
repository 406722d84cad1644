"""
Module: console_kernel.selectors.record_selector
Responsibility: Read-only, tenant-scoped access to the records of one
    entity type.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Every snapshot returned carries its store key under ``id``.
    - Tenant filtering applies the legacy rule: a record without
      ``tenantId`` belongs to the default tenant.  Entity types that are
      not tenant-scoped are never filtered.
    - A record id is one non-blank path segment.  Anything else is
      reported as RecordNotFoundError and never reaches the store, so an
      id cannot address the collection itself or a nested path.
    - Records are returned in store insertion order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from console_kernel.domain.access import belongs_to_tenant
from console_kernel.domain.approval import ApprovalStatus
from console_kernel.domain.entity import EntityDescriptor
from console_kernel.domain.store import join_path
from console_kernel.exceptions import RecordNotFoundError
from console_kernel.selectors.base import BaseSelector


def with_id(record_id: str, data: dict[str, Any]) -> dict[str, Any]:
    snapshot = dict(data)
    snapshot["id"] = record_id
    return snapshot


@dataclass(frozen=True)
class RecordSet:
    """Records of one entity type as seen from one tenant."""

    entity_type: str
    tenant_id: str | None
    records: tuple[dict[str, Any], ...]

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def ids(self) -> list[str]:
        return [r["id"] for r in self.records]


class RecordSelector(BaseSelector):
    """Reads records for one ``EntityDescriptor``."""

    def __init__(self, store, descriptor: EntityDescriptor):
        super().__init__(store)
        self.descriptor = descriptor

    def record_path(self, record_id: str) -> str:
        if not isinstance(record_id, str) or not record_id.strip() or "/" in record_id:
            raise RecordNotFoundError(self.descriptor.entity_type.value, str(record_id))
        return join_path(self.descriptor.store_path, record_id)

    def get(self, record_id: str) -> dict[str, Any] | None:
        """The record snapshot, or None.  Raises RecordNotFoundError for a malformed id."""
        data = self.store.get(self.record_path(record_id))
        if data is None:
            return None
        return with_id(record_id, data)

    def materialize(
        self,
        raw: dict[str, Any] | None,
        tenant_id: str | None = None,
        status: ApprovalStatus | str | None = None,
    ) -> RecordSet:
        """Turn a raw collection snapshot into a filtered RecordSet."""
        records = [with_id(key, data) for key, data in (raw or {}).items()]
        if tenant_id is not None and self.descriptor.tenant_scoped:
            records = [r for r in records if belongs_to_tenant(r, tenant_id)]
        if status is not None:
            wanted = ApprovalStatus(status).value
            records = [r for r in records if r.get("status") == wanted]
        return RecordSet(
            entity_type=self.descriptor.entity_type.value,
            tenant_id=tenant_id,
            records=tuple(records),
        )

    def list(
        self,
        tenant_id: str | None = None,
        status: ApprovalStatus | str | None = None,
    ) -> RecordSet:
        return self.materialize(self.store.get(self.descriptor.store_path), tenant_id, status)
