"""
AuditorService -- append-only audit trail recorder.

Responsibility:
    Writes one immutable audit entry per mutation, login, logout and
    approval decision, and reads entries back for forensic review.

Architecture position:
    Kernel > Services -- imperative shell, called by
    ChangeControlService and AuthService.

Invariants enforced:
    - Append-only: entries live under ``auditLogs``; the store refuses
      update/remove there and the ORM listeners back it up.
    - The timestamp is the store's server timestamp.  Callers cannot
      supply one.
    - ``changes`` is omitted when empty; optional keys are omitted when
      absent; change values that are absent are written as null.

Failure modes:
    - StoreUnavailableError: the store could not accept the write.  The
      recorder does not retry and does not roll back any record write
      that preceded it.

Audit relevance:
    This IS the audit service.
"""

from __future__ import annotations

from typing import Any, Iterable

from console_kernel.domain.approval import ApprovalStatus
from console_kernel.domain.audit import (
    AUDIT_LOG_PATH,
    Actor,
    AuditAction,
    AuditEntityType,
    AuditEntry,
    AuditEntryInput,
)
from console_kernel.domain.diff import ChangeEntry
from console_kernel.domain.principal import Principal
from console_kernel.domain.store import SERVER_TIMESTAMP, DocumentStore, join_path
from console_kernel.logging_config import get_logger

logger = get_logger("services.auditor")


class AuditorService:
    """
    Records audit entries through a ``DocumentStore``.

    Non-goals:
        - Does NOT interpret entries; filtering and sorting for the
          audit viewer live in ``AuditSelector``.
        - Does NOT make the audit write atomic with the record write.
    """

    def __init__(self, store: DocumentStore, path: str = AUDIT_LOG_PATH):
        self._store = store
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def record(self, entry: AuditEntryInput) -> str:
        """
        Append one audit entry and return its key.

        Raises:
            StoreUnavailableError: The store could not accept the write.
        """
        document = entry.to_document()
        document["timestamp"] = SERVER_TIMESTAMP
        key = self._store.push(self._path, document)
        logger.info(
            "audit_entry_recorded",
            extra={
                "audit_entry_id": key,
                "action": entry.action.value,
                "audit_entity_type": entry.entity_type.value,
                "audit_entity_id": entry.entity_id,
                "change_count": len(entry.changes),
            },
        )
        return key

    # ------------------------------------------------------------------
    # Convenience recorders
    # ------------------------------------------------------------------

    def record_create(
        self,
        principal: Principal,
        entity_type: AuditEntityType,
        entity_id: str,
        entity_name: str | None = None,
        tenant_id: str | None = None,
    ) -> str:
        return self.record(
            AuditEntryInput(
                actor=Actor.from_principal(principal),
                action=AuditAction.CREATE,
                entity_type=entity_type,
                entity_id=entity_id,
                entity_name=entity_name,
                tenant_id=tenant_id,
            )
        )

    def record_update(
        self,
        principal: Principal,
        entity_type: AuditEntityType,
        entity_id: str,
        changes: Iterable[ChangeEntry],
        entity_name: str | None = None,
        tenant_id: str | None = None,
    ) -> str:
        return self.record(
            AuditEntryInput(
                actor=Actor.from_principal(principal),
                action=AuditAction.UPDATE,
                entity_type=entity_type,
                entity_id=entity_id,
                entity_name=entity_name,
                changes=tuple(changes),
                tenant_id=tenant_id,
            )
        )

    def record_delete(
        self,
        principal: Principal,
        entity_type: AuditEntityType,
        entity_id: str,
        entity_name: str | None = None,
        tenant_id: str | None = None,
    ) -> str:
        return self.record(
            AuditEntryInput(
                actor=Actor.from_principal(principal),
                action=AuditAction.DELETE,
                entity_type=entity_type,
                entity_id=entity_id,
                entity_name=entity_name,
                tenant_id=tenant_id,
            )
        )

    def record_decision(
        self,
        principal: Principal,
        entity_type: AuditEntityType,
        entity_id: str,
        previous_status: ApprovalStatus | str,
        new_status: ApprovalStatus,
        entity_name: str | None = None,
        tenant_id: str | None = None,
    ) -> str:
        """Record an approve/reject decision with its status transition."""
        action = (
            AuditAction.APPROVE
            if new_status is ApprovalStatus.APPROVED
            else AuditAction.REJECT
        )
        previous = (
            previous_status.value
            if isinstance(previous_status, ApprovalStatus)
            else previous_status
        )
        return self.record(
            AuditEntryInput(
                actor=Actor.from_principal(principal),
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                entity_name=entity_name,
                metadata={"previousStatus": previous, "newStatus": new_status.value},
                tenant_id=tenant_id,
            )
        )

    def record_login(
        self, principal: Principal, metadata: dict[str, Any] | None = None
    ) -> str:
        return self.record(
            AuditEntryInput(
                actor=Actor.from_principal(principal),
                action=AuditAction.LOGIN,
                entity_type=AuditEntityType.AUTH,
                entity_id=principal.user_id,
                entity_name=principal.email,
                metadata=metadata,
                tenant_id=principal.tenant_id,
            )
        )

    def record_logout(
        self, principal: Principal, metadata: dict[str, Any] | None = None
    ) -> str:
        return self.record(
            AuditEntryInput(
                actor=Actor.from_principal(principal),
                action=AuditAction.LOGOUT,
                entity_type=AuditEntityType.AUTH,
                entity_id=principal.user_id,
                entity_name=principal.email,
                metadata=metadata,
                tenant_id=principal.tenant_id,
            )
        )

    def record_initialize(
        self,
        principal: Principal,
        entity_type: AuditEntityType,
        entity_name: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Record a bulk data initialization (e.g. seeding reference data)."""
        return self.record(
            AuditEntryInput(
                actor=Actor.from_principal(principal),
                action=AuditAction.INITIALIZE,
                entity_type=entity_type,
                entity_name=entity_name,
                metadata=metadata,
                tenant_id=principal.tenant_id,
            )
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_entry(self, entry_id: str) -> AuditEntry | None:
        data = self._store.get(join_path(self._path, entry_id))
        if data is None:
            return None
        return AuditEntry.from_document(entry_id, data)

    def _all_entries(self) -> list[AuditEntry]:
        data = self._store.get(self._path) or {}
        return [AuditEntry.from_document(key, doc) for key, doc in data.items()]

    def get_trace(
        self, entity_type: AuditEntityType | str, entity_id: str
    ) -> list[AuditEntry]:
        """Every entry for one entity, oldest first."""
        entity_type = AuditEntityType(entity_type)
        return [
            e
            for e in self._all_entries()
            if e.entity_type is entity_type and e.entity_id == entity_id
        ]

    def get_recent_entries(self, limit: int = 100) -> list[AuditEntry]:
        """The newest ``limit`` entries, newest first."""
        entries = self._all_entries()
        entries.reverse()
        return entries[:limit]
