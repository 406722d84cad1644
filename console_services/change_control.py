"""
console_services.change_control -- Maker-checker façade for one entity type.

Responsibility:
    The single orchestration every entity manager uses:
    authorize (domain, tenant, role) -> validate -> write the record ->
    diff against the prior snapshot -> record the audit entry.
    One ``ChangeControlService`` is built per ``EntityDescriptor``.

Architecture position:
    Services layer.  Composes AccessGate, the document store,
    AuditorService and the pure approval/diff rules from the kernel.
    Constructed only by ConsoleOrchestrator.

Invariants:
    - Guard and validation failures happen before any write and emit no
      audit entry.
    - Every edit reopens a governed record to Pending with the editor as
      maker.  Checker fields survive the edit as history.
    - The maker of a record can never approve or reject it.
    - The record write and the audit write are separate commits.  An
      audit write that fails after the record write is logged as
      ``audit_write_failed`` and the record mutation stands.

Failure modes:
    - DomainAccessDeniedError / TenantAccessDeniedError: scope denial.
    - SelfApprovalError / InsufficientRoleError /
      InvalidApprovalTransitionError: approval guards.
    - MissingFieldError: required business fields missing or blank.
    - RecordNotFoundError: no record at the id.
    - UnsupportedOperationError: approve/reject on an ungoverned type.
    - StoreUnavailableError: the record write failed (no audit attempted).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator

from console_kernel.domain.access import TENANT_ID
from console_kernel.domain.approval import (
    CHECKER_EMAIL,
    CHECKER_NAME,
    CHECKER_TIMESTAMP,
    LAST_MODIFIED_AT,
    LAST_MODIFIED_BY,
    STATUS,
    ApprovalDecision,
    ApprovalStatus,
    apply_create,
    apply_decision,
    apply_edit,
    check_decision,
    check_maker,
    stamp_modified,
)
from console_kernel.domain.clock import Clock, SystemClock
from console_kernel.domain.diff import diff
from console_kernel.domain.entity import EntityDescriptor
from console_kernel.domain.principal import Principal
from console_kernel.domain.store import DocumentStore, Subscription
from console_kernel.exceptions import (
    GuardViolationError,
    MissingFieldError,
    RecordNotFoundError,
    StoreUnavailableError,
    UnsupportedOperationError,
)
from console_kernel.logging_config import LogContext, get_logger
from console_kernel.selectors.record_selector import RecordSelector, RecordSet, with_id
from console_kernel.services.auditor_service import AuditorService
from console_kernel.utils.serialization import strip_none, to_storable
from console_services.access_gate import AccessGate

logger = get_logger("services.change_control")

_DECISION_FIELDS = (
    STATUS,
    CHECKER_NAME,
    CHECKER_EMAIL,
    CHECKER_TIMESTAMP,
    LAST_MODIFIED_BY,
    LAST_MODIFIED_AT,
)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


class ChangeControlService:
    """
    Change-control operations for the records of one entity type.

    Every call receives the acting ``Principal`` explicitly, plus an
    optional ``tenant_override`` that only Administrators can use.
    """

    def __init__(
        self,
        descriptor: EntityDescriptor,
        store: DocumentStore,
        auditor: AuditorService,
        access_gate: AccessGate,
        clock: Clock | None = None,
    ):
        self.descriptor = descriptor
        self._store = store
        self._auditor = auditor
        self._gate = access_gate
        self._clock = clock or SystemClock()
        self._records = RecordSelector(store, descriptor)

    @property
    def entity_type(self) -> str:
        return self.descriptor.entity_type.value

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _context(self, principal: Principal, record_id: str | None = None) -> Iterator[None]:
        with LogContext.bind(
            actor_id=principal.user_id,
            entity_type=self.entity_type,
            entity_id=record_id,
        ):
            yield

    def _validate(self, record: dict[str, Any]) -> None:
        missing = [f for f in self.descriptor.required_fields if _is_blank(record.get(f))]
        if missing:
            logger.warning(
                "validation_failed",
                extra={"missing_fields": missing},
            )
            raise MissingFieldError(self.entity_type, missing)

    def _check_maker(self, principal: Principal) -> None:
        try:
            check_maker(principal)
        except GuardViolationError as exc:
            self._log_guard(principal, exc)
            raise

    def _log_guard(self, principal: Principal, exc: GuardViolationError) -> None:
        logger.warning(
            "guard_violation",
            extra={"code": exc.code, "actor_email": principal.email, "role": principal.role.value},
        )

    def _load(
        self, principal: Principal, record_id: str, tenant_override: str | None
    ) -> dict[str, Any]:
        record = self._records.get(record_id)
        if record is None:
            raise RecordNotFoundError(self.entity_type, record_id)
        if self.descriptor.tenant_scoped:
            self._gate.authorize_record(principal, record, tenant_override)
        return record

    def _audit(
        self, action: str, recorder: Callable[..., str], *args: Any, **kwargs: Any
    ) -> str | None:
        """Run an audit write; a store failure is logged, not raised."""
        try:
            return recorder(*args, **kwargs)
        except StoreUnavailableError:
            logger.error(
                "audit_write_failed",
                exc_info=True,
                extra={"audit_action": action},
            )
            return None

    @staticmethod
    def _stored(record_id: str, record: dict[str, Any]) -> dict[str, Any]:
        return with_id(record_id, strip_none(to_storable(record)))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(
        self,
        principal: Principal,
        fields: dict[str, Any],
        tenant_override: str | None = None,
    ) -> dict[str, Any]:
        """Create a record and return its snapshot (with ``id``)."""
        with self._context(principal):
            self._gate.authorize_domain(principal, self.descriptor.domain)
            self._check_maker(principal)
            self._validate(fields)

            now = self._clock.now_iso()
            record = {k: v for k, v in fields.items() if k != "id"}
            if self.descriptor.tenant_scoped:
                record[TENANT_ID] = self._gate.resolve_effective_tenant(principal, tenant_override)
            if self.descriptor.governed:
                record = apply_create(record, principal, now)
            else:
                record = stamp_modified(record, principal, now)

            record_id = self._store.push(self.descriptor.store_path, record)
            logger.info(
                "record_created",
                extra={"record_id": record_id, "tenant": record.get(TENANT_ID)},
            )

            self._audit(
                "create",
                self._auditor.record_create,
                principal,
                self.descriptor.entity_type,
                record_id,
                entity_name=self.descriptor.entity_name(record),
                tenant_id=record.get(TENANT_ID),
            )
            return self._stored(record_id, record)

    def edit(
        self,
        principal: Principal,
        record_id: str,
        changes: dict[str, Any],
        tenant_override: str | None = None,
    ) -> dict[str, Any]:
        """
        Apply a maker edit and return the new snapshot.

        A ``None`` value in ``changes`` removes the field.
        """
        with self._context(principal, record_id):
            self._gate.authorize_domain(principal, self.descriptor.domain)
            current = self._load(principal, record_id, tenant_override)
            self._check_maker(principal)

            changes = {k: v for k, v in changes.items() if k not in ("id", TENANT_ID)}
            now = self._clock.now_iso()
            if self.descriptor.governed:
                updated = apply_edit(current, changes, principal, now)
            else:
                merged = dict(current)
                merged.update(changes)
                updated = stamp_modified(merged, principal, now)
            self._validate(updated)

            partial = {k: v for k, v in updated.items() if k != "id"}
            self._store.update(self._records.record_path(record_id), partial)

            after = self._stored(record_id, partial)
            change_set = diff(
                current,
                after,
                housekeeping_keys=self.descriptor.housekeeping_keys,
                unordered_fields=self.descriptor.unordered_fields,
            )
            logger.info(
                "record_updated",
                extra={
                    "record_id": record_id,
                    "changed_fields": [c.field for c in change_set],
                    "status": after.get(STATUS),
                },
            )

            self._audit(
                "update",
                self._auditor.record_update,
                principal,
                self.descriptor.entity_type,
                record_id,
                change_set,
                entity_name=self.descriptor.entity_name(after),
                tenant_id=after.get(TENANT_ID),
            )
            return after

    def approve(
        self,
        principal: Principal,
        record_id: str,
        tenant_override: str | None = None,
    ) -> dict[str, Any]:
        return self._decide(principal, record_id, ApprovalDecision.APPROVE, tenant_override)

    def reject(
        self,
        principal: Principal,
        record_id: str,
        tenant_override: str | None = None,
    ) -> dict[str, Any]:
        return self._decide(principal, record_id, ApprovalDecision.REJECT, tenant_override)

    def _decide(
        self,
        principal: Principal,
        record_id: str,
        decision: ApprovalDecision,
        tenant_override: str | None,
    ) -> dict[str, Any]:
        if not self.descriptor.governed:
            raise UnsupportedOperationError(self.entity_type, decision.value)

        with self._context(principal, record_id):
            self._gate.authorize_domain(principal, self.descriptor.domain)
            current = self._load(principal, record_id, tenant_override)

            try:
                target = check_decision(principal, current, decision)
            except GuardViolationError as exc:
                self._log_guard(principal, exc)
                raise

            previous = current.get(STATUS)
            decided = apply_decision(current, principal, decision, self._clock.now_iso())
            self._store.update(
                self._records.record_path(record_id),
                {k: decided[k] for k in _DECISION_FIELDS},
            )
            logger.info(
                "record_decided",
                extra={
                    "record_id": record_id,
                    "decision": decision.value,
                    "previous_status": previous,
                    "new_status": target.value,
                },
            )

            self._audit(
                decision.value,
                self._auditor.record_decision,
                principal,
                self.descriptor.entity_type,
                record_id,
                previous,
                target,
                entity_name=self.descriptor.entity_name(decided),
                tenant_id=decided.get(TENANT_ID),
            )
            return self._stored(record_id, decided)

    def delete(
        self,
        principal: Principal,
        record_id: str,
        tenant_override: str | None = None,
    ) -> None:
        """Remove a record outright.  Audited without a diff."""
        with self._context(principal, record_id):
            self._gate.authorize_domain(principal, self.descriptor.domain)
            current = self._load(principal, record_id, tenant_override)
            self._check_maker(principal)

            self._store.remove(self._records.record_path(record_id))
            logger.info("record_deleted", extra={"record_id": record_id})

            self._audit(
                "delete",
                self._auditor.record_delete,
                principal,
                self.descriptor.entity_type,
                record_id,
                entity_name=self.descriptor.entity_name(current),
                tenant_id=current.get(TENANT_ID),
            )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(
        self,
        principal: Principal,
        record_id: str,
        tenant_override: str | None = None,
    ) -> dict[str, Any]:
        with self._context(principal, record_id):
            self._gate.authorize_domain(principal, self.descriptor.domain)
            return self._load(principal, record_id, tenant_override)

    def list(
        self,
        principal: Principal,
        tenant_override: str | None = None,
        status: ApprovalStatus | str | None = None,
    ) -> RecordSet:
        with self._context(principal):
            self._gate.authorize_domain(principal, self.descriptor.domain)
            tenant = self._gate.resolve_effective_tenant(principal, tenant_override)
            return self._records.list(tenant_id=tenant, status=status)

    def subscribe(
        self,
        principal: Principal,
        callback: Callable[[RecordSet], None],
        tenant_override: str | None = None,
    ) -> Subscription:
        """
        Push scoped snapshots to ``callback``.

        The current RecordSet is delivered immediately and again after
        every committed change to this entity type.
        """
        self._gate.authorize_domain(principal, self.descriptor.domain)
        tenant = self._gate.resolve_effective_tenant(principal, tenant_override)

        def _deliver(raw: Any) -> None:
            callback(self._records.materialize(raw, tenant_id=tenant))

        return self._store.subscribe(self.descriptor.store_path, _deliver)
