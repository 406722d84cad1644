"""
Pure domain layer for the console kernel.

Nothing in this package performs I/O.  Services in
``console_kernel.services`` and ``console_services`` persist what these
functions compute.
"""

from console_kernel.domain.access import (
    DEFAULT_TENANT,
    NavigationState,
    belongs_to_tenant,
    can_access_domain,
    record_tenant,
    resolve_effective_tenant,
)
from console_kernel.domain.approval import (
    APPROVAL_TRANSITIONS,
    ApprovalDecision,
    ApprovalStatus,
    apply_create,
    apply_decision,
    apply_edit,
    check_decision,
    check_maker,
)
from console_kernel.domain.audit import (
    AUDIT_LOG_PATH,
    Actor,
    AuditAction,
    AuditEntityType,
    AuditEntry,
    AuditEntryInput,
)
from console_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from console_kernel.domain.diff import HOUSEKEEPING_KEYS, ChangeEntry, diff
from console_kernel.domain.entity import (
    ENTITY_DESCRIPTORS,
    EntityDescriptor,
    get_descriptor,
)
from console_kernel.domain.principal import Principal, UserRole
from console_kernel.domain.store import SERVER_TIMESTAMP, DocumentStore, Subscription

__all__ = [
    "APPROVAL_TRANSITIONS",
    "AUDIT_LOG_PATH",
    "Actor",
    "ApprovalDecision",
    "ApprovalStatus",
    "AuditAction",
    "AuditEntityType",
    "AuditEntry",
    "AuditEntryInput",
    "ChangeEntry",
    "Clock",
    "DEFAULT_TENANT",
    "DeterministicClock",
    "DocumentStore",
    "ENTITY_DESCRIPTORS",
    "EntityDescriptor",
    "HOUSEKEEPING_KEYS",
    "NavigationState",
    "Principal",
    "SERVER_TIMESTAMP",
    "Subscription",
    "SystemClock",
    "UserRole",
    "apply_create",
    "apply_decision",
    "apply_edit",
    "belongs_to_tenant",
    "can_access_domain",
    "check_decision",
    "check_maker",
    "diff",
    "get_descriptor",
    "record_tenant",
    "resolve_effective_tenant",
]
