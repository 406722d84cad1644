"""
Audit domain types (``console_kernel.domain.audit``).

Responsibility
--------------
Value objects for the append-only audit trail: the action and entity
type vocabularies, the caller-built ``AuditEntryInput`` and the stored
``AuditEntry``.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Stored shape
------------
Entries are written under ``auditLogs`` with camelCase keys (``userId``,
``userName``, ``userEmail``, ``action``, ``entityType``, ``entityId``,
``entityName``, ``changes``, ``metadata``, ``tenantId``, ``timestamp``).
Optional keys are omitted when absent and ``changes`` is omitted when
empty.  Reporting consumers depend on this shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from console_kernel.domain.diff import ChangeEntry
from console_kernel.domain.principal import Principal
from console_kernel.utils.serialization import to_storable

AUDIT_LOG_PATH = "auditLogs"


class AuditAction(str, Enum):
    """Actions recorded in the audit trail."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    APPROVE = "approve"
    REJECT = "reject"
    LOGIN = "login"
    LOGOUT = "logout"
    INITIALIZE = "initialize"


class AuditEntityType(str, Enum):
    """Entity types an audit entry can describe."""

    USER = "user"
    SERVICE = "service"
    ZONE = "zone"
    PRICING = "pricing"
    CAMPAIGN = "campaign"
    LOYALTY = "loyalty"
    BUNDLE = "bundle"
    REFERENCE = "reference"
    AUTH = "auth"
    FXPRICING = "fxpricing"
    DISCOUNTGROUP = "discountgroup"
    FXCAMPAIGN = "fxcampaign"
    FXDISCOUNTOPTION = "fxdiscountoption"


@dataclass(frozen=True)
class Actor:
    """Who performed an audited action."""

    user_id: str
    user_name: str
    user_email: str

    @classmethod
    def from_principal(cls, principal: Principal) -> Actor:
        return cls(
            user_id=principal.user_id,
            user_name=principal.name,
            user_email=principal.email,
        )


@dataclass(frozen=True)
class AuditEntryInput:
    """
    What a caller hands to the recorder.

    There is no timestamp field: the store stamps every entry itself.
    """

    actor: Actor
    action: AuditAction
    entity_type: AuditEntityType
    entity_id: str | None = None
    entity_name: str | None = None
    changes: tuple[ChangeEntry, ...] = ()
    metadata: dict[str, Any] | None = None
    tenant_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "action", AuditAction(self.action))
        object.__setattr__(self, "entity_type", AuditEntityType(self.entity_type))
        object.__setattr__(self, "changes", tuple(self.changes))

    def to_document(self) -> dict[str, Any]:
        """Stored shape without the timestamp."""
        doc: dict[str, Any] = {
            "userId": self.actor.user_id,
            "userName": self.actor.user_name,
            "userEmail": self.actor.user_email,
            "action": self.action.value,
            "entityType": self.entity_type.value,
        }
        if self.entity_id is not None:
            doc["entityId"] = self.entity_id
        if self.entity_name is not None:
            doc["entityName"] = self.entity_name
        if self.changes:
            doc["changes"] = [c.to_document() for c in self.changes]
        if self.metadata is not None:
            doc["metadata"] = to_storable(self.metadata)
        if self.tenant_id is not None:
            doc["tenantId"] = self.tenant_id
        return doc


@dataclass(frozen=True)
class AuditEntry:
    """An audit entry as read back from the store."""

    id: str
    timestamp: str
    actor: Actor
    action: AuditAction
    entity_type: AuditEntityType
    entity_id: str | None = None
    entity_name: str | None = None
    changes: tuple[ChangeEntry, ...] = field(default_factory=tuple)
    metadata: dict[str, Any] | None = None
    tenant_id: str | None = None

    @classmethod
    def from_document(cls, key: str, data: dict[str, Any]) -> AuditEntry:
        return cls(
            id=key,
            timestamp=data.get("timestamp", ""),
            actor=Actor(
                user_id=data.get("userId", ""),
                user_name=data.get("userName", ""),
                user_email=data.get("userEmail", ""),
            ),
            action=AuditAction(data["action"]),
            entity_type=AuditEntityType(data["entityType"]),
            entity_id=data.get("entityId"),
            entity_name=data.get("entityName"),
            changes=tuple(ChangeEntry.from_document(c) for c in data.get("changes", ())),
            metadata=data.get("metadata"),
            tenant_id=data.get("tenantId"),
        )

    def to_document(self) -> dict[str, Any]:
        doc = AuditEntryInput(
            actor=self.actor,
            action=self.action,
            entity_type=self.entity_type,
            entity_id=self.entity_id,
            entity_name=self.entity_name,
            changes=self.changes,
            metadata=self.metadata,
            tenant_id=self.tenant_id,
        ).to_document()
        doc["timestamp"] = self.timestamp
        return doc
