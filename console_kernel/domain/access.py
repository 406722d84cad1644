"""
Access rules (``console_kernel.domain.access``).

Pure tenant and domain rules applied to a ``Principal``.  The
config-aware service that logs denials and builds scoped queries is
``console_services.access_gate.AccessGate``.

Legacy data rule: a record without ``tenantId`` belongs to the implicit
``DEFAULT_TENANT``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from console_kernel.domain.principal import Principal, UserRole

DEFAULT_TENANT = "default-tenant"
TENANT_ID = "tenantId"


def resolve_effective_tenant(principal: Principal, override: str | None = None) -> str:
    """The override for administrators, else the principal's own tenant."""
    if override and principal.role is UserRole.ADMINISTRATOR:
        return override
    return principal.tenant_id or DEFAULT_TENANT


def can_access_domain(principal: Principal, domain: str) -> bool:
    return domain in principal.allowed_domains or principal.role is UserRole.ADMINISTRATOR


def record_tenant(record: dict[str, Any]) -> str:
    return record.get(TENANT_ID) or DEFAULT_TENANT


def belongs_to_tenant(record: dict[str, Any], tenant_id: str) -> bool:
    return record_tenant(record) == tenant_id


@dataclass(frozen=True)
class NavigationState:
    """Where a principal currently is in the console."""

    domain: str
    view: str | None = None

    def with_domain(self, domain: str, view: str | None = None) -> NavigationState:
        return replace(self, domain=domain, view=view)
