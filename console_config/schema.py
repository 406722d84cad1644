"""
Console configuration schema.

Frozen dataclasses parsed from ``sets/<name>/console.yaml`` by the
loader.  Nothing here reads files.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DomainMenuDef:
    """A top-level domain and the views its sidebar lists."""

    id: str
    label: str
    description: str = ""
    views: tuple[str, ...] = ()


@dataclass(frozen=True)
class TenantFeatureDef:
    """The views a tenant is entitled to see."""

    id: str
    label: str
    description: str = ""
    views: tuple[str, ...] = ()


@dataclass(frozen=True)
class ConsoleConfig:
    """The complete console configuration."""

    config_id: str
    version: int
    available_views: dict[str, str]
    domains: tuple[DomainMenuDef, ...]
    tenants: tuple[TenantFeatureDef, ...]
    default_domain: str = "dashboard"
    default_tenant: str = "default-tenant"
    checksum: str = field(default="", compare=False)

    def domain(self, domain_id: str) -> DomainMenuDef | None:
        for d in self.domains:
            if d.id == domain_id:
                return d
        return None

    def tenant(self, tenant_id: str) -> TenantFeatureDef | None:
        for t in self.tenants:
            if t.id == tenant_id:
                return t
        return None

    @property
    def domain_ids(self) -> tuple[str, ...]:
        return tuple(d.id for d in self.domains)

    def tenant_features(self, tenant_id: str) -> tuple[str, ...]:
        """Views for a tenant; unknown tenants get the default tenant's."""
        tenant = self.tenant(tenant_id) or self.tenant(self.default_tenant)
        return tenant.views if tenant else ()
