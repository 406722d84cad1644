"""
console_services.access_gate -- Domain and tenant authorization.

Responsibility:
    Decide which domains, menu views and records a principal may reach.
    Wraps the pure rules in ``console_kernel.domain.access`` with the
    console configuration, structured logging of denials and
    tenant-scoped record queries.

Architecture position:
    Services layer.  Consumes ``ConsoleConfig`` from console_config and
    a ``DocumentStore`` from the kernel.  Called by ChangeControlService
    on every mutation and scoped read.

Invariants:
    - A domain is reachable iff it is in the principal's allowed domains
      or the principal is an Administrator.
    - The tenant override only takes effect for Administrators.
    - A denied navigation never changes the navigation state.
    - Records without ``tenantId`` belong to the default tenant.
"""

from __future__ import annotations

from typing import Any

from console_config.schema import ConsoleConfig
from console_kernel.domain import access
from console_kernel.domain.access import NavigationState
from console_kernel.domain.entity import EntityDescriptor
from console_kernel.domain.principal import Principal
from console_kernel.domain.store import DocumentStore
from console_kernel.exceptions import DomainAccessDeniedError, TenantAccessDeniedError
from console_kernel.logging_config import get_logger
from console_kernel.selectors.record_selector import RecordSelector, RecordSet

logger = get_logger("services.access_gate")


class AccessGate:
    """Config-aware access decisions for one console."""

    def __init__(self, config: ConsoleConfig, store: DocumentStore):
        self._config = config
        self._store = store

    @property
    def config(self) -> ConsoleConfig:
        return self._config

    # ------------------------------------------------------------------
    # Tenant
    # ------------------------------------------------------------------

    def resolve_effective_tenant(
        self, principal: Principal, override: str | None = None
    ) -> str:
        return access.resolve_effective_tenant(principal, override)

    def authorize_record(
        self,
        principal: Principal,
        record: dict[str, Any],
        override: str | None = None,
    ) -> str:
        """
        Return the effective tenant if the record belongs to it.

        Raises:
            TenantAccessDeniedError: The record belongs to another tenant.
        """
        effective = self.resolve_effective_tenant(principal, override)
        owner = access.record_tenant(record)
        if owner != effective:
            logger.warning(
                "tenant_access_denied",
                extra={
                    "actor_email": principal.email,
                    "record_id": record.get("id"),
                    "record_tenant": owner,
                    "effective_tenant": effective,
                },
            )
            raise TenantAccessDeniedError(
                record_id=str(record.get("id", "")),
                record_tenant=owner,
                effective_tenant=effective,
            )
        return effective

    def scoped_query(
        self, descriptor: EntityDescriptor, tenant_id: str
    ) -> RecordSet:
        """Records of one entity type visible from ``tenant_id``."""
        return RecordSelector(self._store, descriptor).list(tenant_id=tenant_id)

    # ------------------------------------------------------------------
    # Domain
    # ------------------------------------------------------------------

    def can_access_domain(self, principal: Principal, domain: str) -> bool:
        return access.can_access_domain(principal, domain)

    def authorize_domain(self, principal: Principal, domain: str) -> None:
        """
        Raises:
            DomainAccessDeniedError: The principal may not reach the domain.
        """
        if not self.can_access_domain(principal, domain):
            logger.warning(
                "domain_access_denied",
                extra={
                    "actor_email": principal.email,
                    "domain": domain,
                    "role": principal.role.value,
                },
            )
            raise DomainAccessDeniedError(actor_email=principal.email, domain=domain)

    def accessible_domains(self, principal: Principal) -> list[str]:
        """Configured domains the principal may reach, in configuration order."""
        return [
            d for d in self._config.domain_ids if self.can_access_domain(principal, d)
        ]

    def initial_navigation(self, principal: Principal) -> NavigationState:
        preferred = principal.default_domain or self._config.default_domain
        if self._config.domain(preferred) is not None and self.can_access_domain(principal, preferred):
            return NavigationState(domain=preferred)
        reachable = self.accessible_domains(principal)
        if not reachable:
            logger.warning(
                "no_accessible_domain",
                extra={"actor_email": principal.email},
            )
            raise DomainAccessDeniedError(actor_email=principal.email, domain=preferred)
        return NavigationState(domain=reachable[0])

    def switch_domain(
        self,
        principal: Principal,
        navigation: NavigationState,
        domain: str,
    ) -> NavigationState:
        """
        Navigate to ``domain``.

        Returns a new NavigationState.  On denial the passed state is
        left as it was and DomainAccessDeniedError is raised.
        """
        self.authorize_domain(principal, domain)
        return navigation.with_domain(domain)

    def visible_views(
        self,
        principal: Principal,
        domain: str,
        override: str | None = None,
    ) -> list[str]:
        """Menu views of ``domain`` the effective tenant is entitled to."""
        if not self.can_access_domain(principal, domain):
            return []
        menu = self._config.domain(domain)
        if menu is None:
            return []
        tenant = self.resolve_effective_tenant(principal, override)
        features = set(self._config.tenant_features(tenant))
        return [v for v in menu.views if v in features]
