"""
Tests for the pure tenant and domain rules (console_kernel/domain/access.py)
and the Principal value object.
"""

import pytest

from console_kernel.domain.access import (
    DEFAULT_TENANT,
    NavigationState,
    belongs_to_tenant,
    can_access_domain,
    record_tenant,
    resolve_effective_tenant,
)
from console_kernel.domain.principal import Principal, UserRole


def _principal(role: UserRole, tenant_id=None, domains=()) -> Principal:
    return Principal(
        user_id="u@x",
        email="u@x",
        name="U",
        role=role,
        tenant_id=tenant_id,
        allowed_domains=frozenset(domains),
    )


class TestEffectiveTenant:
    def test_defaults_to_default_tenant(self):
        assert resolve_effective_tenant(_principal(UserRole.MAKER)) == DEFAULT_TENANT

    def test_uses_principal_tenant(self):
        principal = _principal(UserRole.MAKER, tenant_id="retail-banking")
        assert resolve_effective_tenant(principal) == "retail-banking"

    def test_override_applies_to_administrator(self):
        principal = _principal(UserRole.ADMINISTRATOR, tenant_id="retail-banking")
        assert resolve_effective_tenant(principal, "insurance-demo") == "insurance-demo"

    @pytest.mark.parametrize("role", [UserRole.MAKER, UserRole.CHECKER, UserRole.APPROVER])
    def test_override_ignored_for_non_administrators(self, role):
        principal = _principal(role, tenant_id="retail-banking")
        assert resolve_effective_tenant(principal, "insurance-demo") == "retail-banking"


class TestDomainAccess:
    def test_allowed_domain(self):
        assert can_access_domain(_principal(UserRole.MAKER, domains=["fx"]), "fx")

    def test_missing_domain_denied(self):
        assert not can_access_domain(_principal(UserRole.MAKER, domains=["fx"]), "emobility")

    def test_administrator_reaches_every_domain(self):
        assert can_access_domain(_principal(UserRole.ADMINISTRATOR), "fintech")


class TestRecordTenant:
    def test_legacy_record_belongs_to_default_tenant(self):
        assert record_tenant({"name": "old"}) == DEFAULT_TENANT
        assert belongs_to_tenant({"name": "old"}, DEFAULT_TENANT)
        assert not belongs_to_tenant({"name": "old"}, "retail-banking")

    def test_tagged_record(self):
        record = {"tenantId": "retail-banking"}
        assert belongs_to_tenant(record, "retail-banking")
        assert not belongs_to_tenant(record, DEFAULT_TENANT)


class TestNavigationState:
    def test_with_domain_returns_new_state(self):
        state = NavigationState(domain="dashboard", view="services")
        moved = state.with_domain("fx")
        assert moved == NavigationState(domain="fx")
        assert state.domain == "dashboard"


class TestPrincipal:
    def test_role_and_domains_are_coerced(self):
        principal = Principal(
            user_id="a", email="a@x", name="A", role="Checker", allowed_domains=["fx", "fx"]
        )
        assert principal.role is UserRole.CHECKER
        assert principal.allowed_domains == frozenset({"fx"})

    def test_is_admin(self):
        assert _principal(UserRole.ADMINISTRATOR).is_admin
        assert not _principal(UserRole.CHECKER).is_admin

    def test_from_profile_uses_email_as_user_id(self):
        principal = Principal.from_profile(
            {
                "email": "alice@x",
                "name": "Alice",
                "role": "Maker",
                "tenantId": "emobility-demo",
                "allowedDomains": ["emobility", "dashboard"],
                "defaultDomain": "emobility",
            }
        )
        assert principal.user_id == "alice@x"
        assert principal.tenant_id == "emobility-demo"
        assert principal.allowed_domains == {"emobility", "dashboard"}
        assert principal.default_domain == "emobility"

    def test_from_profile_with_unknown_role_fails(self):
        with pytest.raises(ValueError):
            Principal.from_profile({"email": "x@x", "role": "Superuser"})
