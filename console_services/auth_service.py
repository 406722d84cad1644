"""
console_services.auth_service -- Login/logout audit and console sessions.

Identity itself comes from the host's identity provider; this service
only opens and closes a ``ConsoleSession`` around an already resolved
``Principal`` and records the ``login`` / ``logout`` audit entries.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from console_kernel.domain.access import NavigationState
from console_kernel.domain.principal import Principal
from console_kernel.exceptions import InsufficientRoleError, StoreUnavailableError
from console_kernel.logging_config import LogContext, get_logger
from console_kernel.services.auditor_service import AuditorService
from console_services.access_gate import AccessGate

logger = get_logger("services.auth")


@dataclass(frozen=True)
class ConsoleSession:
    """
    What the console remembers about a signed-in principal.

    ``tenant_override`` is only ever set for Administrators.
    """

    principal: Principal
    navigation: NavigationState
    tenant_override: str | None = None

    def with_navigation(self, navigation: NavigationState) -> ConsoleSession:
        return replace(self, navigation=navigation)

    def with_tenant_override(self, tenant_id: str | None) -> ConsoleSession:
        """
        Raises:
            InsufficientRoleError: The principal is not an Administrator.
        """
        if tenant_id is not None and not self.principal.is_admin:
            raise InsufficientRoleError(
                role=self.principal.role.value, action="override tenant"
            )
        return replace(self, tenant_override=tenant_id)


class AuthService:
    """Opens and closes console sessions."""

    def __init__(self, auditor: AuditorService, access_gate: AccessGate):
        self._auditor = auditor
        self._gate = access_gate

    def login(self, principal: Principal) -> ConsoleSession:
        """
        Start a session at the principal's initial domain.

        A failed login audit write is logged and does not block sign-in.

        Raises:
            DomainAccessDeniedError: No configured domain is reachable.
        """
        with LogContext.bind(actor_id=principal.user_id):
            navigation = self._gate.initial_navigation(principal)
            try:
                self._auditor.record_login(
                    principal, metadata={"domain": navigation.domain}
                )
            except StoreUnavailableError:
                logger.error("audit_write_failed", exc_info=True, extra={"recorder": "record_login"})
            logger.info(
                "session_opened",
                extra={"actor_email": principal.email, "domain": navigation.domain},
            )
            return ConsoleSession(principal=principal, navigation=navigation)

    def logout(self, session: ConsoleSession) -> None:
        """Close the session; the tenant override does not survive it."""
        principal = session.principal
        with LogContext.bind(actor_id=principal.user_id):
            try:
                self._auditor.record_logout(principal)
            except StoreUnavailableError:
                logger.error("audit_write_failed", exc_info=True, extra={"recorder": "record_logout"})
            logger.info(
                "session_closed",
                extra={
                    "actor_email": principal.email,
                    "had_tenant_override": session.tenant_override is not None,
                },
            )

    def switch_domain(self, session: ConsoleSession, domain: str) -> ConsoleSession:
        """
        Raises:
            DomainAccessDeniedError: The session keeps its current domain.
        """
        navigation = self._gate.switch_domain(session.principal, session.navigation, domain)
        return session.with_navigation(navigation)

    def visible_views(self, session: ConsoleSession) -> list[str]:
        return self._gate.visible_views(
            session.principal, session.navigation.domain, session.tenant_override
        )
