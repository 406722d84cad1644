"""
console_services.orchestrator -- Central DI container for console services.

Responsibility:
    Creates every console service exactly once and wires them together.
    No service may create other services internally.  One
    ``ChangeControlService`` is built per registered ``EntityDescriptor``.

Architecture position:
    Services -- top of the service layer and the only place where the
    document store, auditor, access gate and change-control façades are
    constructed and composed.

Invariants enforced:
    - Single-instance lifecycle: one store, one auditor and one access
      gate per orchestrator, shared by every façade.
    - DI transparency: all service wiring is visible in ``__init__``.

Failure modes:
    - UnknownEntityTypeError from ``for_entity`` for unregistered types.
    - FileNotFoundError / ValueError from ``get_active_config`` when no
      config is passed and the default set is missing or invalid.

Usage:
    from console_kernel.db.engine import get_session_factory
    from console_services.orchestrator import ConsoleOrchestrator

    console = ConsoleOrchestrator(get_session_factory())
    pricing = console.for_entity("pricing")
    record = pricing.create(alice, {"description": "AC 22kW", "rate": 2.5})
    pricing.approve(bob, record["id"])
"""

from __future__ import annotations

from typing import Iterable

from sqlalchemy.orm import Session, sessionmaker

from console_config import get_active_config
from console_config.schema import ConsoleConfig
from console_kernel.domain.audit import AUDIT_LOG_PATH, AuditEntityType
from console_kernel.domain.clock import Clock, SystemClock
from console_kernel.domain.entity import ENTITY_DESCRIPTORS, EntityDescriptor
from console_kernel.exceptions import UnknownEntityTypeError
from console_kernel.selectors.audit_selector import AuditSelector
from console_kernel.services.auditor_service import AuditorService
from console_kernel.services.document_store import SqlDocumentStore
from console_services.access_gate import AccessGate
from console_services.auth_service import AuthService
from console_services.change_control import ChangeControlService


class ConsoleOrchestrator:
    """Central factory for console services.

    Contract:
        Receives a SQLAlchemy session factory and optional config, clock
        and descriptors.  Constructs every service once, in dependency
        order, and exposes them as public attributes.

    Non-goals:
        - Does NOT own the engine lifecycle.
        - Does NOT hold a session; each store operation opens its own.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        config: ConsoleConfig | None = None,
        clock: Clock | None = None,
        descriptors: Iterable[EntityDescriptor] | None = None,
    ) -> None:
        self._clock = clock or SystemClock()
        self._config = config or get_active_config()

        # --- Singletons: created once, order matters (dependency graph) ---
        self.store = SqlDocumentStore(
            session_factory, clock=self._clock, append_only_paths=(AUDIT_LOG_PATH,)
        )
        self.auditor = AuditorService(self.store)
        self.audit_selector = AuditSelector(self.store)
        self.access_gate = AccessGate(self._config, self.store)
        self.auth = AuthService(self.auditor, self.access_gate)

        # One façade per entity type (depends on store, auditor, gate)
        registered = (
            list(descriptors) if descriptors is not None else list(ENTITY_DESCRIPTORS.values())
        )
        self.change_control: dict[AuditEntityType, ChangeControlService] = {
            d.entity_type: ChangeControlService(
                descriptor=d,
                store=self.store,
                auditor=self.auditor,
                access_gate=self.access_gate,
                clock=self._clock,
            )
            for d in registered
        }

    @property
    def config(self) -> ConsoleConfig:
        return self._config

    @property
    def clock(self) -> Clock:
        """The clock shared by all services."""
        return self._clock

    def for_entity(self, entity_type: AuditEntityType | str) -> ChangeControlService:
        """
        The change-control façade for ``entity_type``.

        Raises:
            UnknownEntityTypeError: No descriptor is registered for it.
        """
        try:
            key = AuditEntityType(entity_type)
        except ValueError:
            raise UnknownEntityTypeError(str(entity_type)) from None
        service = self.change_control.get(key)
        if service is None:
            raise UnknownEntityTypeError(key.value)
        return service
