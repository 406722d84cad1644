"""
console_services -- Package init and public API.

Responsibility:
    Orchestration above the kernel: the access gate, one change-control
    façade per entity type, session login/logout audit, and the
    ConsoleOrchestrator that wires them.

Architecture position:
    Services.  May import from console_kernel and console_config.
    console_kernel must never import from this package.
"""

from console_services.access_gate import AccessGate
from console_services.auth_service import AuthService, ConsoleSession
from console_services.change_control import ChangeControlService
from console_services.orchestrator import ConsoleOrchestrator

__all__ = [
    "AccessGate",
    "AuthService",
    "ChangeControlService",
    "ConsoleOrchestrator",
    "ConsoleSession",
]
