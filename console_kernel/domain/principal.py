"""
Principal domain types (``console_kernel.domain.principal``).

Responsibility
--------------
Identity of the acting user as handed to the kernel by the session /
identity provider.  A ``Principal`` is created at authentication and is
immutable for the session; role and domain membership are administered
outside this subsystem.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Every façade call receives the Principal explicitly.  There is no
ambient "current user".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class UserRole(str, Enum):
    """Roles a console user can hold."""

    MAKER = "Maker"
    CHECKER = "Checker"
    APPROVER = "Approver"
    ADMINISTRATOR = "Administrator"


@dataclass(frozen=True)
class Principal:
    """The authenticated identity acting on governed records.

    ``user_id`` is the audit identity.  ``from_profile`` falls back to the
    email address when a profile carries no explicit id.
    """

    user_id: str
    email: str
    name: str
    role: UserRole
    tenant_id: str | None = None
    allowed_domains: frozenset[str] = field(default_factory=frozenset)
    default_domain: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.role, UserRole):
            object.__setattr__(self, "role", UserRole(self.role))
        if not isinstance(self.allowed_domains, frozenset):
            object.__setattr__(
                self, "allowed_domains", frozenset(self.allowed_domains)
            )

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMINISTRATOR

    @classmethod
    def from_profile(cls, profile: dict[str, Any]) -> Principal:
        """Build a Principal from a stored user profile (camelCase keys)."""
        email = profile["email"]
        return cls(
            user_id=profile.get("id") or email,
            email=email,
            name=profile.get("name") or email,
            role=UserRole(profile["role"]),
            tenant_id=profile.get("tenantId"),
            allowed_domains=frozenset(profile.get("allowedDomains") or ()),
            default_domain=profile.get("defaultDomain"),
        )
