"""
Configuration Validator (``console_config.validator``).

Validates a ``ConsoleConfig`` before it is handed to any service.

Invariants enforced
-------------------
* Domain and tenant ids are unique.
* Every view a domain or tenant lists is an available view.
* The default domain and default tenant exist.

Errors block the configuration; warnings do not.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from console_config.schema import ConsoleConfig


@dataclass
class ConfigValidationResult:
    """
    Result of configuration validation.

    ``is_valid`` returns ``True`` only when ``errors`` is empty.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def _check_unique(ids: list[str], kind: str, result: ConfigValidationResult) -> None:
    seen: set[str] = set()
    for item in ids:
        if item in seen:
            result.add_error(f"Duplicate {kind} id: '{item}'")
        seen.add(item)


def validate_configuration(config: ConsoleConfig) -> ConfigValidationResult:
    """Validate a console configuration."""
    result = ConfigValidationResult()
    available = set(config.available_views)

    _check_unique([d.id for d in config.domains], "domain", result)
    _check_unique([t.id for t in config.tenants], "tenant", result)

    for domain in config.domains:
        for view in domain.views:
            if view not in available:
                result.add_error(f"Domain '{domain.id}' lists unknown view '{view}'")
        if not domain.views:
            result.add_warning(f"Domain '{domain.id}' has no views")

    for tenant in config.tenants:
        for view in tenant.views:
            if view not in available:
                result.add_error(f"Tenant '{tenant.id}' lists unknown view '{view}'")

    if config.domain(config.default_domain) is None:
        result.add_error(f"Default domain '{config.default_domain}' is not configured")
    if config.tenant(config.default_tenant) is None:
        result.add_error(f"Default tenant '{config.default_tenant}' is not configured")

    return result
