"""
console_config -- single public entrypoint for console configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``: the configured domains and their menu
    views, the tenant feature sets, and the default domain and tenant.

Architecture position:
    Configuration -- YAML-driven, validated at load.  This package sits
    beside ``console_kernel`` and below ``console_services``.  The kernel
    MUST NEVER import from ``console_config``.

Failure modes:
    - ``FileNotFoundError`` -- the configuration set does not exist.
    - ``ValueError`` -- validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``CONSOLE_CONFIG_TRACE`` log entry with the config id, version and
    checksum.
"""

from __future__ import annotations

import logging
from pathlib import Path

from console_config.loader import CONFIG_FILE_NAME, load_config_set
from console_config.schema import ConsoleConfig, DomainMenuDef, TenantFeatureDef
from console_config.validator import validate_configuration

_logger = logging.getLogger("console_kernel.config")

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

__all__ = [
    "ConsoleConfig",
    "DomainMenuDef",
    "TenantFeatureDef",
    "get_active_config",
]


def get_active_config(
    config_dir: Path | None = None,
    set_name: str = "default",
) -> ConsoleConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_dir: Override path to the configuration sets directory.
            Defaults to console_config/sets/.
        set_name: Name of the configuration set subdirectory.

    Raises:
        FileNotFoundError: If the configuration set is missing.
        ValueError: If configuration validation fails.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    set_dir = sets_dir / set_name
    if not (set_dir / CONFIG_FILE_NAME).exists():
        raise FileNotFoundError(
            f"No configuration set '{set_name}' found in {sets_dir}"
        )

    config = load_config_set(set_dir)

    validation = validate_configuration(config)
    if not validation.is_valid:
        raise ValueError(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in validation.errors)
        )
    for warning in validation.warnings:
        _logger.warning("config_validation_warning", extra={"warning": warning})

    _logger.info(
        "CONSOLE_CONFIG_TRACE",
        extra={
            "trace_type": "CONSOLE_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "domain_count": len(config.domains),
            "tenant_count": len(config.tenants),
        },
    )

    return config
