"""
Configuration Loader (``console_config.loader``).

Responsibility
--------------
Loads ``console.yaml`` and parses it into ``console_config.schema``
dataclasses.  Runtime callers use ``console_config.get_active_config()``
instead of calling this directly.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys in parsed dict  -> ``KeyError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from console_config.schema import ConsoleConfig, DomainMenuDef, TenantFeatureDef

CONFIG_FILE_NAME = "console.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_domain(data: dict[str, Any]) -> DomainMenuDef:
    return DomainMenuDef(
        id=data["id"],
        label=data.get("label", data["id"]),
        description=data.get("description", ""),
        views=tuple(data.get("views") or ()),
    )


def parse_tenant(data: dict[str, Any]) -> TenantFeatureDef:
    return TenantFeatureDef(
        id=data["id"],
        label=data.get("label", data["id"]),
        description=data.get("description", ""),
        views=tuple(data.get("views") or ()),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_config(data: dict[str, Any]) -> ConsoleConfig:
    """Parse a ConsoleConfig from the raw YAML mapping."""
    return ConsoleConfig(
        config_id=data["config_id"],
        version=int(data.get("version", 1)),
        available_views=dict(data.get("available_views") or {}),
        domains=tuple(parse_domain(d) for d in data.get("domains") or ()),
        tenants=tuple(parse_tenant(t) for t in data.get("tenants") or ()),
        default_domain=data.get("default_domain", "dashboard"),
        default_tenant=data.get("default_tenant", "default-tenant"),
        checksum=compute_checksum(data),
    )


def load_config_set(set_dir: Path) -> ConsoleConfig:
    """Load and parse ``console.yaml`` from a configuration set directory."""
    return parse_config(load_yaml_file(set_dir / CONFIG_FILE_NAME))
