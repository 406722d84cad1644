"""
Tests for console configuration loading and validation (console_config/).
"""

import logging
from pathlib import Path

import pytest
import yaml

from console_config import get_active_config
from console_config.loader import compute_checksum, parse_config
from console_config.validator import validate_configuration

MINIMAL = {
    "config_id": "TEST",
    "version": 2,
    "default_domain": "home",
    "default_tenant": "t1",
    "available_views": {"overview": "Overview", "pricing": "Pricing"},
    "domains": [
        {"id": "home", "label": "Home", "views": ["overview"]},
        {"id": "sales", "label": "Sales", "views": ["pricing"]},
    ],
    "tenants": [{"id": "t1", "label": "Tenant 1", "views": ["overview", "pricing"]}],
}


def _write_set(root: Path, data: dict, name: str = "test") -> Path:
    set_dir = root / name
    set_dir.mkdir()
    (set_dir / "console.yaml").write_text(yaml.safe_dump(data))
    return root


class TestDefaultConfig:
    def test_default_set_loads_and_validates(self):
        config = get_active_config()
        assert config.config_id == "CONSOLE-DEFAULT"
        assert config.default_domain == "dashboard"
        assert config.default_tenant == "default-tenant"
        assert config.domain_ids == ("dashboard", "admin", "fx", "emobility", "fintech")
        assert validate_configuration(config).is_valid

    def test_fx_menu(self):
        fx = get_active_config().domain("fx")
        assert fx.views == ("fxmarginbuilder", "fxpricing", "fxcampaigns", "fxdiscountoptions")

    def test_unknown_tenant_falls_back_to_default(self):
        config = get_active_config()
        assert config.tenant_features("nope") == config.tenant("default-tenant").views

    def test_config_trace_logged(self, captured_logs):
        get_active_config()
        traces = [r for r in captured_logs() if r["message"] == "CONSOLE_CONFIG_TRACE"]
        assert traces[0]["config_set_id"] == "CONSOLE-DEFAULT"
        assert len(traces[0]["checksum"]) == 64


class TestLoader:
    def test_custom_set(self, tmp_path):
        config = get_active_config(_write_set(tmp_path, MINIMAL), set_name="test")
        assert config.version == 2
        assert config.domain("sales").views == ("pricing",)

    def test_missing_set(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path, set_name="absent")

    def test_checksum_is_deterministic(self):
        assert compute_checksum(MINIMAL) == compute_checksum(dict(MINIMAL))
        changed = {**MINIMAL, "version": 3}
        assert compute_checksum(MINIMAL) != compute_checksum(changed)

    def test_checksum_not_part_of_equality(self):
        a = parse_config(MINIMAL)
        b = parse_config(MINIMAL)
        assert a == b

    def test_label_defaults_to_id(self):
        data = {**MINIMAL, "domains": [{"id": "home", "views": ["overview"]}]}
        assert parse_config(data).domain("home").label == "home"


class TestValidator:
    def test_unknown_view_in_domain(self):
        data = {**MINIMAL, "domains": [{"id": "home", "views": ["overview", "ghost"]}]}
        result = validate_configuration(parse_config(data))
        assert not result.is_valid
        assert any("ghost" in e for e in result.errors)

    def test_unknown_view_in_tenant(self):
        data = {**MINIMAL, "tenants": [{"id": "t1", "views": ["ghost"]}]}
        assert not validate_configuration(parse_config(data)).is_valid

    def test_missing_default_domain(self):
        data = {**MINIMAL, "default_domain": "nowhere"}
        assert not validate_configuration(parse_config(data)).is_valid

    def test_missing_default_tenant(self):
        data = {**MINIMAL, "default_tenant": "nobody"}
        assert not validate_configuration(parse_config(data)).is_valid

    def test_duplicate_domain_ids(self):
        data = {
            **MINIMAL,
            "domains": [
                {"id": "home", "views": ["overview"]},
                {"id": "home", "views": ["pricing"]},
            ],
        }
        result = validate_configuration(parse_config(data))
        assert "Duplicate domain id: 'home'" in result.errors

    def test_empty_domain_is_a_warning(self):
        data = {**MINIMAL, "domains": [*MINIMAL["domains"], {"id": "empty", "views": []}]}
        result = validate_configuration(parse_config(data))
        assert result.is_valid
        assert result.warnings == ["Domain 'empty' has no views"]

    def test_invalid_set_raises_value_error(self, tmp_path):
        data = {**MINIMAL, "default_tenant": "nobody"}
        with pytest.raises(ValueError, match="Configuration validation failed"):
            get_active_config(_write_set(tmp_path, data), set_name="test")

    def test_warnings_logged(self, tmp_path, captured_logs):
        data = {**MINIMAL, "domains": [*MINIMAL["domains"], {"id": "empty", "views": []}]}
        get_active_config(_write_set(tmp_path, data), set_name="test")
        warnings = [r for r in captured_logs() if r["message"] == "config_validation_warning"]
        assert warnings[0]["level"] == logging.getLevelName(logging.WARNING)
