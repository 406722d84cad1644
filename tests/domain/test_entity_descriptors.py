"""Tests for the entity descriptor registry (console_kernel/domain/entity.py)."""

import pytest

from console_kernel.domain.audit import AuditEntityType
from console_kernel.domain.entity import ENTITY_DESCRIPTORS, get_descriptor
from console_kernel.exceptions import UnknownEntityTypeError


class TestDescriptorRegistry:
    def test_lookup_by_string_and_enum(self):
        assert get_descriptor("pricing") is get_descriptor(AuditEntityType.PRICING)

    def test_unknown_type_raises(self):
        with pytest.raises(UnknownEntityTypeError) as exc_info:
            get_descriptor("spaceship")
        assert exc_info.value.code == "UNKNOWN_ENTITY_TYPE"

    def test_registered_type_without_descriptor_raises(self):
        with pytest.raises(UnknownEntityTypeError):
            get_descriptor(AuditEntityType.AUTH)

    def test_governed_types(self):
        governed = {d.entity_type.value for d in ENTITY_DESCRIPTORS.values() if d.governed}
        assert governed == {"pricing", "fxpricing", "campaign", "loyalty"}

    def test_store_paths_are_unique(self):
        paths = [d.store_path for d in ENTITY_DESCRIPTORS.values()]
        assert len(paths) == len(set(paths))

    def test_pricing_descriptor(self):
        descriptor = get_descriptor("pricing")
        assert descriptor.store_path == "pricing"
        assert descriptor.domain == "emobility"
        assert descriptor.required_fields == ("description", "rate")
        assert descriptor.entity_name({"description": "AC 22kW"}) == "AC 22kW"

    def test_fx_pricing_descriptor(self):
        descriptor = get_descriptor("fxpricing")
        assert descriptor.store_path == "fxPricings"
        assert descriptor.domain == "fx"
        assert descriptor.entity_name({"referenceNumber": "FX-001"}) == "FX-001"

    def test_reference_data_is_not_tenant_scoped(self):
        assert get_descriptor("reference").tenant_scoped is False

    def test_entity_name_missing(self):
        assert get_descriptor("zone").entity_name({}) is None
