"""
Entity descriptors (``console_kernel.domain.entity``).

One ``EntityDescriptor`` parameterizes the generic change-control
service for one record type: where its documents live, which domain
owns it, which fields a save requires, and whether it carries approval
status.

Governed types (pricing, fxpricing, campaign, loyalty) run the full
maker-checker lifecycle.  The others are saved and deleted with a diff
audit but no status.
"""

from __future__ import annotations

from dataclasses import dataclass

from console_kernel.domain.audit import AuditEntityType
from console_kernel.domain.diff import HOUSEKEEPING_KEYS
from console_kernel.exceptions import UnknownEntityTypeError


@dataclass(frozen=True)
class EntityDescriptor:
    entity_type: AuditEntityType
    store_path: str
    domain: str
    required_fields: tuple[str, ...] = ()
    name_field: str | None = "name"
    tenant_scoped: bool = True
    governed: bool = False
    housekeeping_keys: frozenset[str] = HOUSEKEEPING_KEYS
    unordered_fields: frozenset[str] = frozenset()

    def entity_name(self, record: dict) -> str | None:
        """Display name used in audit entries."""
        if self.name_field is None:
            return None
        value = record.get(self.name_field)
        return None if value is None else str(value)


ENTITY_DESCRIPTORS: dict[AuditEntityType, EntityDescriptor] = {
    d.entity_type: d
    for d in (
        EntityDescriptor(
            entity_type=AuditEntityType.PRICING,
            store_path="pricing",
            domain="emobility",
            required_fields=("description", "rate"),
            name_field="description",
            governed=True,
        ),
        EntityDescriptor(
            entity_type=AuditEntityType.FXPRICING,
            store_path="fxPricings",
            domain="fx",
            required_fields=("referenceNumber", "baseCurrency", "quoteCurrency"),
            name_field="referenceNumber",
            governed=True,
        ),
        EntityDescriptor(
            entity_type=AuditEntityType.CAMPAIGN,
            store_path="campaigns",
            domain="emobility",
            required_fields=("name",),
            governed=True,
        ),
        EntityDescriptor(
            entity_type=AuditEntityType.LOYALTY,
            store_path="loyaltyPrograms",
            domain="emobility",
            required_fields=("name",),
            governed=True,
        ),
        EntityDescriptor(
            entity_type=AuditEntityType.REFERENCE,
            store_path="referenceData",
            domain="admin",
            required_fields=("category", "name"),
            tenant_scoped=False,
        ),
        EntityDescriptor(
            entity_type=AuditEntityType.SERVICE,
            store_path="services",
            domain="emobility",
            required_fields=("name",),
        ),
        EntityDescriptor(
            entity_type=AuditEntityType.ZONE,
            store_path="zones",
            domain="emobility",
            required_fields=("name",),
        ),
        EntityDescriptor(
            entity_type=AuditEntityType.BUNDLE,
            store_path="bundles",
            domain="emobility",
            required_fields=("name",),
        ),
        EntityDescriptor(
            entity_type=AuditEntityType.DISCOUNTGROUP,
            store_path="userDiscountGroups",
            domain="emobility",
            required_fields=("name",),
        ),
        EntityDescriptor(
            entity_type=AuditEntityType.FXCAMPAIGN,
            store_path="fxCampaigns",
            domain="fx",
            required_fields=("name",),
        ),
        EntityDescriptor(
            entity_type=AuditEntityType.FXDISCOUNTOPTION,
            store_path="fxDiscountOptions",
            domain="fx",
            required_fields=("name",),
        ),
    )
}


def get_descriptor(entity_type: AuditEntityType | str) -> EntityDescriptor:
    """
    Look up the descriptor for an entity type.

    Raises:
        UnknownEntityTypeError: No descriptor is registered.
    """
    try:
        return ENTITY_DESCRIPTORS[AuditEntityType(entity_type)]
    except (KeyError, ValueError):
        raise UnknownEntityTypeError(str(entity_type)) from None
