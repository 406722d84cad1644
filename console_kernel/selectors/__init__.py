"""Selectors for the console kernel (read side)."""

from console_kernel.selectors.audit_selector import AuditFilter, AuditSelector, AuditUser
from console_kernel.selectors.record_selector import RecordSelector, RecordSet

__all__ = [
    "AuditFilter",
    "AuditSelector",
    "AuditUser",
    "RecordSelector",
    "RecordSet",
]
