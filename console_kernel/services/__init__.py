"""Kernel services (imperative shell)."""

from console_kernel.services.auditor_service import AuditorService
from console_kernel.services.document_store import SqlDocumentStore
from console_kernel.services.sequence_service import SequenceService

__all__ = [
    "AuditorService",
    "SequenceService",
    "SqlDocumentStore",
]
