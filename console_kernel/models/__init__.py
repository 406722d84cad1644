"""ORM models for the console kernel."""

from console_kernel.models.document import StoreDocument
from console_kernel.models.sequence import SequenceCounter

__all__ = [
    "SequenceCounter",
    "StoreDocument",
]
