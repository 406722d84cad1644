"""
Module: console_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
    Selectors form the "Q" side of the console kernel: structured read
    access to records and audit entries without mutation capability.
Architecture position: Kernel > Selectors.  May import from domain/.
    MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: Selectors only ever call ``store.get``.
    - DTO return convention: Selectors return plain snapshots, frozen
      dataclasses or computed results.

Failure modes:
    - StoreUnavailableError propagates from the store unchanged.
"""

from abc import ABC

from console_kernel.domain.store import DocumentStore


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a DocumentStore from the caller, perform
        read-only queries, and return DTOs or computed results.
    """

    def __init__(self, store: DocumentStore):
        self.store = store
