"""
ORM-Level Immutability Enforcement for append-only documents.

===============================================================================
WHY THIS EXISTS
===============================================================================

The audit trail must be tamper-proof.  Once an audit entry is written it
is never modified or removed by this subsystem.

This module is the SECOND of two layers:

  Layer 1: SqlDocumentStore (services/document_store.py)
    - Refuses update/remove on append-only paths before touching a row

  Layer 2: THIS FILE (ORM event listeners)
    - Catches modifications through any Python/SQLAlchemy code that
      bypasses the store (ad-hoc sessions, scripts, tests)
    - Fires BEFORE the SQL is sent to the database

===============================================================================
HOW IT WORKS
===============================================================================

    session.flush()
         |
         v
    [before_update event] --> _check_document_immutability() --> ImmutabilityViolationError
         |
         v
    [before_delete event] --> _check_document_delete() --------> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

A row is protected when its ``append_only`` flag was set at insert.  The
store sets the flag for every document written under an append-only
path (``auditLogs`` by default).

===============================================================================
USAGE
===============================================================================

    from console_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # Called once at startup

To temporarily disable (TESTS ONLY):

    from console_kernel.db.immutability import unregister_immutability_listeners
    unregister_immutability_listeners()
"""

from sqlalchemy import event

from console_kernel.exceptions import ImmutabilityViolationError
from console_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _check_document_immutability(mapper, connection, target):
    """Prevent any updates to append-only documents."""
    from console_kernel.models.document import StoreDocument

    if not isinstance(target, StoreDocument) or not target.append_only:
        return

    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "StoreDocument",
            "entity_id": target.path,
            "operation": "UPDATE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="StoreDocument",
        entity_id=target.path,
        reason="Append-only documents cannot be modified",
    )


def _check_document_delete(mapper, connection, target):
    """Prevent deletion of append-only documents."""
    from console_kernel.models.document import StoreDocument

    if not isinstance(target, StoreDocument) or not target.append_only:
        return

    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "StoreDocument",
            "entity_id": target.path,
            "operation": "DELETE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="StoreDocument",
        entity_id=target.path,
        reason="Append-only documents cannot be deleted",
    )


def register_immutability_listeners():
    """
    Register the immutability event listeners.

    Safe to call more than once.
    """
    from console_kernel.models.document import StoreDocument

    if not event.contains(StoreDocument, "before_update", _check_document_immutability):
        event.listen(StoreDocument, "before_update", _check_document_immutability)
    if not event.contains(StoreDocument, "before_delete", _check_document_delete):
        event.listen(StoreDocument, "before_delete", _check_document_delete)


def _safe_remove_listener(target, event_name, listener_fn):
    """Remove an event listener, ignoring it if not registered."""
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove the immutability event listeners.

    WARNING: Only use this in tests that need to violate immutability
    on purpose.
    """
    from console_kernel.models.document import StoreDocument

    _safe_remove_listener(StoreDocument, "before_update", _check_document_immutability)
    _safe_remove_listener(StoreDocument, "before_delete", _check_document_delete)
