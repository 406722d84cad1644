"""
SqlDocumentStore -- the hierarchical document store on SQLAlchemy.

Responsibility:
    Implements the ``DocumentStore`` protocol (get / subscribe / push /
    update / remove plus ``SERVER_TIMESTAMP``) over the
    ``store_documents`` table, and delivers push-based snapshots to
    subscribers after each committed write.

Architecture position:
    Kernel > Services -- imperative shell.  Every record write and every
    audit write in the console goes through one instance of this class.

Invariants enforced:
    - Each operation is its own transaction (``session_scope`` over the
      injected session factory).  Two operations are never atomic
      together; the record write and its audit write commit separately.
    - Documents under an append-only path (``auditLogs`` by default) are
      never updated or removed.  The store refuses first; the ORM
      listeners in ``db/immutability.py`` back it up.
    - ``SERVER_TIMESTAMP`` is resolved from the store's clock, never
      from the caller.
    - Insert order is a monotonic ``seq`` from SequenceService.
    - A write never fails because of what happens after its commit:
      subscriber refresh reads and callbacks are isolated per listener.

Failure modes:
    - StoreUnavailableError: any SQLAlchemy failure (connection, pool
      timeout, constraint) during an operation.
    - ImmutabilityViolationError: update/remove of an append-only
      document.
    - StorePathConflictError: update would create a document at a path
      that already holds child documents.

Concurrency:
    Last write wins.  There is no version check on update.
"""

from __future__ import annotations

import copy
import itertools
import threading
from typing import Any, Callable, Iterable
from uuid import uuid4

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from console_kernel.db.engine import session_scope
from console_kernel.domain.audit import AUDIT_LOG_PATH
from console_kernel.domain.clock import Clock, SystemClock
from console_kernel.domain.store import (
    SERVER_TIMESTAMP,
    SnapshotCallback,
    Subscription,
    join_path,
    paths_overlap,
    split_path,
)
from console_kernel.exceptions import (
    ImmutabilityViolationError,
    StorePathConflictError,
    StoreUnavailableError,
)
from console_kernel.logging_config import get_logger
from console_kernel.models.document import StoreDocument
from console_kernel.services.sequence_service import SequenceService
from console_kernel.utils.serialization import strip_none, to_storable

logger = get_logger("services.document_store")


def _normalize(path: str) -> str:
    return "/".join(s for s in path.strip("/").split("/") if s)


def _resolve_server_values(value: Any, now_iso: str) -> Any:
    if value is SERVER_TIMESTAMP:
        return now_iso
    if isinstance(value, dict):
        return {k: _resolve_server_values(v, now_iso) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_resolve_server_values(v, now_iso) for v in value]
    return value


class SqlDocumentStore:
    """
    Document store backed by a relational table.

    Contract:
        Paths are slash-separated.  A path names a document when a row
        exists with that collection and key; otherwise ``get`` returns
        the direct children of the path as ``{key: document}`` (ordered
        by ``seq``), or ``None`` when there are none.

    Guarantees:
        - ``push`` drops top-level ``None`` values and returns a new key.
        - ``update`` merges top-level keys, deletes keys set to ``None``
          and creates the document if it is missing.
        - ``remove`` deletes a document, or every document below a
          collection path.  Removing a missing path is a no-op.
        - Subscribers receive ``get(subscribed_path)`` once on subscribe
          and again after every committed write whose path overlaps.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        clock: Clock | None = None,
        append_only_paths: Iterable[str] = (AUDIT_LOG_PATH,),
    ):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()
        self._append_only_paths = frozenset(_normalize(p) for p in append_only_paths)
        self._listeners: dict[int, tuple[str, SnapshotCallback]] = {}
        self._listener_ids = itertools.count(1)
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def is_append_only(self, collection: str) -> bool:
        collection = _normalize(collection)
        return any(
            collection == p or collection.startswith(p + "/")
            for p in self._append_only_paths
        )

    def _prepare(self, value: dict[str, Any], now_iso: str) -> dict[str, Any]:
        return to_storable(_resolve_server_values(dict(value), now_iso))

    def _load(self, session: Session, collection: str, key: str) -> StoreDocument | None:
        return session.execute(
            select(StoreDocument)
            .where(StoreDocument.collection == collection)
            .where(StoreDocument.key == key)
        ).scalar_one_or_none()

    def _children(self, session: Session, path: str, recursive: bool = False) -> list[StoreDocument]:
        condition = StoreDocument.collection == path
        if recursive:
            condition = or_(
                condition,
                StoreDocument.collection.startswith(path + "/", autoescape=True),
            )
        return list(
            session.execute(
                select(StoreDocument).where(condition).order_by(StoreDocument.seq)
            ).scalars()
        )

    def _guard_append_only(self, document: StoreDocument, operation: str) -> None:
        if document.append_only or self.is_append_only(document.collection):
            logger.error(
                "immutability_violation_blocked",
                extra={"path": document.path, "operation": operation},
            )
            raise ImmutabilityViolationError(
                entity_type="StoreDocument",
                entity_id=document.path,
                reason=f"Append-only documents cannot be {operation}d",
            )

    def _insert(
        self, session: Session, collection: str, key: str, payload: dict[str, Any]
    ) -> StoreDocument:
        now = self._clock.now()
        seq = SequenceService(session).next_value(SequenceService.DOCUMENT)
        document = StoreDocument(
            collection=collection,
            key=key,
            payload=payload,
            append_only=self.is_append_only(collection),
            seq=seq,
            created_at=now,
            updated_at=now,
        )
        session.add(document)
        session.flush()
        return document

    def _run(self, operation: str, path: str, fn: Callable[[Session], Any]) -> Any:
        try:
            with session_scope(self._session_factory) as session:
                return fn(session)
        except SQLAlchemyError as exc:
            logger.error(
                "store_unavailable",
                extra={"operation": operation, "path": path, "reason": str(exc)},
            )
            raise StoreUnavailableError(operation, path, str(exc)) from exc

    # ------------------------------------------------------------------
    # DocumentStore protocol
    # ------------------------------------------------------------------

    def get(self, path: str) -> Any:
        """Document at ``path``, its children as a dict, or None."""
        normalized = _normalize(path)

        def _read(session: Session) -> Any:
            if normalized:
                collection, key = split_path(normalized)
                document = self._load(session, collection, key)
                if document is not None:
                    return copy.deepcopy(document.payload)
            children = self._children(session, normalized)
            if not children:
                return None
            return {d.key: copy.deepcopy(d.payload) for d in children}

        return self._run("get", normalized, _read)

    def push(self, path: str, value: dict[str, Any]) -> str:
        """Append a document under ``path`` and return its new key."""
        collection = _normalize(path)
        payload = strip_none(self._prepare(value, self._clock.now_iso()))
        key = uuid4().hex

        def _write(session: Session) -> int:
            return self._insert(session, collection, key, payload).seq

        seq = self._run("push", collection, _write)
        document_path = join_path(collection, key)
        logger.info(
            "document_pushed",
            extra={"path": document_path, "seq": seq},
        )
        self._notify(document_path)
        return key

    def update(self, path: str, partial: dict[str, Any]) -> None:
        """Merge ``partial`` into the document at ``path``."""
        collection, key = split_path(path)
        document_path = _normalize(path)
        prepared = self._prepare(partial, self._clock.now_iso())

        def _write(session: Session) -> bool:
            document = self._load(session, collection, key)
            if document is None:
                children = self._children(session, document_path, recursive=True)
                if children:
                    raise StorePathConflictError(document_path, len(children))
                self._insert(session, collection, key, strip_none(prepared))
                return True
            self._guard_append_only(document, "update")
            merged = dict(document.payload)
            for field_name, value in prepared.items():
                if value is None:
                    merged.pop(field_name, None)
                else:
                    merged[field_name] = value
            document.payload = merged
            document.updated_at = self._clock.now()
            return False

        created = self._run("update", document_path, _write)
        logger.info(
            "document_updated",
            extra={"path": document_path, "document_created": created, "fields": sorted(prepared)},
        )
        self._notify(document_path)

    def remove(self, path: str) -> None:
        """Delete the document at ``path`` or everything below it."""
        normalized = _normalize(path)
        collection, key = split_path(normalized)

        def _delete(session: Session) -> int:
            document = self._load(session, collection, key)
            targets = [document] if document is not None else self._children(
                session, normalized, recursive=True
            )
            for target in targets:
                self._guard_append_only(target, "remove")
                session.delete(target)
            session.flush()
            return len(targets)

        removed = self._run("remove", normalized, _delete)
        logger.info(
            "document_removed",
            extra={"path": normalized, "documents": removed},
        )
        if removed:
            self._notify(normalized)

    def subscribe(self, path: str, callback: SnapshotCallback) -> Subscription:
        """
        Register ``callback`` for snapshots of ``path``.

        The current snapshot is delivered before this method returns.
        """
        normalized = _normalize(path)
        listener_id = next(self._listener_ids)
        with self._lock:
            self._listeners[listener_id] = (normalized, callback)
        logger.debug(
            "subscription_opened",
            extra={"path": normalized, "listener_id": listener_id},
        )

        try:
            callback(self.get(normalized))
        except Exception:
            self._drop_listener(listener_id)
            raise

        return Subscription(normalized, lambda: self._drop_listener(listener_id))

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def _drop_listener(self, listener_id: int) -> None:
        with self._lock:
            entry = self._listeners.pop(listener_id, None)
        if entry is not None:
            logger.debug(
                "subscription_closed",
                extra={"path": entry[0], "listener_id": listener_id},
            )

    def _notify(self, changed_path: str) -> None:
        with self._lock:
            targets = [
                (listener_id, path, callback)
                for listener_id, (path, callback) in self._listeners.items()
                if paths_overlap(path, changed_path)
            ]
        for listener_id, path, callback in targets:
            with self._lock:
                if listener_id not in self._listeners:
                    continue
            try:
                callback(self.get(path))
            except Exception:
                # The write is already committed; neither a failed refresh
                # read nor a failing subscriber is reported to the writer.
                logger.exception(
                    "subscriber_callback_failed",
                    extra={"path": path, "listener_id": listener_id},
                )
