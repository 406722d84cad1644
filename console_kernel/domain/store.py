"""
Document store boundary (``console_kernel.domain.store``).

Responsibility
--------------
Declares the hierarchical key-value store every record and audit write
goes through, the ``SERVER_TIMESTAMP`` sentinel the store resolves at
write time, and the disposable ``Subscription`` handle returned by
``subscribe``.

Architecture position
---------------------
**Kernel domain layer** -- protocol and value types only.  The shipped
implementation is ``console_kernel.services.document_store.SqlDocumentStore``.

Paths are slash-separated (``"pricing/-Nx3k"``).  The last segment of a
document path is the document key; everything before it is the
collection.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Protocol, runtime_checkable

SnapshotCallback = Callable[[Any], None]


class _ServerTimestamp:
    """Placeholder replaced by the store's clock when a value is written."""

    _instance: _ServerTimestamp | None = None

    def __new__(cls) -> _ServerTimestamp:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


def split_path(path: str) -> tuple[str, str]:
    """Split ``"a/b/c"`` into collection ``"a/b"`` and key ``"c"``.

    Raises:
        ValueError: If the path is empty.
    """
    segments = [s for s in path.strip("/").split("/") if s]
    if not segments:
        raise ValueError("Store path must not be empty")
    return "/".join(segments[:-1]), segments[-1]


def join_path(*parts: str) -> str:
    return "/".join(p.strip("/") for p in parts if p and p.strip("/"))


def paths_overlap(a: str, b: str) -> bool:
    """True if one path is the other or one of its ancestors."""
    sa = [s for s in a.strip("/").split("/") if s]
    sb = [s for s in b.strip("/").split("/") if s]
    n = min(len(sa), len(sb))
    return sa[:n] == sb[:n]


class Subscription:
    """
    Disposable handle for a store subscription.

    ``unsubscribe()`` is idempotent.  Used as a context manager the
    subscription is torn down when the block exits.
    """

    def __init__(self, path: str, teardown: Callable[[], None]):
        self.path = path
        self._teardown = teardown
        self._active = True
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
        self._teardown()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.unsubscribe()


@runtime_checkable
class DocumentStore(Protocol):
    """
    Hierarchical document store used by the change-control core.

    Implementations must:
        - assign a new unique key on ``push`` and return it;
        - merge top-level keys on ``update``, deleting keys whose value
          is ``None`` and creating the document when it is missing;
        - replace ``SERVER_TIMESTAMP`` with the store's own clock;
        - reject update/remove on append-only paths with
          ``ImmutabilityViolationError``;
        - raise ``StoreUnavailableError`` when the backend fails.
    """

    def get(self, path: str) -> Any: ...

    def subscribe(self, path: str, callback: SnapshotCallback) -> Subscription: ...

    def push(self, path: str, value: dict[str, Any]) -> str: ...

    def update(self, path: str, partial: dict[str, Any]) -> None: ...

    def remove(self, path: str) -> None: ...
