"""
Module: console_kernel.models.document
Responsibility: ORM persistence for documents of the hierarchical store.
Architecture position: Kernel > Models.  May import from db/base.py only.

A document is addressed by ``collection`` (the parent path, e.g.
``"pricing"``) and ``key`` (the last path segment).  Its body is a JSON
object.  ``seq`` is allocated by SequenceService on insert and gives the
store's insertion order.

Invariants enforced:
    - (collection, key) is unique.
    - Rows with ``append_only`` set are never updated or deleted
      (ORM listener in db/immutability.py).
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, BigInteger, Boolean, DateTime, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from console_kernel.db.base import Base


class StoreDocument(Base):
    """One document in the store."""

    __tablename__ = "store_documents"

    __table_args__ = (
        UniqueConstraint("collection", "key", name="uq_store_document_path"),
        Index("idx_store_document_collection", "collection"),
        Index("idx_store_document_seq", "seq"),
    )

    collection: Mapped[str] = mapped_column(String(255), nullable=False)

    key: Mapped[str] = mapped_column(String(255), nullable=False)

    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    append_only: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    seq: Mapped[int] = mapped_column(BigInteger, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    @property
    def path(self) -> str:
        if self.collection:
            return f"{self.collection}/{self.key}"
        return self.key

    def __repr__(self) -> str:
        return f"<StoreDocument {self.path} seq={self.seq}>"
