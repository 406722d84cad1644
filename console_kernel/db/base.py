"""
Module: console_kernel.db.base
Responsibility: Declarative base shared by the store's ORM models.
Architecture position: Kernel > DB.  Imported by every model module and
    nothing else in the kernel; imports nothing from the kernel itself.

Invariants enforced:
    - Every row carries a surrogate uuid4 ``id`` stored as text so the same
      schema runs on SQLite and PostgreSQL.
    - ``datetime`` columns are timezone-aware.
"""

from datetime import datetime
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import BigInteger, DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """A UUID kept in a String(36) column."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else PyUUID(value)


class Base(DeclarativeBase):
    """Declarative base for store tables."""

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
        PyUUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[PyUUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


UUID = PyUUID
