"""
Deterministic serialization utilities.

Every value that reaches the document store, and every value the differ
compares, goes through this module so that "equal" means the same thing
on both sides of a write.
"""

import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID


def _json_serializer(obj: Any) -> Any:
    """
    Custom JSON serializer for types not natively supported.

    Raises:
        TypeError: If object type is not supported.
    """
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=canonicalize_json)

    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonicalize_json(data: Any) -> str:
    """
    Convert data to canonical JSON string.

    Produces a deterministic JSON representation:
    - Keys are sorted alphabetically
    - No whitespace
    - Consistent handling of special types (Decimal, datetime, UUID, Enum)

    Unlike Python ``==``, the canonical form keeps ``1``, ``1.0``, ``True``
    and ``"1"`` distinct.
    """
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        default=_json_serializer,
    )


def to_storable(value: Any) -> Any:
    """
    Normalize a value into the JSON-safe shape the store persists.

    Decimal -> str, datetime/date -> ISO string, UUID -> str, Enum -> value,
    tuple/set -> list.  Dict keys are coerced to str.  ``None`` is kept;
    callers decide whether a ``None`` means "omit" or "null".
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Enum):
        return to_storable(value.value)
    if isinstance(value, dict):
        return {str(k): to_storable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_storable(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return [to_storable(v) for v in _json_serializer(value)]
    return _json_serializer(value)


def strip_none(payload: dict[str, Any]) -> dict[str, Any]:
    """Drop top-level keys whose value is None."""
    return {k: v for k, v in payload.items() if v is not None}

