"""
ChangeSet differ -- field-level change sets for audit entries.

Pure function over two record snapshots.  Values are compared by their
canonical JSON form, so nested dicts compare independent of key order
while ``1``, ``1.0``, ``True`` and ``"1"`` stay distinct.

List values are compared in order.  Reordering an otherwise identical
list is reported as a change unless the field is listed in
``unordered_fields``, in which case the list is compared as a multiset.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from console_kernel.utils.serialization import canonicalize_json, to_storable

HOUSEKEEPING_KEYS: frozenset[str] = frozenset({"id", "lastModifiedBy", "lastModifiedAt"})


@dataclass(frozen=True)
class ChangeEntry:
    """One differing field between two snapshots."""

    field: str
    old_value: Any = None
    new_value: Any = None

    def to_document(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "oldValue": to_storable(self.old_value),
            "newValue": to_storable(self.new_value),
        }

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> ChangeEntry:
        return cls(
            field=data["field"],
            old_value=data.get("oldValue"),
            new_value=data.get("newValue"),
        )


def _comparable(value: Any, unordered: bool) -> str:
    if unordered and isinstance(value, (list, tuple)):
        return canonicalize_json(sorted(canonicalize_json(v) for v in value))
    return canonicalize_json(value)


def diff(
    old: dict[str, Any] | None,
    new: dict[str, Any] | None,
    *,
    housekeeping_keys: Iterable[str] = HOUSEKEEPING_KEYS,
    unordered_fields: Iterable[str] = (),
) -> list[ChangeEntry]:
    """
    Compute the changed fields between two snapshots.

    Keys are visited in the old snapshot's order, then keys only the new
    snapshot has.  Absent values become ``None``.  ``diff(x, x)`` is
    always empty.
    """
    old = old or {}
    new = new or {}
    skip = frozenset(housekeeping_keys)
    unordered = frozenset(unordered_fields)

    keys = [k for k in old if k not in skip]
    keys.extend(k for k in new if k not in skip and k not in old)

    changes: list[ChangeEntry] = []
    for key in keys:
        old_value = old.get(key)
        new_value = new.get(key)
        is_unordered = key in unordered
        if _comparable(old_value, is_unordered) != _comparable(new_value, is_unordered):
            changes.append(ChangeEntry(field=key, old_value=old_value, new_value=new_value))
    return changes
