"""
Approval domain logic (``console_kernel.domain.approval``).

Responsibility
--------------
The maker-checker state machine shared by every governed entity type:
status lifecycle, the segregation-of-duties guards, and the pure
functions that produce the next record snapshot for create, edit and
decision transitions.

Architecture position
---------------------
**Kernel domain layer** -- pure functions over plain record dicts.
ZERO I/O.  The change-control service persists what these functions
return.

Invariants enforced
-------------------
* ``APPROVAL_TRANSITIONS`` is the only set of direct status writes.
  Approved and Rejected have no outgoing edges; they return to Pending
  only through ``apply_edit``.
* The maker of a record can never decide it, whatever their role.
* Only Checker and Administrator may decide.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from console_kernel.domain.principal import Principal, UserRole
from console_kernel.exceptions import (
    InsufficientRoleError,
    InvalidApprovalTransitionError,
    SelfApprovalError,
)


class ApprovalStatus(str, Enum):
    """Approval status carried by governed records."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class ApprovalDecision(str, Enum):
    """A checker's decision on a Pending record."""

    APPROVE = "approve"
    REJECT = "reject"

    @property
    def target_status(self) -> ApprovalStatus:
        if self is ApprovalDecision.APPROVE:
            return ApprovalStatus.APPROVED
        return ApprovalStatus.REJECTED


APPROVAL_TRANSITIONS: dict[ApprovalStatus, frozenset[ApprovalStatus]] = {
    ApprovalStatus.PENDING: frozenset({
        ApprovalStatus.APPROVED,
        ApprovalStatus.REJECTED,
    }),
    ApprovalStatus.APPROVED: frozenset(),
    ApprovalStatus.REJECTED: frozenset(),
}

CHECKER_ROLES: frozenset[UserRole] = frozenset({
    UserRole.CHECKER,
    UserRole.ADMINISTRATOR,
})

MAKER_ROLES: frozenset[UserRole] = frozenset({
    UserRole.MAKER,
    UserRole.CHECKER,
    UserRole.APPROVER,
    UserRole.ADMINISTRATOR,
})

# Stored record keys
STATUS = "status"
MAKER_NAME = "makerName"
MAKER_EMAIL = "makerEmail"
MAKER_TIMESTAMP = "makerTimestamp"
CHECKER_NAME = "checkerName"
CHECKER_EMAIL = "checkerEmail"
CHECKER_TIMESTAMP = "checkerTimestamp"
LAST_MODIFIED_BY = "lastModifiedBy"
LAST_MODIFIED_AT = "lastModifiedAt"


def can_transition(from_status: ApprovalStatus, to_status: ApprovalStatus) -> bool:
    return to_status in APPROVAL_TRANSITIONS.get(from_status, frozenset())


def record_status(record: dict[str, Any]) -> ApprovalStatus | None:
    """The record's approval status, or None when it carries none."""
    value = record.get(STATUS)
    if value is None:
        return None
    try:
        return ApprovalStatus(value)
    except ValueError:
        return None


def stamp_modified(
    record: dict[str, Any], actor: Principal, now: str
) -> dict[str, Any]:
    """Return a copy with ``lastModifiedBy/At`` set."""
    stamped = dict(record)
    stamped[LAST_MODIFIED_BY] = actor.email
    stamped[LAST_MODIFIED_AT] = now
    return stamped


def _stamp_maker(record: dict[str, Any], actor: Principal, now: str) -> dict[str, Any]:
    record[STATUS] = ApprovalStatus.PENDING.value
    record[MAKER_NAME] = actor.name
    record[MAKER_EMAIL] = actor.email
    record[MAKER_TIMESTAMP] = now
    return stamp_modified(record, actor, now)


def check_maker(actor: Principal) -> None:
    """
    Raise if the actor may not author changes.

    Raises:
        InsufficientRoleError: Role is not one of the maker roles.
    """
    if actor.role not in MAKER_ROLES:
        raise InsufficientRoleError(role=actor.role.value, action="edit")


def apply_create(
    fields: dict[str, Any], actor: Principal, now: str
) -> dict[str, Any]:
    """New record snapshot: Pending, maker stamped, no checker fields."""
    record = {
        k: v
        for k, v in fields.items()
        if k not in (CHECKER_NAME, CHECKER_EMAIL, CHECKER_TIMESTAMP, "id")
    }
    return _stamp_maker(record, actor, now)


def apply_edit(
    current: dict[str, Any],
    changes: dict[str, Any],
    actor: Principal,
    now: str,
) -> dict[str, Any]:
    """
    Merged record snapshot after a maker edit.

    Whatever the current status, the result is Pending with the editing
    actor as maker.  Existing checker fields are kept as they are.
    """
    record = dict(current)
    record.update(
        {k: v for k, v in changes.items() if k not in (STATUS, "id")}
    )
    return _stamp_maker(record, actor, now)


def _same_email(a: str, b: str) -> bool:
    return a.strip().casefold() == b.strip().casefold()


def check_decision(
    actor: Principal,
    record: dict[str, Any],
    decision: ApprovalDecision,
) -> ApprovalStatus:
    """
    Validate a checker decision and return the target status.

    Raises:
        InvalidApprovalTransitionError: Record is not Pending.
        SelfApprovalError: Actor is the record's maker.
        InsufficientRoleError: Actor's role may not decide.
    """
    decision = ApprovalDecision(decision)
    target = decision.target_status
    record_id = str(record.get("id", ""))
    current = record_status(record)

    if current is None or not can_transition(current, target):
        raise InvalidApprovalTransitionError(
            record_id=record_id,
            from_status=str(record.get(STATUS)),
            to_status=target.value,
        )

    maker_email = record.get(MAKER_EMAIL)
    if maker_email and _same_email(str(maker_email), actor.email):
        raise SelfApprovalError(
            record_id=record_id,
            actor_email=actor.email,
            decision=decision.value,
        )

    if actor.role not in CHECKER_ROLES:
        raise InsufficientRoleError(role=actor.role.value, action=decision.value)

    return target


def apply_decision(
    record: dict[str, Any],
    actor: Principal,
    decision: ApprovalDecision,
    now: str,
) -> dict[str, Any]:
    """Decided record snapshot.  Call ``check_decision`` first."""
    target = ApprovalDecision(decision).target_status
    decided = dict(record)
    decided[STATUS] = target.value
    decided[CHECKER_NAME] = actor.name
    decided[CHECKER_EMAIL] = actor.email
    decided[CHECKER_TIMESTAMP] = now
    return stamp_modified(decided, actor, now)
