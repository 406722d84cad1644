"""
Typed Exception Hierarchy for the Console Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every failure in the change-control core ends up in front of a user: a
checker who tried to approve their own change, a maker who reached for a
domain they do not hold, a save that never reached the store.  Callers
must be able to tell these apart without parsing message strings:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example - WRONG way to handle errors:
    try:
        pricing.approve(principal, record_id)
    except Exception as e:
        if "own change" in str(e):  # FRAGILE - message might change
            show_warning()

Example - RIGHT way (what this module enables):
    try:
        pricing.approve(principal, record_id)
    except SelfApprovalError as e:
        show_warning(str(e))                 # user-visible message
        api_response(code=e.code, record=e.record_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from ConsoleKernelError:

    ConsoleKernelError (base)
    |
    +-- StoreError
    |   +-- StoreUnavailableError
    |   +-- StorePathConflictError
    |
    +-- GuardViolationError
    |   +-- SelfApprovalError
    |   +-- InsufficientRoleError
    |   +-- InvalidApprovalTransitionError
    |   +-- DomainAccessDeniedError
    |   +-- TenantAccessDeniedError
    |
    +-- ValidationError
    |   +-- MissingFieldError
    |
    +-- RecordError
    |   +-- RecordNotFoundError
    |   +-- UnsupportedOperationError
    |   +-- UnknownEntityTypeError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Store           | STORE_UNAVAILABLE           | Backend failure on any read/write
                | STORE_PATH_CONFLICT         | Update would shadow an existing collection
----------------|-----------------------------|-----------------------------------------
Guard           | SELF_APPROVAL               | Checker is the record's maker
                | INSUFFICIENT_ROLE           | Role may not perform the action
                | INVALID_APPROVAL_TRANSITION | Decision on a non-Pending record
                | DOMAIN_ACCESS_DENIED        | Domain not in allowed domains
                | TENANT_ACCESS_DENIED        | Record outside the effective tenant
----------------|-----------------------------|-----------------------------------------
Validation      | MISSING_FIELD               | Required business field absent/blank
----------------|-----------------------------|-----------------------------------------
Record          | RECORD_NOT_FOUND            | No document at the record path
                | UNSUPPORTED_OPERATION       | Approve/reject on an ungoverned type
                | UNKNOWN_ENTITY_TYPE         | No descriptor registered for type
----------------|-----------------------------|-----------------------------------------
Immutability    | IMMUTABILITY_VIOLATION      | Update/remove of an audit entry

===============================================================================
PROPAGATION
===============================================================================

Guard, validation and store errors are raised BEFORE any mutation they
protect and are surfaced to the initiating caller.  Nothing in the
kernel retries.  The one recovered case is a StoreUnavailableError on
the audit write that follows a successful record write: it is logged by
the change-control service and the record mutation stands.

===============================================================================
"""


class ConsoleKernelError(Exception):
    """
    Base exception for all console kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "CONSOLE_KERNEL_ERROR"


# Store-related exceptions


class StoreError(ConsoleKernelError):
    """Base exception for persistent store errors."""

    code: str = "STORE_ERROR"


class StoreUnavailableError(StoreError):
    """The underlying store could not serve a read or accept a write."""

    code: str = "STORE_UNAVAILABLE"

    def __init__(self, operation: str, path: str, reason: str = ""):
        self.operation = operation
        self.path = path
        self.reason = reason
        message = f"Store unavailable during {operation} on '{path}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class StorePathConflictError(StoreError):
    """A document write targets a path that already holds child documents."""

    code: str = "STORE_PATH_CONFLICT"

    def __init__(self, path: str, children: int):
        self.path = path
        self.children = children
        super().__init__(
            f"Cannot write a document at '{path}': it holds {children} child document(s)"
        )


# Guard violations (rejected before any mutation, no audit entry)


class GuardViolationError(ConsoleKernelError):
    """Base exception for authorization and segregation-of-duties failures."""

    code: str = "GUARD_VIOLATION"


class SelfApprovalError(GuardViolationError):
    """A principal attempted to approve or reject their own change."""

    code: str = "SELF_APPROVAL"

    def __init__(self, record_id: str, actor_email: str, decision: str = "approve"):
        self.record_id = record_id
        self.actor_email = actor_email
        self.decision = decision
        super().__init__(f"You cannot {decision} your own change ({record_id})")


class InsufficientRoleError(GuardViolationError):
    """The principal's role does not permit the requested action."""

    code: str = "INSUFFICIENT_ROLE"

    def __init__(self, role: str, action: str):
        self.role = role
        self.action = action
        super().__init__(f"Insufficient role to {action}: {role}")


class InvalidApprovalTransitionError(GuardViolationError):
    """A decision was requested on a record that is not Pending."""

    code: str = "INVALID_APPROVAL_TRANSITION"

    def __init__(self, record_id: str, from_status: str, to_status: str):
        self.record_id = record_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Cannot move record {record_id} from {from_status} to {to_status}"
        )


class DomainAccessDeniedError(GuardViolationError):
    """The principal may not reach the requested domain."""

    code: str = "DOMAIN_ACCESS_DENIED"

    def __init__(self, actor_email: str, domain: str):
        self.actor_email = actor_email
        self.domain = domain
        super().__init__("You do not have permission to access this domain.")


class TenantAccessDeniedError(GuardViolationError):
    """A record outside the principal's effective tenant was addressed."""

    code: str = "TENANT_ACCESS_DENIED"

    def __init__(self, record_id: str, record_tenant: str, effective_tenant: str):
        self.record_id = record_id
        self.record_tenant = record_tenant
        self.effective_tenant = effective_tenant
        super().__init__(
            f"Record {record_id} belongs to tenant {record_tenant}, "
            f"not {effective_tenant}"
        )


# Validation exceptions


class ValidationError(ConsoleKernelError):
    """Base exception for business-field validation failures."""

    code: str = "VALIDATION_ERROR"


class MissingFieldError(ValidationError):
    """One or more required business fields are missing or blank."""

    code: str = "MISSING_FIELD"

    def __init__(self, entity_type: str, fields: list[str]):
        self.entity_type = entity_type
        self.fields = fields
        super().__init__(
            f"Missing required field(s) for {entity_type}: {', '.join(fields)}"
        )


# Record-related exceptions


class RecordError(ConsoleKernelError):
    """Base exception for governed record lookups and operations."""

    code: str = "RECORD_ERROR"


class RecordNotFoundError(RecordError):
    """No document exists at the record path."""

    code: str = "RECORD_NOT_FOUND"

    def __init__(self, entity_type: str, record_id: str):
        self.entity_type = entity_type
        self.record_id = record_id
        super().__init__(f"{entity_type} record not found: {record_id}")


class UnsupportedOperationError(RecordError):
    """The operation does not apply to this entity type."""

    code: str = "UNSUPPORTED_OPERATION"

    def __init__(self, entity_type: str, operation: str):
        self.entity_type = entity_type
        self.operation = operation
        super().__init__(f"{operation} is not supported for {entity_type}")


class UnknownEntityTypeError(RecordError):
    """No entity descriptor is registered for the requested type."""

    code: str = "UNKNOWN_ENTITY_TYPE"

    def __init__(self, entity_type: str):
        self.entity_type = entity_type
        super().__init__(f"Unknown entity type: {entity_type}")


# Immutability-related exceptions


class ImmutabilityError(ConsoleKernelError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an append-only document.

    Audit entries are immutable from creation.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
