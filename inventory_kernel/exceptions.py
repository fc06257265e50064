"""
Typed Exception Hierarchy for the Inventory Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Stock operations fail for a handful of precise reasons: the input was
malformed, the supply does not exist, or applying the movement would break
a ledger invariant.  Callers must be able to tell these apart without
parsing message strings:

    try:
        service.issue_stock(supply_id, Decimal("8"))
    except Exception as e:
        if "insufficient" in str(e):  # FRAGILE - message might change
            ...

Instead:

    try:
        service.issue_stock(supply_id, Decimal("8"))
    except InsufficientStockError as e:
        respond(409, code=e.code, available=str(e.available))

Every exception carries:
  1. A ``code`` class attribute (machine-readable, API-safe).
  2. A ``kind`` class attribute (one of ``ErrorKind``) that boundary
     adapters map to their own transport representation.
  3. Structured attributes with the data needed to explain the failure.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    InventoryKernelError (base, kind=INTERNAL)
    |
    +-- InventoryValidationError            kind=VALIDATION
    |
    +-- SupplyNotFoundError                 kind=NOT_FOUND
    |
    +-- StockConflictError                  kind=CONFLICT
    |   +-- InsufficientStockError
    |   +-- NegativeStockError
    |   +-- SupplyHasStockError
    |   +-- OpeningBalanceError
    |
    +-- ImmutabilityViolationError          kind=CONFLICT

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Kind        | Code                      | When Raised
------------|---------------------------|------------------------------------------
VALIDATION  | VALIDATION_FAILED         | Malformed quantity, kind/sign mismatch,
            |                           | zero quantity, blank description,
            |                           | note too long, empty patch,
            |                           | unknown catalog id
NOT_FOUND   | SUPPLY_NOT_FOUND          | Unknown or inactive supply
CONFLICT    | INSUFFICIENT_STOCK        | Issue larger than current stock
            | NEGATIVE_STOCK            | Delta would drive projection below zero
            | SUPPLY_HAS_STOCK          | Soft delete with nonzero stock
            | OPENING_BALANCE_EXISTS    | init movement on a supply with history
            | IMMUTABILITY_VIOLATION    | Update/delete of an immutable row
INTERNAL    | INVENTORY_KERNEL_ERROR    | Storage/transaction failure

Storage errors raised by SQLAlchemy are NOT wrapped; they propagate
unchanged and ``error_kind()`` classifies them as INTERNAL.

===============================================================================
DESIGN DECISIONS
===============================================================================

1. ``InsufficientStockError`` and ``NegativeStockError`` are distinct.
   The first is the pre-check under the row lock ("you asked for more than
   there is"); the second is the projection's own invariant check when a
   delta is applied.  Both are CONFLICT and both leave no partial state.

2. Validation failures are collected, not thrown one at a time.  The pure
   validators return a ``ValidationResult``; the service raises a single
   ``InventoryValidationError`` carrying every violation.

===============================================================================
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from inventory_kernel.domain.dtos import ValidationError


class ErrorKind(str, Enum):
    """Transport-agnostic error taxonomy.

    Boundary adapters (HTTP, CLI, message consumers) map each kind to their
    own representation, e.g. 400/404/409/500.
    """

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


class InventoryKernelError(Exception):
    """
    Base exception for all inventory kernel errors.

    All subclasses must have a ``code`` and a ``kind`` class attribute.
    """

    code: str = "INVENTORY_KERNEL_ERROR"
    kind: ErrorKind = ErrorKind.INTERNAL


class InventoryValidationError(InventoryKernelError):
    """Input failed validation before touching storage."""

    code: str = "VALIDATION_FAILED"
    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, errors: tuple[ValidationError, ...]):
        self.errors = tuple(errors)
        detail = "; ".join(e.message for e in self.errors) or "invalid input"
        super().__init__(f"Invalid input: {detail}")

    @property
    def error_codes(self) -> tuple[str, ...]:
        return tuple(e.code for e in self.errors)


class SupplyNotFoundError(InventoryKernelError):
    """Supply does not exist or has been soft-deleted."""

    code: str = "SUPPLY_NOT_FOUND"
    kind: ErrorKind = ErrorKind.NOT_FOUND

    def __init__(self, supply_id: int):
        self.supply_id = supply_id
        super().__init__(f"Supply not found: {supply_id}")


# Stock conflicts


class StockConflictError(InventoryKernelError):
    """Base exception for movements rejected by the current stock state."""

    code: str = "STOCK_CONFLICT"
    kind: ErrorKind = ErrorKind.CONFLICT


class InsufficientStockError(StockConflictError):
    """Requested issue quantity exceeds the current projection."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, supply_id: int, available: Decimal, requested: Decimal):
        self.supply_id = supply_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for supply {supply_id}: "
            f"available {available}, requested {requested}"
        )


class NegativeStockError(StockConflictError):
    """Applying the delta would leave the projection below zero."""

    code: str = "NEGATIVE_STOCK"

    def __init__(self, supply_id: int, current: Decimal, delta: Decimal):
        self.supply_id = supply_id
        self.current = current
        self.delta = delta
        super().__init__(
            f"Stock for supply {supply_id} would become negative: "
            f"current {current}, delta {delta}"
        )


class SupplyHasStockError(StockConflictError):
    """Soft delete attempted while the supply still holds stock."""

    code: str = "SUPPLY_HAS_STOCK"

    def __init__(self, supply_id: int, quantity: Decimal):
        self.supply_id = supply_id
        self.quantity = quantity
        super().__init__(
            f"Cannot delete supply {supply_id} with existing stock ({quantity})"
        )


class OpeningBalanceError(StockConflictError):
    """An init movement was requested for a supply that already has history."""

    code: str = "OPENING_BALANCE_EXISTS"

    def __init__(self, supply_id: int, movement_count: int):
        self.supply_id = supply_id
        self.movement_count = movement_count
        super().__init__(
            f"Supply {supply_id} already has {movement_count} movement(s); "
            f"opening balance not allowed"
        )


# Immutability


class ImmutabilityViolationError(InventoryKernelError):
    """Attempted to modify or delete an immutable record."""

    code: str = "IMMUTABILITY_VIOLATION"
    kind: ErrorKind = ErrorKind.CONFLICT

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


def error_kind(exc: BaseException) -> ErrorKind:
    """Classify any exception for a boundary adapter.

    Kernel exceptions report their own kind; everything else (storage,
    driver, programming errors) is INTERNAL.
    """
    if isinstance(exc, InventoryKernelError):
        return exc.kind
    return ErrorKind.INTERNAL
