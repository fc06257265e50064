"""
Pure domain layer.

Data transfer objects, value primitives, validators and the clock
abstraction, with NO dependencies on the ORM or the database.
"""

from inventory_kernel.domain.clock import (
    Clock,
    DeterministicClock,
    SystemClock,
    ensure_utc,
)
from inventory_kernel.domain.dtos import (
    HistoryEntry,
    MovementInfo,
    MovementResult,
    ProposedMovement,
    StockInfo,
    StockReconciliation,
    SupplyAttributes,
    SupplyInfo,
    SupplyListing,
    SupplyPatch,
    ValidationError,
    ValidationResult,
)
from inventory_kernel.domain.values import (
    NEGATIVE_KINDS,
    POSITIVE_KINDS,
    MovementKind,
    round_quantity,
    to_quantity,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "HistoryEntry",
    "MovementInfo",
    "MovementKind",
    "MovementResult",
    "NEGATIVE_KINDS",
    "POSITIVE_KINDS",
    "ProposedMovement",
    "StockInfo",
    "StockReconciliation",
    "SupplyAttributes",
    "SupplyInfo",
    "SupplyListing",
    "SupplyPatch",
    "SystemClock",
    "ValidationError",
    "ValidationResult",
    "ensure_utc",
    "round_quantity",
    "to_quantity",
]
