"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable structures that cross the kernel boundary:
    typed inputs (SupplyAttributes, SupplyPatch, ProposedMovement), the
    validation result types, and the read-side records returned by services
    and selectors (SupplyInfo, SupplyListing, MovementInfo, HistoryEntry,
    StockInfo, MovementResult, StockReconciliation).

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Free of ORM dependencies.
    from_model() class methods exist as boundary converters but are only
    invoked from the service and selector layers.

Invariants enforced:
    - Services accept and return DTOs, never ORM entities.
    - Quantities are Decimal; kinds are MovementKind.

Data flow:
    SupplyAttributes -> SupplyRegistry.create -> SupplyInfo
    ProposedMovement -> LedgerService.record_movement -> MovementResult
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from inventory_kernel.domain.clock import ensure_utc
from inventory_kernel.domain.values import MovementKind

if TYPE_CHECKING:
    from inventory_kernel.models.movement import SupplyMovement as SupplyMovementModel
    from inventory_kernel.models.stock import SupplyStock as SupplyStockModel
    from inventory_kernel.models.supply import Supply as SupplyModel


# =============================================================================
# Validation
# =============================================================================


@dataclass(frozen=True)
class ValidationError:
    """
    A single validation error.

    Contract:
        Carries a machine-readable code, a human-readable message, an
        optional field name, and optional details.

    Non-goals:
        - Does NOT raise -- it IS the error representation.
          InventoryValidationError wraps a tuple of these.
    """

    code: str
    message: str
    field: str | None = None
    details: dict[str, Any] | None = None


@dataclass(frozen=True)
class ValidationResult:
    """
    Result of validation.

    Guarantees:
        - errors is always a tuple (never None).
        - bool(result) == result.is_valid.
    """

    is_valid: bool
    errors: tuple[ValidationError, ...] = field(default_factory=tuple)

    @classmethod
    def success(cls) -> ValidationResult:
        return cls(is_valid=True, errors=())

    @classmethod
    def failure(cls, *errors: ValidationError) -> ValidationResult:
        return cls(is_valid=False, errors=tuple(errors))

    @classmethod
    def combine(cls, *results: ValidationResult) -> ValidationResult:
        """Merge several results; valid only if every input is valid."""
        errors = tuple(e for r in results for e in r.errors)
        if errors:
            return cls(is_valid=False, errors=errors)
        return cls.success()

    def __bool__(self) -> bool:
        return self.is_valid


# =============================================================================
# Inputs
# =============================================================================


@dataclass(frozen=True)
class SupplyAttributes:
    """Descriptive attributes for a new supply."""

    description: str
    id_supply_type: int | None = None
    id_supply_color: int | None = None
    measuring_uom_id: int | None = None


@dataclass(frozen=True)
class SupplyPatch:
    """
    Partial update of a supply's descriptive attributes.

    A field left as None is not touched.  There is no ``active`` field:
    activation state changes only through soft delete.
    """

    description: str | None = None
    id_supply_type: int | None = None
    id_supply_color: int | None = None
    measuring_uom_id: int | None = None

    def changes(self) -> dict[str, Any]:
        """Fields present in the patch, by column name."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    @property
    def is_empty(self) -> bool:
        return not self.changes()


@dataclass(frozen=True)
class ProposedMovement:
    """
    A movement the caller wants recorded.

    Contract:
        ``quantity`` is already signed.  The movement protocol validates it
        against ``kind`` before anything is written.
    """

    supply_id: int
    kind: MovementKind
    quantity: Decimal
    notes: str | None = None
    ref_table: str | None = None
    ref_id: int | None = None
    movement_date: datetime | None = None


# =============================================================================
# Outputs
# =============================================================================


@dataclass(frozen=True)
class SupplyInfo:
    id_supply: int
    description: str
    active: bool
    id_supply_type: int | None
    id_supply_color: int | None
    measuring_uom_id: int | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, supply: SupplyModel) -> SupplyInfo:
        return cls(
            id_supply=supply.id_supply,
            description=supply.description,
            active=supply.active,
            id_supply_type=supply.id_supply_type,
            id_supply_color=supply.id_supply_color,
            measuring_uom_id=supply.measuring_uom_id,
            created_at=supply.created_at,
            updated_at=supply.updated_at,
        )


@dataclass(frozen=True)
class SupplyListing:
    """
    A supply joined with its catalog labels and current stock.

    Returned by the get/list/low-stock reads.  Label fields are None when
    the supply does not reference the corresponding catalog row.
    """

    id_supply: int
    description: str
    active: bool
    id_supply_type: int | None
    id_supply_color: int | None
    measuring_uom_id: int | None
    type_name: str | None
    color_name: str | None
    category_name: str | None
    uom_description: str | None
    stock_actual: Decimal


@dataclass(frozen=True)
class MovementInfo:
    id_supply_movement: int
    id_supply: int
    movement_date: datetime
    quantity: Decimal
    kind: MovementKind
    notes: str | None = None
    ref_table: str | None = None
    ref_id: int | None = None

    @classmethod
    def from_model(cls, movement: SupplyMovementModel) -> MovementInfo:
        return cls(
            id_supply_movement=movement.id_supply_movement,
            id_supply=movement.id_supply,
            movement_date=ensure_utc(movement.movement_date),
            quantity=movement.quantity,
            kind=MovementKind(movement.movement_type),
            notes=movement.notes,
            ref_table=movement.ref_table,
            ref_id=movement.ref_id,
        )


@dataclass(frozen=True)
class HistoryEntry:
    """A movement as listed in a supply's history, with its description."""

    movement: MovementInfo
    supply_description: str


@dataclass(frozen=True)
class StockInfo:
    id_supply: int
    stock_actual: Decimal
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, stock: SupplyStockModel) -> StockInfo:
        return cls(
            id_supply=stock.id_supply,
            stock_actual=stock.stock_actual,
            updated_at=stock.updated_at,
        )

    def has_enough_stock(self, quantity: Decimal) -> bool:
        return self.stock_actual >= quantity

    def is_low(self, threshold: Decimal | int) -> bool:
        return self.stock_actual <= threshold


@dataclass(frozen=True)
class MovementResult:
    """The appended movement and the projection after applying it."""

    movement: MovementInfo
    stock: StockInfo


@dataclass(frozen=True)
class StockReconciliation:
    """
    Projection vs. ledger comparison for one supply.

    ``is_consistent`` is False only if the projection has drifted from the
    sum of the supply's movements.
    """

    id_supply: int
    stock_actual: Decimal
    ledger_sum: Decimal
    movement_count: int

    @property
    def is_consistent(self) -> bool:
        return self.stock_actual == self.ledger_sum

    @property
    def drift(self) -> Decimal:
        return self.stock_actual - self.ledger_sum
