"""
Module: inventory_kernel.models.movement
Responsibility: ORM persistence for SupplyMovement, the append-only ledger
    entry that records one signed, kind-tagged quantity change.
Architecture position: Kernel > Models.  May import from db/ and domain/values.py.
    MUST NOT import from services/, selectors/, or outer layers.

Invariants enforced:
    - quantity is never zero (CHECK constraint).
    - quantity's sign matches the movement kind's required sign (CHECK
      constraint, mirrored by MovementKind.sign and the domain validators).
    - Immutable once written: no UPDATE, no DELETE (ORM listeners in
      db/immutability.py, PostgreSQL triggers in db/sql/).
    - id_supply_movement is assigned on insert and never reused.

Failure modes:
    - IntegrityError if a raw insert violates the sign/kind CHECK or
      references a missing supply.
    - ImmutabilityViolationError on any attempt to modify a persisted row.

Audit relevance:
    The movement table IS the stock history.  The SupplyStock projection
    is derived from it and must always equal the sum of its quantities.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inventory_kernel.db.base import Base
from inventory_kernel.db.types import IDENTITY_KEY, NOTE, REF_TABLE
from inventory_kernel.domain.values import NEGATIVE_KINDS, POSITIVE_KINDS, MovementKind

if TYPE_CHECKING:
    from inventory_kernel.models.supply import Supply


def _in_list(kinds: frozenset[MovementKind]) -> str:
    return ", ".join(f"'{k.value}'" for k in sorted(kinds, key=lambda k: k.value))


class SupplyMovement(Base):
    """
    One immutable stock ledger entry.

    Contract:
        Created exclusively by LedgerService through MovementLedger.append().
        Read-only afterward.

    Guarantees:
        - quantity != 0 and sign(quantity) == kind.sign.
        - movement_date is always set (defaults to the service clock).
        - ref_table / ref_id are an opaque provenance tag; no referential
          integrity is implied.
    """

    __tablename__ = "supply_movements"

    __table_args__ = (
        CheckConstraint("quantity <> 0", name="ck_movement_quantity_nonzero"),
        CheckConstraint(
            f"movement_type IN ({_in_list(POSITIVE_KINDS | NEGATIVE_KINDS)})",
            name="ck_movement_type_known",
        ),
        CheckConstraint(
            f"(movement_type IN ({_in_list(POSITIVE_KINDS)}) AND quantity > 0) OR "
            f"(movement_type IN ({_in_list(NEGATIVE_KINDS)}) AND quantity < 0)",
            name="ck_movement_sign_matches_kind",
        ),
        Index(
            "idx_movement_supply_history",
            "id_supply",
            "movement_date",
            "id_supply_movement",
        ),
        Index("idx_movement_ref", "ref_table", "ref_id"),
    )

    id_supply_movement: Mapped[int] = mapped_column(
        IDENTITY_KEY, primary_key=True, autoincrement=True
    )

    id_supply: Mapped[int] = mapped_column(
        ForeignKey("supplies.id_supply"),
        nullable=False,
    )

    movement_date: Mapped[datetime] = mapped_column(nullable=False)

    # Signed: positive kinds add stock, negative kinds remove it
    quantity: Mapped[Decimal] = mapped_column(nullable=False)

    movement_type: Mapped[str] = mapped_column(String(30), nullable=False)

    # Provenance tag (e.g. "production_orders", 42)
    ref_table: Mapped[str | None] = mapped_column(REF_TABLE, nullable=True)
    ref_id: Mapped[int | None] = mapped_column(nullable=True)

    notes: Mapped[str | None] = mapped_column(NOTE, nullable=True)

    supply: Mapped["Supply"] = relationship()

    @property
    def kind(self) -> MovementKind:
        return MovementKind(self.movement_type)

    def __repr__(self) -> str:
        return (
            f"<SupplyMovement {self.id_supply_movement}: supply={self.id_supply} "
            f"{self.movement_type} {self.quantity}>"
        )
