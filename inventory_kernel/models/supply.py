"""
Module: inventory_kernel.models.supply
Responsibility: ORM persistence for Supply, the trackable inventory item.
    A Supply owns exactly one SupplyStock projection and any number of
    SupplyMovement ledger entries.
Architecture position: Kernel > Models.  May import from db/ and domain/values.py.
    MUST NOT import from services/, selectors/, or outer layers.

Invariants enforced:
    - id_supply is assigned on insert and never changes.
    - description is never blank (CHECK constraint; the domain validators
      reject blank and over-long descriptions before any write).
    - Supplies are soft-deleted (active = false), never physically removed
      (ORM listener + PostgreSQL trigger).

Failure modes:
    - IntegrityError on an unknown catalog id (FK) or a blank description.
    - ImmutabilityViolationError on session.delete(supply).
"""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inventory_kernel.db.base import TrackedBase
from inventory_kernel.db.types import DESCRIPTION, IDENTITY_KEY

if TYPE_CHECKING:
    from inventory_kernel.models.stock import SupplyStock


class Supply(TrackedBase):
    """
    A trackable inventory item.

    Contract:
        Created only through SupplyRegistry.create(), which initializes the
        stock projection in the same transaction.  Reads filter on
        ``active = true``; inactive supplies keep their history.

    Non-goals:
        - Does NOT hold the current quantity.  That is SupplyStock.
    """

    __tablename__ = "supplies"

    __table_args__ = (
        CheckConstraint(
            "length(trim(description)) > 0",
            name="ck_supply_description_not_blank",
        ),
        Index("idx_supply_active", "active"),
        Index("idx_supply_type", "id_supply_type"),
        Index("idx_supply_color", "id_supply_color"),
    )

    id_supply: Mapped[int] = mapped_column(
        IDENTITY_KEY, primary_key=True, autoincrement=True
    )

    description: Mapped[str] = mapped_column(DESCRIPTION, nullable=False)

    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Classification
    id_supply_type: Mapped[int | None] = mapped_column(
        ForeignKey("supply_type.id_supply_type"),
        nullable=True,
    )

    id_supply_color: Mapped[int | None] = mapped_column(
        ForeignKey("supply_color.id_supply_color"),
        nullable=True,
    )

    measuring_uom_id: Mapped[int | None] = mapped_column(
        ForeignKey("unit_of_measure.id_uom"),
        nullable=True,
    )

    stock: Mapped["SupplyStock"] = relationship(
        back_populates="supply",
        uselist=False,
        passive_deletes="all",
    )

    def __repr__(self) -> str:
        state = "active" if self.active else "inactive"
        return f"<Supply {self.id_supply}: {self.description} ({state})>"
