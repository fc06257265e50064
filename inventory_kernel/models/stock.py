"""
Module: inventory_kernel.models.stock
Responsibility: ORM persistence for SupplyStock, the materialized current
    quantity of one supply.
Architecture position: Kernel > Models.  May import from db/ and domain/values.py.

Invariants enforced:
    - One row per supply (id_supply is the primary key).
    - stock_actual >= 0 at every commit (CHECK constraint, and
      StockAggregator.apply_delta refuses before the write).
    - stock_actual equals the sum of the supply's movement quantities.
      Only StockAggregator writes this table, and only in the same
      transaction as the movement that justifies the change.
    - Rows are never deleted (ORM listener + PostgreSQL trigger).

Failure modes:
    - IntegrityError if a raw write would make stock negative.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inventory_kernel.db.base import Base
from inventory_kernel.db.types import IDENTITY_KEY
from inventory_kernel.domain.values import ZERO

if TYPE_CHECKING:
    from inventory_kernel.models.supply import Supply


class SupplyStock(Base):
    """
    Current stock projection for a supply.

    The row is the serialization point for every movement on its supply:
    writers lock it (SELECT ... FOR UPDATE) before validating a change.
    """

    __tablename__ = "supply_stock"

    __table_args__ = (
        CheckConstraint("stock_actual >= 0", name="ck_supply_stock_non_negative"),
    )

    id_supply: Mapped[int] = mapped_column(
        IDENTITY_KEY,
        ForeignKey("supplies.id_supply"),
        primary_key=True,
        autoincrement=False,
    )

    stock_actual: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)

    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    supply: Mapped["Supply"] = relationship(back_populates="stock")

    def __repr__(self) -> str:
        return f"<SupplyStock supply={self.id_supply}: {self.stock_actual}>"
