"""
Module: inventory_kernel.selectors.movement_selector
Responsibility: Read access to the movement ledger: newest-first history
    pages, the ledger sum used by reconciliation and repair, and counts.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - History order is movement_date DESC, id_supply_movement DESC, so ties
      on the timestamp resolve to the most recently inserted movement first.
    - History of a soft-deleted supply remains readable.

Non-goals:
    - No pagination tokens.  limit/offset windows are not stable under
      concurrent appends.
"""

from decimal import Decimal

from sqlalchemy import func, select

from inventory_kernel.domain.dtos import HistoryEntry, MovementInfo
from inventory_kernel.domain.validation import (
    require_valid,
    validate_history_window,
    validate_supply_id,
)
from inventory_kernel.domain.values import (
    DEFAULT_HISTORY_LIMIT,
    ZERO,
    round_quantity,
    to_quantity,
)
from inventory_kernel.exceptions import SupplyNotFoundError
from inventory_kernel.models.movement import SupplyMovement
from inventory_kernel.models.supply import Supply
from inventory_kernel.selectors.base import BaseSelector


class MovementSelector(BaseSelector[SupplyMovement]):
    """Read-only queries over supply_movements."""

    def history(
        self,
        supply_id: int,
        limit: int = DEFAULT_HISTORY_LIMIT,
        offset: int = 0,
    ) -> list[HistoryEntry]:
        """
        Return one page of a supply's movements, newest first.

        Raises:
            InventoryValidationError: bad id, limit outside 1..1000, or
                negative offset.
            SupplyNotFoundError: the supply has never existed.
        """
        require_valid(validate_supply_id(supply_id))
        require_valid(validate_history_window(limit, offset))

        description = self.session.execute(
            select(Supply.description).where(Supply.id_supply == supply_id)
        ).scalar_one_or_none()
        if description is None:
            raise SupplyNotFoundError(supply_id)

        movements = self.session.execute(
            select(SupplyMovement)
            .where(SupplyMovement.id_supply == supply_id)
            .order_by(
                SupplyMovement.movement_date.desc(),
                SupplyMovement.id_supply_movement.desc(),
            )
            .limit(limit)
            .offset(offset)
        ).scalars()

        return [
            HistoryEntry(
                movement=MovementInfo.from_model(m),
                supply_description=description,
            )
            for m in movements
        ]

    def ledger_sum(self, supply_id: int) -> Decimal:
        """Sum of every movement quantity for the supply (0 with no history)."""
        total = self.session.execute(
            select(func.sum(SupplyMovement.quantity)).where(
                SupplyMovement.id_supply == supply_id
            )
        ).scalar()
        if total is None:
            return ZERO
        return round_quantity(to_quantity(total))

    def count(self, supply_id: int) -> int:
        return self.session.execute(
            select(func.count())
            .select_from(SupplyMovement)
            .where(SupplyMovement.id_supply == supply_id)
        ).scalar_one()
