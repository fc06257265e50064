"""
MovementLedger -- append-only log of stock movements.

Responsibility:
    Persists one SupplyMovement per call and exposes the supply's history.
    append() writes exactly one row and touches nothing else; LedgerService
    composes it with StockAggregator.apply_delta() in one transaction.

Architecture position:
    Kernel > Services.  Flushes only.

Invariants enforced:
    - Every appended movement satisfies the kind/sign/non-zero rules
      (checked here as well as in the movement protocol).
    - The referenced supply exists.
    - Rows are never updated or deleted (db/immutability.py).
"""

from datetime import datetime

from inventory_kernel.domain.dtos import HistoryEntry, ProposedMovement
from inventory_kernel.domain.validation import (
    require_valid,
    validate_history_window,
    validate_proposed_movement,
)
from inventory_kernel.domain.values import DEFAULT_HISTORY_LIMIT, round_quantity, to_quantity
from inventory_kernel.exceptions import SupplyNotFoundError
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.movement import SupplyMovement
from inventory_kernel.models.supply import Supply
from inventory_kernel.selectors.movement_selector import MovementSelector
from inventory_kernel.services.base import BaseService

logger = get_logger("services.movement_ledger")


class MovementLedger(BaseService[SupplyMovement]):
    """Append and read supply movements."""

    def __init__(self, session, page_size: int = DEFAULT_HISTORY_LIMIT):
        super().__init__(session)
        require_valid(validate_history_window(page_size, 0))
        self.page_size = page_size

    def append(self, movement: ProposedMovement, movement_date: datetime) -> SupplyMovement:
        """
        Persist one movement.

        Preconditions:
            ``movement_date`` is resolved by the caller (the service clock
            when the proposal carries none).

        Raises:
            InventoryValidationError: kind/sign/quantity/note/ref invalid.
            SupplyNotFoundError: the supply does not exist.
        """
        require_valid(validate_proposed_movement(movement))
        if self.session.get(Supply, movement.supply_id) is None:
            raise SupplyNotFoundError(movement.supply_id)

        row = SupplyMovement(
            id_supply=movement.supply_id,
            movement_date=movement_date,
            quantity=round_quantity(to_quantity(movement.quantity)),
            movement_type=movement.kind.value,
            ref_table=movement.ref_table,
            ref_id=movement.ref_id,
            notes=movement.notes,
        )
        self.session.add(row)
        self.session.flush()

        logger.info(
            "movement_appended",
            extra={
                "supply_id": movement.supply_id,
                "movement_id": row.id_supply_movement,
                "movement_type": movement.kind.value,
                "quantity": str(row.quantity),
            },
        )
        return row

    def history(
        self,
        supply_id: int,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[HistoryEntry]:
        """One page of history; ``limit`` defaults to the configured page size."""
        if limit is None:
            limit = self.page_size
        return MovementSelector(self.session).history(supply_id, limit, offset)
