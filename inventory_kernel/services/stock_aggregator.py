"""
StockAggregator -- the current-quantity projection per supply.

Responsibility:
    Owns every write to ``supply_stock``: eager initialization with a new
    supply, row locking for the movement protocol, delta application, and
    the explicit repair path for a supply whose projection row is missing.
    Read helpers (get, is_low, list_low) answer "how much is there now"
    without replaying the ledger.

Architecture position:
    Kernel > Services.  Flushes only; LedgerService owns the transaction.

Invariants enforced:
    - apply_delta is the only mutator of stock_actual and refuses any delta
      that would leave it below zero (NegativeStockError).
    - lock() takes a row lock (SELECT ... FOR UPDATE on PostgreSQL) so that
      validate-then-apply on one supply is serialized across sessions.
    - A repaired projection is initialized to the ledger sum, so the
      stock == sum(movements) invariant holds from the moment it exists.

Failure modes:
    - SupplyNotFoundError when repairing a projection for a supply that was
      never created.
    - NegativeStockError from apply_delta.
"""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from inventory_kernel.domain.dtos import StockInfo, SupplyListing
from inventory_kernel.domain.validation import (
    require_valid,
    validate_supply_id,
    validate_threshold,
)
from inventory_kernel.domain.values import (
    DEFAULT_LOW_STOCK_THRESHOLD,
    ZERO,
    round_quantity,
)
from inventory_kernel.exceptions import NegativeStockError, SupplyNotFoundError
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.stock import SupplyStock
from inventory_kernel.models.supply import Supply
from inventory_kernel.selectors.movement_selector import MovementSelector
from inventory_kernel.selectors.stock_selector import StockSelector
from inventory_kernel.services.base import BaseService

logger = get_logger("services.stock_aggregator")


class StockAggregator(BaseService[SupplyStock]):
    """
    Maintains the SupplyStock projection.

    Contract:
        Callers hold the session's transaction.  apply_delta() must run in
        the same transaction as the movement append that justifies it.
    """

    def __init__(self, session, low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD):
        super().__init__(session)
        require_valid(validate_threshold(low_stock_threshold))
        self.low_stock_threshold = low_stock_threshold

    def initialize(self, supply_id: int) -> SupplyStock:
        """Create the zero projection for a freshly inserted supply."""
        stock = SupplyStock(id_supply=supply_id, stock_actual=ZERO)
        self.session.add(stock)
        self.session.flush()
        logger.debug("stock_initialized", extra={"supply_id": supply_id})
        return stock

    def _select(self, supply_id: int, for_update: bool) -> SupplyStock | None:
        stmt = select(SupplyStock).where(SupplyStock.id_supply == supply_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(
            stmt.execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def lock(self, supply_id: int) -> SupplyStock:
        """
        Load the projection row under a row lock.

        The lock is held until the surrounding transaction ends.  A missing
        row is repaired first.
        """
        stock = self._select(supply_id, for_update=True)
        if stock is None:
            self._repair(supply_id)
            stock = self._select(supply_id, for_update=True)
        return stock

    def get(self, supply_id: int) -> StockInfo:
        """
        Return the current projection.

        Raises:
            SupplyNotFoundError: the supply has never existed.
        """
        require_valid(validate_supply_id(supply_id))
        stock = self._select(supply_id, for_update=False)
        if stock is None:
            stock = self._repair(supply_id)
        return StockInfo.from_model(stock)

    def is_low(self, supply_id: int, threshold: int | None = None) -> bool:
        if threshold is None:
            threshold = self.low_stock_threshold
        require_valid(validate_threshold(threshold))
        return self.get(supply_id).is_low(threshold)

    def list_low(self, threshold: int | None = None) -> list[SupplyListing]:
        if threshold is None:
            threshold = self.low_stock_threshold
        return StockSelector(self.session).list_low(threshold)

    def apply_delta(self, supply_id: int, delta: Decimal) -> SupplyStock:
        """
        Add a signed delta to the projection.

        Raises:
            NegativeStockError: the result would be below zero.  Nothing is
                written in that case.
        """
        stock = self.lock(supply_id)
        current = stock.stock_actual
        new_quantity = round_quantity(current + delta)
        if new_quantity < ZERO:
            logger.warning(
                "negative_stock_rejected",
                extra={
                    "supply_id": supply_id,
                    "current": str(current),
                    "delta": str(delta),
                },
            )
            raise NegativeStockError(supply_id, current, delta)

        stock.stock_actual = new_quantity
        self.session.flush()
        logger.debug(
            "stock_delta_applied",
            extra={
                "supply_id": supply_id,
                "delta": str(delta),
                "stock_actual": str(new_quantity),
            },
        )
        return stock

    def _repair(self, supply_id: int) -> SupplyStock:
        """
        Create a missing projection from the ledger sum.

        Only reachable when the one-projection-per-supply invariant has been
        broken outside the kernel (e.g. a data migration gap).
        """
        if self.session.get(Supply, supply_id) is None:
            raise SupplyNotFoundError(supply_id)

        ledger_sum = MovementSelector(self.session).ledger_sum(supply_id)
        logger.warning(
            "stock_projection_repaired",
            extra={"supply_id": supply_id, "stock_actual": str(ledger_sum)},
        )

        # Another session may repair the same row concurrently
        savepoint = self.session.begin_nested()
        try:
            stock = SupplyStock(id_supply=supply_id, stock_actual=ledger_sum)
            self.session.add(stock)
            self.session.flush()
            savepoint.commit()
            return stock
        except IntegrityError:
            savepoint.rollback()
            logger.debug("stock_repair_race", extra={"supply_id": supply_id})
            return self.session.execute(
                select(SupplyStock)
                .where(SupplyStock.id_supply == supply_id)
                .execution_options(populate_existing=True)
            ).scalar_one()
