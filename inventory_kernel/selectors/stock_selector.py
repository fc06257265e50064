"""
Module: inventory_kernel.selectors.stock_selector
Responsibility: Read access to the stock projection: the low-stock report.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - The low-stock report includes only active supplies that have a
      projection row, with stock <= threshold, ordered by stock ascending
      then description.
"""

from inventory_kernel.domain.dtos import SupplyListing
from inventory_kernel.domain.validation import require_valid, validate_threshold
from inventory_kernel.domain.values import DEFAULT_LOW_STOCK_THRESHOLD
from inventory_kernel.models.stock import SupplyStock
from inventory_kernel.models.supply import Supply
from inventory_kernel.selectors.base import BaseSelector
from inventory_kernel.selectors.supply_selector import listing_query, to_listing


class StockSelector(BaseSelector[SupplyStock]):
    """Read-only queries over supply_stock."""

    def list_low(
        self, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    ) -> list[SupplyListing]:
        """
        Active supplies whose stock is at or below ``threshold``.

        Raises:
            InventoryValidationError: threshold is not a non-negative integer.
        """
        require_valid(validate_threshold(threshold))
        stmt = (
            listing_query()
            .where(SupplyStock.id_supply.is_not(None))
            .where(SupplyStock.stock_actual <= threshold)
            .order_by(SupplyStock.stock_actual, Supply.description, Supply.id_supply)
        )
        return [to_listing(row) for row in self.session.execute(stmt)]
