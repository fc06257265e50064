"""Read-only selectors for querying inventory data."""

from inventory_kernel.selectors.movement_selector import MovementSelector
from inventory_kernel.selectors.stock_selector import StockSelector
from inventory_kernel.selectors.supply_selector import SupplySelector

__all__ = [
    "MovementSelector",
    "StockSelector",
    "SupplySelector",
]
