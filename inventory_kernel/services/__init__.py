"""Write-side services for the inventory kernel."""

from inventory_kernel.services.ledger_service import LedgerService
from inventory_kernel.services.movement_ledger import MovementLedger
from inventory_kernel.services.stock_aggregator import StockAggregator
from inventory_kernel.services.supply_registry import SupplyRegistry

__all__ = [
    "LedgerService",
    "MovementLedger",
    "StockAggregator",
    "SupplyRegistry",
]
