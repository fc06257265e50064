"""ORM models for the inventory kernel."""

from inventory_kernel.models.catalog import (
    SupplyCategory,
    SupplyColor,
    SupplyType,
    UnitOfMeasure,
)
from inventory_kernel.models.movement import SupplyMovement
from inventory_kernel.models.stock import SupplyStock
from inventory_kernel.models.supply import Supply

__all__ = [
    "Supply",
    "SupplyCategory",
    "SupplyColor",
    "SupplyMovement",
    "SupplyStock",
    "SupplyType",
    "UnitOfMeasure",
]
