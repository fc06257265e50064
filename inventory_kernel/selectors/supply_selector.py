"""
Module: inventory_kernel.selectors.supply_selector
Responsibility: Read access to active supplies joined with their catalog
    labels and current stock.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Only active supplies are returned.
    - Filters are conjunctive; the description filter is a case-insensitive
      substring match.
    - Results are ordered by description (ties by id).
"""

from __future__ import annotations

from sqlalchemy import Select, select
from sqlalchemy.engine import Row

from inventory_kernel.domain.dtos import SupplyListing
from inventory_kernel.domain.validation import (
    require_valid,
    validate_list_filters,
    validate_supply_id,
)
from inventory_kernel.domain.values import ZERO
from inventory_kernel.exceptions import SupplyNotFoundError
from inventory_kernel.models.catalog import (
    SupplyCategory,
    SupplyColor,
    SupplyType,
    UnitOfMeasure,
)
from inventory_kernel.models.stock import SupplyStock
from inventory_kernel.models.supply import Supply
from inventory_kernel.selectors.base import BaseSelector


def listing_query() -> Select:
    """SELECT of active supplies with labels and stock (LEFT JOINs throughout)."""
    return (
        select(
            Supply,
            SupplyType.name.label("type_name"),
            SupplyColor.name.label("color_name"),
            SupplyCategory.name.label("category_name"),
            UnitOfMeasure.description.label("uom_description"),
            SupplyStock.stock_actual,
        )
        .outerjoin(SupplyType, Supply.id_supply_type == SupplyType.id_supply_type)
        .outerjoin(
            SupplyCategory,
            SupplyType.id_supply_category == SupplyCategory.id_supply_category,
        )
        .outerjoin(SupplyColor, Supply.id_supply_color == SupplyColor.id_supply_color)
        .outerjoin(UnitOfMeasure, Supply.measuring_uom_id == UnitOfMeasure.id_uom)
        .outerjoin(SupplyStock, SupplyStock.id_supply == Supply.id_supply)
        .where(Supply.active.is_(True))
    )


def to_listing(row: Row) -> SupplyListing:
    supply = row.Supply
    return SupplyListing(
        id_supply=supply.id_supply,
        description=supply.description,
        active=supply.active,
        id_supply_type=supply.id_supply_type,
        id_supply_color=supply.id_supply_color,
        measuring_uom_id=supply.measuring_uom_id,
        type_name=row.type_name,
        color_name=row.color_name,
        category_name=row.category_name,
        uom_description=row.uom_description,
        stock_actual=row.stock_actual if row.stock_actual is not None else ZERO,
    )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SupplySelector(BaseSelector[Supply]):
    """Read-only queries over active supplies."""

    def get(self, supply_id: int) -> SupplyListing:
        """
        Return one active supply with its labels and stock.

        Raises:
            InventoryValidationError: supply_id is not a positive integer.
            SupplyNotFoundError: unknown or inactive supply.
        """
        require_valid(validate_supply_id(supply_id))
        row = self.session.execute(
            listing_query().where(Supply.id_supply == supply_id)
        ).one_or_none()
        if row is None:
            raise SupplyNotFoundError(supply_id)
        return to_listing(row)

    def list(
        self,
        description: str | None = None,
        id_supply_type: int | None = None,
        id_supply_color: int | None = None,
    ) -> list[SupplyListing]:
        """List active supplies matching every given filter."""
        require_valid(validate_list_filters(id_supply_type, id_supply_color))

        stmt = listing_query()
        if description:
            stmt = stmt.where(
                Supply.description.ilike(f"%{_escape_like(description)}%", escape="\\")
            )
        if id_supply_type is not None:
            stmt = stmt.where(Supply.id_supply_type == id_supply_type)
        if id_supply_color is not None:
            stmt = stmt.where(Supply.id_supply_color == id_supply_color)
        stmt = stmt.order_by(Supply.description, Supply.id_supply)

        return [to_listing(row) for row in self.session.execute(stmt)]

    def exists(self, supply_id: int, active_only: bool = True) -> bool:
        stmt = select(Supply.id_supply).where(Supply.id_supply == supply_id)
        if active_only:
            stmt = stmt.where(Supply.active.is_(True))
        return self.session.execute(stmt).first() is not None
