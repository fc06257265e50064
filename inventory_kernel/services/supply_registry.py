"""
SupplyRegistry -- supply identity and descriptive attributes.

Responsibility:
    Create, update and soft-delete supplies.  Creation initializes the
    stock projection in the same transaction; soft delete checks stock
    under the projection's row lock.  get/list delegate to SupplySelector.

Architecture position:
    Kernel > Services.  Flushes only.

Invariants enforced:
    - Every supply has a projection from the moment it is flushed.
    - Identity never changes; the patch type has no id or active field.
    - Soft delete only at exactly zero stock; the row is never removed.
    - Inactive supplies are invisible to get/update/soft_delete.
"""

from __future__ import annotations

from sqlalchemy import select

from inventory_kernel.domain.dtos import (
    SupplyAttributes,
    SupplyInfo,
    SupplyListing,
    SupplyPatch,
    ValidationError,
    ValidationResult,
)
from inventory_kernel.domain.validation import (
    require_valid,
    validate_supply_attributes,
    validate_supply_id,
    validate_supply_patch,
)
from inventory_kernel.domain.values import ZERO
from inventory_kernel.exceptions import SupplyHasStockError, SupplyNotFoundError
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.catalog import SupplyColor, SupplyType, UnitOfMeasure
from inventory_kernel.models.supply import Supply
from inventory_kernel.selectors.supply_selector import SupplySelector
from inventory_kernel.services.base import BaseService
from inventory_kernel.services.stock_aggregator import StockAggregator

logger = get_logger("services.supply_registry")

# Catalog tables behind each optional supply attribute.
_CATALOG_REFERENCES = {
    "id_supply_type": SupplyType,
    "id_supply_color": SupplyColor,
    "measuring_uom_id": UnitOfMeasure,
}


class SupplyRegistry(BaseService[Supply]):
    """
    Service for managing supplies.

    All public methods return DTOs, not ORM Supply entities.
    """

    def __init__(self, session, stock: StockAggregator | None = None):
        super().__init__(session)
        self._stock = stock or StockAggregator(session)

    def _get_active(self, supply_id: int) -> Supply:
        """Get an active supply by id, raising if unknown or inactive."""
        require_valid(validate_supply_id(supply_id))
        supply = self.session.execute(
            select(Supply)
            .where(Supply.id_supply == supply_id)
            .where(Supply.active.is_(True))
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if supply is None:
            raise SupplyNotFoundError(supply_id)
        return supply

    def _check_references(self, values: dict) -> None:
        """Reject catalog ids that point at no row before the flush does."""
        errors = [
            ValidationError(
                code="UNKNOWN_REFERENCE",
                message=f"{field} {values[field]} does not exist",
                field=field,
            )
            for field, model in _CATALOG_REFERENCES.items()
            if values.get(field) is not None
            and self.session.get(model, values[field]) is None
        ]
        if errors:
            require_valid(ValidationResult.failure(*errors))

    def create(self, attributes: SupplyAttributes) -> SupplyInfo:
        """
        Insert a supply and its zero stock projection.

        Raises:
            InventoryValidationError: blank/over-long description, bad ids,
                or a type, color or unit id with no catalog row.
        """
        require_valid(validate_supply_attributes(attributes))
        self._check_references(
            {field: getattr(attributes, field) for field in _CATALOG_REFERENCES}
        )

        supply = Supply(
            description=attributes.description,
            active=True,
            id_supply_type=attributes.id_supply_type,
            id_supply_color=attributes.id_supply_color,
            measuring_uom_id=attributes.measuring_uom_id,
        )
        self.session.add(supply)
        self.session.flush()
        self._stock.initialize(supply.id_supply)

        logger.info(
            "supply_created",
            extra={"supply_id": supply.id_supply, "description": supply.description},
        )
        return SupplyInfo.from_model(supply)

    def get(self, supply_id: int) -> SupplyListing:
        return SupplySelector(self.session).get(supply_id)

    def list(
        self,
        description: str | None = None,
        id_supply_type: int | None = None,
        id_supply_color: int | None = None,
    ) -> list[SupplyListing]:
        return SupplySelector(self.session).list(
            description=description,
            id_supply_type=id_supply_type,
            id_supply_color=id_supply_color,
        )

    def update(self, supply_id: int, patch: SupplyPatch) -> SupplyInfo:
        """
        Apply a non-empty patch to an active supply.

        Raises:
            InventoryValidationError: empty patch, invalid attribute or
                unknown catalog id.
            SupplyNotFoundError: unknown or inactive supply.
        """
        require_valid(validate_supply_id(supply_id))
        require_valid(validate_supply_patch(patch))
        supply = self._get_active(supply_id)

        changes = patch.changes()
        self._check_references(changes)
        for name, value in changes.items():
            setattr(supply, name, value)
        self.session.flush()

        logger.info(
            "supply_updated",
            extra={"supply_id": supply_id, "fields": sorted(changes)},
        )
        return SupplyInfo.from_model(supply)

    def soft_delete(self, supply_id: int) -> SupplyInfo:
        """
        Deactivate a supply whose stock is exactly zero.

        Raises:
            SupplyNotFoundError: unknown or already inactive supply.
            SupplyHasStockError: stock is not zero.
        """
        supply = self._get_active(supply_id)
        stock = self._stock.lock(supply_id)
        if stock.stock_actual != ZERO:
            logger.warning(
                "supply_delete_rejected",
                extra={"supply_id": supply_id, "stock_actual": str(stock.stock_actual)},
            )
            raise SupplyHasStockError(supply_id, stock.stock_actual)

        supply.active = False
        self.session.flush()
        logger.info("supply_deactivated", extra={"supply_id": supply_id})
        return SupplyInfo.from_model(supply)
