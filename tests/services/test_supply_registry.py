"""Tests for SupplyRegistry through the LedgerService wrappers."""

from decimal import Decimal

import pytest
from sqlalchemy import select

from inventory_kernel.domain.dtos import SupplyAttributes, SupplyPatch
from inventory_kernel.exceptions import (
    ErrorKind,
    InventoryValidationError,
    SupplyNotFoundError,
    error_kind,
)
from inventory_kernel.models.stock import SupplyStock
from inventory_kernel.models.supply import Supply


class TestCreate:

    def test_create_initializes_zero_projection(self, session, ledger_service):
        supply = ledger_service.create_supply(SupplyAttributes("Blue Thread"))

        assert supply.id_supply > 0
        assert supply.active is True
        stock = session.execute(
            select(SupplyStock).where(SupplyStock.id_supply == supply.id_supply)
        ).scalar_one()
        assert stock.stock_actual == Decimal("0")

    def test_create_with_catalog_labels(self, ledger_service, catalog):
        supply = ledger_service.create_supply(
            SupplyAttributes(
                "Blue Cotton",
                id_supply_type=catalog["cotton"].id_supply_type,
                id_supply_color=catalog["blue"].id_supply_color,
                measuring_uom_id=catalog["meters"].id_uom,
            )
        )

        listing = ledger_service.registry.get(supply.id_supply)
        assert listing.type_name == "Cotton"
        assert listing.color_name == "Blue"
        assert listing.category_name == "Threads"
        assert listing.uom_description == "Meters"
        assert listing.stock_actual == Decimal("0")

    def test_blank_description_rejected(self, ledger_service):
        with pytest.raises(InventoryValidationError) as exc_info:
            ledger_service.create_supply(SupplyAttributes("   "))
        assert exc_info.value.error_codes == ("DESCRIPTION_REQUIRED",)

    def test_description_stored_as_given(self, ledger_service):
        supply = ledger_service.create_supply(SupplyAttributes("  Padded  "))
        assert supply.description == "  Padded  "

    def test_unknown_catalog_ids_rejected(self, session, ledger_service):
        with pytest.raises(InventoryValidationError) as exc_info:
            ledger_service.create_supply(
                SupplyAttributes("Orphan", id_supply_type=424_242, measuring_uom_id=434_343)
            )

        assert exc_info.value.error_codes == ("UNKNOWN_REFERENCE", "UNKNOWN_REFERENCE")
        assert [e.field for e in exc_info.value.errors] == ["id_supply_type", "measuring_uom_id"]
        assert error_kind(exc_info.value) is ErrorKind.VALIDATION
        assert session.execute(
            select(Supply).where(Supply.description == "Orphan")
        ).first() is None


class TestGet:

    def test_labels_absent_without_catalog_references(self, ledger_service, create_supply):
        supply = create_supply("Plain")
        listing = ledger_service.registry.get(supply.id_supply)
        assert listing.type_name is None
        assert listing.color_name is None

    def test_unknown_supply(self, ledger_service):
        with pytest.raises(SupplyNotFoundError):
            ledger_service.registry.get(424242)

    def test_inactive_supply_hidden(self, ledger_service, create_supply):
        supply = create_supply()
        ledger_service.delete_supply(supply.id_supply)
        with pytest.raises(SupplyNotFoundError):
            ledger_service.registry.get(supply.id_supply)

    def test_invalid_id(self, ledger_service):
        with pytest.raises(InventoryValidationError):
            ledger_service.registry.get(0)


class TestUpdate:

    def test_partial_update(self, ledger_service, create_supply, catalog):
        supply = create_supply("Old Name")

        updated = ledger_service.update_supply(
            supply.id_supply,
            SupplyPatch(description="New Name", id_supply_color=catalog["red"].id_supply_color),
        )

        assert updated.id_supply == supply.id_supply
        assert updated.description == "New Name"
        assert updated.id_supply_color == catalog["red"].id_supply_color
        assert ledger_service.registry.get(supply.id_supply).color_name == "Red"

    def test_untouched_fields_kept(self, ledger_service, create_supply, catalog):
        supply = create_supply("Thread", id_supply_type=catalog["cotton"].id_supply_type)
        updated = ledger_service.update_supply(supply.id_supply, SupplyPatch(description="Thread 2"))
        assert updated.id_supply_type == catalog["cotton"].id_supply_type

    def test_update_does_not_touch_stock(self, ledger_service, create_supply):
        supply = create_supply(stock=Decimal("12"))
        ledger_service.update_supply(supply.id_supply, SupplyPatch(description="Renamed"))
        assert ledger_service.stock.get(supply.id_supply).stock_actual == Decimal("12")

    def test_empty_patch_rejected(self, ledger_service, create_supply):
        supply = create_supply()
        with pytest.raises(InventoryValidationError) as exc_info:
            ledger_service.update_supply(supply.id_supply, SupplyPatch())
        assert exc_info.value.error_codes == ("EMPTY_PATCH",)

    def test_inactive_supply_not_updatable(self, ledger_service, create_supply):
        supply = create_supply()
        ledger_service.delete_supply(supply.id_supply)
        with pytest.raises(SupplyNotFoundError):
            ledger_service.update_supply(supply.id_supply, SupplyPatch(description="Back"))

    def test_unknown_color_rejected(self, ledger_service, create_supply):
        supply = create_supply("Kept Name")
        with pytest.raises(InventoryValidationError) as exc_info:
            ledger_service.update_supply(
                supply.id_supply, SupplyPatch(description="Lost", id_supply_color=515_151)
            )

        assert exc_info.value.error_codes == ("UNKNOWN_REFERENCE",)
        assert ledger_service.registry.get(supply.id_supply).description == "Kept Name"
