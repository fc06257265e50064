"""
Tests for StockAggregator: reads, low-stock checks and the repair path.

The repair path is exercised by inserting rows with Core statements, the
way a data migration that skipped the projection would.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import insert

from inventory_kernel.exceptions import (
    InventoryValidationError,
    NegativeStockError,
    SupplyNotFoundError,
)
from inventory_kernel.models.movement import SupplyMovement
from inventory_kernel.models.supply import Supply


def insert_supply_without_projection(session, description="Legacy Thread") -> int:
    return session.execute(
        insert(Supply).values(description=description, active=True).returning(Supply.id_supply)
    ).scalar_one()


def insert_raw_movement(session, supply_id, quantity, movement_type="purchase"):
    session.execute(
        insert(SupplyMovement).values(
            id_supply=supply_id,
            movement_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
            quantity=quantity,
            movement_type=movement_type,
        )
    )


class TestRead:

    def test_get(self, ledger_service, create_supply):
        supply = create_supply(stock=Decimal("6"))
        stock = ledger_service.stock.get(supply.id_supply)
        assert stock.id_supply == supply.id_supply
        assert stock.stock_actual == Decimal("6")

    def test_is_low_inclusive(self, ledger_service, create_supply):
        supply = create_supply(stock=Decimal("10"))
        assert ledger_service.stock.is_low(supply.id_supply)
        assert not ledger_service.stock.is_low(supply.id_supply, threshold=9)

    def test_is_low_rejects_negative_threshold(self, ledger_service, create_supply):
        supply = create_supply()
        with pytest.raises(InventoryValidationError):
            ledger_service.stock.is_low(supply.id_supply, threshold=-1)

    def test_unknown_supply(self, ledger_service):
        with pytest.raises(SupplyNotFoundError):
            ledger_service.stock.get(777_777)


class TestApplyDelta:

    def test_refuses_negative_result(self, session, ledger_service, create_supply):
        supply = create_supply(stock=Decimal("3"))
        with pytest.raises(NegativeStockError) as exc_info:
            ledger_service.stock.apply_delta(supply.id_supply, Decimal("-3.0001"))
        assert exc_info.value.delta == Decimal("-3.0001")
        assert ledger_service.stock.get(supply.id_supply).stock_actual == Decimal("3")


class TestRepair:

    def test_missing_projection_repaired_from_ledger(self, session, ledger_service, captured_logs):
        supply_id = insert_supply_without_projection(session)
        insert_raw_movement(session, supply_id, Decimal("15"))
        insert_raw_movement(session, supply_id, Decimal("-4"), "issue_to_production")

        stock = ledger_service.stock.get(supply_id)

        assert stock.stock_actual == Decimal("11")
        repaired = [r for r in captured_logs() if r["message"] == "stock_projection_repaired"]
        assert len(repaired) == 1
        assert repaired[0]["level"] == "WARNING"

    def test_repair_without_history_starts_at_zero(self, session, ledger_service):
        supply_id = insert_supply_without_projection(session)
        assert ledger_service.stock.get(supply_id).stock_actual == Decimal("0")

    def test_movement_on_supply_missing_projection(self, session, ledger_service):
        supply_id = insert_supply_without_projection(session)

        result = ledger_service.receive_stock(supply_id, Decimal("2"))

        assert result.stock.stock_actual == Decimal("2")
        assert ledger_service.verify_stock(supply_id).is_consistent
