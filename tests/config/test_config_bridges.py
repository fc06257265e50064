"""Tests for inventory_config.bridges: settings flowing into the ledger service."""

from decimal import Decimal

import pytest

from inventory_config import InventorySettings
from inventory_config.bridges import build_ledger_service
from inventory_kernel.domain.dtos import SupplyAttributes
from inventory_kernel.exceptions import InventoryValidationError
from inventory_kernel.services.ledger_service import LedgerService


@pytest.fixture
def settings() -> InventorySettings:
    return InventorySettings(
        database_url="sqlite://", low_stock_threshold=3, history_page_size=2
    )


class TestBuildLedgerService:

    def test_defaults_come_from_settings(self, session, settings, deterministic_clock):
        service = build_ledger_service(session, settings, clock=deterministic_clock)

        assert service.stock.low_stock_threshold == 3
        assert service.ledger.page_size == 2
        assert service.clock is deterministic_clock

    def test_low_stock_uses_configured_threshold(self, session, settings, deterministic_clock):
        service = build_ledger_service(session, settings, clock=deterministic_clock)
        supply = service.create_supply(SupplyAttributes("Thin Thread"))
        service.receive_stock(supply.id_supply, Decimal("5"))

        assert not service.stock.is_low(supply.id_supply)
        service.issue_stock(supply.id_supply, Decimal("2"))
        assert service.stock.is_low(supply.id_supply)
        assert supply.id_supply in [s.id_supply for s in service.stock.list_low()]

    def test_history_page_uses_configured_size(self, session, settings, deterministic_clock):
        service = build_ledger_service(session, settings, clock=deterministic_clock)
        supply = service.create_supply(SupplyAttributes("Paged Thread"))
        for _ in range(4):
            deterministic_clock.tick()
            service.receive_stock(supply.id_supply, Decimal("1"))

        assert len(service.ledger.history(supply.id_supply)) == 2
        assert len(service.ledger.history(supply.id_supply, limit=3)) == 3

    def test_plain_service_keeps_kernel_defaults(self, session):
        service = LedgerService(session)
        assert service.stock.low_stock_threshold == 10
        assert service.ledger.page_size == 50

    @pytest.mark.parametrize(
        "overrides",
        [{"low_stock_threshold": -1}, {"history_page_size": 0}, {"history_page_size": 1001}],
    )
    def test_invalid_kernel_defaults_rejected(self, session, overrides):
        with pytest.raises(InventoryValidationError):
            LedgerService(session, **overrides)
