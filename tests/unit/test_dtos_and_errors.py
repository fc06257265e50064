"""Unit tests for DTO behaviour, the clock, and the error taxonomy."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from inventory_kernel.domain.clock import DeterministicClock, SystemClock, ensure_utc
from inventory_kernel.domain.dtos import (
    StockInfo,
    StockReconciliation,
    SupplyPatch,
    ValidationError,
    ValidationResult,
)
from inventory_kernel.exceptions import (
    ErrorKind,
    ImmutabilityViolationError,
    InsufficientStockError,
    InventoryValidationError,
    NegativeStockError,
    OpeningBalanceError,
    StockConflictError,
    SupplyHasStockError,
    SupplyNotFoundError,
    error_kind,
)


class TestValidationResult:

    def test_combine(self):
        err = ValidationError(code="X", message="x")
        combined = ValidationResult.combine(
            ValidationResult.success(), ValidationResult.failure(err)
        )
        assert not combined
        assert combined.errors == (err,)

    def test_combine_all_valid(self):
        assert ValidationResult.combine(ValidationResult.success(), ValidationResult.success())


class TestStockInfo:

    def test_low_stock_is_inclusive(self):
        stock = StockInfo(id_supply=1, stock_actual=Decimal("10"))
        assert stock.is_low(10)
        assert not stock.is_low(9)

    def test_has_enough_stock(self):
        stock = StockInfo(id_supply=1, stock_actual=Decimal("8"))
        assert stock.has_enough_stock(Decimal("8"))
        assert not stock.has_enough_stock(Decimal("8.0001"))


class TestStockReconciliation:

    def test_consistent(self):
        rec = StockReconciliation(1, Decimal("10.0000"), Decimal("10"), 2)
        assert rec.is_consistent
        assert rec.drift == 0

    def test_drift(self):
        rec = StockReconciliation(1, Decimal("12"), Decimal("10"), 2)
        assert not rec.is_consistent
        assert rec.drift == Decimal("2")


class TestSupplyPatch:

    def test_none_fields_are_untouched(self):
        assert SupplyPatch().is_empty
        assert SupplyPatch(description="New").changes() == {"description": "New"}


class TestClock:

    def test_deterministic_clock_moves_only_when_told(self):
        clock = DeterministicClock()
        first = clock.now()
        assert clock.now() == first
        assert clock.tick() == first + timedelta(seconds=1)
        clock.advance(59)
        assert clock.now() == first + timedelta(minutes=1)

    def test_system_clock_is_utc(self):
        assert SystemClock().now().tzinfo == timezone.utc

    def test_ensure_utc(self):
        naive = datetime(2024, 5, 1, 10, 0)
        assert ensure_utc(naive) == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
        plus_two = datetime(2024, 5, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        assert ensure_utc(plus_two).hour == 10


class TestErrorTaxonomy:

    @pytest.mark.parametrize(
        "exc, kind, code",
        [
            (InventoryValidationError(()), ErrorKind.VALIDATION, "VALIDATION_FAILED"),
            (SupplyNotFoundError(1), ErrorKind.NOT_FOUND, "SUPPLY_NOT_FOUND"),
            (
                InsufficientStockError(1, Decimal("2"), Decimal("8")),
                ErrorKind.CONFLICT,
                "INSUFFICIENT_STOCK",
            ),
            (
                NegativeStockError(1, Decimal("2"), Decimal("-8")),
                ErrorKind.CONFLICT,
                "NEGATIVE_STOCK",
            ),
            (SupplyHasStockError(1, Decimal("5")), ErrorKind.CONFLICT, "SUPPLY_HAS_STOCK"),
            (OpeningBalanceError(1, 3), ErrorKind.CONFLICT, "OPENING_BALANCE_EXISTS"),
            (
                ImmutabilityViolationError("SupplyMovement", "1", "immutable"),
                ErrorKind.CONFLICT,
                "IMMUTABILITY_VIOLATION",
            ),
        ],
    )
    def test_kernel_errors_report_kind_and_code(self, exc, kind, code):
        assert error_kind(exc) is kind
        assert exc.code == code

    def test_stock_conflicts_share_a_base(self):
        assert issubclass(InsufficientStockError, StockConflictError)
        assert issubclass(NegativeStockError, StockConflictError)

    def test_foreign_errors_are_internal(self):
        assert error_kind(RuntimeError("boom")) is ErrorKind.INTERNAL
        assert error_kind(OperationalError("SELECT 1", {}, Exception("locked"))) is (
            ErrorKind.INTERNAL
        )

    def test_insufficient_stock_carries_amounts(self):
        exc = InsufficientStockError(7, Decimal("2"), Decimal("8"))
        assert (exc.supply_id, exc.available, exc.requested) == (7, Decimal("2"), Decimal("8"))
        assert "available 2" in str(exc)

    def test_validation_error_message_joins_errors(self):
        exc = InventoryValidationError(
            (
                ValidationError(code="A", message="first"),
                ValidationError(code="B", message="second"),
            )
        )
        assert exc.error_codes == ("A", "B")
        assert "first; second" in str(exc)
