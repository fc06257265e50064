"""
Property-based tests of the stock invariants.

For any sequence of receive/issue/return/adjust operations on one supply:
- the projection equals the sum of the supply's movements, and
- the projection is never negative,
after every operation, whether it succeeded or was rejected.
"""

from decimal import Decimal

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from inventory_kernel.domain.dtos import SupplyAttributes
from inventory_kernel.domain.values import round_quantity
from inventory_kernel.exceptions import InventoryValidationError, StockConflictError

quantities = st.decimals(
    min_value=Decimal("0.0001"),
    max_value=Decimal("500"),
    places=4,
    allow_nan=False,
    allow_infinity=False,
)

operations = st.lists(
    st.tuples(
        st.sampled_from(["receive", "issue", "return", "adjust_up", "adjust_down"]),
        quantities,
    ),
    min_size=1,
    max_size=15,
)

FUZZ_SETTINGS = settings(
    max_examples=50,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)


def apply_operation(service, supply_id, op, quantity):
    if op == "receive":
        return service.receive_stock(supply_id, quantity)
    if op == "issue":
        return service.issue_stock(supply_id, quantity)
    if op == "return":
        return service.return_stock(supply_id, quantity)
    if op == "adjust_up":
        return service.adjust_stock(supply_id, quantity)
    return service.adjust_stock(supply_id, -quantity)


class TestStockInvariants:

    @given(ops=operations)
    @FUZZ_SETTINGS
    def test_projection_tracks_ledger(self, ops, ledger_service):
        supply = ledger_service.create_supply(SupplyAttributes("Fuzzed Thread"))
        expected = Decimal("0")

        for op, quantity in ops:
            delta = -quantity if op in ("issue", "adjust_down") else quantity
            try:
                apply_operation(ledger_service, supply.id_supply, op, quantity)
            except StockConflictError:
                assert expected + delta < 0, f"{op}({quantity}) rejected with stock {expected}"
            else:
                expected = round_quantity(expected + delta)

            reconciliation = ledger_service.verify_stock(supply.id_supply)
            assert reconciliation.is_consistent
            assert reconciliation.stock_actual >= 0
            assert reconciliation.stock_actual == expected

    @given(quantity=quantities)
    @FUZZ_SETTINGS
    def test_receive_then_issue_all_returns_to_zero(self, quantity, ledger_service):
        supply = ledger_service.create_supply(SupplyAttributes("Round Trip"))
        ledger_service.receive_stock(supply.id_supply, quantity)
        result = ledger_service.issue_stock(supply.id_supply, quantity)
        assert result.stock.stock_actual == 0

    @given(
        quantity=st.one_of(
            st.decimals(max_value=Decimal("0"), allow_nan=False, allow_infinity=False),
            st.decimals(min_value=Decimal("1000000"), allow_nan=False, allow_infinity=False),
            st.text(alphabet="abcxyz -!", max_size=5),
            st.booleans(),
            st.none(),
        )
    )
    @FUZZ_SETTINGS
    def test_invalid_quantities_never_write(self, quantity, ledger_service):
        supply = ledger_service.create_supply(SupplyAttributes("Guarded"))
        with pytest.raises(InventoryValidationError):
            ledger_service.receive_stock(supply.id_supply, quantity)
        assert ledger_service.verify_stock(supply.id_supply).movement_count == 0
