"""
LedgerService -- orchestrates validated, atomic stock movements.

Responsibility:
    Public write API of the kernel.  Every stock change goes through the
    movement protocol:

        lock projection row -> check supply is active -> validate
            -> [savepoint: append movement -> apply delta] -> commit

    and returns ``MovementResult(movement, stock)``.  Supply lifecycle
    operations (create/update/delete) are exposed here too so that callers
    get the same transaction ownership and logging for them.

Architecture position:
    Kernel > Services.  The only service that commits or rolls back, and
    only when constructed with ``auto_commit=True`` (the default).

Invariants enforced:
    - stock == sum(movement quantities) for every supply after every
      completed operation: the append and the delta share one savepoint,
      so a rejected delta never leaves an orphan movement.
    - stock >= 0: issue_stock pre-checks under the row lock
      (InsufficientStockError) and apply_delta re-checks
      (NegativeStockError).
    - Two concurrent issues against one supply serialize on the projection
      row; at most one can succeed when stock covers only one.

Failure modes:
    - InventoryValidationError, SupplyNotFoundError, StockConflictError
      subclasses: logged as ``<operation>_rejected`` at WARNING.
    - Storage errors (SQLAlchemy): logged as ``<operation>_failed`` at ERROR
      and re-raised unchanged.  No automatic retry.

Usage:
    service = LedgerService(session, clock=SystemClock())
    supply = service.create_supply(SupplyAttributes("Blue Thread"))
    result = service.receive_stock(supply.id_supply, Decimal("100"), "initial batch")
    assert result.stock.stock_actual == Decimal("100")
"""

from __future__ import annotations

import time
from collections.abc import Callable
from decimal import Decimal
from typing import TypeVar
from uuid import uuid4

from sqlalchemy.orm import Session

from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import (
    MovementInfo,
    MovementResult,
    ProposedMovement,
    StockInfo,
    StockReconciliation,
    SupplyAttributes,
    SupplyInfo,
    SupplyPatch,
)
from inventory_kernel.domain.validation import (
    require_valid,
    validate_adjustment,
    validate_proposed_movement,
    validate_stock_request,
    validate_supply_id,
)
from inventory_kernel.domain.values import (
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_LOW_STOCK_THRESHOLD,
    ZERO,
    MovementKind,
    to_quantity,
)
from inventory_kernel.exceptions import (
    InsufficientStockError,
    InventoryKernelError,
    OpeningBalanceError,
    SupplyNotFoundError,
)
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.selectors.movement_selector import MovementSelector
from inventory_kernel.selectors.supply_selector import SupplySelector
from inventory_kernel.services.movement_ledger import MovementLedger
from inventory_kernel.services.stock_aggregator import StockAggregator
from inventory_kernel.services.supply_registry import SupplyRegistry

logger = get_logger("services.ledger_service")

T = TypeVar("T")


class LedgerService:
    """
    Orchestrates the supply registry, movement ledger and stock aggregator.

    Contract:
        One instance per session.  With ``auto_commit=True`` each public
        write commits on success and rolls back on failure.  With
        ``auto_commit=False`` the caller owns commit/rollback; the movement
        protocol still runs inside a savepoint.

        ``low_stock_threshold`` and ``history_page_size`` are the defaults
        used when a low-stock check or history read passes no explicit
        value; hosts take them from their settings.

    Non-goals:
        - No retries.  Stock operations are not idempotent; replaying a
          purchase would double-count it.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        auto_commit: bool = True,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
        history_page_size: int = DEFAULT_HISTORY_LIMIT,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._auto_commit = auto_commit

        self._stock = StockAggregator(session, low_stock_threshold=low_stock_threshold)
        self._ledger = MovementLedger(session, page_size=history_page_size)
        self._registry = SupplyRegistry(session, stock=self._stock)
        self._movements = MovementSelector(session)
        self._supplies = SupplySelector(session)

    @property
    def session(self) -> Session:
        return self._session

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def registry(self) -> SupplyRegistry:
        return self._registry

    @property
    def ledger(self) -> MovementLedger:
        return self._ledger

    @property
    def stock(self) -> StockAggregator:
        return self._stock

    # =========================================================================
    # Transaction boundary
    # =========================================================================

    def _run(
        self,
        operation: str,
        supply_id: int | None,
        work: Callable[[], T],
        **log_fields,
    ) -> T:
        """Run ``work`` with logging context, timing and commit/rollback."""
        with LogContext.bind(
            correlation_id=str(uuid4()),
            supply_id=str(supply_id) if supply_id is not None else None,
            operation=operation,
        ):
            logger.info(f"{operation}_started", extra=log_fields)
            t0 = time.monotonic()
            try:
                result = work()
                if self._auto_commit:
                    self._session.commit()
            except InventoryKernelError as exc:
                duration_ms = round((time.monotonic() - t0) * 1000, 2)
                if self._auto_commit:
                    self._session.rollback()
                logger.warning(
                    f"{operation}_rejected",
                    extra={
                        "duration_ms": duration_ms,
                        "error_code": exc.code,
                        "error_kind": exc.kind.value,
                    },
                )
                raise
            except Exception:
                duration_ms = round((time.monotonic() - t0) * 1000, 2)
                if self._auto_commit:
                    self._session.rollback()
                logger.error(
                    f"{operation}_failed",
                    extra={"duration_ms": duration_ms},
                    exc_info=True,
                )
                raise

            duration_ms = round((time.monotonic() - t0) * 1000, 2)
            logger.info(f"{operation}_completed", extra={"duration_ms": duration_ms})
            return result

    # =========================================================================
    # Movement protocol
    # =========================================================================

    def _lock_active(self, supply_id: int):
        """Lock the projection row, then confirm the supply is still active."""
        stock = self._stock.lock(supply_id)
        if not self._supplies.exists(supply_id):
            raise SupplyNotFoundError(supply_id)
        return stock

    def _apply(self, movement: ProposedMovement) -> MovementResult:
        """
        Append the movement and apply its delta inside one savepoint.

        Preconditions: the supply's projection row is locked and the
            movement has been validated.
        """
        movement_date = movement.movement_date or self._clock.now()
        with self._session.begin_nested():
            row = self._ledger.append(movement, movement_date)
            stock = self._stock.apply_delta(movement.supply_id, row.quantity)

        return MovementResult(
            movement=MovementInfo.from_model(row),
            stock=StockInfo.from_model(stock),
        )

    def _record(self, movement: ProposedMovement) -> MovementResult:
        require_valid(validate_proposed_movement(movement))
        self._lock_active(movement.supply_id)
        if movement.kind is MovementKind.INIT:
            count = self._movements.count(movement.supply_id)
            if count:
                raise OpeningBalanceError(movement.supply_id, count)
        return self._apply(movement)

    def record_movement(self, movement: ProposedMovement) -> MovementResult:
        """
        Run the movement protocol for an arbitrary proposed movement.

        Validates kind, sign, non-zero quantity, note and reference, then
        appends and applies the delta atomically.

        Raises:
            InventoryValidationError: malformed movement.
            SupplyNotFoundError: unknown or inactive supply.
            NegativeStockError: the delta would leave stock below zero.
            OpeningBalanceError: ``init`` on a supply that has history.
        """
        return self._run(
            "record_movement",
            movement.supply_id,
            lambda: self._record(movement),
            movement_type=getattr(movement.kind, "value", str(movement.kind)),
            quantity=str(movement.quantity),
        )

    # =========================================================================
    # Stock operations
    # =========================================================================

    def receive_stock(
        self,
        supply_id: int,
        quantity: Decimal,
        notes: str | None = None,
        ref_table: str | None = None,
        ref_id: int | None = None,
    ) -> MovementResult:
        """Record a ``purchase`` of ``quantity`` (> 0) units."""
        return self._stock_request(
            "receive_stock",
            MovementKind.PURCHASE,
            supply_id,
            quantity,
            notes,
            ref_table,
            ref_id,
        )

    def return_stock(
        self,
        supply_id: int,
        quantity: Decimal,
        notes: str | None = None,
        ref_table: str | None = None,
        ref_id: int | None = None,
    ) -> MovementResult:
        """Record a ``return`` of ``quantity`` (> 0) units to stock."""
        return self._stock_request(
            "return_stock",
            MovementKind.RETURN,
            supply_id,
            quantity,
            notes,
            ref_table,
            ref_id,
        )

    def issue_stock(
        self,
        supply_id: int,
        quantity: Decimal,
        notes: str | None = None,
        ref_table: str | None = None,
        ref_id: int | None = None,
    ) -> MovementResult:
        """
        Record an ``issue_to_production`` of ``quantity`` (> 0) units.

        The availability check runs under the projection row lock, so it
        sees every committed movement.

        Raises:
            InsufficientStockError: current stock is less than quantity.
        """
        return self._stock_request(
            "issue_stock",
            MovementKind.ISSUE_TO_PRODUCTION,
            supply_id,
            quantity,
            notes,
            ref_table,
            ref_id,
        )

    def _stock_request(
        self,
        operation: str,
        kind: MovementKind,
        supply_id: int,
        quantity: Decimal,
        notes: str | None,
        ref_table: str | None,
        ref_id: int | None,
    ) -> MovementResult:
        def work() -> MovementResult:
            require_valid(
                validate_stock_request(supply_id, quantity, notes, ref_table, ref_id)
            )
            amount = abs(to_quantity(quantity))
            stock = self._lock_active(supply_id)
            if not kind.is_positive and stock.stock_actual < amount:
                logger.warning(
                    "insufficient_stock",
                    extra={
                        "available": str(stock.stock_actual),
                        "requested": str(amount),
                    },
                )
                raise InsufficientStockError(supply_id, stock.stock_actual, amount)
            return self._apply(
                ProposedMovement(
                    supply_id=supply_id,
                    kind=kind,
                    quantity=kind.signed(amount),
                    notes=notes,
                    ref_table=ref_table,
                    ref_id=ref_id,
                )
            )

        return self._run(
            operation,
            supply_id,
            work,
            movement_type=kind.value,
            quantity=str(quantity),
        )

    def adjust_stock(
        self,
        supply_id: int,
        quantity: Decimal,
        notes: str | None = None,
    ) -> MovementResult:
        """
        Record a manual correction.

        A positive ``quantity`` becomes ``adjustment+``, a negative one
        ``adjustment-``.  Downward adjustments below zero stock fail with
        NegativeStockError.
        """
        def work() -> MovementResult:
            require_valid(validate_adjustment(supply_id, quantity, notes))
            signed = to_quantity(quantity)
            kind = (
                MovementKind.ADJUSTMENT_NEGATIVE
                if signed < ZERO
                else MovementKind.ADJUSTMENT_POSITIVE
            )
            return self._record(
                ProposedMovement(
                    supply_id=supply_id,
                    kind=kind,
                    quantity=signed,
                    notes=notes,
                )
            )

        return self._run("adjust_stock", supply_id, work, quantity=str(quantity))

    def open_balance(
        self,
        supply_id: int,
        quantity: Decimal,
        notes: str | None = None,
    ) -> MovementResult:
        """
        Record the opening balance (``init``) of a supply with no history.

        Raises:
            OpeningBalanceError: the supply already has movements.
        """
        return self._run(
            "open_balance",
            supply_id,
            lambda: self._record(
                ProposedMovement(
                    supply_id=supply_id,
                    kind=MovementKind.INIT,
                    quantity=quantity,
                    notes=notes,
                )
            ),
            quantity=str(quantity),
        )

    # =========================================================================
    # Supply lifecycle
    # =========================================================================

    def create_supply(self, attributes: SupplyAttributes) -> SupplyInfo:
        """Create a supply together with its zero stock projection."""
        return self._run(
            "create_supply",
            None,
            lambda: self._registry.create(attributes),
        )

    def update_supply(self, supply_id: int, patch: SupplyPatch) -> SupplyInfo:
        return self._run(
            "update_supply",
            supply_id,
            lambda: self._registry.update(supply_id, patch),
            patch_fields=sorted(patch.changes()),
        )

    def delete_supply(self, supply_id: int) -> SupplyInfo:
        """
        Soft-delete a supply.

        Raises:
            SupplyHasStockError: stock is not exactly zero.
        """
        return self._run(
            "delete_supply",
            supply_id,
            lambda: self._registry.soft_delete(supply_id),
        )

    # =========================================================================
    # Audit
    # =========================================================================

    def verify_stock(self, supply_id: int) -> StockReconciliation:
        """
        Compare the projection against the ledger sum.

        Runs inside the same transaction boundary as the write operations, so
        with ``auto_commit`` the read (and any projection repair it triggers)
        is committed and no lock outlives the call.  Logs
        ``stock_drift_detected`` at ERROR when the two differ.
        """
        return self._run(
            "verify_stock", supply_id, lambda: self._reconcile(supply_id)
        )

    def _reconcile(self, supply_id: int) -> StockReconciliation:
        require_valid(validate_supply_id(supply_id))
        stock = self._stock.get(supply_id)
        reconciliation = StockReconciliation(
            id_supply=supply_id,
            stock_actual=stock.stock_actual,
            ledger_sum=self._movements.ledger_sum(supply_id),
            movement_count=self._movements.count(supply_id),
        )
        if not reconciliation.is_consistent:
            logger.error(
                "stock_drift_detected",
                extra={
                    "supply_id": supply_id,
                    "stock_actual": str(reconciliation.stock_actual),
                    "ledger_sum": str(reconciliation.ledger_sum),
                    "drift": str(reconciliation.drift),
                },
            )
        return reconciliation
