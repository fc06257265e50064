"""
ORM-Level Immutability Enforcement (Layer 1 of 2).

===============================================================================
WHY THIS EXISTS
===============================================================================

Stock history must be tamper-proof.  The only way to change a supply's
quantity is to append a new movement; an existing movement is never edited
or removed, and the rows that anchor the history (the supply itself and its
stock projection) are never physically deleted.

  Layer 1: THIS FILE (ORM event listeners)
    - Catches modifications through Python/SQLAlchemy code
    - Fires BEFORE the SQL is sent to the database

  Layer 2: db/sql/*.sql (PostgreSQL triggers)
    - Catches raw SQL, bulk UPDATE statements, direct psql access

See also:
  - db/triggers.py - Loads and installs PostgreSQL triggers

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity          | Rule                          | Why
----------------|-------------------------------|------------------------------
SupplyMovement  | No UPDATE, no DELETE          | The movement log IS the history
Supply          | No DELETE (soft delete only)  | Movements reference it
SupplyStock     | No DELETE                     | One projection row per supply

Supply and SupplyStock UPDATEs are legitimate (attribute edits, soft delete,
projection maintenance) and are not intercepted here.

===============================================================================
USAGE
===============================================================================

Called by create_tables() and by the test fixtures:

    from inventory_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()

Registration is idempotent.  To temporarily disable (TESTS ONLY):

    unregister_immutability_listeners()
    # ... do forbidden operation ...
    register_immutability_listeners()
"""

from sqlalchemy import event

from inventory_kernel.exceptions import ImmutabilityViolationError
from inventory_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _block(entity_type: str, entity_id, operation: str, reason: str) -> None:
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(entity_id),
            "operation": operation,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(entity_id),
        reason=reason,
    )


def _check_movement_immutability(mapper, connection, target):
    """Prevent any updates to SupplyMovement records."""
    _block(
        "SupplyMovement",
        target.id_supply_movement,
        "UPDATE",
        "Supply movements are immutable and cannot be modified",
    )


def _check_movement_delete(mapper, connection, target):
    """Prevent deletion of SupplyMovement records."""
    _block(
        "SupplyMovement",
        target.id_supply_movement,
        "DELETE",
        "Supply movements cannot be deleted",
    )


def _check_supply_delete(mapper, connection, target):
    """Supplies are soft-deleted; the physical row anchors its history."""
    _block(
        "Supply",
        target.id_supply,
        "DELETE",
        "Supplies cannot be deleted; set active = false instead",
    )


def _check_stock_delete(mapper, connection, target):
    _block(
        "SupplyStock",
        target.id_supply,
        "DELETE",
        "Stock projections cannot be deleted",
    )


def _listeners():
    from inventory_kernel.models.movement import SupplyMovement
    from inventory_kernel.models.stock import SupplyStock
    from inventory_kernel.models.supply import Supply

    return [
        (SupplyMovement, "before_update", _check_movement_immutability),
        (SupplyMovement, "before_delete", _check_movement_delete),
        (Supply, "before_delete", _check_supply_delete),
        (SupplyStock, "before_delete", _check_stock_delete),
    ]


def register_immutability_listeners():
    """
    Register all immutability enforcement event listeners.

    Call this after all models are imported but before any database
    operations begin.  Calling it again is a no-op.
    """
    for target, event_name, listener_fn in _listeners():
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)


def _safe_remove_listener(target, event_name, listener_fn):
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove immutability enforcement event listeners.

    WARNING: Only use this in tests where you need to intentionally
    violate immutability rules to verify detection at the database layer.
    """
    for target, event_name, listener_fn in _listeners():
        _safe_remove_listener(target, event_name, listener_fn)


def listeners_registered() -> bool:
    """True if every immutability listener is currently attached."""
    return all(
        event.contains(target, event_name, listener_fn)
        for target, event_name, listener_fn in _listeners()
    )
