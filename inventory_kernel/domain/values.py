"""
Value primitives for the stock ledger.

Responsibility:
    Movement kinds with their required signs, quantity precision and input
    limits, and the Decimal conversion helpers every layer shares.

Architecture position:
    Kernel > Domain -- pure, zero I/O, no ORM.  Imported by db/, models/,
    services/ and selectors/.

Invariants enforced:
    - No floats anywhere in the kernel.  Quantities are Decimal with
      QUANTITY_DECIMAL_PLACES fractional digits.
    - Every movement kind is either stock-increasing or stock-decreasing;
      there is no neutral kind.
"""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

QUANTITY_DECIMAL_PLACES = 4
MAX_MOVEMENT_QUANTITY = Decimal("999999.9999")
MAX_DESCRIPTION_LENGTH = 200
MAX_NOTE_LENGTH = 1000
MAX_REF_TABLE_LENGTH = 100

DEFAULT_HISTORY_LIMIT = 50
MAX_HISTORY_LIMIT = 1000
DEFAULT_LOW_STOCK_THRESHOLD = 10

ZERO = Decimal("0")

_QUANTUM = Decimal(1).scaleb(-QUANTITY_DECIMAL_PLACES)


class MovementKind(str, Enum):
    """
    Enumerated movement kinds.

    Contract:
        INIT, PURCHASE, RETURN and ADJUSTMENT_POSITIVE carry a positive
        quantity; ISSUE_TO_PRODUCTION and ADJUSTMENT_NEGATIVE a negative one.
    """

    INIT = "init"
    PURCHASE = "purchase"
    ISSUE_TO_PRODUCTION = "issue_to_production"
    RETURN = "return"
    ADJUSTMENT_POSITIVE = "adjustment+"
    ADJUSTMENT_NEGATIVE = "adjustment-"

    @property
    def sign(self) -> int:
        """+1 for stock-increasing kinds, -1 for stock-decreasing kinds."""
        return 1 if self in POSITIVE_KINDS else -1

    @property
    def is_positive(self) -> bool:
        return self in POSITIVE_KINDS

    def signed(self, quantity: Decimal) -> Decimal:
        """Return ``abs(quantity)`` with this kind's sign applied."""
        return abs(quantity) * self.sign


POSITIVE_KINDS = frozenset({
    MovementKind.INIT,
    MovementKind.PURCHASE,
    MovementKind.RETURN,
    MovementKind.ADJUSTMENT_POSITIVE,
})

NEGATIVE_KINDS = frozenset({
    MovementKind.ISSUE_TO_PRODUCTION,
    MovementKind.ADJUSTMENT_NEGATIVE,
})


def to_quantity(value: Decimal | int | float | str) -> Decimal:
    """
    Convert a caller-supplied number to a Decimal quantity.

    Floats are converted through ``str`` so that ``0.1`` becomes
    ``Decimal("0.1")`` rather than its binary expansion.

    Raises:
        decimal.InvalidOperation: If value is not numeric.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_quantity(value: Decimal) -> Decimal:
    """Quantize a quantity to QUANTITY_DECIMAL_PLACES (ROUND_HALF_UP)."""
    return value.quantize(_QUANTUM, rounding=ROUND_HALF_UP)
