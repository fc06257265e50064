"""
Module: inventory_kernel.db.types
Responsibility: SQLAlchemy column types shared by every model, so that stock
    quantities and identities are stored identically everywhere.
Architecture position: Kernel > DB.  May import from domain/values.py only.
    MUST NOT import from models/, services/, or selectors/.

Invariants enforced:
    - Quantities are Numeric(18, 4), never Float.
    - Identities are BIGINT on PostgreSQL and INTEGER on SQLite (where only
      an INTEGER PRIMARY KEY aliases the autoincrementing rowid).
"""

from decimal import Decimal
from typing import Annotated

from sqlalchemy import BigInteger, Integer, Numeric, String

from inventory_kernel.domain.values import (
    MAX_DESCRIPTION_LENGTH,
    MAX_NOTE_LENGTH,
    MAX_REF_TABLE_LENGTH,
    QUANTITY_DECIMAL_PLACES,
)

# 18 digits total, 4 decimal places
QUANTITY = Numeric(18, QUANTITY_DECIMAL_PLACES)

IDENTITY_KEY = BigInteger().with_variant(Integer(), "sqlite")

Quantity = Annotated[Decimal, QUANTITY]

DESCRIPTION = String(MAX_DESCRIPTION_LENGTH)
NOTE = String(MAX_NOTE_LENGTH)
REF_TABLE = String(MAX_REF_TABLE_LENGTH)
