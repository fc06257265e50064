"""
Module: inventory_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.  Provides
    the type annotation map for consistent column types, the integer identity
    key convention, and the TrackedBase mixin for audit timestamps.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - Decimal precision: type_annotation_map maps Python Decimal to the
      Quantity column type (Numeric(18, 4)).  NEVER use float for stock
      quantities.
    - Integer identities: every table keys on an autoincrementing integer
      that is assigned on insert and never reused.
    - Audit timestamps: TrackedBase provides created_at and updated_at.

Failure modes:
    - IntegrityError on duplicate primary key (only possible via raw SQL).
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from inventory_kernel.db.types import IDENTITY_KEY, QUANTITY


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Contract:
        Every ORM model in the kernel inherits from Base (or TrackedBase) and
        declares its own integer primary key with ``IDENTITY_KEY``.

    Guarantees:
        - Decimal maps to Numeric(18, 4) -- exact stock quantities.
        - datetime maps to DateTime(timezone=True).
        - int maps to BigInteger (Integer on SQLite, so the rowid alias
          autoincrements).
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: QUANTITY,
        datetime: DateTime(timezone=True),
        int: IDENTITY_KEY,
    }


class TrackedBase(Base):
    """
    Abstract base with audit timestamps.

    Guarantees:
        - created_at is set to server NOW() on INSERT and never changes.
        - updated_at is set on INSERT and refreshed on every UPDATE.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
