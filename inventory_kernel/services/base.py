"""
BaseService -- abstract base for the kernel's write-side services.

Responsibility:
    Common constructor and session-handling contract.  Services receive a
    SQLAlchemy ``Session`` and persist via ``session.flush()``.

Architecture position:
    Kernel > Services -- imperative shell.

Invariants enforced:
    - SupplyRegistry, MovementLedger and StockAggregator never commit or
      roll back.  Only LedgerService owns a transaction boundary, and only
      when constructed with ``auto_commit=True``.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from inventory_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for kernel services.

    Non-goals:
        - Does NOT provide read-only listing queries; those belong in
          ``inventory_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        self.session = session
