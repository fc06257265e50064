"""
Module: inventory_kernel.selectors.base
Responsibility: Abstract base class for read-only query selectors, the "Q"
    side of the kernel's CQRS-lite split.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: selectors MUST NOT call session.add(),
      session.delete(), session.commit() or session.flush().
    - DTO return convention: selectors return frozen dataclasses, never ORM
      instances.
    - Session ownership: the caller owns the session and its transaction.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from inventory_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs or computed results.
    """

    def __init__(self, session: Session):
        self.session = session
