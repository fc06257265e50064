"""Database layer - engine, base classes, column types, and immutability enforcement."""

from inventory_kernel.db.base import Base, TrackedBase
from inventory_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    get_session_factory,
    init_engine_from_url,
    session_scope,
)
from inventory_kernel.db.types import IDENTITY_KEY, QUANTITY, Quantity

__all__ = [
    "Base",
    "IDENTITY_KEY",
    "QUANTITY",
    "Quantity",
    "TrackedBase",
    "create_tables",
    "drop_tables",
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_engine_from_url",
    "session_scope",
]
