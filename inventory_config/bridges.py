"""
Config -> Kernel Bridges.

Functions that turn InventorySettings into kernel objects.  They live in
inventory_config (the producer) because the kernel must NEVER import
inventory_config.

Usage:
    from inventory_config import get_active_config
    from inventory_config.bridges import build_ledger_service

    settings = get_active_config()
    init_engine_from_settings(settings)
    service = build_ledger_service(get_session(), settings)
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from inventory_config.schema import InventorySettings
from inventory_kernel.domain.clock import Clock
from inventory_kernel.services.ledger_service import LedgerService


def build_ledger_service(
    session: Session,
    settings: InventorySettings,
    clock: Clock | None = None,
    auto_commit: bool = True,
) -> LedgerService:
    """Build a LedgerService whose read defaults come from ``settings``."""
    return LedgerService(
        session,
        clock=clock,
        auto_commit=auto_commit,
        low_stock_threshold=settings.low_stock_threshold,
        history_page_size=settings.history_page_size,
    )
