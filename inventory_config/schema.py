"""
InventorySettings schema.

The runtime settings of the stock ledger host: how to reach the database,
how to log, and the default read windows.  Parsed from YAML by the loader
and frozen; nothing mutates settings after load.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from inventory_kernel.domain.values import MAX_HISTORY_LIMIT

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class InventorySettings:
    """Frozen runtime settings."""

    database_url: str
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    echo_sql: bool = False
    log_level: str = "INFO"
    low_stock_threshold: int = 10
    history_page_size: int = 50

    def __post_init__(self) -> None:
        if not self.database_url:
            raise ValueError("database_url is required")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            )
        for name in ("pool_size", "pool_timeout", "history_page_size"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")
        if self.max_overflow < 0:
            raise ValueError("max_overflow cannot be negative")
        if self.low_stock_threshold < 0:
            raise ValueError("low_stock_threshold cannot be negative")
        if self.history_page_size > MAX_HISTORY_LIMIT:
            raise ValueError(f"history_page_size cannot exceed {MAX_HISTORY_LIMIT}")

    @property
    def logging_level(self) -> int:
        """``log_level`` as a ``logging`` module constant, for configure_logging()."""
        return logging.getLevelName(self.log_level)
