"""
inventory_config -- single public entrypoint for runtime settings.

Responsibility:
    ``get_active_config()`` is the only way the host obtains settings.
    The kernel never reads files or environment variables itself; the host
    passes the relevant values in (``init_engine_from_settings``,
    ``configure_logging``, ``bridges.build_ledger_service``).

Architecture position:
    Configuration.  Sits above ``inventory_kernel``; the kernel MUST NEVER
    import from ``inventory_config``.

Failure modes:
    - ``FileNotFoundError`` -- the selected YAML file does not exist.
    - ``ValueError`` -- unknown keys or invalid values.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from inventory_config.loader import load_settings
from inventory_config.schema import InventorySettings

_logger = logging.getLogger("inventory_kernel.config")


def get_active_config(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> InventorySettings:
    """
    Return the active, validated settings.

    Args:
        path: Explicit YAML file.  Defaults to $INVENTORY_CONFIG_FILE, then
            the packaged ``defaults.yaml``.
        environ: Environment mapping for overrides (default ``os.environ``).
    """
    settings = load_settings(path, environ)
    _logger.info(
        "config_loaded",
        extra={
            "log_level": settings.log_level,
            "pool_size": settings.pool_size,
            "low_stock_threshold": settings.low_stock_threshold,
        },
    )
    return settings


__all__ = ["InventorySettings", "get_active_config"]
