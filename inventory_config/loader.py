"""
Configuration Loader (``inventory_config.loader``).

Responsibility
--------------
Reads a YAML settings file, applies environment overrides, and parses
the result into a frozen ``InventorySettings``.  Callers use
``inventory_config.get_active_config()`` rather than this module.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys or invalid values  -> ``ValueError``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from inventory_config.schema import InventorySettings

DEFAULTS_FILE = Path(__file__).parent / "defaults.yaml"

ENV_CONFIG_FILE = "INVENTORY_CONFIG_FILE"
ENV_DATABASE_URL = "INVENTORY_DATABASE_URL"
ENV_LOG_LEVEL = "INVENTORY_LOG_LEVEL"

_KNOWN_KEYS = frozenset(f.name for f in fields(InventorySettings))


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return data


def apply_env_overrides(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    merged = dict(data)
    if environ.get(ENV_DATABASE_URL):
        merged["database_url"] = environ[ENV_DATABASE_URL]
    if environ.get(ENV_LOG_LEVEL):
        merged["log_level"] = environ[ENV_LOG_LEVEL].upper()
    return merged


def parse_settings(data: dict[str, Any]) -> InventorySettings:
    """Build InventorySettings from a parsed mapping, rejecting unknown keys."""
    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
    if "database_url" not in data:
        raise ValueError("database_url is required")
    return InventorySettings(**data)


def load_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> InventorySettings:
    """
    Load settings from ``path`` (or $INVENTORY_CONFIG_FILE, or the packaged
    defaults) and apply environment overrides.
    """
    env = os.environ if environ is None else environ
    if path is None:
        path = Path(env[ENV_CONFIG_FILE]) if env.get(ENV_CONFIG_FILE) else DEFAULTS_FILE
    return parse_settings(apply_env_overrides(load_yaml_file(path), env))
