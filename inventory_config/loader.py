"""
Configuration Loader (``inventory_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into typed
``inventory_config.schema`` dataclass instances.  Runtime callers go through
``inventory_config.get_active_config()`` instead of calling this directly.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Unknown keys in a settings block raise ``ValueError``; a typo in a
  policy flag must not silently fall back to the default.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the parsed
  document for configuration identity.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing ``config_id``  -> ``KeyError`` propagates.
* Wrong value types or unknown keys  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from inventory_config.schema import (
    DatabaseSettings,
    InventoryConfig,
    LedgerSettings,
    LoggingSettings,
)

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _check_keys(block: str, data: dict[str, Any], cls: type) -> None:
    allowed = {f.name for f in fields(cls)}
    unknown = set(data) - allowed
    if unknown:
        raise ValueError(
            f"Unknown keys in '{block}' settings: {', '.join(sorted(unknown))}"
        )


def _require_type(block: str, key: str, value: Any, expected: type) -> None:
    # bool is an int subclass; reject it where an int is expected
    if isinstance(value, bool) and expected is not bool:
        raise ValueError(f"'{block}.{key}' must be {expected.__name__}, got bool")
    if not isinstance(value, expected):
        raise ValueError(
            f"'{block}.{key}' must be {expected.__name__}, got {type(value).__name__}"
        )


def parse_ledger(data: dict[str, Any]) -> LedgerSettings:
    """Parse LedgerSettings from a dict."""
    _check_keys("ledger", data, LedgerSettings)
    defaults = LedgerSettings()
    allow_zero_put = data.get("allow_zero_put", defaults.allow_zero_put)
    _require_type("ledger", "allow_zero_put", allow_zero_put, bool)
    move_reason_to = data.get("move_reason_to", defaults.move_reason_to)
    move_reason_from = data.get("move_reason_from", defaults.move_reason_from)
    _require_type("ledger", "move_reason_to", move_reason_to, str)
    _require_type("ledger", "move_reason_from", move_reason_from, str)
    return LedgerSettings(
        allow_zero_put=allow_zero_put,
        move_reason_to=move_reason_to,
        move_reason_from=move_reason_from,
    )


def parse_database(data: dict[str, Any]) -> DatabaseSettings:
    """Parse DatabaseSettings from a dict."""
    _check_keys("database", data, DatabaseSettings)
    defaults = DatabaseSettings()
    settings = DatabaseSettings(
        url=data.get("url", defaults.url),
        url_env=data.get("url_env", defaults.url_env),
        echo=data.get("echo", defaults.echo),
        pool_size=data.get("pool_size", defaults.pool_size),
        max_overflow=data.get("max_overflow", defaults.max_overflow),
        pool_timeout=data.get("pool_timeout", defaults.pool_timeout),
    )
    _require_type("database", "url", settings.url, str)
    _require_type("database", "echo", settings.echo, bool)
    for key in ("pool_size", "max_overflow", "pool_timeout"):
        _require_type("database", key, getattr(settings, key), int)
    return settings


def parse_logging(data: dict[str, Any]) -> LoggingSettings:
    """Parse LoggingSettings from a dict."""
    _check_keys("logging", data, LoggingSettings)
    level = str(data.get("level", LoggingSettings().level)).upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"'logging.level' must be one of {sorted(_LOG_LEVELS)}, got {level}")
    return LoggingSettings(level=level)


def parse_config(data: dict[str, Any]) -> InventoryConfig:
    """
    Parse a complete InventoryConfig from a loaded YAML document.

    Missing settings blocks take their defaults.
    """
    return InventoryConfig(
        config_id=data["config_id"],
        version=int(data.get("version", 1)),
        ledger=parse_ledger(data.get("ledger") or {}),
        database=parse_database(data.get("database") or {}),
        logging=parse_logging(data.get("logging") or {}),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
