"""
Inventory configuration schema.

Frozen dataclasses that YAML configuration files are parsed into.  The
loader builds them; bridges turn them into kernel inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class LedgerSettings:
    """Policy knobs for StockLedger."""

    allow_zero_put: bool = False
    move_reason_to: str = "Moved to location {location}"
    move_reason_from: str = "Moved from location {location}"


@dataclass(frozen=True)
class DatabaseSettings:
    """
    Connection settings.

    When ``url_env`` names a set environment variable, its value overrides
    ``url``.
    """

    url: str = "sqlite://"
    url_env: str | None = "DATABASE_URL"
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class InventoryConfig:
    """The complete runtime configuration."""

    config_id: str
    version: int
    ledger: LedgerSettings = field(default_factory=LedgerSettings)
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    checksum: str = ""
