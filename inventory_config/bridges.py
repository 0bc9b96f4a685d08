"""
Config -> Kernel Bridges.

Functions that convert InventoryConfig settings into kernel inputs.  These
live in inventory_config (the producer) because the kernel must NEVER
import inventory_config.

Usage:
    from inventory_config import get_active_config
    from inventory_config.bridges import build_stock_ledger, init_engine_from_config

    config = get_active_config()
    init_engine_from_config(config)
    with session_scope() as session:
        ledger = build_stock_ledger(session, config)
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from inventory_config.schema import DatabaseSettings, InventoryConfig
from inventory_kernel.db.engine import init_engine_from_url
from inventory_kernel.domain.clock import Clock
from inventory_kernel.logging_config import configure_logging
from inventory_kernel.services.stock_ledger import StockLedger


def resolve_database_url(
    settings: DatabaseSettings,
    environ: Mapping[str, str] | None = None,
) -> str:
    """The URL named by ``url_env`` when that variable is set, else ``url``."""
    env = os.environ if environ is None else environ
    if settings.url_env and env.get(settings.url_env):
        return env[settings.url_env]
    return settings.url


def configure_logging_from_config(config: InventoryConfig) -> None:
    """Install the structured JSON handler at the configured level."""
    configure_logging(level=config.logging.level)


def init_engine_from_config(
    config: InventoryConfig,
    environ: Mapping[str, str] | None = None,
) -> Engine:
    """Initialize the kernel engine from database settings."""
    configure_logging_from_config(config)
    db = config.database
    return init_engine_from_url(
        resolve_database_url(db, environ),
        echo=db.echo,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_timeout=db.pool_timeout,
    )


def build_stock_ledger(
    session: Session,
    config: InventoryConfig,
    clock: Clock | None = None,
) -> StockLedger:
    """A StockLedger carrying the configured ledger policy."""
    return StockLedger(
        session,
        clock,
        allow_zero_put=config.ledger.allow_zero_put,
        move_reason_to=config.ledger.move_reason_to,
        move_reason_from=config.ledger.move_reason_from,
    )
