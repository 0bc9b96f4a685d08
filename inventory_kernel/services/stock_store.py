"""
StockStore -- persistence-facing accessor for Stock rows.

Responsibility:
    Find a stock record by its (item, location) pair, reload one under a row
    lock, insert a new empty record, and flush mutations.  The store applies
    no business rules; the ledger decides when each call is legal.

Architecture position:
    Kernel > Services.  Used only by StockLedger.

Invariants enforced:
    - Exact-pair lookup: ``find`` matches item AND location, never one alone.
    - Locked reloads use ``populate_existing`` so that the identity map is
      refreshed with the committed row, not a stale in-session copy.

Failure modes:
    - StockNotFoundError from ``lock`` when the id does not exist.
    - IntegrityError from ``create`` on a duplicate pair (translated by the
      ledger) or from ``save`` on a negative quantity.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from inventory_kernel.exceptions import StockNotFoundError
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.stock import Stock, StockStatus
from inventory_kernel.services.base import BaseService

logger = get_logger("services.stock_store")


class StockStore(BaseService[Stock]):
    """Row-level access to ``inventory_stocks``."""

    def find(self, item_id: UUID, location_id: UUID) -> Stock | None:
        """Return the stock record for the pair, or None."""
        stmt = select(Stock).where(
            Stock.item_id == item_id,
            Stock.location_id == location_id,
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def lock(self, stock_id: UUID) -> Stock:
        """
        Reload a stock row under ``SELECT ... FOR UPDATE``.

        The lock is held until the caller's transaction ends.

        Raises:
            StockNotFoundError: If no stock record has this id.
        """
        stmt = (
            select(Stock)
            .where(Stock.id == stock_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        stock = self.session.execute(stmt).scalar_one_or_none()
        if stock is None:
            raise StockNotFoundError(stock_id=str(stock_id))
        return stock

    def create(
        self,
        item_id: UUID,
        location_id: UUID,
        aisle: str | None = None,
        row: str | None = None,
        bin: str | None = None,
        *,
        actor_id: UUID,
    ) -> Stock:
        """Insert a new, empty, active stock record and flush it."""
        stock = Stock(
            item_id=item_id,
            location_id=location_id,
            quantity=Decimal("0"),
            aisle=aisle,
            row=row,
            bin=bin,
            status=StockStatus.ACTIVE,
            created_by_id=actor_id,
        )
        self._persist(stock)
        logger.debug(
            "stock_row_inserted",
            extra={
                "stock_id": str(stock.id),
                "item_id": str(item_id),
                "location_id": str(location_id),
            },
        )
        return stock

    def save(self, stock: Stock) -> None:
        """Flush pending changes on a stock record."""
        self.session.flush()
