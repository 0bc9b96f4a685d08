"""
InventoryFacade -- read-only, item-level view over an item's stock records.

Responsibility:
    Answers "how much of this item do we hold", "is it in stock" and "what
    unit is it counted in" by aggregating across the item's stock records.
    Nothing here writes.

Invariants enforced:
    - total_stock(item) is always computed from the stock rows; there is no
      stored total to drift.  Retired records hold zero, so they do not
      change the sum.

Failure modes:
    - ItemNotFoundError when an item id does not exist (metric queries).
    - NoMetricAssignedError from metric_symbol() on an item without a metric.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from inventory_kernel.db.types import ZERO, quantize
from inventory_kernel.domain.dtos import LocationInfo, MovementInfo, StockInfo
from inventory_kernel.exceptions import ItemNotFoundError, NoMetricAssignedError
from inventory_kernel.models.item import Item
from inventory_kernel.models.location import Location
from inventory_kernel.models.movement import StockMovement
from inventory_kernel.models.stock import Stock
from inventory_kernel.selectors.base import BaseSelector


class InventoryFacade(BaseSelector[Stock]):
    """Aggregates over one item's stock records."""

    @staticmethod
    def _item_id(item: Item | UUID) -> UUID:
        return item.id if isinstance(item, Item) else item

    def _load_item(self, item: Item | UUID) -> Item:
        if isinstance(item, Item):
            return item
        row = self.session.get(Item, item)
        if row is None:
            raise ItemNotFoundError(str(item))
        return row

    def total_stock(self, item: Item | UUID) -> Decimal:
        """Sum of quantities across all of the item's stock records."""
        # Summed here, not with SQL SUM(): SQLite would add the values as floats
        stmt = select(Stock.quantity).where(Stock.item_id == self._item_id(item))
        return quantize(sum(self.session.execute(stmt).scalars(), ZERO))

    def is_in_stock(self, item: Item | UUID) -> bool:
        return self.total_stock(item) > ZERO

    def has_metric(self, item: Item | UUID) -> bool:
        return self._load_item(item).metric is not None

    def metric_symbol(self, item: Item | UUID) -> str:
        """
        Symbol of the item's unit of measure.

        Raises:
            NoMetricAssignedError: If the item has no metric.
        """
        row = self._load_item(item)
        if row.metric is None:
            raise NoMetricAssignedError(str(row.id))
        return row.metric.symbol

    def stocks_for_item(self, item: Item | UUID) -> list[StockInfo]:
        """The item's stock records, ordered by location code."""
        stmt = (
            select(Stock)
            .join(Location, Stock.location_id == Location.id)
            .where(Stock.item_id == self._item_id(item))
            .order_by(Location.code)
        )
        return [StockInfo.from_model(s) for s in self._all(stmt)]

    def locations_for_item(self, item: Item | UUID) -> list[LocationInfo]:
        """Locations where the item has an active, non-empty record."""
        stmt = (
            select(Location)
            .join(Stock, Stock.location_id == Location.id)
            .where(
                Stock.item_id == self._item_id(item),
                Stock.status == "active",
                # quantity >= 0 holds, and equality is exact on every backend
                Stock.quantity != ZERO,
            )
            .order_by(Location.code)
        )
        return [LocationInfo.from_model(loc) for loc in self._all(stmt)]

    def movements_for_stock(self, stock_id: UUID) -> list[MovementInfo]:
        """Trail of one stock record, oldest first."""
        stmt = (
            select(StockMovement)
            .where(StockMovement.stock_id == stock_id)
            .order_by(StockMovement.sequence)
        )
        return [MovementInfo.from_model(m) for m in self._all(stmt)]
