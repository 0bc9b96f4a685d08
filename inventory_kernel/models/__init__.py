"""Domain models for the inventory kernel."""

from inventory_kernel.models.item import Item, Metric
from inventory_kernel.models.location import Location
from inventory_kernel.models.movement import MovementKind, StockMovement
from inventory_kernel.models.stock import Stock, StockStatus

__all__ = [
    "Item",
    "Metric",
    "Location",
    "Stock",
    "StockStatus",
    "StockMovement",
    "MovementKind",
]
