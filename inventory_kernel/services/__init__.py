"""Services for the inventory kernel (write side)."""

from inventory_kernel.services.location_resolver import LocationResolver
from inventory_kernel.services.movement_recorder import MovementRecorder
from inventory_kernel.services.stock_ledger import StockLedger
from inventory_kernel.services.stock_store import StockStore

__all__ = [
    "LocationResolver",
    "MovementRecorder",
    "StockLedger",
    "StockStore",
]
