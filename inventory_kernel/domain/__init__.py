"""
Pure domain layer.

Data transfer objects and the clock abstraction.  NO dependencies on the
ORM or the database.
"""

from inventory_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from inventory_kernel.domain.dtos import LocationInfo, MovementInfo, StockInfo

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "LocationInfo",
    "MovementInfo",
    "StockInfo",
]
