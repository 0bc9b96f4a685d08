"""Database layer - engine, base classes, types, and immutability."""

from inventory_kernel.db.base import Base, TrackedBase, UTCDateTime, UUIDString
from inventory_kernel.db.engine import create_tables, get_engine, get_session, session_scope
from inventory_kernel.db.types import ExactDecimal, Money, Quantity

__all__ = [
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UTCDateTime",
    "ExactDecimal",
    "Money",
    "Quantity",
]
