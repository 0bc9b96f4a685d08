"""
Shared base for the ledger's write-side services.

A service works inside a transaction it did not open.  It may add rows,
flush, and open savepoints; committing or rolling back the outer
transaction is left to whoever created the session (``session_scope()``
in application code, the test fixture in tests).
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from inventory_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """Holds the caller's session.  The type parameter names the model the service owns."""

    def __init__(self, session: Session):
        self.session = session

    def _persist(self, *rows: ModelType) -> None:
        """Stage rows and flush so ids, defaults and constraints resolve now."""
        self.session.add_all(rows)
        self.session.flush()
