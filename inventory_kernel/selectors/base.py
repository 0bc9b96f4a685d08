"""
Read side of the ledger.

Selectors answer questions about stock without changing it: no add, delete,
flush or commit.  Results leave as frozen DTOs from ``domain/dtos`` or plain
values, so callers never hold a live ORM row.  Importing ``services/`` from
here is not allowed.
"""

from abc import ABC
from typing import Any, Generic, TypeVar

from sqlalchemy import Select
from sqlalchemy.orm import Session

from inventory_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):

    def __init__(self, session: Session):
        self.session = session

    def _all(self, stmt: Select[Any]) -> list[Any]:
        return list(self.session.execute(stmt).scalars())
