"""
Declarative base for the inventory tables.

Every ORM model in ``inventory_kernel.models`` derives from ``Base`` (the
append-only movement trail) or ``TrackedBase`` (catalog and stock rows that
are edited in place and therefore carry who/when columns).  Nothing in this
module may import from models/, services/, selectors/ or domain/.

Column conventions fixed here:
    - Primary keys are uuid4 values kept in a 36-character string column, so
      SQLite and PostgreSQL store ids identically.
    - Bare ``Decimal`` annotations become ``ExactDecimal`` (38, 9); stock
      quantities and unit costs are never floats.
    - ``datetime`` annotations become ``UTCDateTime``: timezone-aware in,
      timezone-aware (UTC) out, whichever backend stored them.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from inventory_kernel.db.types import ExactDecimal


class UUIDString(TypeDecorator):
    """``uuid.UUID`` on the Python side, canonical hyphenated text in the database."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class UTCDateTime(TypeDecorator):
    """
    Timestamps normalized to UTC.

    SQLite keeps no offset, so values are converted to UTC before they are
    written and read back with ``timezone.utc`` attached.  Naive values are
    taken to be UTC already.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):

    type_annotation_map: ClassVar[dict] = {
        UUID: UUIDString(),
        Decimal: ExactDecimal(),
        datetime: UTCDateTime(),
        int: BigInteger,
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """
    Rows that change after insert.

    ``created_by_id`` is the actor passed to the operation that inserted the
    row; ledger operations that later mutate it set ``updated_by_id``.  The
    timestamps are filled by the database, not the ledger clock.
    """

    __abstract__ = True

    created_by_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    updated_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )
