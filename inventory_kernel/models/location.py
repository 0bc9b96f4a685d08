"""
Module: inventory_kernel.models.location
Responsibility: ORM persistence for physical places where stock can reside.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - code is globally unique (uq_location_code).  Callers may reference a
      location by its id or by this code.
    - The ledger never writes to a Location; it is referenced, not owned.
"""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import TrackedBase


class Location(TrackedBase):
    """
    A physical place (warehouse, shelf, van).

    aisle/row/bin are the default placement descriptors copied onto a Stock
    record when one is created without explicit placement.
    """

    __tablename__ = "inventory_locations"

    __table_args__ = (
        UniqueConstraint("code", name="uq_location_code"),
    )

    code: Mapped[str] = mapped_column(String(50), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    aisle: Mapped[str | None] = mapped_column(String(50), nullable=True)

    row: Mapped[str | None] = mapped_column(String(50), nullable=True)

    bin: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<Location {self.code}: {self.name}>"
