"""
Module: inventory_kernel.models.stock
Responsibility: ORM persistence for the quantity of one Item held at one
    Location.  This is the row every ledger operation locks and mutates.
Architecture position: Kernel > Models.  May import from db/ only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - Exactly one Stock per (item_id, location_id) (uq_stock_item_location).
      A retired record still occupies its pair.
    - quantity >= 0 (ck_stock_quantity_non_negative).  The ledger rejects
      over-takes before they reach the database; the constraint is the
      backstop for any other writer.
    - status is 'active' or 'retired' (ck_stock_valid_status).

Failure modes:
    - IntegrityError on a duplicate (item, location) pair; the ledger
      translates it into StockAlreadyExistsError.
    - IntegrityError on a negative quantity.

Audit relevance:
    Stock.quantity always equals the after_quantity of the latest
    StockMovement for the record.  Every change goes through the ledger,
    which appends that movement in the same savepoint.
"""

from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inventory_kernel.db.base import TrackedBase, UUIDString
from inventory_kernel.db.types import Quantity
from inventory_kernel.models.item import Item
from inventory_kernel.models.location import Location


class StockStatus(str, Enum):
    """Stock record lifecycle.

    Contract: ACTIVE <-> RETIRED.  Only an empty record may be retired, and
    a retired record cannot be adjusted until it is restored.
    """

    ACTIVE = "active"
    RETIRED = "retired"


class Stock(TrackedBase):
    """
    Quantity of one Item at one Location.

    Contract:
        Zero is a valid steady state and is distinct from "no record".
        aisle/row/bin are a placement snapshot taken at creation; later
        edits to the Location do not rewrite them.
    """

    __tablename__ = "inventory_stocks"

    __table_args__ = (
        UniqueConstraint("item_id", "location_id", name="uq_stock_item_location"),
        CheckConstraint(
            "CAST(quantity AS NUMERIC) >= 0", name="ck_stock_quantity_non_negative"
        ),
        CheckConstraint(
            "status IN ('active', 'retired')",
            name="ck_stock_valid_status",
        ),
        Index("idx_stock_item", "item_id"),
        Index("idx_stock_location", "location_id"),
    )

    item_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("inventory_items.id"),
        nullable=False,
    )

    location_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("inventory_locations.id"),
        nullable=False,
    )

    quantity: Mapped[Quantity] = mapped_column(
        nullable=False,
        default=Decimal("0"),
    )

    aisle: Mapped[str | None] = mapped_column(String(50), nullable=True)

    row: Mapped[str | None] = mapped_column(String(50), nullable=True)

    bin: Mapped[str | None] = mapped_column(String(50), nullable=True)

    status: Mapped[StockStatus] = mapped_column(
        String(20),
        nullable=False,
        default=StockStatus.ACTIVE,
    )

    item: Mapped["Item"] = relationship("Item", foreign_keys=[item_id])

    location: Mapped["Location"] = relationship(
        "Location",
        foreign_keys=[location_id],
        lazy="selectin",
    )

    @property
    def is_active(self) -> bool:
        return self.status == StockStatus.ACTIVE

    def __repr__(self) -> str:
        return f"<Stock item={self.item_id} location={self.location_id} qty={self.quantity}>"
