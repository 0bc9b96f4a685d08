"""
Module: inventory_kernel.models.movement
Responsibility: ORM persistence for the append-only audit trail of stock
    quantity changes.  One row per change, written by MovementRecorder in the
    same savepoint as the quantity mutation it describes.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Append-only: UPDATE and DELETE are rejected by ORM listeners
      (db/immutability.py).
    - after_quantity = before_quantity + delta.
    - sequence numbers a stock record's movements 1, 2, 3, ... with no
      duplicates (uq_movement_stock_sequence).  They are allocated while the
      stock row is locked.
    - cost >= 0 (ck_movement_cost_non_negative).
    - A transfer produces exactly two rows sharing transfer_id, each naming
      the other via counterpart_movement_id.

Failure modes:
    - ImmutabilityViolationError on any attempt to modify or delete a row.

Audit relevance:
    This table is the ledger's history.  Replaying the deltas of a stock
    record in sequence order reproduces its current quantity.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base, UUIDString
from inventory_kernel.db.types import Money, Quantity


class MovementKind(str, Enum):
    """What kind of ledger operation produced a movement."""

    OPENING = "opening"
    PUT = "put"
    TAKE = "take"
    TRANSFER_OUT = "transfer_out"
    TRANSFER_IN = "transfer_in"
    RETIRE = "retire"
    RESTORE = "restore"


class StockMovement(Base):
    """
    Immutable record of one quantity change on one Stock record.

    Contract:
        Never updated, never deleted.  item_id and location_id are
        denormalized from the stock record so the trail stays readable
        without joins.
    """

    __tablename__ = "inventory_stock_movements"

    __table_args__ = (
        CheckConstraint("CAST(cost AS NUMERIC) >= 0", name="ck_movement_cost_non_negative"),
        CheckConstraint(
            "CAST(after_quantity AS NUMERIC) >= 0", name="ck_movement_after_non_negative"
        ),
        UniqueConstraint("stock_id", "sequence", name="uq_movement_stock_sequence"),
        Index("idx_movement_transfer", "transfer_id"),
    )

    stock_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("inventory_stocks.id"),
        nullable=False,
    )

    item_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    location_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    # Position in this stock record's trail, starting at 1
    sequence: Mapped[int] = mapped_column(nullable=False)

    kind: Mapped[MovementKind] = mapped_column(String(20), nullable=False)

    delta: Mapped[Quantity] = mapped_column(nullable=False)

    before_quantity: Mapped[Quantity] = mapped_column(nullable=False)

    after_quantity: Mapped[Quantity] = mapped_column(nullable=False)

    cost: Mapped[Money] = mapped_column(nullable=False, default=Decimal("0"))

    reason: Mapped[str] = mapped_column(String(1000), nullable=False, default="")

    occurred_at: Mapped[datetime] = mapped_column(nullable=False)

    actor_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    # Transfer linkage
    transfer_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    counterpart_movement_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), nullable=True
    )

    def __repr__(self) -> str:
        return f"<StockMovement {self.kind} stock={self.stock_id} delta={self.delta}>"
