"""
Module: inventory_kernel.models.item
Responsibility: ORM persistence for catalog items whose stock is tracked, and
    for the units of measure (metrics) those items are counted in.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - sku is globally unique (uq_item_sku).
    - metric symbol is globally unique (uq_metric_symbol).
    - The Item row is the serialization point for stock creation: the ledger
      locks it FOR UPDATE before checking whether a (item, location) stock
      record already exists.

Failure modes:
    - IntegrityError on duplicate sku or metric symbol.

Audit relevance:
    Every stock record and movement references an Item.  Items are never
    deleted by the ledger.
"""

from uuid import UUID

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inventory_kernel.db.base import TrackedBase, UUIDString


class Metric(TrackedBase):
    """
    Unit of measure (e.g. kilogram / "kg").

    Guarantees:
        - symbol is unique across all metrics.
    """

    __tablename__ = "inventory_metrics"

    __table_args__ = (
        UniqueConstraint("symbol", name="uq_metric_symbol"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    symbol: Mapped[str] = mapped_column(String(20), nullable=False)

    def __repr__(self) -> str:
        return f"<Metric {self.symbol}>"


class Item(TrackedBase):
    """
    Catalog entry whose stock is tracked across locations.

    Contract:
        An Item owns zero or more Stock records, at most one per Location.
        Its total stock is the sum of the quantities of all its records
        (retired records hold zero); that figure is derived, never stored.

    Non-goals:
        - Pricing or valuation.  Cost is recorded per movement only.
    """

    __tablename__ = "inventory_items"

    __table_args__ = (
        UniqueConstraint("sku", name="uq_item_sku"),
    )

    sku: Mapped[str] = mapped_column(String(100), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    metric_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("inventory_metrics.id"),
        nullable=True,
    )

    metric: Mapped["Metric | None"] = relationship(
        "Metric",
        foreign_keys=[metric_id],
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Item {self.sku}: {self.name}>"
