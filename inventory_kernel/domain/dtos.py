"""
DTOs -- Immutable data transfer objects returned by ledger services.

Responsibility:
    Callers of the ledger receive frozen snapshots, never live ORM rows, so
    a returned quantity cannot drift as the session continues to work.

Architecture position:
    Kernel > Domain -- free of runtime ORM imports.  from_model() class
    methods are the boundary converters; they are invoked from services
    and selectors, never from domain logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from inventory_kernel.models.location import Location as LocationModel
    from inventory_kernel.models.movement import StockMovement as MovementModel
    from inventory_kernel.models.stock import Stock as StockModel


def _enum_value(value) -> str:
    # Enum members before a reload, plain strings after
    return getattr(value, "value", value)


@dataclass(frozen=True)
class LocationInfo:
    """Snapshot of a Location."""

    id: UUID
    code: str
    name: str
    aisle: str | None = None
    row: str | None = None
    bin: str | None = None

    @classmethod
    def from_model(cls, model: LocationModel) -> LocationInfo:
        return cls(
            id=model.id,
            code=model.code,
            name=model.name,
            aisle=model.aisle,
            row=model.row,
            bin=model.bin,
        )


@dataclass(frozen=True)
class StockInfo:
    """
    Snapshot of one Stock record after a ledger operation.

    ``status`` is the raw lifecycle value ("active" / "retired").
    """

    id: UUID
    item_id: UUID
    location_id: UUID
    quantity: Decimal
    status: str
    aisle: str | None = None
    row: str | None = None
    bin: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @property
    def is_empty(self) -> bool:
        return self.quantity == 0

    @classmethod
    def from_model(cls, model: StockModel) -> StockInfo:
        return cls(
            id=model.id,
            item_id=model.item_id,
            location_id=model.location_id,
            quantity=model.quantity,
            status=_enum_value(model.status),
            aisle=model.aisle,
            row=model.row,
            bin=model.bin,
        )


@dataclass(frozen=True)
class MovementInfo:
    """Snapshot of one StockMovement."""

    id: UUID
    stock_id: UUID
    item_id: UUID
    location_id: UUID
    sequence: int
    kind: str
    delta: Decimal
    before_quantity: Decimal
    after_quantity: Decimal
    cost: Decimal
    reason: str
    occurred_at: datetime
    actor_id: UUID
    transfer_id: UUID | None = None
    counterpart_movement_id: UUID | None = None

    @property
    def is_transfer(self) -> bool:
        return self.transfer_id is not None

    @classmethod
    def from_model(cls, model: MovementModel) -> MovementInfo:
        return cls(
            id=model.id,
            stock_id=model.stock_id,
            item_id=model.item_id,
            location_id=model.location_id,
            sequence=model.sequence,
            kind=_enum_value(model.kind),
            delta=model.delta,
            before_quantity=model.before_quantity,
            after_quantity=model.after_quantity,
            cost=model.cost,
            reason=model.reason,
            occurred_at=model.occurred_at,
            actor_id=model.actor_id,
            transfer_id=model.transfer_id,
            counterpart_movement_id=model.counterpart_movement_id,
        )
