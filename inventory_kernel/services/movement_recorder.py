"""
MovementRecorder -- append-only writer for the stock movement trail.

Responsibility:
    Append one immutable StockMovement per quantity change.  The recorder is
    a pure append: it applies no business rules and reads the resulting
    quantity from the stock row the ledger has already mutated.

Architecture position:
    Kernel > Services.  Used only by StockLedger, inside the ledger's
    savepoint, so that a failed append also undoes the quantity change.

Invariants enforced:
    - after_quantity is taken from ``stock.quantity`` at record time and
      must equal before_quantity + delta.
    - occurred_at comes from the injected Clock.

Failure modes:
    - PersistenceFailureError wrapping any SQLAlchemyError raised by the
      flush.  The enclosing savepoint rolls back.

Audit relevance:
    Every row written here is protected by db/immutability.py.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.exceptions import PersistenceFailureError
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.movement import MovementKind, StockMovement
from inventory_kernel.models.stock import Stock
from inventory_kernel.services.base import BaseService

logger = get_logger("services.movement_recorder")


class MovementRecorder(BaseService[StockMovement]):
    """Appends StockMovement rows."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def record(
        self,
        stock: Stock,
        delta: Decimal,
        *,
        kind: MovementKind,
        actor_id: UUID,
        before_quantity: Decimal,
        reason: str = "",
        cost: Decimal = Decimal("0"),
        transfer_id: UUID | None = None,
        movement_id: UUID | None = None,
        counterpart_movement_id: UUID | None = None,
    ) -> StockMovement:
        """
        Append a movement for ``stock``.

        ``movement_id`` may be pre-assigned so that the two halves of a
        transfer can name each other before either row is inserted.
        """
        movement = StockMovement(
            id=movement_id or uuid4(),
            stock_id=stock.id,
            item_id=stock.item_id,
            location_id=stock.location_id,
            sequence=self._next_sequence(stock.id),
            kind=kind,
            delta=delta,
            before_quantity=before_quantity,
            after_quantity=stock.quantity,
            cost=cost,
            reason=reason or "",
            occurred_at=self._clock.now(),
            actor_id=actor_id,
            transfer_id=transfer_id,
            counterpart_movement_id=counterpart_movement_id,
        )
        self.session.add(movement)
        try:
            self.session.flush()
        except SQLAlchemyError as exc:
            logger.error(
                "movement_append_failed",
                extra={"stock_id": str(stock.id), "kind": str(kind.value)},
                exc_info=True,
            )
            raise PersistenceFailureError("record_movement", str(exc)) from exc

        logger.debug(
            "movement_recorded",
            extra={
                "movement_id": str(movement.id),
                "stock_id": str(stock.id),
                "kind": kind.value,
                "delta": delta,
                "after_quantity": stock.quantity,
            },
        )
        return movement

    def _next_sequence(self, stock_id: UUID) -> int:
        # Callers hold the stock row lock, so max + 1 cannot race.
        stmt = select(func.coalesce(func.max(StockMovement.sequence), 0)).where(
            StockMovement.stock_id == stock_id
        )
        return int(self.session.execute(stmt).scalar_one()) + 1

