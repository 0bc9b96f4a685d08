"""
Append-only guard for ``StockMovement``.

A stock's quantity is only as trustworthy as the trail that explains it, so
a movement row may be inserted and read but never updated or deleted through
the ORM.  Mapper ``before_update`` / ``before_delete`` hooks raise
``ImmutabilityViolationError`` during flush, before any SQL is emitted.

``Stock`` rows are deliberately left mutable: their quantity is the running
projection of the trail.

Register once at startup, after the models are imported::

    register_immutability_listeners()

Tests that need to repair a row may call ``unregister_immutability_listeners()``
and must re-register afterwards.  Raw SQL bypasses these hooks.
"""

from sqlalchemy import event

from inventory_kernel.exceptions import ImmutabilityViolationError
from inventory_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _refuse(operation: str, reason: str):
    def listener(mapper, connection, target):
        entity_type = type(target).__name__
        logger.error(
            "immutability_violation_blocked",
            extra={
                "entity_type": entity_type,
                "entity_id": str(target.id),
                "operation": operation,
            },
        )
        raise ImmutabilityViolationError(
            entity_type=entity_type,
            entity_id=str(target.id),
            reason=reason,
        )

    listener.__name__ = f"refuse_{operation.lower()}"
    return listener


# mapper event name -> listener
_GUARDS = {
    "before_update": _refuse("UPDATE", "Stock movements are immutable and cannot be modified"),
    "before_delete": _refuse("DELETE", "Stock movements cannot be deleted"),
}


def _movement_model():
    from inventory_kernel.models.movement import StockMovement

    return StockMovement


def register_immutability_listeners() -> None:
    """Attach the guards.  Idempotent."""
    model = _movement_model()
    for event_name, listener in _GUARDS.items():
        if not event.contains(model, event_name, listener):
            event.listen(model, event_name, listener)


def unregister_immutability_listeners() -> None:
    """Detach the guards.  Tests only."""
    model = _movement_model()
    for event_name, listener in _GUARDS.items():
        if event.contains(model, event_name, listener):
            event.remove(model, event_name, listener)
