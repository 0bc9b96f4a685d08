"""
Tests for MovementRecorder and StockStore.

The ledger normally drives both; these tests exercise them directly to pin
down sequencing and the store's pair lookup.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from inventory_kernel.exceptions import PersistenceFailureError, StockNotFoundError
from inventory_kernel.models.movement import MovementKind, StockMovement
from inventory_kernel.services.movement_recorder import MovementRecorder
from inventory_kernel.services.stock_store import StockStore


@pytest.fixture
def store(session):
    return StockStore(session)


@pytest.fixture
def recorder(session, deterministic_clock):
    return MovementRecorder(session, deterministic_clock)


@pytest.fixture
def empty_stock(store, item, location_a, test_actor_id):
    return store.create(item.id, location_a.id, actor_id=test_actor_id)


class TestStockStore:

    def test_create_is_empty_and_active(self, empty_stock):
        assert empty_stock.quantity == Decimal("0")
        assert empty_stock.is_active

    def test_find_matches_exact_pair(self, store, empty_stock, item, location_a, location_b):
        assert store.find(item.id, location_a.id) is empty_stock
        assert store.find(item.id, location_b.id) is None

    def test_lock_returns_row(self, store, empty_stock):
        assert store.lock(empty_stock.id).id == empty_stock.id

    def test_lock_unknown_id(self, store):
        with pytest.raises(StockNotFoundError):
            store.lock(uuid4())


class TestMovementRecorder:

    def test_sequence_increments_per_stock(
        self, recorder, store, empty_stock, item, location_b, test_actor_id
    ):
        """Each stock record numbers its own trail from 1."""
        other = store.create(item.id, location_b.id, actor_id=test_actor_id)

        first = recorder.record(
            empty_stock, Decimal("0"), kind=MovementKind.OPENING,
            actor_id=test_actor_id, before_quantity=Decimal("0"),
        )
        second = recorder.record(
            empty_stock, Decimal("0"), kind=MovementKind.PUT,
            actor_id=test_actor_id, before_quantity=Decimal("0"),
        )
        other_first = recorder.record(
            other, Decimal("0"), kind=MovementKind.OPENING,
            actor_id=test_actor_id, before_quantity=Decimal("0"),
        )

        assert (first.sequence, second.sequence, other_first.sequence) == (1, 2, 1)

    def test_after_quantity_read_from_stock(
        self, recorder, empty_stock, deterministic_clock, test_actor_id
    ):
        empty_stock.quantity = Decimal("7")

        movement = recorder.record(
            empty_stock, Decimal("7"), kind=MovementKind.PUT,
            actor_id=test_actor_id, before_quantity=Decimal("0"), reason=None,
        )

        assert movement.after_quantity == Decimal("7")
        assert movement.item_id == empty_stock.item_id
        assert movement.location_id == empty_stock.location_id
        assert movement.occurred_at == deterministic_clock.now()
        assert movement.reason == ""

    def test_preassigned_id(self, recorder, empty_stock, test_actor_id):
        movement_id = uuid4()
        movement = recorder.record(
            empty_stock, Decimal("0"), kind=MovementKind.OPENING,
            actor_id=test_actor_id, before_quantity=Decimal("0"),
            movement_id=movement_id,
        )
        assert movement.id == movement_id

    def test_rejected_row_raises_persistence_failure(
        self, session, recorder, empty_stock, test_actor_id
    ):
        """A negative cost violates the table CHECK and is reported, not leaked."""
        with pytest.raises(PersistenceFailureError) as exc_info:
            with session.begin_nested():
                recorder.record(
                    empty_stock, Decimal("0"), kind=MovementKind.PUT,
                    actor_id=test_actor_id, before_quantity=Decimal("0"),
                    cost=Decimal("-1"),
                )

        assert exc_info.value.operation == "record_movement"
        assert session.query(StockMovement).count() == 0
