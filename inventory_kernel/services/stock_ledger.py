"""
StockLedger -- put, take and move stock as atomic, audited operations.

Responsibility:
    The only writer of Stock quantities.  Every public operation resolves its
    location references, locks the affected rows, validates the request,
    mutates quantities, and appends one StockMovement per changed record.

Architecture position:
    Kernel > Services.  Composes LocationResolver, StockStore and
    MovementRecorder.  Receives the caller's Session and never commits it.

Invariants enforced:
    - One Stock per (item, location): creation locks the Item row before the
      existence check and insert, so concurrent creators serialize; the
      UNIQUE constraint is the backstop and is reported as
      StockAlreadyExistsError.
    - Non-negativity: a take larger than the locked quantity is rejected
      before anything is written.
    - Atomicity: each operation runs in one SAVEPOINT.  Batch operations use
      a single savepoint for the whole batch, so a failure at any location
      leaves every location unchanged.
    - Conservation: a move subtracts exactly what it adds and links the two
      movements through a shared transfer_id.
    - Lock ordering: moves and batches lock every stock row they touch in
      id order before changing any of them, so they cannot deadlock one
      another.

Failure modes:
    - LocationNotFoundError, ItemNotFoundError: unresolvable references.
    - StockNotFoundError: take/put/move on a pair with no stock record.
    - StockAlreadyExistsError: second create for a pair.
    - InsufficientStockError: take more than is on hand.
    - InvalidQuantityError / InvalidCostError: bad amounts.
    - SameLocationError: move onto the source location.
    - StockRetiredError / StockNotEmptyError: lifecycle violations.
    - PersistenceFailureError: the database rejected a write.

Audit relevance:
    Each successful operation is logged at INFO with the actor, the stock
    ids and the resulting quantities.  Rejections are logged at WARNING with
    the error code.  The movement trail itself is the durable record.

Usage:
    with session_scope() as session:
        ledger = StockLedger(session)
        ledger.create_stock_on_location(item, "WH-A", 10, actor_id=actor)
        ledger.take_from_location(item, "WH-A", 4, "picked", actor_id=actor)
        ledger.move_stock(item, "WH-A", "WH-B", actor_id=actor)
"""

from __future__ import annotations

from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator, Sequence
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from inventory_kernel.db.types import NumberLike, ZERO, to_money, to_quantity
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import StockInfo
from inventory_kernel.exceptions import (
    InsufficientStockError,
    InvalidQuantityError,
    InventoryKernelError,
    ItemNotFoundError,
    PersistenceFailureError,
    SameLocationError,
    StockAlreadyExistsError,
    StockNotEmptyError,
    StockNotFoundError,
    StockRetiredError,
)
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.models.item import Item
from inventory_kernel.models.location import Location
from inventory_kernel.models.movement import MovementKind
from inventory_kernel.models.stock import Stock, StockStatus
from inventory_kernel.services.base import BaseService
from inventory_kernel.services.location_resolver import LocationRef, LocationResolver
from inventory_kernel.services.movement_recorder import MovementRecorder
from inventory_kernel.services.stock_store import StockStore

logger = get_logger("services.stock_ledger")

ItemRef = Item | UUID
StockRef = Stock | StockInfo | UUID

DEFAULT_MOVE_REASON_TO = "Moved to location {location}"
DEFAULT_MOVE_REASON_FROM = "Moved from location {location}"


class StockLedger(BaseService[Stock]):
    """
    Stock ledger for items held across multiple locations.

    Contract:
        Every mutating method takes a keyword-only ``actor_id`` and returns
        frozen ``StockInfo`` snapshots.  Nothing is committed; the caller's
        transaction decides durability.

    Non-goals:
        - Reporting.  Item-level aggregates live in InventoryFacade.
        - Valuation.  ``cost`` is recorded on the movement and nothing more.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        *,
        allow_zero_put: bool = False,
        move_reason_to: str = DEFAULT_MOVE_REASON_TO,
        move_reason_from: str = DEFAULT_MOVE_REASON_FROM,
        resolver: LocationResolver | None = None,
        store: StockStore | None = None,
        recorder: MovementRecorder | None = None,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._allow_zero_put = allow_zero_put
        self._move_reason_to = move_reason_to
        self._move_reason_from = move_reason_from
        self._resolver = resolver or LocationResolver(session)
        self._store = store or StockStore(session)
        self._recorder = recorder or MovementRecorder(session, self._clock)
        self._depth = 0

    # =========================================================================
    # Transaction boundary
    # =========================================================================

    @contextmanager
    def _operation(self, operation: str, actor_id: UUID, **fields) -> Iterator[None]:
        """
        Run the body inside a SAVEPOINT.

        Kernel errors propagate unchanged.  Database errors are rolled back
        and re-raised as PersistenceFailureError.  Only the outermost
        operation logs a rejection, so a failing batch logs once.
        """
        outermost = self._depth == 0
        self._depth += 1
        try:
            with LogContext.bind(actor_id=str(actor_id)):
                with self.session.begin_nested():
                    yield
        except InventoryKernelError as exc:
            if outermost:
                logger.warning(
                    "stock_operation_rejected",
                    extra={
                        "operation": operation,
                        "error_code": exc.code,
                        "error": str(exc),
                        **fields,
                    },
                )
            raise
        except SQLAlchemyError as exc:
            if outermost:
                logger.error(
                    "stock_operation_failed",
                    extra={"operation": operation, **fields},
                    exc_info=True,
                )
            raise PersistenceFailureError(operation, str(exc)) from exc
        finally:
            self._depth -= 1

    # =========================================================================
    # Reference helpers
    # =========================================================================

    @staticmethod
    def _item_id(item: ItemRef) -> UUID:
        if isinstance(item, Item):
            return item.id
        if isinstance(item, UUID):
            return item
        raise TypeError(f"Item reference must be an Item or UUID, got {type(item).__name__}")

    @staticmethod
    def _stock_id(stock: StockRef) -> UUID:
        if isinstance(stock, (Stock, StockInfo)):
            return stock.id
        if isinstance(stock, UUID):
            return stock
        raise TypeError(
            f"Stock reference must be a Stock, StockInfo or UUID, got {type(stock).__name__}"
        )

    def _lock_item(self, item: ItemRef) -> Item:
        """Lock the item row; serializes stock creation for the item."""
        item_id = self._item_id(item)
        stmt = (
            select(Item)
            .where(Item.id == item_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        row = self.session.execute(stmt).scalar_one_or_none()
        if row is None:
            raise ItemNotFoundError(str(item_id))
        return row

    def _lock_in_order(self, stock_ids) -> dict[UUID, Stock]:
        """Lock stock rows in id order; every multi-row operation uses this order."""
        return {
            stock_id: self._store.lock(stock_id)
            for stock_id in sorted(set(stock_ids), key=str)
        }

    def _find_existing(self, item: ItemRef, location: LocationRef) -> Stock:
        resolved = self._resolver.resolve(location)
        item_id = self._item_id(item)
        stock = self._store.find(item_id, resolved.id)
        if stock is None:
            raise StockNotFoundError(item_id=str(item_id), location_id=str(resolved.id))
        return stock

    # =========================================================================
    # Validation
    # =========================================================================

    @staticmethod
    def _take_quantity(quantity: NumberLike) -> Decimal:
        qty = to_quantity(quantity)
        if qty <= ZERO:
            raise InvalidQuantityError(quantity, "quantity must be greater than zero")
        return qty

    def _put_quantity(self, quantity: NumberLike) -> Decimal:
        qty = to_quantity(quantity)
        if qty < ZERO:
            raise InvalidQuantityError(quantity, "quantity cannot be negative")
        if qty == ZERO and not self._allow_zero_put:
            raise InvalidQuantityError(quantity, "quantity must be greater than zero")
        return qty

    @staticmethod
    def _ensure_active(stock: Stock) -> None:
        if stock.status != StockStatus.ACTIVE:
            raise StockRetiredError(str(stock.id))

    # =========================================================================
    # Row-level primitives (callers hold the savepoint and the locks)
    # =========================================================================

    def _insert_stock(
        self,
        item_id: UUID,
        location: Location,
        aisle: str | None,
        row: str | None,
        bin: str | None,
        actor_id: UUID,
    ) -> Stock:
        """Insert an empty record; placement defaults to the location's."""
        try:
            with self.session.begin_nested():
                return self._store.create(
                    item_id,
                    location.id,
                    aisle if aisle is not None else location.aisle,
                    row if row is not None else location.row,
                    bin if bin is not None else location.bin,
                    actor_id=actor_id,
                )
        except IntegrityError as exc:
            raise StockAlreadyExistsError(
                item_id=str(item_id),
                location_id=str(location.id),
                location_name=location.name,
            ) from exc

    def _apply(
        self,
        stock: Stock,
        delta: Decimal,
        kind: MovementKind,
        actor_id: UUID,
        reason: str,
        cost: Decimal = ZERO,
        **link,
    ) -> Stock:
        before = stock.quantity
        stock.quantity = before + delta
        stock.updated_by_id = actor_id
        self._store.save(stock)
        self._recorder.record(
            stock,
            delta,
            kind=kind,
            actor_id=actor_id,
            before_quantity=before,
            reason=reason,
            cost=cost,
            **link,
        )
        return stock

    def _take(self, stock_id: UUID, quantity: NumberLike, reason: str, actor_id: UUID) -> Stock:
        qty = self._take_quantity(quantity)
        stock = self._store.lock(stock_id)
        self._ensure_active(stock)
        if stock.quantity < qty:
            raise InsufficientStockError(
                stock_id=str(stock.id),
                available=stock.quantity,
                requested=qty,
                location_id=str(stock.location_id),
            )
        return self._apply(stock, -qty, MovementKind.TAKE, actor_id, reason)

    def _put(
        self,
        stock_id: UUID,
        quantity: NumberLike,
        reason: str,
        cost: NumberLike | None,
        actor_id: UUID,
    ) -> Stock:
        qty = self._put_quantity(quantity)
        cost_value = to_money(cost)
        stock = self._store.lock(stock_id)
        self._ensure_active(stock)
        return self._apply(stock, qty, MovementKind.PUT, actor_id, reason, cost_value)

    # =========================================================================
    # Creation
    # =========================================================================

    def create_stock_on_location(
        self,
        item: ItemRef,
        location: LocationRef,
        quantity: NumberLike,
        reason: str = "",
        cost: NumberLike | None = 0,
        aisle: str | None = None,
        row: str | None = None,
        bin: str | None = None,
        *,
        actor_id: UUID,
    ) -> StockInfo:
        """
        Create the item's stock record at a location and stock it.

        The record starts at zero and receives ``quantity`` through an
        opening movement.  Zero is allowed and yields an empty record whose
        trail still starts with that opening entry.

        Raises:
            StockAlreadyExistsError: If the pair already has a record,
                active or retired.
        """
        with self._operation("create_stock_on_location", actor_id):
            qty = to_quantity(quantity)
            if qty < ZERO:
                raise InvalidQuantityError(quantity, "quantity cannot be negative")
            cost_value = to_money(cost)
            resolved = self._resolver.resolve(location)
            item_row = self._lock_item(item)

            existing = self._store.find(item_row.id, resolved.id)
            if existing is not None:
                raise StockAlreadyExistsError(
                    item_id=str(item_row.id),
                    location_id=str(resolved.id),
                    location_name=resolved.name,
                    stock_id=str(existing.id),
                    retired=existing.status == StockStatus.RETIRED,
                )

            stock = self._insert_stock(item_row.id, resolved, aisle, row, bin, actor_id)
            self._apply(stock, qty, MovementKind.OPENING, actor_id, reason, cost_value)

        logger.info(
            "stock_created",
            extra={
                "actor_id": str(actor_id),
                "stock_id": str(stock.id),
                "item_id": str(stock.item_id),
                "location_id": str(stock.location_id),
                "quantity": stock.quantity,
            },
        )
        return StockInfo.from_model(stock)

    # =========================================================================
    # Single-record adjustments
    # =========================================================================

    def take(
        self,
        stock: StockRef,
        quantity: NumberLike,
        reason: str = "",
        *,
        actor_id: UUID,
    ) -> StockInfo:
        """
        Remove ``quantity`` from a stock record.

        Raises:
            InvalidQuantityError: If quantity is not greater than zero.
            InsufficientStockError: If the record holds less than quantity.
        """
        stock_id = self._stock_id(stock)
        with self._operation("take", actor_id, stock_id=str(stock_id)):
            row = self._take(stock_id, quantity, reason, actor_id)
        self._log_adjustment("stock_taken", row, quantity, actor_id)
        return StockInfo.from_model(row)

    def put(
        self,
        stock: StockRef,
        quantity: NumberLike,
        reason: str = "",
        cost: NumberLike | None = 0,
        *,
        actor_id: UUID,
    ) -> StockInfo:
        """
        Add ``quantity`` to a stock record, recording ``cost`` on the movement.

        Zero is rejected unless the ledger was built with allow_zero_put.
        """
        stock_id = self._stock_id(stock)
        with self._operation("put", actor_id, stock_id=str(stock_id)):
            row = self._put(stock_id, quantity, reason, cost, actor_id)
        self._log_adjustment("stock_put", row, quantity, actor_id)
        return StockInfo.from_model(row)

    def take_from_location(
        self,
        item: ItemRef,
        location: LocationRef,
        quantity: NumberLike,
        reason: str = "",
        *,
        actor_id: UUID,
    ) -> StockInfo:
        """Take from the item's record at ``location``; never auto-creates."""
        with self._operation("take_from_location", actor_id):
            row = self._take(self._find_existing(item, location).id, quantity, reason, actor_id)
        self._log_adjustment("stock_taken", row, quantity, actor_id)
        return StockInfo.from_model(row)

    def put_to_location(
        self,
        item: ItemRef,
        location: LocationRef,
        quantity: NumberLike,
        reason: str = "",
        cost: NumberLike | None = 0,
        *,
        actor_id: UUID,
    ) -> StockInfo:
        """Put onto the item's record at ``location``; never auto-creates."""
        with self._operation("put_to_location", actor_id):
            row = self._put(
                self._find_existing(item, location).id, quantity, reason, cost, actor_id
            )
        self._log_adjustment("stock_put", row, quantity, actor_id)
        return StockInfo.from_model(row)

    # =========================================================================
    # Batches (all-or-nothing)
    # =========================================================================

    def take_from_many_locations(
        self,
        item: ItemRef,
        quantity: NumberLike,
        locations: Sequence[LocationRef],
        reason: str = "",
        *,
        actor_id: UUID,
    ) -> list[StockInfo]:
        """
        Take the same ``quantity`` from each location, in the given order.

        Returns one snapshot per location, in input order.  Rows are locked
        in id order first.  If any location fails, no location is changed.
        """
        with self._operation(
            "take_from_many_locations", actor_id, location_count=len(locations)
        ):
            stock_ids = [self._find_existing(item, ref).id for ref in locations]
            self._lock_in_order(stock_ids)
            rows = [self._take(stock_id, quantity, reason, actor_id) for stock_id in stock_ids]
            results = [StockInfo.from_model(row) for row in rows]
        self._log_batch("take_from_many_locations", item, results, actor_id)
        return results

    def put_to_many_locations(
        self,
        item: ItemRef,
        quantity: NumberLike,
        locations: Sequence[LocationRef],
        reason: str = "",
        cost: NumberLike | None = 0,
        *,
        actor_id: UUID,
    ) -> list[StockInfo]:
        """
        Put the same ``quantity`` onto each location, in the given order.

        A location without a stock record fails the whole batch with
        StockNotFoundError; nothing is auto-created.
        """
        with self._operation(
            "put_to_many_locations", actor_id, location_count=len(locations)
        ):
            stock_ids = [self._find_existing(item, ref).id for ref in locations]
            self._lock_in_order(stock_ids)
            rows = [
                self._put(stock_id, quantity, reason, cost, actor_id) for stock_id in stock_ids
            ]
            results = [StockInfo.from_model(row) for row in rows]
        self._log_batch("put_to_many_locations", item, results, actor_id)
        return results

    # Aliases

    def remove_from_location(self, item, location, quantity, reason="", *, actor_id):
        return self.take_from_location(item, location, quantity, reason, actor_id=actor_id)

    def remove_from_many_locations(self, item, quantity, locations, reason="", *, actor_id):
        return self.take_from_many_locations(item, quantity, locations, reason, actor_id=actor_id)

    def add_to_location(self, item, location, quantity, reason="", cost=0, *, actor_id):
        return self.put_to_location(item, location, quantity, reason, cost, actor_id=actor_id)

    def add_to_many_locations(self, item, quantity, locations, reason="", cost=0, *, actor_id):
        return self.put_to_many_locations(
            item, quantity, locations, reason, cost, actor_id=actor_id
        )

    # =========================================================================
    # Transfer
    # =========================================================================

    def move_stock(
        self,
        item: ItemRef,
        from_location: LocationRef,
        to_location: LocationRef,
        *,
        actor_id: UUID,
        reason: str | None = None,
    ) -> StockInfo:
        """
        Move the entire quantity of the source record to the destination.

        The destination record is created (empty) if the item has none
        there.  Returns the destination snapshot after the transfer.

        Raises:
            SameLocationError: If both references name one location.
            StockNotFoundError: If the item has no record at the source.
            InvalidQuantityError: If the source record is empty.
        """
        with self._operation("move_stock", actor_id):
            source_location = self._resolver.resolve(from_location)
            destination_location = self._resolver.resolve(to_location)
            if source_location.id == destination_location.id:
                raise SameLocationError(str(source_location.id))

            item_row = self._lock_item(item)
            source = self._store.find(item_row.id, source_location.id)
            if source is None:
                raise StockNotFoundError(
                    item_id=str(item_row.id), location_id=str(source_location.id)
                )

            out_reason = reason or self._move_reason_to.format(
                location=destination_location.name
            )
            in_reason = reason or self._move_reason_from.format(
                location=source_location.name
            )

            destination = self._store.find(item_row.id, destination_location.id)
            if destination is None:
                destination = self._insert_stock(
                    item_row.id, destination_location, None, None, None, actor_id
                )
                self._apply(destination, ZERO, MovementKind.OPENING, actor_id, in_reason)

            locked = self._lock_in_order((source.id, destination.id))
            source = locked[source.id]
            destination = locked[destination.id]
            self._ensure_active(source)
            self._ensure_active(destination)

            qty = source.quantity
            if qty <= ZERO:
                raise InvalidQuantityError(qty, "source stock is empty")

            transfer_id = uuid4()
            out_id = uuid4()
            in_id = uuid4()
            self._apply(
                source, -qty, MovementKind.TRANSFER_OUT, actor_id, out_reason,
                transfer_id=transfer_id, movement_id=out_id, counterpart_movement_id=in_id,
            )
            self._apply(
                destination, qty, MovementKind.TRANSFER_IN, actor_id, in_reason,
                transfer_id=transfer_id, movement_id=in_id, counterpart_movement_id=out_id,
            )

        logger.info(
            "stock_moved",
            extra={
                "actor_id": str(actor_id),
                "transfer_id": str(transfer_id),
                "item_id": str(item_row.id),
                "from_stock_id": str(source.id),
                "to_stock_id": str(destination.id),
                "quantity": qty,
            },
        )
        return StockInfo.from_model(destination)

    # =========================================================================
    # Lookup and lifecycle
    # =========================================================================

    def get_stock_from_location(self, item: ItemRef, location: LocationRef) -> StockInfo:
        """
        Return the item's stock record at ``location``.

        Raises:
            StockNotFoundError: If the item has no record there.
        """
        return StockInfo.from_model(self._find_existing(item, location))

    def retire_stock(self, stock: StockRef, reason: str = "", *, actor_id: UUID) -> StockInfo:
        """
        Retire an empty stock record.

        The record keeps its (item, location) slot; restore_stock brings it
        back.

        Raises:
            StockRetiredError: If the record is already retired.
            StockNotEmptyError: If the record still holds stock.
        """
        stock_id = self._stock_id(stock)
        with self._operation("retire_stock", actor_id, stock_id=str(stock_id)):
            row = self._store.lock(stock_id)
            self._ensure_active(row)
            if row.quantity != ZERO:
                raise StockNotEmptyError(str(row.id), row.quantity)
            row.status = StockStatus.RETIRED
            self._apply(row, ZERO, MovementKind.RETIRE, actor_id, reason)
        logger.info(
            "stock_retired", extra={"actor_id": str(actor_id), "stock_id": str(row.id)}
        )
        return StockInfo.from_model(row)

    def restore_stock(self, stock: StockRef, reason: str = "", *, actor_id: UUID) -> StockInfo:
        """
        Return a retired stock record to service at quantity zero.

        Restoring an active record changes nothing and records nothing.
        """
        stock_id = self._stock_id(stock)
        with self._operation("restore_stock", actor_id, stock_id=str(stock_id)):
            row = self._store.lock(stock_id)
            if row.status == StockStatus.ACTIVE:
                return StockInfo.from_model(row)
            row.status = StockStatus.ACTIVE
            self._apply(row, ZERO, MovementKind.RESTORE, actor_id, reason)
        logger.info(
            "stock_restored", extra={"actor_id": str(actor_id), "stock_id": str(row.id)}
        )
        return StockInfo.from_model(row)

    # =========================================================================
    # Logging
    # =========================================================================

    @staticmethod
    def _log_adjustment(
        message: str, stock: Stock, quantity: NumberLike, actor_id: UUID
    ) -> None:
        logger.info(
            message,
            extra={
                "actor_id": str(actor_id),
                "stock_id": str(stock.id),
                "item_id": str(stock.item_id),
                "location_id": str(stock.location_id),
                "requested": str(quantity),
                "resulting_quantity": stock.quantity,
            },
        )

    def _log_batch(
        self, operation: str, item: ItemRef, results: list[StockInfo], actor_id: UUID
    ) -> None:
        logger.info(
            "stock_batch_completed",
            extra={
                "actor_id": str(actor_id),
                "operation": operation,
                "item_id": str(self._item_id(item)),
                "location_count": len(results),
            },
        )
