"""
Typed Exception Hierarchy for the Inventory Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the stock ledger branch on failure kind: a missing stock record is
handled differently from an insufficient quantity, and both differ from a
database outage. Parsing messages for that is fragile, so every failure is:

  1. A TYPED exception class (catch by type, not message)
  2. Tagged with a CODE attribute (machine-readable, API-safe)
  3. Carrying structured DATA (ids, quantities) as attributes

Example:
    try:
        ledger.take_from_location(item, "WH-A", Decimal("5"), actor_id=actor)
    except InsufficientStockError as e:
        log.warning(f"Only {e.available} available at {e.location_id}")
        api_response(code=e.code, available=e.available)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from InventoryKernelError:

    InventoryKernelError (base)
    |
    +-- ItemError
    |   +-- ItemNotFoundError
    |   +-- NoMetricAssignedError
    |
    +-- LocationError
    |   +-- LocationNotFoundError
    |
    +-- StockError
    |   +-- StockNotFoundError
    |   +-- StockAlreadyExistsError
    |   +-- StockRetiredError
    |   +-- StockNotEmptyError
    |   +-- SameLocationError
    |
    +-- QuantityError
    |   +-- InvalidQuantityError
    |   +-- InvalidCostError
    |   +-- InsufficientStockError
    |
    +-- PersistenceError
    |   +-- PersistenceFailureError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES
===============================================================================

Code                    | Exception                   | Typical cause
------------------------|-----------------------------|---------------------------
ITEM_NOT_FOUND          | ItemNotFoundError           | Unknown item id
NO_METRIC_ASSIGNED      | NoMetricAssignedError       | metric_symbol() on bare item
LOCATION_NOT_FOUND      | LocationNotFoundError       | Unknown location id/code
STOCK_NOT_FOUND         | StockNotFoundError          | Take/put where none exists
STOCK_ALREADY_EXISTS    | StockAlreadyExistsError     | Second create for pair
STOCK_RETIRED           | StockRetiredError           | Mutating a retired record
STOCK_NOT_EMPTY         | StockNotEmptyError          | Retiring a non-zero record
SAME_LOCATION           | SameLocationError           | Move with from == to
INVALID_QUANTITY        | InvalidQuantityError        | Zero, negative, non-numeric
INVALID_COST            | InvalidCostError            | Negative or non-numeric cost
INSUFFICIENT_STOCK      | InsufficientStockError      | Take more than on hand
PERSISTENCE_FAILURE     | PersistenceFailureError     | Database rejected a write
IMMUTABILITY_VIOLATION  | ImmutabilityViolationError  | UPDATE/DELETE of a movement
"""

from decimal import Decimal


class InventoryKernelError(Exception):
    """Base exception for all inventory kernel errors."""

    code: str = "INVENTORY_KERNEL_ERROR"


# Item-related exceptions


class ItemError(InventoryKernelError):
    """Base exception for item-related errors."""

    code: str = "ITEM_ERROR"


class ItemNotFoundError(ItemError):
    """Item with given ID was not found."""

    code: str = "ITEM_NOT_FOUND"

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item not found: {item_id}")


class NoMetricAssignedError(ItemError):
    """The item has no unit of measure, so it has no metric symbol."""

    code: str = "NO_METRIC_ASSIGNED"

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item {item_id} has no metric assigned")


# Location-related exceptions


class LocationError(InventoryKernelError):
    """Base exception for location-related errors."""

    code: str = "LOCATION_ERROR"


class LocationNotFoundError(LocationError):
    """No location matches the given reference."""

    code: str = "LOCATION_NOT_FOUND"

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Location not found: {reference}")


# Stock-related exceptions


class StockError(InventoryKernelError):
    """Base exception for stock-record errors."""

    code: str = "STOCK_ERROR"


class StockNotFoundError(StockError):
    """
    No stock record exists for the requested (item, location) pair.

    Either ``stock_id`` is set (lookup by id) or ``item_id`` and
    ``location_id`` are set (lookup by pair).
    """

    code: str = "STOCK_NOT_FOUND"

    def __init__(
        self,
        item_id: str | None = None,
        location_id: str | None = None,
        stock_id: str | None = None,
    ):
        self.item_id = item_id
        self.location_id = location_id
        self.stock_id = stock_id
        if stock_id is not None:
            message = f"Stock not found: {stock_id}"
        else:
            message = (
                f"No stock found for item {item_id} at location {location_id}"
            )
        super().__init__(message)


class StockAlreadyExistsError(StockError):
    """A stock record already exists for this (item, location) pair."""

    code: str = "STOCK_ALREADY_EXISTS"

    def __init__(
        self,
        item_id: str,
        location_id: str,
        location_name: str,
        stock_id: str | None = None,
        retired: bool = False,
    ):
        self.item_id = item_id
        self.location_id = location_id
        self.location_name = location_name
        self.stock_id = stock_id
        self.retired = retired
        message = f"Stock already exists on location {location_name}"
        if retired:
            message += " (retired; restore it instead)"
        super().__init__(message)


class StockRetiredError(StockError):
    """The stock record is retired and cannot be adjusted."""

    code: str = "STOCK_RETIRED"

    def __init__(self, stock_id: str):
        self.stock_id = stock_id
        super().__init__(f"Stock {stock_id} is retired")


class StockNotEmptyError(StockError):
    """Only an empty stock record may be retired."""

    code: str = "STOCK_NOT_EMPTY"

    def __init__(self, stock_id: str, quantity: Decimal):
        self.stock_id = stock_id
        self.quantity = quantity
        super().__init__(
            f"Stock {stock_id} still holds {quantity} and cannot be retired"
        )


class SameLocationError(StockError):
    """Source and destination of a move are the same location."""

    code: str = "SAME_LOCATION"

    def __init__(self, location_id: str):
        self.location_id = location_id
        super().__init__(f"Cannot move stock from location {location_id} to itself")


# Quantity-related exceptions


class QuantityError(InventoryKernelError):
    """Base exception for quantity and cost validation errors."""

    code: str = "QUANTITY_ERROR"


class InvalidQuantityError(QuantityError):
    """Quantity is not a valid positive number for this operation."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, quantity: object, reason: str):
        self.quantity = quantity
        self.reason = reason
        super().__init__(f"Invalid quantity {quantity!r}: {reason}")


class InvalidCostError(QuantityError):
    """Cost is negative or not numeric."""

    code: str = "INVALID_COST"

    def __init__(self, cost: object, reason: str):
        self.cost = cost
        self.reason = reason
        super().__init__(f"Invalid cost {cost!r}: {reason}")


class InsufficientStockError(QuantityError):
    """A take would drive the stock quantity below zero."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(
        self,
        stock_id: str,
        available: Decimal,
        requested: Decimal,
        location_id: str | None = None,
    ):
        self.stock_id = stock_id
        self.available = available
        self.requested = requested
        self.location_id = location_id
        super().__init__(
            f"Not enough stock. Tried to take {requested} but only "
            f"{available} is available"
        )


# Persistence-related exceptions


class PersistenceError(InventoryKernelError):
    """Base exception for storage errors."""

    code: str = "PERSISTENCE_ERROR"


class PersistenceFailureError(PersistenceError):
    """The database rejected a write; the enclosing operation was rolled back."""

    code: str = "PERSISTENCE_FAILURE"

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Persistence failure during {operation}: {detail}")


# Immutability-related exceptions


class ImmutabilityError(InventoryKernelError):
    """Base exception for immutability violations."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an immutable record.

    Stock movements are append-only from creation.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
