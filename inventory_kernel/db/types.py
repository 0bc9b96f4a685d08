"""
Module: inventory_kernel.db.types
Responsibility: Annotated type aliases and normalization helpers for quantity
    and cost columns.  Centralizes precision so that every model and service
    uses identical type definitions.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats anywhere in the kernel.  Quantities and costs are Decimal
      with 9 fractional digits; float input is converted via its str() form
      so that 0.1 becomes Decimal("0.1"), not its binary expansion.
    - Exact storage on every backend: ExactDecimal never lets a quantity
      pass through a binary float, including on SQLite.

Failure modes:
    - InvalidQuantityError on a non-numeric or non-finite quantity.
    - InvalidCostError on a non-numeric, non-finite, or negative cost.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Annotated

from sqlalchemy import Numeric, String
from sqlalchemy.orm import mapped_column
from sqlalchemy.types import TypeDecorator

from inventory_kernel.exceptions import InvalidCostError, InvalidQuantityError

QUANTITY_DECIMAL_PLACES = 9
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")


class ExactDecimal(TypeDecorator):
    """
    Decimal column with 38 digits, 9 of them fractional.

    PostgreSQL gets a native ``NUMERIC(38, 9)``.  SQLite has no exact
    numeric storage (NUMERIC affinity turns values into 8-byte floats), so
    there the value is kept as its fixed-point text, e.g. ``"12.500000000"``.
    Values read back are always quantized Decimals.
    """

    impl = Numeric(38, QUANTITY_DECIMAL_PLACES)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(48))
        return dialect.type_descriptor(Numeric(38, QUANTITY_DECIMAL_PLACES))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        # + ZERO folds -0 into 0 so zero has one text form
        value = quantize(Decimal(str(value))) + ZERO
        if dialect.name == "sqlite":
            return format(value, "f")
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return quantize(Decimal(str(value)))


Quantity = Annotated[Decimal, mapped_column(ExactDecimal())]
Money = Annotated[Decimal, mapped_column(ExactDecimal())]

NumberLike = Decimal | int | float | str


def _to_decimal(value: NumberLike) -> Decimal | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not result.is_finite():
        return None
    try:
        return quantize(result)
    except InvalidOperation:
        return None


def quantize(value: Decimal) -> Decimal:
    """Round a value to the column precision."""
    return value.quantize(
        Decimal(1).scaleb(-QUANTITY_DECIMAL_PLACES), rounding=DEFAULT_ROUNDING
    )


def to_quantity(value: NumberLike) -> Decimal:
    """
    Normalize a caller-supplied quantity to a Decimal.

    Sign is NOT checked here; each ledger operation applies its own rule.

    Raises:
        InvalidQuantityError: If value is not a finite number.
    """
    result = _to_decimal(value)
    if result is None:
        raise InvalidQuantityError(value, "quantity must be a finite number")
    return result


def to_money(value: NumberLike | None) -> Decimal:
    """
    Normalize a caller-supplied cost to a non-negative Decimal.

    None is treated as zero.

    Raises:
        InvalidCostError: If value is not a finite number or is negative.
    """
    if value is None:
        return ZERO
    result = _to_decimal(value)
    if result is None:
        raise InvalidCostError(value, "cost must be a finite number")
    if result < ZERO:
        raise InvalidCostError(value, "cost cannot be negative")
    return result
