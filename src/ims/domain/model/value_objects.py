"""Value Objects and numeric helpers shared across the domain.

Quantities and prices are Decimals everywhere. Binary floats would make
moving-average costs and document totals drift after a few hundred
movements, so every boundary value goes through ``to_decimal``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ims.domain.exceptions import InvalidQuantity, ValidationError

ZERO = Decimal("0")

# Moving-average unit cost is kept to six places; quantities and amounts
# are exact (sums of products of the inputs).
COST_PLACES = Decimal("0.000001")

# Largest magnitude accepted for a single quantity or price.
MAX_MAGNITUDE = Decimal("1E+15")


@dataclass(frozen=True)
class StockKey:
    """Composite natural key of a stock balance."""

    product_id: str
    warehouse_id: str

    def __str__(self) -> str:
        return f"{self.product_id}@{self.warehouse_id}"


def to_decimal(value: str | int | float | Decimal, field: str = "value") -> Decimal:
    """Coerce *value* to a finite Decimal or raise ValidationError."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}: {value!r}")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Invalid {field}: {value!r}") from exc
    if not result.is_finite():
        raise ValidationError(f"Invalid {field}: {value!r}")
    if abs(result) >= MAX_MAGNITUDE:
        raise ValidationError(f"Invalid {field}: {value!r} is out of range")
    return result


def positive_quantity(value: str | int | float | Decimal, what: str = "Quantity") -> Decimal:
    """Return *value* as a Decimal, rejecting zero and negatives."""
    quantity = to_decimal(value, "quantity")
    if quantity <= ZERO:
        raise InvalidQuantity(f"{what} must be positive, got {quantity}", quantity)
    return quantity


def non_negative_price(value: str | int | float | Decimal) -> Decimal:
    price = to_decimal(value, "unit price")
    if price < ZERO:
        raise ValidationError(f"Unit price cannot be negative, got {price}")
    return price


def quantize_cost(value: Decimal) -> Decimal:
    return value.quantize(COST_PLACES, rounding=ROUND_HALF_UP)


def moving_average(
    old_cost: Decimal, old_quantity: Decimal, quantity: Decimal, unit_price: Decimal
) -> Decimal:
    """Weighted-average unit cost after receiving *quantity* at *unit_price*.

    The weight is the stock held *before* the movement. When nothing (or
    less than nothing) was on hand the new price simply becomes the cost.
    """
    if old_quantity <= ZERO:
        return quantize_cost(unit_price)
    total_quantity = old_quantity + quantity
    total_cost = old_cost * old_quantity + quantity * unit_price
    return quantize_cost(total_cost / total_quantity)


def format_decimal(value: Decimal) -> str:
    """Render a Decimal without exponent noise (``Decimal('2E+1')`` -> ``'20'``)."""
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
